from __future__ import annotations

from datetime import datetime

from datamapper.domain.attributes import Attribute
from datamapper.domain.base_entity import BaseEntity


class Entity(BaseEntity):
    """
    Entity with audit timestamps declared.

    The id stays untyped: it is whatever the record store generates
    (an integer, a UUID or any other opaque key).
    """

    id = Attribute()
    created_at = Attribute(datetime)
    updated_at = Attribute(datetime)

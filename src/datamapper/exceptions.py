from __future__ import annotations

from typing import Any, Dict, Optional


# ───────────────────────── Base error ─────────────────────────
class DataMapperError(Exception):
    """Base class for every error raised by datamapper."""
    code: str = "datamapper_error"
    message: str
    details: Optional[Dict[str, Any]]

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message or self.__class__.__name__)
        if code is not None:
            self.code = code
        self.message = message or self.__class__.__name__
        self.details = details


# ───────────────────────── Entity / conversion ─────────────────────────
class EntityInvalid(DataMapperError):
    """Raised by the raising mapper variants when the entity did not validate."""
    code = "entity_invalid"

    def __init__(self, entity: Any) -> None:
        self.entity = entity
        errors = list(getattr(entity, "mapper_errors", []) or [])
        summary = ", ".join(f"{field} {msg}" for field, msg in errors)
        super().__init__(
            f"{entity.__class__.__name__} is invalid" + (f": {summary}" if summary else ""),
            details={"mapper_errors": errors},
        )


class UnknownAttributeType(DataMapperError):
    code = "unknown_attribute_type"

    def __init__(self, attribute_type: Any) -> None:
        self.attribute_type = attribute_type
        super().__init__(f"Unknown attribute type: {attribute_type!r}")


# ───────────────────────── Record store ─────────────────────────
class RecordNotFound(DataMapperError, LookupError):
    code = "record_not_found"

    def __init__(self, model: str, id_value: Any) -> None:
        self.model = model
        self.id = id_value
        super().__init__(
            f"Couldn't find {model} with id={id_value!r}",
            details={"model": model, "id": id_value},
        )


class RecordNotSaved(DataMapperError):
    """The store failed to persist a record that passed validation."""
    code = "record_not_saved"


class RecordNotDeleted(DataMapperError):
    code = "record_not_deleted"


class MassAssignmentError(DataMapperError):
    code = "mass_assignment"

    def __init__(self, model: str, attributes: list[str]) -> None:
        self.model = model
        self.attributes = attributes
        super().__init__(
            f"Can't mass-assign protected or unknown attributes on {model}: {', '.join(attributes)}",
            details={"model": model, "attributes": attributes},
        )


__all__ = [
    "DataMapperError",
    "EntityInvalid",
    "UnknownAttributeType",
    "RecordNotFound",
    "RecordNotSaved",
    "RecordNotDeleted",
    "MassAssignmentError",
]

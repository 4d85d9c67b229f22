import pytest

from datamapper.config import get_settings
from datamapper.infrastructure.observability.logger import configure_logging


@pytest.fixture(scope="session", autouse=True)
def _logging():
    configure_logging(log_level="DEBUG", json_logs=False)


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    for key in (
        "DATAMAPPER_ENVIRONMENT",
        "DATAMAPPER_DATABASE_URL",
        "DATAMAPPER_MASS_ASSIGNMENT_SANITIZER",
        "DATAMAPPER_INCLUDE_STRATEGY",
        "DATAMAPPER_LOG_LEVEL",
        "DATAMAPPER_LOG_FORMAT",
    ):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

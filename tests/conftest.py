import pytest

from receiptsplit.config import get_settings


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    for name in ("LOG_LEVEL", "EMPTY_PARTICIPANTS_POLICY", "CURRENCY_LABEL"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

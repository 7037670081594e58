"""Settings are cached per process; start every test from the environment as it is then."""

import pytest

from lease_economics.config import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

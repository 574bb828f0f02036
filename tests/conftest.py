import pytest
from rest_framework.test import APIClient

BACKEND_URL = 'http://backend.test/api'


@pytest.fixture(autouse=True)
def backend_settings(settings):
    """Point every test at a fake backend; no test reaches the network."""
    settings.BANTUIN_API_URL = BACKEND_URL
    settings.BANTUIN_PROXY_TIMEOUT = 15
    settings.BANTUIN_CLIENT_BASE_URL = 'http://proxy.test/api'
    settings.BANTUIN_SERVICES_PAGE_SIZE = 12
    return settings


@pytest.fixture
def api_client():
    """Provide API client for testing."""
    return APIClient()

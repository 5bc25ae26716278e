import pytest

from tests.stubs import UpstreamStub, api_client, make_settings


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def shopify():
    return UpstreamStub()


@pytest.fixture
def imgbb():
    return UpstreamStub()


@pytest.fixture
async def client(settings, shopify, imgbb):
    async with api_client(settings, shopify, imgbb) as async_client:
        yield async_client

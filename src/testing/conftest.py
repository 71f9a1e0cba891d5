import logging as log

import pytest

from odoolink.comm import ClientConfig, OdooClient
from testing.integration.helpers import (
    TEST_DATABASE,
    TEST_PASSWORD,
    TEST_USERNAME,
    FakeOdooBackend,
    FakeOdooServer,
    SEEDED_PARTNERS,
    partner_rows,
)

log.basicConfig(level=log.DEBUG, format="%(levelname)s - %(message)s")


@pytest.fixture(scope="function")
def backend():
    """A fresh in-memory backend seeded with partners FOR EACH function"""
    _backend = FakeOdooBackend()
    _backend.add_many("res.partner", partner_rows(SEEDED_PARTNERS))
    return _backend


@pytest.fixture(scope="function")
def server(backend):
    """Serve the backend over HTTP for the duration of the test"""
    with FakeOdooServer(backend) as _server:
        yield _server


@pytest.fixture(scope="function")
def client_config(server):
    return ClientConfig(
        database=TEST_DATABASE,
        username=TEST_USERNAME,
        password=TEST_PASSWORD,
        url=server.url,
    )


@pytest.fixture(scope="function")
def _client(client_config):
    """Open an authenticated client FOR EACH function using this fixture"""
    client = OdooClient.connect(client_config, timeout=5)
    yield client
    # free resources
    client.close()

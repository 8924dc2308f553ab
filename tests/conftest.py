"""
Shared fixtures.

No test talks to a real gateway: clients get a FakeGateway installed in
place of their HTTP layer, and polling runs with a zero interval.
"""

import pytest

from helpers import FakeGateway, mk_signer
from xsuite.proxy import FSProxy, Proxy, ProxyConfig

EXPLORER_URL = "https://explorer.example"


@pytest.fixture
def proxy_config():
    return ProxyConfig(
        proxy_url="http://gateway.test",
        explorer_url=EXPLORER_URL,
        poll_interval=0,
    )


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def proxy(proxy_config, gateway):
    client = Proxy(proxy_config)
    gateway.install(client)
    return client


@pytest.fixture
def fsproxy(proxy_config, gateway):
    client = FSProxy(proxy_config)
    gateway.install(client)
    return client


@pytest.fixture
def signer():
    return mk_signer(1)

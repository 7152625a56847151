"""Shared fixtures: canned XML-RPC responses, fake transports and clients."""

import inspect
from typing import Any, Optional
from xml.sax.saxutils import escape

import pytest

from nebterm.client import Credentials, OneClient
from nebterm.dispatch import ServiceDispatcher
from nebterm.navigation import NavigationEngine
from nebterm.resources import ResourceRegistry

ENDPOINT = "http://one.example:2633/RPC2"

VM_POOL_XML = (
    "<VM_POOL>"
    "<VM><ID>1</ID><NAME>web1</NAME><UNAME>oneadmin</UNAME><STATE>3</STATE>"
    "<LCM_STATE>3</LCM_STATE><TEMPLATE><MEMORY>2048</MEMORY>"
    "<NIC><IP>10.0.0.5</IP></NIC></TEMPLATE></VM>"
    "<VM><ID>2</ID><NAME>db1</NAME><UNAME>oneadmin</UNAME><STATE>8</STATE>"
    "<LCM_STATE>0</LCM_STATE><TEMPLATE><MEMORY>4096</MEMORY></TEMPLATE></VM>"
    "</VM_POOL>"
)

VM_POOL = {
    "VM_POOL": {
        "VM": [
            {"ID": "1", "NAME": "web1", "STATE": "3"},
            {"ID": "2", "NAME": "db1", "STATE": "8"},
            {"ID": "17", "NAME": "web-staging", "STATE": "3"},
        ]
    }
}


def _envelope(flag: bool, data_xml: str, code: int) -> str:
    return (
        '<?xml version="1.0"?><methodResponse><params><param><value>'
        "<array><data>"
        f"<value><boolean>{1 if flag else 0}</boolean></value>"
        f"<value>{data_xml}</value>"
        f"<value><i4>{code}</i4></value>"
        "</data></array>"
        "</value></param></params></methodResponse>"
    )


def rpc_success(data: Any, code: int = 0) -> str:
    """A methodResponse carrying `[true, data, code]`."""
    if isinstance(data, str):
        return _envelope(True, f"<string>{escape(data)}</string>", code)
    return _envelope(True, f"<i4>{data}</i4>", code)


def rpc_failure(message: str, code: int = 256) -> str:
    """A methodResponse carrying `[false, message, code]`."""
    return _envelope(False, f"<string>{escape(message)}</string>", code)


def rpc_fault(message: str, code: int = 1) -> str:
    return (
        '<?xml version="1.0"?><methodResponse><fault><value><struct>'
        f"<member><name>faultCode</name><value><int>{code}</int></value></member>"
        f"<member><name>faultString</name><value><string>{escape(message)}</string></value></member>"
        "</struct></value></fault></methodResponse>"
    )


class FakeTransport:
    """Returns queued response bodies (or raises queued errors) in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[tuple[str, str]] = []
        self.closed = False

    async def send(self, endpoint: str, body: str) -> str:
        self.requests.append((endpoint, body))
        if not self.responses:
            raise AssertionError(f"Unexpected request: {body}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True


class FakeClient:
    """Answers calls from a method -> document table and records them.

    A table entry may be a document, an exception to raise, or a (sync or
    async) callable taking the argument list.
    """

    def __init__(self, documents: Optional[dict[str, Any]] = None):
        self.documents = dict(documents or {})
        self.calls: list[tuple[str, list[Any]]] = []

    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    async def call(self, method: str, params=()) -> Any:
        params = list(params)
        self.calls.append((method, params))
        if method not in self.documents:
            raise AssertionError(f"Unexpected call: {method}")
        result = self.documents[method]
        if isinstance(result, Exception):
            raise result
        if callable(result):
            result = result(params)
        if inspect.isawaitable(result):
            result = await result
        return result


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(username="oneadmin", password="s3cret", endpoint=ENDPOINT)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def one_client(credentials, transport) -> OneClient:
    return OneClient(credentials, transport=transport)


@pytest.fixture
def registry() -> ResourceRegistry:
    return ResourceRegistry()


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient({"one.vmpool.info": VM_POOL})


@pytest.fixture
def dispatcher(fake_client) -> ServiceDispatcher:
    return ServiceDispatcher(fake_client)


@pytest.fixture
def engine(registry, dispatcher) -> NavigationEngine:
    return NavigationEngine(registry, dispatcher, initial_resource="one-vms")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep tests away from the real home directory and OpenNebula settings."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for name in (
        "ONE_AUTH",
        "ONE_XMLRPC",
        "NEBTERM_TIMEOUT",
        "NEBTERM_LOG_LEVEL",
        "NEBTERM_DEFINITIONS_DIR",
    ):
        monkeypatch.delenv(name, raising=False)

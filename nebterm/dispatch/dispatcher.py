"""Service dispatcher - maps (service, verb, params) to remote calls.

Resource definitions name a service and a verb; this module owns the fixed
table that turns them into an XML-RPC method and an ordered argument list.
Lookup is two-level (service, then verb) over plain dictionaries.

Arguments are read from the caller's parameter map by name. List verbs
fall back to defaults; identifiers are required and a missing one is
rejected before anything is sent.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from nebterm.documents.transcoder import Document
from nebterm.errors import MissingParameter, UnknownOperation
from nebterm.rpc.values import INT32_MAX, INT32_MIN

logger = logging.getLogger(__name__)

# Pool filter flags understood by the remote API
FILTER_ALL = -2  # everything the caller may see: own and shared resources
FILTER_MINE_AND_GROUP = -1
FILTER_MINE = -3
UNBOUNDED = -1

_INTEGER = re.compile(r"^-?\d+$")


class RpcCaller(Protocol):
    async def call(self, method: str, params: list[Any]) -> Document: ...


@dataclass(frozen=True)
class Param:
    """A named integer argument; required when it has no default."""
    name: str
    default: Optional[int] = None

    @property
    def required(self) -> bool:
        return self.default is None


@dataclass(frozen=True)
class Verb:
    """One dispatch-table entry.

    Remote arguments are `leading` constants, then the mapped `params`,
    then `trailing` constants.
    """
    method: str
    params: tuple[Param, ...] = ()
    leading: tuple[Any, ...] = ()
    trailing: tuple[Any, ...] = ()


ID = Param("id")
POOL = (
    Param("filter", FILTER_ALL),
    Param("start", UNBOUNDED),
    Param("end", UNBOUNDED),
)


def _pool(method: str, *extra: Param) -> Verb:
    return Verb(method, POOL + extra)


def _by_id(method: str, *trailing: Any) -> Verb:
    return Verb(method, (ID,), trailing=trailing)


def _vm_action(action: str) -> Verb:
    return Verb("one.vm.action", (ID,), leading=(action,))


_VM_LIST = _pool("one.vmpool.info", Param("state", UNBOUNDED))
_VM_GET = _by_id("one.vm.info")

SERVICES: dict[str, dict[str, Verb]] = {
    "vm": {
        "list": _VM_LIST,
        "list_vms": _VM_LIST,
        "get": _VM_GET,
        "get_vm": _VM_GET,
        "resume": _vm_action("resume"),
        "suspend": _vm_action("suspend"),
        "stop": _vm_action("stop"),
        "poweroff": _vm_action("poweroff"),
        "poweroff-hard": _vm_action("poweroff-hard"),
        "reboot": _vm_action("reboot"),
        "reboot-hard": _vm_action("reboot-hard"),
        "terminate": _vm_action("terminate"),
        "terminate-hard": _vm_action("terminate-hard"),
        "undeploy": _vm_action("undeploy"),
        "hold": _vm_action("hold"),
        "release": _vm_action("release"),
        "resched": _vm_action("resched"),
        "unresched": _vm_action("unresched"),
    },
    "host": {
        "list": Verb("one.hostpool.info"),
        "get": _by_id("one.host.info"),
        "enable": _by_id("one.host.status", 0),
        "disable": _by_id("one.host.status", 1),
        "offline": _by_id("one.host.status", 2),
    },
    "datastore": {
        "list": Verb("one.datastorepool.info"),
        "get": _by_id("one.datastore.info"),
    },
    "vnet": {
        "list": _pool("one.vnpool.info"),
        "get": _by_id("one.vn.info"),
        "delete": _by_id("one.vn.delete"),
    },
    "image": {
        "list": _pool("one.imagepool.info"),
        "get": _by_id("one.image.info"),
        "enable": _by_id("one.image.enable", True),
        "disable": _by_id("one.image.enable", False),
        "delete": _by_id("one.image.delete"),
    },
    "template": {
        "list": _pool("one.templatepool.info"),
        "get": _by_id("one.template.info"),
        "delete": _by_id("one.template.delete"),
    },
    "cluster": {
        "list": Verb("one.clusterpool.info"),
        "get": _by_id("one.cluster.info"),
    },
    "user": {
        "list": Verb("one.userpool.info"),
        "get": _by_id("one.user.info"),
    },
    "group": {
        "list": Verb("one.grouppool.info"),
    },
    "zone": {
        "list": Verb("one.zonepool.info"),
    },
    "system": {
        "version": Verb("one.system.version"),
        "config": Verb("one.system.config"),
    },
}

# Verb aliases kept for definitions written against the long names
for _service, _verbs in SERVICES.items():
    if "list" in _verbs:
        _verbs.setdefault(f"list_{_service}s", _verbs["list"])
    if "get" in _verbs:
        _verbs.setdefault(f"get_{_service}", _verbs["get"])
SERVICES["system"]["get_version"] = SERVICES["system"]["version"]
SERVICES["system"]["get_config"] = SERVICES["system"]["config"]


def _as_int(value: Any) -> Optional[int]:
    """Integer argument value, or None when it is not a 32-bit integer."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and _INTEGER.match(value.strip()):
        number = int(value.strip())
    else:
        return None
    if not INT32_MIN <= number <= INT32_MAX:
        return None
    return number


class ServiceDispatcher:
    """Resolves service verbs and invokes them through an RPC caller."""

    def __init__(self, client: RpcCaller, services: Optional[dict[str, dict[str, Verb]]] = None):
        self.client = client
        self._services = services if services is not None else SERVICES

    def services(self) -> list[str]:
        return sorted(self._services.keys())

    def verbs(self, service: str) -> list[str]:
        """Verbs a service accepts.

        Raises:
            UnknownOperation: If the service does not exist
        """
        table = self._services.get(service)
        if table is None:
            raise UnknownOperation(service)
        return sorted(table.keys())

    def resolve(self, service: str, verb: str) -> Verb:
        table = self._services.get(service)
        if table is None:
            raise UnknownOperation(service)
        entry = table.get(verb)
        if entry is None:
            raise UnknownOperation(service, verb)
        return entry

    def build_arguments(
        self, service: str, verb: str, params: dict[str, Any]
    ) -> tuple[str, list[Any]]:
        """Resolve the remote method and its ordered arguments.

        Raises:
            UnknownOperation: Unknown service or verb
            MissingParameter: A required identifier is absent, not numeric or
                outside the 32-bit integer range
        """
        entry = self.resolve(service, verb)
        arguments: list[Any] = list(entry.leading)
        for param in entry.params:
            raw = params.get(param.name)
            value = _as_int(raw) if raw is not None else None
            if value is None:
                if param.required:
                    raise MissingParameter(service, verb, param.name)
                if raw is not None:
                    logger.debug(
                        f"Ignoring unusable {param.name}={raw!r} for "
                        f"{service}.{verb}, using {param.default}"
                    )
                value = param.default
            arguments.append(value)
        arguments.extend(entry.trailing)
        return entry.method, arguments

    async def invoke(
        self, service: str, verb: str, params: Optional[dict[str, Any]] = None
    ) -> Document:
        """Run a service verb and return the response document."""
        method, arguments = self.build_arguments(service, verb, params or {})
        logger.debug(f"Dispatching {service}.{verb} -> {method}")
        return await self.client.call(method, arguments)

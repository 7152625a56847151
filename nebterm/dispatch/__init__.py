"""Service dispatch: (service, verb, params) to remote XML-RPC calls."""

from nebterm.dispatch.dispatcher import SERVICES, Param, ServiceDispatcher, Verb

__all__ = ["SERVICES", "Param", "ServiceDispatcher", "Verb"]

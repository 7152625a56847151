"""OpenNebula client: credentials, HTTP transport, envelope and calls."""

from nebterm.client.auth import Credentials, parse_auth_string
from nebterm.client.client import OneClient
from nebterm.client.envelope import interpret, to_document
from nebterm.client.transport import HttpTransport, Transport

__all__ = [
    "Credentials",
    "HttpTransport",
    "OneClient",
    "Transport",
    "interpret",
    "parse_auth_string",
    "to_document",
]

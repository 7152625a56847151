"""XML-RPC wire codec: value model, request encoder, response decoder."""

from nebterm.rpc.codec import RpcResponse, decode_response, encode_call
from nebterm.rpc.values import ProtocolValue, ValueKind

__all__ = [
    "ProtocolValue",
    "RpcResponse",
    "ValueKind",
    "decode_response",
    "encode_call",
]

"""
Client side of the configuration store call boundary.

The store lives in another process. Every operation is a single blocking
request/reply round trip over a Unix domain socket: one JSON request per
connection, write side shut down after sending, one JSON reply read to EOF.
There is no timeout and no retry; a call that cannot complete raises
TransportError and is not retried.
"""

from __future__ import annotations

import json
import socket
from pathlib import Path
from typing import Any, Protocol

from devcfg.core.grammar import ResetMode

METHOD_GET = "GET_config"
METHOD_PUT = "PUT_config"
METHOD_DELETE = "DELETE_config"
METHOD_LIST = "LIST_config"
METHOD_RESET = "RESET_config"

MAX_REPLY_BYTES = 1 << 20


class TransportError(Exception):
    """The store call could not complete."""


class RemoteError(TransportError):
    """The store answered the call with an error status."""


class ConfigStore(Protocol):
    """The five operations devcfg needs from the store."""

    def get(self, caller: str | None, namespace: str, key: str) -> str | None: ...

    def put(
        self,
        caller: str | None,
        namespace: str,
        key: str,
        value: str,
        make_default: bool,
    ) -> bool: ...

    def delete(self, caller: str | None, composite_key: str) -> int: ...

    def list(self, caller: str | None, namespace: str | None) -> dict[str, str]: ...

    def reset_to_defaults(
        self, caller: str | None, mode: ResetMode, namespace: str | None
    ) -> None: ...


def _read_reply(sock: socket.socket, limit: int = MAX_REPLY_BYTES) -> bytes:
    chunks = []
    size = 0
    while True:
        data = sock.recv(4096)
        if not data:
            break
        size += len(data)
        if size > limit:
            raise TransportError(f"reply exceeds {limit} bytes")
        chunks.append(data)
    return b"".join(chunks)


class SocketStore:
    """ConfigStore reached through a Unix domain socket."""

    def __init__(self, socket_path: Path, user: int = 0):
        self.socket_path = Path(socket_path)
        self.user = user

    def call(
        self,
        method: str,
        caller: str | None,
        arg: str | None = None,
        extras: dict[str, Any] | None = None,
    ) -> Any:
        """Issue one request and return the reply's result.

        Raises TransportError if the round trip fails or the reply is not a
        well-formed envelope, RemoteError if the store reports an error.
        """
        request = {
            "method": method,
            "caller": caller,
            "user": self.user,
            "arg": arg,
            "extras": extras or {},
        }
        try:
            with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
                sock.connect(str(self.socket_path))
                sock.sendall(json.dumps(request).encode("utf-8"))
                sock.shutdown(socket.SHUT_WR)
                raw = _read_reply(sock)
        except OSError as e:
            raise TransportError(f"{method} via {self.socket_path}: {e}") from e

        try:
            reply = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise TransportError(f"{method}: undecodable reply: {raw[:80]!r}") from e
        if not isinstance(reply, dict):
            raise TransportError(f"{method}: reply is not an object")

        status = reply.get("status")
        if status == "error":
            raise RemoteError(f"{method}: {reply.get('error', 'unknown error')}")
        if status != "ok":
            raise TransportError(f"{method}: unexpected reply status {status!r}")
        return reply.get("result")

    def get(self, caller: str | None, namespace: str, key: str) -> str | None:
        result = self.call(METHOD_GET, caller, key, {"namespace": namespace})
        if result is not None and not isinstance(result, str):
            raise TransportError(f"{METHOD_GET}: reply value is not a string")
        return result

    def put(
        self,
        caller: str | None,
        namespace: str,
        key: str,
        value: str,
        make_default: bool,
    ) -> bool:
        extras = {"namespace": namespace, "value": value, "make_default": make_default}
        return bool(self.call(METHOD_PUT, caller, key, extras))

    def delete(self, caller: str | None, composite_key: str) -> int:
        result = self.call(METHOD_DELETE, caller, composite_key)
        if not isinstance(result, int) or isinstance(result, bool):
            raise TransportError(f"{METHOD_DELETE}: reply has no row count")
        return result

    def list(self, caller: str | None, namespace: str | None) -> dict[str, str]:
        extras = {} if namespace is None else {"prefix": namespace}
        result = self.call(METHOD_LIST, caller, None, extras)
        if not isinstance(result, dict):
            raise TransportError(f"{METHOD_LIST}: reply has no key/value mapping")
        return {str(k): str(v) for k, v in result.items()}

    def reset_to_defaults(
        self, caller: str | None, mode: ResetMode, namespace: str | None
    ) -> None:
        self.call(METHOD_RESET, caller, namespace, {"mode": mode.value})

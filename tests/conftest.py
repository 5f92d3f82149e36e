"""
Shared test fixtures for devcfg tests.
"""

import io
from dataclasses import dataclass, field

import pytest

from devcfg.core.config import reset_logging
from devcfg.core.grammar import ResetMode
from devcfg.core.identity import ROOT_UID
from devcfg.core.store import TransportError


class FakeStore:
    """In-memory ConfigStore that records every call."""

    def __init__(self, flags: dict[str, dict[str, str]] | None = None):
        self.flags = flags if flags is not None else {}
        self.calls: list[tuple] = []
        self.fail: TransportError | None = None
        self.delete_count: int | None = None  # force a row count

    def _record(self, *call):
        self.calls.append(call)
        if self.fail is not None:
            raise self.fail

    def get(self, caller, namespace, key):
        self._record("get", caller, namespace, key)
        return self.flags.get(namespace, {}).get(key)

    def put(self, caller, namespace, key, value, make_default):
        self._record("put", caller, namespace, key, value, make_default)
        self.flags.setdefault(namespace, {})[key] = value
        return True

    def delete(self, caller, composite_key):
        self._record("delete", caller, composite_key)
        if self.delete_count is not None:
            return self.delete_count
        namespace, _, key = composite_key.partition("/")
        return 1 if self.flags.get(namespace, {}).pop(key, None) is not None else 0

    def list(self, caller, namespace):
        self._record("list", caller, namespace)
        if namespace is not None:
            return dict(self.flags.get(namespace, {}))
        return {
            f"{ns}/{key}": value
            for ns, values in self.flags.items()
            for key, value in values.items()
        }

    def reset_to_defaults(self, caller, mode: ResetMode, namespace):
        self._record("reset", caller, mode, namespace)


@dataclass
class Result:
    status: int
    out: str
    err: str
    lines: list[str] = field(default_factory=list)


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def run(store):
    """Run a command string against the fake store as root."""
    from devcfg.core.parser import tokenize
    from devcfg.devcfg import run as run_command

    def _run(command: str, uid: int = ROOT_UID) -> Result:
        out, err = io.StringIO(), io.StringIO()
        status = run_command(tokenize(command), store, uid, out=out, err=err)
        return Result(status, out.getvalue(), err.getvalue(), out.getvalue().splitlines())

    return _run


@pytest.fixture(autouse=True)
def no_logging():
    """Leave structlog unconfigured between tests."""
    yield
    reset_logging()


def succeeded(result: Result) -> bool:
    """Check if a command was dispatched."""
    return result.status == 0 and result.err == ""


def rejected(result: Result) -> bool:
    """Check if a command was refused before reaching the store."""
    return result.status == -1 and result.err != ""

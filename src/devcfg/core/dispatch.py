"""
Turns a parsed command into one store call and its output lines.

Store exceptions are not caught here. A delete that removes nothing is an
ordinary result, not an error.
"""

from __future__ import annotations

from collections.abc import Callable

from devcfg.core.grammar import CommandVerb, ParsedCommand
from devcfg.core.store import ConfigStore

Handler = Callable[[ParsedCommand, ConfigStore, str | None], list[str]]


def _get(cmd: ParsedCommand, store: ConfigStore, caller: str | None) -> list[str]:
    value = store.get(caller, cmd.namespace, cmd.key)
    return ["null" if value is None else value]


def _put(cmd: ParsedCommand, store: ConfigStore, caller: str | None) -> list[str]:
    store.put(caller, cmd.namespace, cmd.key, cmd.value, cmd.make_default)
    return []


def _delete(cmd: ParsedCommand, store: ConfigStore, caller: str | None) -> list[str]:
    deleted = store.delete(caller, cmd.composite_key)
    if deleted == 1:
        return [f"Successfully deleted {cmd.key} from {cmd.namespace}"]
    return [f"Failed to delete {cmd.key} from {cmd.namespace}"]


def _list(cmd: ParsedCommand, store: ConfigStore, caller: str | None) -> list[str]:
    flags = store.list(caller, cmd.namespace)
    return [f"{key}={flags[key]}" for key in sorted(flags)]


def _reset(cmd: ParsedCommand, store: ConfigStore, caller: str | None) -> list[str]:
    store.reset_to_defaults(caller, cmd.reset_mode, cmd.namespace)
    return []


HANDLERS: dict[CommandVerb, Handler] = {
    CommandVerb.GET: _get,
    CommandVerb.PUT: _put,
    CommandVerb.DELETE: _delete,
    CommandVerb.LIST: _list,
    CommandVerb.RESET: _reset,
}


def dispatch(cmd: ParsedCommand, store: ConfigStore, caller: str | None) -> list[str]:
    """Issue the single store call for cmd and return the lines to print."""
    return HANDLERS[cmd.verb](cmd, store, caller)

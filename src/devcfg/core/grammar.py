"""
Verb grammar for devcfg commands.

Each verb owns an ordered table of slots: required slots first, then at most
one optional trailing slot. Tokens fill slots strictly left to right, so the
meaning of a token depends only on the verb and its position.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Literal

HELP_TOKENS = frozenset({"help", "-h"})


class CommandVerb(Enum):
    GET = "get"
    PUT = "put"
    DELETE = "delete"
    LIST = "list"
    RESET = "reset"


class ResetMode(Enum):
    UNTRUSTED_DEFAULTS = "untrusted_defaults"
    UNTRUSTED_CLEAR = "untrusted_clear"
    TRUSTED_DEFAULTS = "trusted_defaults"


@dataclass(frozen=True)
class ParsedCommand:
    """A command that is fully valid for its verb."""

    verb: CommandVerb
    namespace: str | None = None  # None on list/reset means all namespaces
    key: str | None = None
    value: str | None = None
    make_default: bool = False
    reset_mode: ResetMode | None = None

    @property
    def composite_key(self) -> str:
        """Address of a single entry, as used by the store's delete call."""
        return f"{self.namespace}/{self.key}"


class GrammarError(ValueError):
    """Rejected command line. Raised before any store call is made."""

    def __init__(
        self,
        kind: Literal[
            "unrecognized_verb",
            "missing_arguments",
            "too_many_arguments",
            "invalid_reset_mode",
        ],
        message: str,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message


# === Slots ===


@dataclass(frozen=True)
class Slot:
    """One positional argument of a verb."""

    name: str  # ParsedCommand field filled by this slot
    metavar: str  # shown in usage and "missing" messages
    accept: Callable[[str], object] = str


def _reset_mode(token: str) -> ResetMode:
    try:
        return ResetMode(token.lower())
    except ValueError:
        raise GrammarError("invalid_reset_mode", f"Invalid reset mode: {token}") from None


def _default_literal(token: str) -> bool:
    # Anything but the literal is an extra argument, not a bad value
    if token.lower() != "default":
        raise GrammarError("too_many_arguments", "Too many arguments")
    return True


NAMESPACE = Slot("namespace", "NAMESPACE")
KEY = Slot("key", "KEY")
VALUE = Slot("value", "VALUE")
MAKE_DEFAULT = Slot("make_default", "default", _default_literal)
RESET_MODE = Slot("reset_mode", "RESET_MODE", _reset_mode)


@dataclass(frozen=True)
class Grammar:
    required: tuple[Slot, ...] = ()
    optional: Slot | None = None

    @property
    def slots(self) -> tuple[Slot, ...]:
        if self.optional is None:
            return self.required
        return self.required + (self.optional,)

    def usage(self, verb: CommandVerb) -> str:
        words = [verb.value] + [slot.metavar for slot in self.required]
        if self.optional is not None:
            words.append(f"[{self.optional.metavar}]")
        return " ".join(words)


GRAMMARS: dict[CommandVerb, Grammar] = {
    CommandVerb.GET: Grammar(required=(NAMESPACE, KEY)),
    CommandVerb.PUT: Grammar(required=(NAMESPACE, KEY, VALUE), optional=MAKE_DEFAULT),
    CommandVerb.DELETE: Grammar(required=(NAMESPACE, KEY)),
    CommandVerb.LIST: Grammar(optional=NAMESPACE),
    CommandVerb.RESET: Grammar(required=(RESET_MODE,), optional=NAMESPACE),
}


# === Parsing ===


def parse_verb(token: str) -> CommandVerb:
    """Match a verb token case-insensitively."""
    try:
        return CommandVerb(token.lower())
    except ValueError:
        raise GrammarError("unrecognized_verb", f"Invalid command: {token}") from None


def parse(tokens: Sequence[str]) -> ParsedCommand | None:
    """Parse a full argument list, verb first.

    Returns None when help was requested (no verb, ``help`` or ``-h``).
    Raises GrammarError for anything the verb's grammar does not accept.
    """
    if not tokens or tokens[0] in HELP_TOKENS:
        return None
    verb = parse_verb(tokens[0])
    return parse_arguments(verb, tokens[1:])


def parse_arguments(verb: CommandVerb, args: Sequence[str]) -> ParsedCommand:
    """Fill the verb's slots from the arguments that follow it."""
    grammar = GRAMMARS[verb]
    slots = grammar.slots
    fields: dict[str, object] = {}

    for index, token in enumerate(args):
        if index >= len(slots):
            raise GrammarError("too_many_arguments", "Too many arguments")
        slot = slots[index]
        fields[slot.name] = slot.accept(token)

    missing = grammar.required[len(args):]
    if missing:
        names = " ".join(slot.metavar for slot in missing)
        raise GrammarError("missing_arguments", f"Missing arguments: expected {names}")

    return ParsedCommand(verb=verb, **fields)

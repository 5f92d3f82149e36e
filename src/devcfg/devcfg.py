"""Command-line front end for the device configuration store.

One invocation handles exactly one command:

    devcfg get NAMESPACE KEY
    devcfg put NAMESPACE KEY VALUE [default]
    devcfg delete NAMESPACE KEY
    devcfg list [NAMESPACE]
    devcfg reset {untrusted_defaults|untrusted_clear|trusted_defaults} [NAMESPACE]
    devcfg help | -h
    devcfg -c "COMMAND"

Exit codes:
- 0: The store call was made and completed (including a delete that removed
  nothing).
- -1: Help was printed, or the command line or configuration was rejected.
  No store call is made.

Transport failures are not turned into exit codes. They propagate out of
main() so the interpreter reports the underlying error.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from typing import TextIO

from devcfg.core.config import configure_logging, load_config, log_command
from devcfg.core.dispatch import dispatch
from devcfg.core.grammar import GRAMMARS, GrammarError, ResetMode, parse
from devcfg.core.identity import resolve_identity
from devcfg.core.parser import tokenize
from devcfg.core.store import ConfigStore, SocketStore, TransportError

EXIT_OK = 0
EXIT_ERROR = -1

DESCRIPTIONS = {
    "get": ["Retrieve the current value of KEY from the given NAMESPACE."],
    "put": [
        "Change the contents of KEY to VALUE for the given NAMESPACE.",
        "{default} to set as the default value.",
    ],
    "delete": ["Delete the entry for KEY for the given NAMESPACE."],
    "list": ["Print all keys and values defined, optionally for the given NAMESPACE."],
    "reset": [
        "Reset all flag values, optionally for a NAMESPACE, according to RESET_MODE.",
        "RESET_MODE is one of {" + ", ".join(m.value for m in ResetMode) + "}",
        "NAMESPACE limits which flags are reset if provided, otherwise all flags are reset",
    ],
}


def help_text() -> str:
    lines = ["Device Config (devcfg) commands:", "  help", "      Print this help text."]
    for verb, grammar in GRAMMARS.items():
        lines.append(f"  {grammar.usage(verb)}")
        lines.extend(f"      {line}" for line in DESCRIPTIONS[verb.value])
    lines.append('  -c "COMMAND"')
    lines.append("      Run one of the commands above given as a single quoted string.")
    return "\n".join(lines)


def run(
    argv: Sequence[str],
    store: ConfigStore,
    uid: int,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Parse argv, make at most one store call, print the result.

    Returns the exit status. Store exceptions propagate.
    """
    if out is None:
        out = sys.stdout
    if err is None:
        err = sys.stderr

    try:
        command = parse(argv)
    except GrammarError as e:
        log_command("rejected", kind=e.kind, reason=e.message, status=EXIT_ERROR)
        print(e.message, file=err)
        return EXIT_ERROR

    if command is None:
        log_command("help", status=EXIT_ERROR)
        print(help_text(), file=out)
        return EXIT_ERROR

    caller = resolve_identity(uid)
    fields = {
        "verb": command.verb.value,
        "namespace": command.namespace,
        "key": command.key,
        "caller": caller,
    }
    log_command("parsed", value=command.value, **fields)

    try:
        lines = dispatch(command, store, caller)
    except TransportError as e:
        log_command("transport_error", error=str(e), **fields)
        raise

    for line in lines:
        print(line, file=out)
    log_command("dispatched", status=EXIT_OK, **fields)
    return EXIT_OK


def _command_words(argv: Sequence[str]) -> list[str]:
    """Expand ``-c "COMMAND"`` into words. Raises ValueError if malformed."""
    if not argv or argv[0] != "-c":
        return list(argv)
    if len(argv) != 2:
        raise ValueError("-c takes exactly one COMMAND argument")
    return tokenize(argv[1])


def main(argv: Sequence[str] | None = None) -> None:
    if argv is None:
        argv = sys.argv[1:]

    try:
        config = load_config()
    except ValueError as e:
        print(f"devcfg: config error: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)
    configure_logging(config)

    try:
        words = _command_words(argv)
    except ValueError as e:
        log_command("rejected", kind="command_line", reason=str(e), status=EXIT_ERROR)
        print(f"devcfg: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)

    store = SocketStore(config.socket, user=config.user)
    sys.exit(run(words, store, os.getuid()))


if __name__ == "__main__":
    main()

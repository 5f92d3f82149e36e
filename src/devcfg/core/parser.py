"""
Command-line tokenizing for ``devcfg -c "COMMAND"``.

Uses bashlex so quoting follows bash rules. Only a single simple command is
accepted; the words are never handed to a shell.
"""

from __future__ import annotations

import bashlex

SUBSTITUTION_KINDS = frozenset({"commandsubstitution", "processsubstitution"})


def tokenize(command: str) -> list[str]:
    """Split one command line into words.

    Returns [] for an empty or blank line. Raises ValueError for anything that
    is not exactly one simple command (pipelines, lists, redirects,
    substitutions, assignments) or that bashlex cannot parse.
    """
    if not command or not command.strip():
        return []

    try:
        nodes = bashlex.parse(command)
    except (bashlex.errors.ParsingError, NotImplementedError) as e:
        raise ValueError(f"invalid command line: {e}") from None

    if len(nodes) != 1 or nodes[0].kind != "command":
        raise ValueError("expected a single command")

    words = []
    for part in nodes[0].parts:
        if part.kind == "redirect":
            raise ValueError("redirections are not supported")
        if part.kind != "word":
            raise ValueError(f"unsupported construct: {part.kind}")
        if _has_substitution(part):
            raise ValueError(f"substitutions are not supported: {part.word}")
        words.append(part.word)
    return words


def _has_substitution(node) -> bool:
    """Recursively check a word node for command or process substitution."""
    for child in getattr(node, "parts", None) or []:
        if child.kind in SUBSTITUTION_KINDS or _has_substitution(child):
            return True
    return False

"""Caller identity used for attribution on store calls."""

from __future__ import annotations

ROOT_UID = 0
SHELL_UID = 2000

SHELL_PACKAGE = "com.android.shell"

KNOWN_CALLERS = {
    ROOT_UID: "root",
    SHELL_UID: SHELL_PACKAGE,
}


def resolve_identity(uid: int) -> str | None:
    """Map a raw process uid to the identity passed to the store.

    Unknown uids resolve to None; the store decides what an unattributed
    caller may do.
    """
    return KNOWN_CALLERS.get(uid)

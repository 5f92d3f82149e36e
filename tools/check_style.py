#!/usr/bin/env python3
"""Check for banned Python constructions in devcfg source.

Banned constructions:

    Construction          Reason                            Use instead
    --------------------  --------------------------------  --------------------------
    import shlex          command lines are split by        devcfg.core.parser.tokenize
    from shlex import     bashlex in one place
    os.getuid()           the caller's uid is read once     pass uid into run()
    os.geteuid()          at the process boundary           resolve_identity(uid)
"""

import ast
import os
import sys

BANNED_MODULES = frozenset({"shlex"})
UID_CALLS = frozenset({"getuid", "geteuid"})

# Files allowed to read the process uid
UID_READERS = frozenset({os.path.join("devcfg", "devcfg.py")})


def find_python_files(directory):
    """Find all .py files recursively."""
    result = []
    for root, dirs, files in os.walk(directory):
        if "__pycache__" in dirs:
            dirs.remove("__pycache__")
        for f in files:
            if f.endswith(".py"):
                result.append(os.path.join(root, f))
    result.sort()
    return result


def _reads_uid(node):
    func = node.func
    return (
        isinstance(func, ast.Attribute)
        and func.attr in UID_CALLS
        and isinstance(func.value, ast.Name)
        and func.value.id == "os"
    )


def check_file(filepath):
    with open(filepath) as f:
        source = f.read()

    tree = ast.parse(source, filepath)
    errors = []
    may_read_uid = any(filepath.endswith(allowed) for allowed in UID_READERS)

    for node in ast.walk(tree):
        lineno = getattr(node, "lineno", 0)

        if isinstance(node, ast.Import):
            for alias in node.names:
                if alias.name in BANNED_MODULES:
                    errors.append(
                        (lineno, f"import {alias.name}: banned, use devcfg.core.parser.tokenize")
                    )

        if isinstance(node, ast.ImportFrom):
            if node.module in BANNED_MODULES:
                errors.append(
                    (lineno, f"from {node.module} import: banned, use devcfg.core.parser.tokenize")
                )

        if isinstance(node, ast.Call) and _reads_uid(node) and not may_read_uid:
            errors.append(
                (lineno, f"os.{node.func.attr}(): banned outside the entry point, pass uid in")
            )

    return errors


def check_tree(src_dir):
    """Return (filepath, lineno, description) for every banned construction."""
    all_errors = []
    for filepath in find_python_files(src_dir):
        for lineno, description in check_file(filepath):
            all_errors.append((filepath, lineno, description))
    return sorted(all_errors)


def main():
    src_dir = "src"
    if len(sys.argv) > 1:
        src_dir = sys.argv[1]

    if not os.path.isdir(src_dir):
        print(f"Directory not found: {src_dir}")
        sys.exit(1)

    if not find_python_files(src_dir):
        print(f"No Python files found in: {src_dir}")
        sys.exit(1)

    try:
        all_errors = check_tree(src_dir)
    except SyntaxError as e:
        print(f"Syntax error: {e}")
        sys.exit(1)

    if not all_errors:
        sys.exit(0)

    print(f"Found {len(all_errors)} banned construction(s):")
    for filepath, lineno, description in all_errors:
        print(f"  {filepath}:{lineno}: {description}")
    sys.exit(1)


if __name__ == "__main__":
    main()

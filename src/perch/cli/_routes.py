"""``perch routes`` — list registered resources.

Resolves an import string to a perch App and prints, for every
resource, the methods it answers at collection and item level.
"""

import argparse
import sys

from perch.cli._resolve import resolve_app


def print_routes(args: argparse.Namespace) -> None:
    """Print a METHOD / PATH / RESOURCE table for a perch app."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    app._ensure_frozen()
    entries = list(app.registry)
    if not entries:
        print("No resources registered.")
        return

    rows: list[tuple[str, str, str]] = []
    for entry in entries:
        owner = type(entry.resource).__name__
        caps = entry.capabilities
        for path, collection in ((entry.prefix, True), (f"{entry.prefix}{{id}}", False)):
            methods = caps.allowed_methods(collection=collection)
            if methods:
                rows.append((", ".join(methods), path, owner))

    if not rows:
        print("No capabilities advertised.")
        return

    max_methods = max(6, *(len(r[0]) for r in rows))  # "METHOD" header
    max_path = max(4, *(len(r[1]) for r in rows))  # "PATH" header

    fmt = f"{{:<{max_methods}}}  {{:<{max_path}}}  {{}}"
    print(fmt.format("METHOD", "PATH", "RESOURCE"))
    sep_len = max_methods + max_path + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for methods, path, owner in rows:
        print(fmt.format(methods, path, owner))

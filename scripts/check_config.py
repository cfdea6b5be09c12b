"""Validate a dashboard config.yml without starting the app.

Uses the same parse rules as the loader (empty / unparseable YAML counts as
an empty document) and prints either a short summary or the pruned
validation report.

Usage: python scripts/check_config.py path/to/config.yml
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure project root on path when executed directly
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.config import ConfigValidationError, validate_document  # noqa: E402
from core.config.loader import parse_document  # noqa: E402
from core.config.services import build_service_groups  # noqa: E402
from core.config.tags import build_tag_map  # noqa: E402


def check(path: Path) -> int:
    if not path.is_file():
        print(f"NOT FOUND: {path}")
        return 1
    document = parse_document(path.read_bytes())
    try:
        validate_document(document)
    except ConfigValidationError as e:
        print("INVALID:")
        print(e.summary())
        return 1
    groups = build_service_groups(
        document.get("services"), build_tag_map(document.get("tags") or [])
    )
    total = sum(len(g.items) for g in groups)
    print(f"OK: {len(groups)} group(s), {total} service(s)")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("path", type=Path, help="config.yml to validate")
    args = parser.parse_args(argv)
    return check(args.path)


if __name__ == "__main__":
    sys.exit(main())

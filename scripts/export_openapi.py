from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path


def _dump(data: object) -> str:
    # ASCII-only output keeps repo diffs readable; non-ASCII is \u-escaped.
    return json.dumps(data, ensure_ascii=True, indent=2, sort_keys=True) + "\n"


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Export the FastAPI OpenAPI spec to apidocs/ as a JSON snapshot."
    )
    parser.add_argument(
        "--out-dir",
        default="apidocs",
        help="Output directory (default: apidocs)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Do not write; exit 1 if the committed snapshot is out of date.",
    )
    args = parser.parse_args()

    # Import lazily so argparse --help stays fast.
    from notes_backend.main import app

    path = Path(args.out_dir) / "openapi-v1.json"
    payload = _dump(app.openapi())

    if args.check:
        current = path.read_text(encoding="utf-8") if path.is_file() else ""
        if current != payload:
            print(f"{path} is out of date; run scripts/export_openapi.py", file=sys.stderr)
            return 1
        return 0

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(payload, encoding="utf-8")
    print(f"wrote {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

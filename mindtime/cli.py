"""
mindtime: command line entry point
====================================

Usage
-----
    mindtime serve [--reload]
    mindtime sample <out.json>
    mindtime validate <mindmap.json> [--strict]
    mindtime export [--title T] [--description D] [--out DIR]
    mindtime import <mindmap.json> [--strict]

``export`` and ``import`` work against the locally saved mindmap (the same
store the server uses, see MINDTIME_DB_PATH / MINDTIME_STORAGE_KEY).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from mindtime.config import Settings
from mindtime.exchange.mindmap_config import (
    create_sample_config,
    export_filename,
    import_config_file,
    write_config_file,
)
from mindtime.server.main import build_state, configure_logging


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="mindtime",
        description="Edit, store and exchange MindTime mindmaps.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the API + Socket.IO server.")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes.")

    sample = sub.add_parser("sample", help="Write the sample mindmap to a file.")
    sample.add_argument("out", metavar="out.json")

    validate = sub.add_parser("validate", help="Check a mindmap file without importing it.")
    validate.add_argument("path", metavar="mindmap.json")
    validate.add_argument("--strict", action="store_true",
                          help="Treat edges to missing nodes as errors.")

    export = sub.add_parser("export", help="Export the saved mindmap.")
    export.add_argument("--title", default=None)
    export.add_argument("--description", default=None)
    export.add_argument("--out", metavar="DIR", default=".",
                        help="Output directory (default: current directory).")

    imp = sub.add_parser("import", help="Replace the saved mindmap with a file.")
    imp.add_argument("path", metavar="mindmap.json")
    imp.add_argument("--strict", action="store_true")
    return p


def _load(path: str, strict: bool) -> tuple:
    """Run the async import and collect whichever continuation fired."""
    outcome: dict = {}
    asyncio.run(import_config_file(
        path,
        on_success=lambda imported: outcome.setdefault("ok", imported),
        on_error=lambda message: outcome.setdefault("error", message),
        strict=strict,
    ))
    return outcome.get("ok"), outcome.get("error")


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    if args.command == "serve":
        from mindtime.server.main import run
        run(settings, reload=args.reload)
        return 0

    if args.command == "sample":
        out = Path(args.out)
        out.write_text(json.dumps(create_sample_config(), indent=2, ensure_ascii=False), encoding="utf-8")
        print(f"[mindtime] wrote  : {out}")
        return 0

    if args.command == "validate":
        imported, error = _load(args.path, args.strict)
        if error:
            print(f"[error] {error}", file=sys.stderr)
            return 1
        print(f"[mindtime] nodes  : {len(imported.nodes)}")
        print(f"[mindtime] edges  : {len(imported.edges)}")
        print(f"[mindtime] title  : {imported.metadata.title}")
        return 0

    state = build_state(settings)

    if args.command == "export":
        out_dir = Path(args.out)
        out_dir.mkdir(parents=True, exist_ok=True)
        path = write_config_file(
            out_dir / export_filename(args.title),
            state.document,
            args.title,
            args.description,
        )
        print(f"[mindtime] wrote  : {path}")
        return 0

    if args.command == "import":
        imported, error = _load(args.path, args.strict)
        if error:
            print(f"[error] {error}", file=sys.stderr)
            return 1
        state.apply_import(imported)
        print(f"[mindtime] imported {len(imported.nodes)} node(s), {len(imported.edges)} edge(s)")
        return 0

    return 2


if __name__ == "__main__":
    sys.exit(main())

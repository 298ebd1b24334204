"""Entry point for ``python -m icaloverview``."""

import argparse
import sys
from typing import Optional

from . import run_server


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="icaloverview",
        description="Serve a combined agenda/week/month overview of several ICS feeds.",
    )
    parser.add_argument("--port", type=int, help="Port to listen on (default 8080)")
    parser.add_argument("--host", help="Address to bind (default 127.0.0.1)")
    parser.add_argument("--sources", help="YAML/JSON file listing the calendar sources")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        run_server(args)
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())

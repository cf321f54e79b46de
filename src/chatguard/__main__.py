"""CLI for interpreting chat-completion API error strings.

Usage:
    python -m chatguard 'POST "https://api.openai.com/v1/chat/completions": 429 ...'
    some-command 2>&1 | python -m chatguard
"""

import argparse
import json
import sys

from chatguard.exceptions import HeaderUnrecognizedError
from chatguard.parser import parse_error


def main(argv: list[str] | None = None) -> int:
    """Interpret error strings and print them as JSON."""
    parser = argparse.ArgumentParser(
        description="Interpret chat-completion API error strings",
        prog="python -m chatguard",
    )
    parser.add_argument(
        "errors",
        nargs="*",
        help="Raw error strings (default: read one error from stdin)",
    )
    parser.add_argument("--indent", type=int, default=None, help="Indent JSON output")
    args = parser.parse_args(argv)

    raw_errors = args.errors or [sys.stdin.read()]

    failures = 0
    for raw in raw_errors:
        try:
            details = parse_error(raw)
        except HeaderUnrecognizedError as e:
            print(f"✗ {e}", file=sys.stderr)
            failures += 1
            continue
        result = details.to_dict()
        result["is_rate_limit"] = details.is_rate_limit()
        result["is_auth"] = details.is_auth()
        result["is_server_error"] = details.is_server_error()
        print(json.dumps(result, indent=args.indent))

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())

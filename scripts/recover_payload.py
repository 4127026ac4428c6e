"""Run the recovery pipeline over a saved provider response."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError

from app.logging_config import configure_logging
from app.services.json_repair import attempt_repairs
from app.services.payload_locator import locate
from app.services.recovery_errors import DEFAULT_PREFIX_CHARS, RecoveryError
from app.services.recovery_pipeline import Domain, normalize_tree, request_from_context


logger = logging.getLogger("scripts.recover_payload")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Recover a domain record from a raw provider response",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Recover a workout plan from a saved response
  python scripts/recover_payload.py workout response.txt

  # Read from stdin and pass request context for defaults
  cat response.txt | python scripts/recover_payload.py nutrition - --context '{"goal": "lose_weight"}'

  # Only show the repaired generic tree
  python scripts/recover_payload.py physique response.txt --tree-only
        """,
    )
    parser.add_argument("domain", choices=[d.value for d in Domain], help="Schema to normalize onto")
    parser.add_argument("path", help="File holding the raw response, or - for stdin")
    parser.add_argument("--context", type=str, default=None, help="JSON object with request fields")
    parser.add_argument("--tree-only", action="store_true", help="Print the repaired tree and stop")
    parser.add_argument(
        "--prefix-chars",
        type=int,
        default=DEFAULT_PREFIX_CHARS,
        help="Characters of raw text kept in error diagnostics",
    )
    return parser.parse_args(argv)


def read_raw(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging()

    domain = Domain(args.domain)
    try:
        context = json.loads(args.context) if args.context else None
        request = request_from_context(domain, context)
    except (json.JSONDecodeError, ValidationError) as err:
        logger.error("❌ Invalid --context: %s", err)
        return 2

    raw = read_raw(args.path)
    try:
        span = locate(raw, args.prefix_chars)
        outcome = attempt_repairs(span.extract(raw), args.prefix_chars)
    except RecoveryError as err:
        logger.error("❌ %s: %s", err.kind, err.message)
        print(json.dumps(err.to_detail(), indent=2))
        return 1

    logger.info(
        "✅ Located %s payload at %d-%d%s, parsed after %d repair step(s)",
        span.kind.value,
        span.start,
        span.end,
        " (truncated)" if span.truncated else "",
        outcome.step_count,
    )
    if args.tree_only:
        print(json.dumps(outcome.value, indent=2))
        return 0

    record = normalize_tree(outcome.value, domain, request)
    print(record.model_dump_json(by_alias=True, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python
# ruff: noqa: E402
"""Search fragrances or score how well two of them layer together."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.append(str(REPO_ROOT))

from scent_layering.core.config import get_settings
from scent_layering.core.exceptions import ConfigurationError, NotFoundError, UpstreamError
from scent_layering.core.logging import configure_logging, get_logger
from scent_layering.orchestrator import PairingWorkflow

LOGGER = get_logger("compare_fragrances")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--log-level", default=None, help="Override the configured log level.")
    parser.add_argument("--no-fallback", action="store_true", help="Do not fall back to the catalog API.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="List fragrances matching a query.")
    search.add_argument("query")

    compare = subparsers.add_parser("compare", help="Score the top hits of two queries against each other.")
    compare.add_argument("first")
    compare.add_argument("second")
    compare.add_argument("--advice", action="store_true", help="Ask the text-generation service for advice.")
    return parser.parse_args(argv)


def dump_json(payload: Any) -> None:
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


async def _run(args: argparse.Namespace) -> int:
    async with PairingWorkflow(get_settings()) as workflow:
        try:
            return await _dispatch(workflow, args)
        finally:
            LOGGER.debug("cli.cache_stats", stats=workflow.cache.stats())


async def _dispatch(workflow: PairingWorkflow, args: argparse.Namespace) -> int:
    fallback = not args.no_fallback
    if args.command == "search":
        outcome = await workflow.search(args.query, fallback=fallback)
        dump_json(
            {
                "source": outcome.source,
                "warning": outcome.warning,
                "results": [hit.as_dict() for hit in outcome.results],
            }
        )
        return 0

    first = await workflow.search(args.first, fallback=fallback)
    second = await workflow.search(args.second, fallback=fallback)
    if not first.results or not second.results:
        missing = args.first if not first.results else args.second
        raise SystemExit(f"No fragrance found for '{missing}'. Try rephrasing the query.")
    record_a = await workflow.resolve(first.results[0], first.source)
    record_b = await workflow.resolve(second.results[0], second.source)
    result = await workflow.compare_records(record_a, record_b, with_advice=args.advice)
    dump_json(
        {
            "first": result.first.as_dict(),
            "second": result.second.as_dict(),
            "analysis": result.analysis.as_dict(),
            "advice": result.advice.as_dict() if result.advice else None,
        }
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    try:
        return asyncio.run(_run(args))
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    except (UpstreamError, NotFoundError) as exc:
        print(f"Lookup failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

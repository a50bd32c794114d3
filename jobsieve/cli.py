"""
Command line trigger surface.

    jobsieve scrape [source|all]
    jobsieve score [limit]
    jobsieve stats
    jobsieve runs [limit]
"""
from __future__ import annotations

import argparse
import asyncio
import json
from typing import List

from jobsieve import runner, scorer, store
from jobsieve.config import ensure_dirs
from jobsieve.database import init_db
from jobsieve.errors import JobSieveError
from jobsieve.log import get_logger, setup_logging

log = get_logger(__name__)


def _dump(data) -> str:
    return json.dumps(data, indent=2, default=str)


def cmd_scrape(args: argparse.Namespace) -> int:
    if args.source == "all":
        results = asyncio.run(runner.run_all())
        log.info("Scrape results:\n%s", _dump({k: v.as_dict() for k, v in results.items()}))
    else:
        result = asyncio.run(runner.run_one(args.source))
        log.info("Scrape result for %s:\n%s", args.source, _dump(result.as_dict()))
    return 0


def cmd_score(args: argparse.Namespace) -> int:
    scored = asyncio.run(scorer.score_unscored(args.limit))
    log.info("Scored %d jobs", scored)
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    log.info("Job stats:\n%s", _dump(store.get_job_stats()))
    return 0


def cmd_runs(args: argparse.Namespace) -> int:
    runs = store.get_scrape_runs(args.limit)
    if not runs:
        log.info("No scrape runs recorded yet")
        return 0
    for r in runs:
        log.info(
            "#%d %-15s %-9s found=%s new=%s started=%s%s",
            r["id"], r["source"], r["status"], r["jobs_found"], r["jobs_new"],
            r["started_at"], f" error={r['error']}" if r["error"] else "",
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobsieve", description="Web3 job scraper and scorer")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR (default: $LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scrape_cmd = subparsers.add_parser("scrape", help="Scrape one source, or all of them")
    scrape_cmd.add_argument("source", nargs="?", default="all", help="Source name or 'all'")
    scrape_cmd.set_defaults(func=cmd_scrape)

    score_cmd = subparsers.add_parser("score", help="Score unscored jobs with the LLM judge")
    score_cmd.add_argument("limit", nargs="?", type=int, default=50, help="Max jobs to score")
    score_cmd.set_defaults(func=cmd_score)

    stats_cmd = subparsers.add_parser("stats", help="Show job counts and average score")
    stats_cmd.set_defaults(func=cmd_stats)

    runs_cmd = subparsers.add_parser("runs", help="List recent scrape runs")
    runs_cmd.add_argument("limit", nargs="?", type=int, default=20, help="Number of runs to show")
    runs_cmd.set_defaults(func=cmd_runs)

    return parser


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    ensure_dirs()
    try:
        init_db()
        return args.func(args)
    except JobSieveError as exc:
        log.error("%s", exc)
        return 1
    except Exception:
        log.exception("Command %r failed", args.command)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

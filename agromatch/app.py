import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List

from . import __version__
from .commands import CommandHandler, run_command
from .config import load_config
from .database import init_database
from .env import load_env
from .errors import ConfigurationError, MatchError
from .logger import get_logger
from .matcher import Matcher
from .models import CandidateProfile, CompanyProfile, JobPosting
from .reporter import report
from .schema import VALIDATORS
from .storage import SqlProfileStore

MODELS = {
    "candidate": CandidateProfile,
    "job": JobPosting,
    "company": CompanyProfile,
}


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _read_records(input_path: Path) -> List[Dict[str, Any]]:
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise SystemExit(f"Invalid JSON in {input_path}: {e}")
    records = data if isinstance(data, list) else [data]
    if not all(isinstance(r, dict) for r in records):
        raise SystemExit("Input must be a JSON object or a list of objects")
    return records


def ingest_record(kind: str, record: Dict[str, Any], store: SqlProfileStore) -> Dict[str, Any]:
    errors = VALIDATORS[kind](record)
    if errors:
        return {"id": record.get("id"), "status": "validation_error", "errors": errors}
    profile = MODELS[kind].from_dict(record)
    save = getattr(store, f"save_{kind}")
    return {"id": profile.id, **save(profile)}


def _build(args: argparse.Namespace):
    config = load_config(Path(args.config) if args.config else None)
    if args.db:
        config = replace(config, db_path=Path(args.db))
    logger = get_logger(level=config.log_level, enable_console=args.verbose)
    store = SqlProfileStore(config.db_path)
    return config, logger, store


def cmd_init_db(args: argparse.Namespace) -> None:
    config = load_config(Path(args.config) if args.config else None)
    db_path = Path(args.db) if args.db else config.db_path
    init_database(db_path)
    print(f"Database ready: {db_path}")


def cmd_add(args: argparse.Namespace) -> None:
    kind = args.kind
    _, logger, store = _build(args)
    counts = {"new": 0, "updated": 0, "no-change": 0, "validation_error": 0}
    try:
        for record in _read_records(Path(args.input)):
            outcome = ingest_record(kind, record, store)
            status = outcome["status"]
            counts[status] += 1
            if status == "validation_error":
                print(f"[validation_error] {outcome['id']} - {outcome['errors']}")
                continue
            logger.info(f"{kind.capitalize()} saved", id=outcome["id"], status=status)
            print(f"[{status}] {outcome['id']}")
    finally:
        store.close()
    print("Done. " + " ".join(f"{k}={v}" for k, v in counts.items()))


def cmd_validate(args: argparse.Namespace) -> None:
    invalid = 0
    for record in _read_records(Path(args.input)):
        errors = VALIDATORS[args.kind](record)
        if errors:
            invalid += 1
            print(f"Invalid ({record.get('id')}):")
            for e in errors:
                print(f" - {e}")
    if invalid:
        raise SystemExit(2)
    print("Valid")


def cmd_list_jobs(args: argparse.Namespace) -> None:
    _, _, store = _build(args)
    try:
        jobs = store.list_jobs(status=None if args.all else "open")
    finally:
        store.close()
    if not jobs:
        print("No jobs in store.")
        return
    print(f"Found {len(jobs)} jobs:\n")
    for job in jobs:
        print(f"ID: {job.id}")
        print(f"  Title: {job.title}")
        print(f"  Category: {job.category}")
        print(f"  Location: {job.location}")
        print(f"  Skills: {', '.join(job.required_skills)}")
        print(f"  Status: {job.status}")
        print()


def cmd_match(args: argparse.Namespace) -> None:
    config, logger, store = _build(args)
    try:
        with Matcher(config, store, logger) as matcher:
            candidate, job = matcher.fetch_pair(args.candidate, args.job)
            result = matcher.cached(args.candidate, args.job) if args.cache else None
            if result is None:
                result = matcher.match_profiles(candidate, job, persist=args.persist)
    finally:
        store.close()
    _print_json(report(result, candidate, job))


def cmd_rank(args: argparse.Namespace) -> None:
    config, logger, store = _build(args)
    job_ids = [j.strip() for j in args.jobs.split(",") if j.strip()] if args.jobs else None
    try:
        with Matcher(config, store, logger) as matcher:
            ranked = matcher.rank_jobs(args.candidate, job_ids=job_ids, persist=args.persist, limit=args.limit)
            logger.log_metrics_summary()
    finally:
        store.close()
    _print_json(ranked.to_dict())


def cmd_lead_score(args: argparse.Namespace) -> None:
    config, logger, store = _build(args)
    try:
        with Matcher(config, store, logger) as matcher:
            leads = [matcher.leads.score(cid) for cid in args.company]
    finally:
        store.close()
    leads.sort(key=lambda lead: (-lead.score, lead.company_id))
    _print_json([lead.to_dict() for lead in leads])


def cmd_history(args: argparse.Namespace) -> None:
    _, _, store = _build(args)
    try:
        history = store.result_history(args.candidate, args.job)
    finally:
        store.close()
    if not history:
        print("No stored results.")
        return
    for r in history:
        print(f"{r.computed_at.isoformat()}  {r.job_id:<20} {r.score:>5.1f}  {r.rationale}")


def cmd_admin(args: argparse.Namespace) -> None:
    if args.input:
        payloads = _read_records(Path(args.input))
    else:
        try:
            payloads = [json.loads(args.command_json)]
        except json.JSONDecodeError as e:
            raise SystemExit(f"Invalid command JSON: {e}")
    config, logger, store = _build(args)
    try:
        with Matcher(config, store, logger) as matcher:
            handler = CommandHandler(matcher)
            responses = [run_command(handler, p) for p in payloads]
    finally:
        store.close()
    _print_json(responses if len(responses) > 1 else responses[0])
    if not all(r["ok"] for r in responses):
        raise SystemExit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agromatch",
        description="Match Romanian candidates with Danish farm and forestry jobs",
    )
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--config", help="Path to JSON config file")
    parser.add_argument("--db", help="Path to SQLite database (overrides config and AGROMATCH_DB)")
    parser.add_argument("--verbose", action="store_true", help="Also log to the console")

    subparsers = parser.add_subparsers(dest="command")
    ini = subparsers.add_parser("init-db", help="Create the database tables")
    ini.set_defaults(func=cmd_init_db)

    for kind in ("candidate", "job", "company"):
        add = subparsers.add_parser(f"add-{kind}", help=f"Add or update {kind} profiles from a JSON file")
        add.add_argument("--input", required=True, help="JSON object or list of objects")
        add.set_defaults(func=cmd_add, kind=kind)

    val = subparsers.add_parser("validate", help="Validate profile JSON without saving it")
    val.add_argument("--kind", required=True, choices=sorted(VALIDATORS), help="Profile kind")
    val.add_argument("--input", required=True, help="JSON object or list of objects")
    val.set_defaults(func=cmd_validate)

    lst = subparsers.add_parser("list-jobs", help="List stored jobs")
    lst.add_argument("--all", action="store_true", help="Include closed jobs")
    lst.set_defaults(func=cmd_list_jobs)

    mat = subparsers.add_parser("match", help="Score one candidate against one job")
    mat.add_argument("--candidate", required=True, help="Candidate id")
    mat.add_argument("--job", required=True, help="Job id")
    mat.add_argument("--persist", action="store_true", help="Store the result in match history")
    mat.add_argument("--cache", action="store_true", help="Reuse a stored result younger than cache_ttl")
    mat.set_defaults(func=cmd_match)

    rnk = subparsers.add_parser("rank", help="Score one candidate against many jobs")
    rnk.add_argument("--candidate", required=True, help="Candidate id")
    rnk.add_argument("--jobs", help="Comma-separated job ids (default: all open jobs)")
    rnk.add_argument("--limit", type=int, help="Keep only the best N results")
    rnk.add_argument("--persist", action="store_true", help="Store results in match history")
    rnk.set_defaults(func=cmd_rank)

    lead = subparsers.add_parser("lead-score", help="Score companies as recruitment leads")
    lead.add_argument("--company", required=True, action="append", help="Company id (repeatable)")
    lead.set_defaults(func=cmd_lead_score)

    his = subparsers.add_parser("history", help="Show stored match results for a candidate")
    his.add_argument("--candidate", required=True, help="Candidate id")
    his.add_argument("--job", help="Restrict to one job id")
    his.set_defaults(func=cmd_history)

    adm = subparsers.add_parser("admin", help="Run admin commands given as JSON")
    src = adm.add_mutually_exclusive_group(required=True)
    src.add_argument("--command", dest="command_json", help='e.g. \'{"kind": "get_stats"}\'')
    src.add_argument("--input", help="JSON file with one command or a list of commands")
    adm.set_defaults(func=cmd_admin)

    return parser


def main(argv: List[str] | None = None):
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        args.func(args)
    except ConfigurationError as e:
        _print_json(e.to_dict())
        raise SystemExit(2)
    except MatchError as e:
        _print_json(e.to_dict())
        raise SystemExit(1)


if __name__ == "__main__":
    sys.exit(main())

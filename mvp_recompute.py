#!/usr/bin/env python3
"""
Club MVP points CLI

Publishes scoring formulas, recomputes point events and prints season
leaderboards for a JSON data directory (see clubmvp.store.JsonFileStore).

Usage:
    python mvp_recompute.py publish --club brookweald --rules rules.json
    python mvp_recompute.py recompute --club brookweald --start 2025-04-01 --end 2025-09-30
    python mvp_recompute.py recompute --club brookweald --match m-0412
    python mvp_recompute.py ensure-zero --club brookweald --match m-0412 --team 1st-xi --players p1 p2 p3
    python mvp_recompute.py leaderboard --club brookweald --start 2025-04-01 --end 2025-09-30 --xlsx mvp.xlsx
"""

import argparse
import sys
from pathlib import Path

from clubmvp import (
    FormulaRules,
    JsonFileStore,
    NoActiveFormula,
    StoreError,
    ensure_zero_rows,
    get_active_formula,
    publish_formula,
    recompute_match,
    recompute_season_points,
    refresh_match,
    season_totals,
    write_leaderboard_csv,
    write_leaderboard_excel,
)
from clubmvp.config import get_default_formula_rules, get_log_level
from clubmvp.logging_config import get_logger, setup_logging
from clubmvp.utils import load_json

logger = get_logger('clubmvp.cli')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Club MVP points: formulas, recompute and leaderboards")
    parser.add_argument(
        "--data-dir", "-d",
        default="data/club",
        help="Directory holding the store's JSON files",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (defaults to log_level in data/scoring_config.json)",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Directory for log files (default: ./logs)",
    )
    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="Log to the console only",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    publish = sub.add_parser("publish", help="Publish a new formula version and activate it")
    publish.add_argument("--club", required=True, help="Club id")
    publish.add_argument("--season", default=None, help="Season id (omit for the club default)")
    publish.add_argument(
        "--rules",
        default=None,
        help="JSON file with formula rules (default: default_formula from the config)",
    )
    publish.add_argument("--name", default=None, help="Display name for the version")
    publish.add_argument("--by", default=None, help="Who is publishing")

    recompute = sub.add_parser("recompute", help="Recompute point events under the active formula")
    recompute.add_argument("--club", required=True, help="Club id")
    recompute.add_argument("--season", default=None, help="Season id used to resolve the formula")
    recompute.add_argument("--start", default=None, help="First match date (YYYY-MM-DD)")
    recompute.add_argument("--end", default=None, help="Last match date (YYYY-MM-DD)")
    recompute.add_argument("--match", default=None, help="Recompute a single match instead of a date range")
    recompute.add_argument("--batch-size", type=int, default=None, help="Events per insert call")

    zero = sub.add_parser("ensure-zero", help="Add zero cards for rostered players without any card")
    zero.add_argument("--match", required=True, help="Match id")
    zero.add_argument("--team", default=None, help="Club team id")
    zero.add_argument("--players", nargs="+", required=True, help="Selected roster player ids")
    zero.add_argument("--club", default=None, help="Also recompute the match for this club")
    zero.add_argument("--season", default=None, help="Season id used to resolve the formula")

    board = sub.add_parser("leaderboard", help="Print or export season point totals")
    board.add_argument("--club", required=True, help="Club id")
    board.add_argument("--start", required=True, help="First match date (YYYY-MM-DD)")
    board.add_argument("--end", required=True, help="Last match date (YYYY-MM-DD)")
    board.add_argument("--season", default=None, help="Season id used to resolve the formula")
    board.add_argument("--formula-id", default=None, help="Formula id (default: the active formula)")
    board.add_argument("--team", default=None, help="Only count this team's matches")
    board.add_argument("--top", type=int, default=20, help="Rows to print")
    board.add_argument("--csv", default=None, help="Write the player table to this CSV file")
    board.add_argument("--xlsx", default=None, help="Write player and team tables to this workbook")

    return parser


def cmd_publish(store: JsonFileStore, args) -> int:
    if args.rules:
        rules = load_json(args.rules, schema=FormulaRules)
    else:
        rules = get_default_formula_rules()
    formula = publish_formula(
        store, args.club, rules, season_id=args.season, name=args.name, created_by=args.by
    )
    print(f"Published {formula.name} (v{formula.version}) id={formula.id}")
    return 0


def cmd_recompute(store: JsonFileStore, args) -> int:
    if args.match:
        result = recompute_match(
            store, args.club, args.match, season_id=args.season, batch_size=args.batch_size
        )
    elif args.start and args.end:
        result = recompute_season_points(
            store, args.club, args.start, args.end, season_id=args.season, batch_size=args.batch_size
        )
    else:
        print("recompute needs --match or both --start and --end", file=sys.stderr)
        return 2

    print(
        f"Recomputed {result.matches} match(es) under formula v{result.formula_version}: "
        f"{result.events_deleted} events deleted, {result.events_inserted} inserted"
    )
    return 0


def cmd_ensure_zero(store: JsonFileStore, args) -> int:
    if args.club:
        zero_rows, result = refresh_match(
            store, args.club, args.match, args.team, args.players, season_id=args.season
        )
    else:
        zero_rows, result = ensure_zero_rows(store, args.match, args.team, args.players), None

    print(f"Added {zero_rows.created_rows} zero rows for {zero_rows.created_triples} player(s)")
    for player_id in zero_rows.missing_player_ids:
        print(f"  {player_id}")
    if result is not None:
        print(f"Recomputed match {args.match}: {result.events_inserted} events")
    return 0


def cmd_leaderboard(store: JsonFileStore, args) -> int:
    formula_id = args.formula_id
    if formula_id is None:
        formula_id = get_active_formula(store, args.club, args.season).id

    players, teams = season_totals(
        store, args.club, args.start, args.end, formula_id, team_id=args.team
    )

    print(f"{'#':>3}  {'Player':<24} {'Bat':>7} {'Bowl':>7} {'Field':>7} {'Total':>8}  M")
    for rank, p in enumerate(players[:args.top], 1):
        print(
            f"{rank:>3}  {p.player_id:<24} {p.bat:>7.1f} {p.bowl:>7.1f} {p.field:>7.1f} "
            f"{p.total:>8.1f}  {p.matches}"
        )
    if teams:
        print()
        for rank, t in enumerate(teams, 1):
            print(f"{rank:>3}  {t.team_id:<24} {t.total:>8.1f} pts")

    if args.csv:
        write_leaderboard_csv(args.csv, players)
        print(f"Leaderboard written: {args.csv}")
    if args.xlsx:
        write_leaderboard_excel(args.xlsx, players, teams)
        print(f"Workbook written: {args.xlsx}")
    return 0


COMMANDS = {
    "publish": cmd_publish,
    "recompute": cmd_recompute,
    "ensure-zero": cmd_ensure_zero,
    "leaderboard": cmd_leaderboard,
}


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(
        log_dir=Path(args.log_dir) if args.log_dir else None,
        level=args.log_level or get_log_level(),
        log_to_file=not args.no_log_file,
    )

    logger.info(f"Running {args.command} against {args.data_dir}")
    try:
        store = JsonFileStore(args.data_dir)
        return COMMANDS[args.command](store, args)
    except NoActiveFormula as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    except StoreError as e:
        print(f"❌ Store failure: {e}", file=sys.stderr)
        return 1
    except (ValueError, FileNotFoundError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())

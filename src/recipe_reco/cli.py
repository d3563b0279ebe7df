"""
cli.py

Purpose:
    Command line entry points for the recommendation engine.

Usage:
    recipe-reco refresh --user-id <uuid>
    recipe-reco show --user-id <uuid> [--channel trending]
    recipe-reco reap

Requires:
    SUPABASE_URL
    SUPABASE_SERVICE_ROLE_KEY
    SPOONACULAR_API_KEY (optional; falls back to the spoonacular-proxy edge function)
"""
from __future__ import annotations

import argparse
from typing import List, Optional

from recipe_reco.logging_utils import LOG_RUN_ID
from recipe_reco.schema import Channel, RefreshReport, ScoredRecipe
from recipe_reco.service import RecommendationService, build_service


def _print_report(report: RefreshReport) -> None:
    if report.skipped:
        print(f"[{LOG_RUN_ID}] no profile for {report.user_id}; nothing generated")
        return
    print(f"[{LOG_RUN_ID}] refreshed {report.user_id}: {report.persisted} recommendations")
    for channel, ch in report.channels.items():
        status = "ok" if ch.outcome.ok else f"failed ({ch.outcome.error})"
        print(f"  {channel.value:<14} persisted={ch.persisted:<3} failed={ch.failed:<3} {status}")


def _print_recipes(channel: Channel, items: List[ScoredRecipe]) -> None:
    print(f"== {channel.value} ({len(items)})")
    for i, item in enumerate(items, start=1):
        print(f"{i:02d}. {item.recipe.title}  score={item.score:.2f}  id={item.recipe.id}")
        if item.reason:
            print("    -", item.reason)


def run(args: argparse.Namespace, service: RecommendationService) -> int:
    if args.command == "refresh":
        _print_report(service.orchestrator.refresh(args.user_id))
    elif args.command == "show":
        if args.channel:
            channel = Channel(args.channel)
            _print_recipes(channel, service.query.get_recommendations(args.user_id, channel))
        else:
            for channel, items in service.query.get_all_channels(args.user_id).items():
                _print_recipes(channel, items)
    elif args.command == "reap":
        print(f"reaped {service.store.reap_expired()} expired recommendations")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="recipe-reco", description="Recipe recommendation engine")
    sub = ap.add_subparsers(dest="command", required=True)

    refresh = sub.add_parser("refresh", help="Regenerate all channels for a user")
    refresh.add_argument("--user-id", required=True)

    show = sub.add_parser("show", help="Print live recommendations for a user")
    show.add_argument("--user-id", required=True)
    show.add_argument("--channel", choices=[c.value for c in Channel])

    sub.add_parser("reap", help="Delete expired recommendation rows")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    service = build_service()
    try:
        return run(args, service)
    finally:
        service.close()


if __name__ == "__main__":
    raise SystemExit(main())

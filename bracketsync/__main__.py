"""Main entry point for the bracket sync command line."""

import argparse
import asyncio
import sys

from .api import EnvCredentials, StartGGClient, StaticCredentials
from .errors import BracketSyncError
from .models.bracket_set import BracketSet
from .models.mock_data import MOCK_EVENT, MOCK_SET_DETAILS
from .models.startgg_api import StartGGEvent, StartGGSetDetail
from .sync import BracketSetSync
from .sync.normalizer import convert_games, convert_set, convert_videogame
from .utils.logging import log, mask_token


def format_set(bracket_set: BracketSet) -> str:
    winner = f" - winner: {bracket_set.winner_name}" if bracket_set.winner_name else ""
    return (
        f"[{bracket_set.id}] R{bracket_set.round or '?'} {bracket_set.match_name} "
        f"({bracket_set.match_score}) - {bracket_set.state_label}{winner}"
    )


def format_games(bracket_set: BracketSet) -> list[str]:
    names = {character.id: character.name for character in bracket_set.videogame.characters}
    lines = []
    for game in bracket_set.games:
        winner_index = bracket_set.entrant_index(game.winner_id)
        winner = bracket_set.slots[winner_index].display_name if winner_index is not None else "-"
        picks = " / ".join(
            names.get(character_id, "?") if character_id else "-"
            for character_id in game.character_ids
        )
        lines.append(f"    Game {game.order_num}: winner {winner} ({picks})")
    return lines


def demo_sets() -> list[BracketSet]:
    """Sets built from bundled mock payloads, with the first one expanded"""
    event = StartGGEvent.model_validate(MOCK_EVENT)
    videogame = convert_videogame(event.videogame)
    sets = [convert_set(node, videogame) for node in event.sets.nodes]

    detail = StartGGSetDetail.model_validate(MOCK_SET_DETAILS)
    sets[0].games = convert_games(detail.games, sets[0])
    sets[0].is_expanded = True
    return sets


async def run(args: argparse.Namespace) -> int:
    credentials = StaticCredentials(args.token) if args.token else EnvCredentials()
    client = StartGGClient(credentials)
    engine = BracketSetSync(client)

    if args.tournaments:
        tournaments = await client.fetch_tournaments()
        events = await client.fetch_tournament_events([t.id for t in tournaments])
        for event in events:
            log(f"🏆 {event.tournament_name} / {event.name} (event ID: {event.id})")
        return 0

    event_id = args.event
    if args.slug and not event_id:
        log("🔍 Getting event ID from slug...")
        event_id = await client.get_event_id_from_slug(args.slug)
        if not event_id:
            log("❌ Could not get event ID from slug")
            return 1

    if not event_id:
        log("❌ Missing event: use --event or --slug (or --demo)")
        return 1

    sets = await engine.load_sets(event_id, prefetch_players=False)
    for bracket_set in sets:
        if args.set and bracket_set.id != args.set:
            continue
        log(format_set(bracket_set))
        if args.expand:
            expanded = await engine.expand_set(bracket_set.id)
            for line in format_games(expanded):
                log(line)
    return 0


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description="start.gg bracket set manager")
    parser.add_argument("--token", help="start.gg API token (defaults to $STARTGG_TOKEN)")
    parser.add_argument("--event", help="start.gg event ID")
    parser.add_argument(
        "--slug",
        help="start.gg event slug (e.g., tournament/the-c-stick-55/event/melee-singles)",
    )
    parser.add_argument("--set", help="Only show this set ID")
    parser.add_argument("--expand", action="store_true", help="Fetch and show the games of each set")
    parser.add_argument(
        "--tournaments",
        action="store_true",
        help="List the events of tournaments you administer",
    )
    parser.add_argument("--demo", action="store_true", help="Run with demo data")

    args = parser.parse_args()

    log("🔍 Command line args:")
    log(f"   Token: {mask_token(args.token)}")
    log(f"   Event: {args.event}")
    log(f"   Slug: {args.slug}")
    log(f"   Demo: {args.demo}")

    if args.demo:
        log("🏆 Running in DEMO mode with mock data")
        for bracket_set in demo_sets():
            log(format_set(bracket_set))
            for line in format_games(bracket_set):
                log(line)
        return

    try:
        exit_code = asyncio.run(run(args))
    except BracketSyncError as e:
        log(f"❌ {type(e).__name__}: {e}")
        exit_code = 1
    except KeyboardInterrupt:
        log("\n👋 Stopped")
        exit_code = 130

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()

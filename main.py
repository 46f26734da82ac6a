"""Inferno Island — launcher. Serves the API, or plays a whole game headless."""

import argparse
import asyncio
import logging
import os
import random
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = os.getenv("PORT", "13013")


def _print_event(event, names: dict[str, str]) -> None:
    from inferno_island.engine import day_label, event_type_label, time_label

    print(f"\n[{day_label(event.day)} {time_label(event.time_of_day)}] "
          f"{event_type_label(event.type)}: {event.title}")
    print(f"  {event.narrative}")
    for line in event.dialogue:
        print(f"  {names.get(line.character_id, line.character_id)}: {line.text}")
    for change in event.affinity_changes:
        sign = "+" if change.change >= 0 else ""
        print(f"  ({names.get(change.from_id, change.from_id)} → "
              f"{names.get(change.to_id, change.to_id)} {sign}{change.change}: {change.reason})")


async def simulate(seed: int | None) -> int:
    from inferno_island import engine
    from inferno_island.autoplay import AutoPlayer
    from inferno_island.config import build_synthesizer, get_config

    config = get_config()
    rng = random.Random(seed)
    player = AutoPlayer(
        engine.new_game(rng),
        build_synthesizer(config, rng),
        speed=0,
        ceremony_delay=0,
        window=config["recent_event_window"],
    )
    state = await player.run(max_failures=3)

    names = {c.id: c.name for c in state.characters}
    for event in state.events:
        _print_event(event, names)

    print("\nFinal couples:")
    for couple in state.final_couples or []:
        print(f"  {names[couple.person1_id]} ♥ {names[couple.person2_id]}")
    if not state.final_couples:
        print("  (none)")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Inferno Island launcher")
    parser.add_argument("--simulate", action="store_true",
                        help="Play one full game in the terminal and exit")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for the rule-based random draws")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=int(PORT))
    args = parser.parse_args()

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.simulate:
        sys.exit(asyncio.run(simulate(args.seed)))

    import uvicorn

    from inferno_island.api import GameSession, create_app
    from inferno_island.config import build_synthesizer, get_config

    config = get_config()
    rng = random.Random(args.seed) if args.seed is not None else None
    session = GameSession(
        build_synthesizer(config, rng), rng=rng, window=config["recent_event_window"]
    )
    print(f"Starting Inferno Island on http://localhost:{args.port} ...")
    uvicorn.run(create_app(session), host=args.host, port=args.port)


if __name__ == "__main__":
    main()

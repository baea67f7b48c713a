"""
SAPTest CLI - Command-line interface for the engine.

Usage:
    saptest battle --team Ant,Fish --opponent Cricket --seed 1
    saptest pets [--tier N]        List pets
    saptest foods                  List foods
    saptest toys                   List toys
    saptest validate               Validate the built-in content
    saptest serve                  Run the HTTP API
"""

import argparse
import logging
import sys

from .config import load_settings


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="SAPTest - Auto-battler simulation engine",
        prog="saptest",
    )
    parser.add_argument("--config", help="Path to a .saptest.toml settings file")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Battle command
    battle_parser = subparsers.add_parser("battle", help="Run a battle between two rosters")
    battle_parser.add_argument("--team", required=True, help="Comma-separated pet names, front first")
    battle_parser.add_argument("--opponent", required=True, help="Comma-separated pet names, front first")
    battle_parser.add_argument("--team-toys", default="", help="Comma-separated toy names for the team")
    battle_parser.add_argument("--opponent-toys", default="", help="Comma-separated toy names for the opponent")
    battle_parser.add_argument("--seed", type=int, default=None, help="Team RNG seed")
    battle_parser.add_argument("--opponent-seed", type=int, default=None, help="Opponent RNG seed")
    battle_parser.add_argument("--log", action="store_true", help="Print the event log as JSON")

    # Content commands
    pets_parser = subparsers.add_parser("pets", help="List pets")
    pets_parser.add_argument("--tier", type=int, default=None, help="Only this tier")
    subparsers.add_parser("foods", help="List foods")
    subparsers.add_parser("toys", help="List toys")
    subparsers.add_parser("validate", help="Validate the built-in content")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    settings = load_settings(args.config)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "battle":
        return cmd_battle(args, settings)
    elif args.command == "pets":
        return cmd_pets(args)
    elif args.command == "foods":
        return cmd_foods(args)
    elif args.command == "toys":
        return cmd_toys(args)
    elif args.command == "validate":
        return cmd_validate(args)
    elif args.command == "serve":
        return cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _parse_roster(text: str) -> list[str]:
    return [name.strip() for name in text.split(",") if name.strip()]


def cmd_battle(args, settings):
    """Run one battle and print the result."""
    from .api.schemas import BattleRequest, ErrorResponse, PetSpec, ToySpec
    from .api.service import APIService

    service = APIService(settings=settings)
    request = BattleRequest(
        team=[PetSpec(name=n) for n in _parse_roster(args.team)],
        opponent=[PetSpec(name=n) for n in _parse_roster(args.opponent)],
        team_toys=[ToySpec(name=n) for n in _parse_roster(args.team_toys)],
        opponent_toys=[ToySpec(name=n) for n in _parse_roster(args.opponent_toys)],
        seed=args.seed,
        opponent_seed=args.opponent_seed,
        include_log=args.log,
    )
    response = service.run_battle(request)
    if isinstance(response, ErrorResponse):
        print(f"Error [{response.error_code.value}]: {response.error}")
        sys.exit(1)

    print(f"Outcome: {response.outcome.value} after {response.n_turns} turn(s)")
    for label, pets in (("Team", response.team), ("Opponent", response.opponent)):
        survivors = [f"{p.name} ({p.attack}/{p.health})" for p in pets if p]
        print(f"{label}: {', '.join(survivors) or '-'}")
    if args.log:
        print(response.model_dump_json(include={"events"}, indent=2))
    return 0


def cmd_pets(args):
    """List pets."""
    from .api.service import APIService

    response = APIService().list_pets(args.tier)
    for pet in response.pets:
        print(f"T{pet.tier} {pet.name:<10} {pet.attack}/{pet.health}  {pet.description}")
    return 0


def cmd_foods(args):
    """List foods."""
    from .api.service import APIService

    response = APIService().list_foods()
    for food in response.foods:
        held = " (held)" if food.holdable else ""
        print(f"T{food.tier} {food.name:<14} {food.description}{held}")
    return 0


def cmd_toys(args):
    """List toys."""
    from .content import default_provider

    for toy in default_provider().toys_for_tier(6):
        lasts = f" ({toy.duration} turn)" if toy.duration else ""
        print(f"T{toy.tier} {toy.name:<14} {toy.description}{lasts}")
    return 0


def cmd_validate(args):
    """Validate the built-in content."""
    from .content import default_provider
    from .content.validation import validate_content

    result = validate_content(default_provider())
    for w in result.warnings:
        print(f"  warning: {w}")
    for e in result.errors:
        print(f"  error: {e}")
    print("Content valid" if result.valid else "Content invalid")
    if not result.valid:
        sys.exit(1)
    return 0


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install uvicorn")
        sys.exit(1)

    from .api.app import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    main()

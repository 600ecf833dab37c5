"""
ColorWars CLI - Command-line interface for the engine.

Usage:
    colorwars play [--players N] [--ai DIFFICULTY] [--size N]   Play in the terminal
    colorwars simulate [--players N] [--difficulty D]           Watch an AI-only game
    colorwars serve [--host HOST] [--port PORT]                 Run the multiplayer server
"""

import argparse
import logging
import os
import sys

from .engine_core.errors import ColorWarsError
from .engine_core.state import GameSession, GameStatus

logger = logging.getLogger(__name__)

# Stop AI-only games that run this long
MAX_SIMULATED_MOVES = 2000


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="ColorWars - Chain-Reaction Territory Game",
        prog="colorwars",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("COLORWARS_LOG_LEVEL", "WARNING"),
        help="Logging level (DEBUG, INFO, WARNING, ...)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play in the terminal")
    play_parser.add_argument("--players", type=int, default=2, help="Number of players (2-6)")
    play_parser.add_argument(
        "--ai",
        choices=["easy", "medium", "hard"],
        help="Every player after the first is an AI of this difficulty",
    )
    play_parser.add_argument("--size", type=int, help="Board size override")
    play_parser.add_argument("--seed", type=int, help="Random seed for the AI")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Watch an AI-only game")
    simulate_parser.add_argument("--players", type=int, default=2, help="Number of players (2-6)")
    simulate_parser.add_argument("--difficulty", choices=["easy", "medium", "hard"], default="medium")
    simulate_parser.add_argument("--size", type=int, help="Board size override")
    simulate_parser.add_argument("--seed", type=int, help="Random seed for the AI")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the multiplayer server")
    serve_parser.add_argument("--host", default=os.getenv("COLORWARS_HOST", "127.0.0.1"))
    serve_parser.add_argument("--port", type=int, default=int(os.getenv("COLORWARS_PORT", "3000")))

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        if args.command == "play":
            cmd_play(args)
        elif args.command == "simulate":
            cmd_simulate(args)
        elif args.command == "serve":
            cmd_serve(args)
        else:
            parser.print_help()
            sys.exit(1)
    except ColorWarsError as e:
        print(f"Error: {e}")
        sys.exit(1)


def render(session: GameSession) -> str:
    """Board with coordinates, plus turn and cell counts."""
    size = session.board.size
    header = "    " + " ".join(f"{c:>2} " for c in range(size))
    rows = [header]
    for r, row in enumerate(session.board.cells):
        cells = [" . " if cell.owner is None else f"{cell.owner[0].upper()}{cell.count} " for cell in row]
        rows.append(f"{r:>2}  " + " ".join(cells))

    counts = ", ".join(f"{player}: {n}" for player, n in session.cell_counts().items())
    rows.append(f"Cells - {counts}")
    if session.status == GameStatus.ENDED:
        rows.append(f"Game over - {session.winner} wins after {len(session.move_history)} moves")
    else:
        rows.append(f"{session.current_player} to move")
    return "\n".join(rows)


def cmd_play(args):
    """Interactive terminal game."""
    from .bots import get_policy
    from .engine_core.state import PLAYER_COLORS
    from .session import GameLoop

    bots = {}
    if args.ai:
        for i, color in enumerate(PLAYER_COLORS[1:args.players]):
            seed = None if args.seed is None else args.seed + i
            bots[color] = get_policy(args.ai, seed=seed)

    loop = GameLoop.create(player_count=args.players, board_size=args.size, bots=bots)
    loop.start()

    print("Commands: <row> <col> | undo | hint | new | quit")
    print("Opening move: any empty cell (3 dots). After that: only your own cells.")

    while True:
        print()
        print(render(loop.session))
        try:
            line = input("> ").strip().lower()
        except EOFError:
            break

        if line in ("quit", "exit", "q"):
            break
        if line == "undo":
            if not loop.undo():
                print("Nothing to undo")
            continue
        if line == "hint":
            try:
                decision = loop.hint()
            except ColorWarsError as e:
                print(f"No hint: {e}")
                continue
            print(f"Try {decision.row} {decision.col} ({decision.explanation})")
            continue
        if line == "new":
            loop.new_game()
            continue

        parts = line.split()
        if len(parts) != 2 or not all(p.isdigit() for p in parts):
            print("Enter a move as: <row> <col>")
            continue

        result = loop.play(int(parts[0]), int(parts[1]))
        for error in result.errors:
            print(error)
        for move in result.moves:
            if move.explosions:
                print(f"{move.move.player} at ({move.move.row}, {move.move.col}): "
                      f"{len(move.explosions)} explosion(s)")


def cmd_simulate(args):
    """Play an AI-only game and print the result."""
    from .bots import get_policy
    from .engine_core.rules import RulesEngine, create_session, get_valid_moves

    session = create_session(args.players, board_size=args.size)
    rules = RulesEngine()
    policies = {
        color: get_policy(args.difficulty, seed=None if args.seed is None else args.seed + i)
        for i, color in enumerate(session.players)
    }

    moves = 0
    explosions = 0
    while session.status == GameStatus.PLAYING and moves < MAX_SIMULATED_MOVES:
        player = session.current_player
        decision = policies[player].select_move(session, player, get_valid_moves(session, player))
        result = rules.apply(session, decision.row, decision.col)
        moves += 1
        explosions += len(result.explosions)

    print(render(session))
    print(f"Moves: {moves}, explosions: {explosions}")
    if session.status == GameStatus.PLAYING:
        print(f"Stopped after {MAX_SIMULATED_MOVES} moves without a winner")


def cmd_serve(args):
    """Run the FastAPI app under uvicorn."""
    import uvicorn

    logger.info("Serving on %s:%d", args.host, args.port)
    uvicorn.run("colorwars.api.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()

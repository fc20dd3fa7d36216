#!/usr/bin/env python
"""
Interactive Across game for playing against the MCTS AI in a terminal.

Example usage:
    # Play White against the easy AI
    across-play --color white

    # Play a pie-rule game against the hard AI
    across-play --difficulty hard --pie-rule

    # Use a custom iteration budget
    across-play --iterations 800 --seed 7
"""
import argparse
import logging
import os
import random
import sys
from typing import Optional

from across_ai.core.board import BoardState, IllegalMoveError
from across_ai.core.constants import (
    Player, Position, PLAYER_DISPLAY_NAMES, PLAYER_SYMBOLS, DIFFICULTY_ITERATIONS
)
from across_ai.core.game import Game, GameResult, is_valid_opening
from across_ai.mcts.agent import MCTSAgent
from across_ai.mcts.config import MCTSConfig


# ANSI color codes for terminal output
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    BLACK = "\033[90m"
    YELLOW = "\033[93m"

    @staticmethod
    def player_color(player: Player) -> str:
        """Get ANSI color code for a player's pegs."""
        return Colors.WHITE if player is Player.WHITE else Colors.BLACK


def parse_args(argv=None):
    """Parse command-line arguments for game configuration."""
    parser = argparse.ArgumentParser(description="Play Across against the MCTS AI")

    parser.add_argument("--difficulty", type=str, default="easy",
                        choices=sorted(DIFFICULTY_ITERATIONS),
                        help="AI strength preset")
    parser.add_argument("--iterations", type=int, default=None,
                        help="MCTS iterations per move (overrides --difficulty)")
    parser.add_argument("--color", type=str, default="white",
                        choices=["white", "black", "random"],
                        help="Your color (ignored with --pie-rule)")
    parser.add_argument("--pie-rule", action="store_true",
                        help="Start with a coin toss, an opening peg and a color choice")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed")
    parser.add_argument("--debug", action="store_true",
                        help="Show debug information")

    return parser.parse_args(argv)


def display_board(state: BoardState, last_move: Optional[Position] = None) -> None:
    """Print the board with colored pegs; the last move is bold."""
    size = state.size
    print("\n    " + " ".join(f"{x % 10}" for x in range(1, size + 1)))
    for y in range(1, size + 1):
        cells = []
        for x in range(1, size + 1):
            pos = Position(x, y)
            peg = state.peg_at(pos)
            if peg is not None:
                style = Colors.BOLD if pos == last_move else ""
                cells.append(f"{style}{Colors.player_color(peg.owner)}{PLAYER_SYMBOLS[peg.owner]}{Colors.RESET}")
            elif state.is_corner(pos):
                cells.append(" ")
            else:
                cells.append(".")
        print(f"{y:>3} " + " ".join(cells))

    for player in Player:
        print(f"  {PLAYER_SYMBOLS[player]} {PLAYER_DISPLAY_NAMES[player]}: "
              f"{len(state.pegs_of(player))} pegs, {len(state.links_of(player))} links")


def parse_position(text: str) -> Optional[Position]:
    """Parse 'x y' or 'x,y' into a Position, or None if malformed."""
    parts = text.replace(",", " ").split()
    if len(parts) != 2:
        return None
    try:
        return Position(int(parts[0]), int(parts[1]))
    except ValueError:
        return None


def get_human_move(state: BoardState, opening: bool = False) -> Position:
    """
    Prompt until the human enters a legal position.

    Args:
        state: Current board state
        opening: Whether this is the pie-rule opening peg

    Returns:
        Chosen position
    """
    goal = "top to bottom" if state.to_move is Player.WHITE else "left to right"
    prompt = "Opening peg (x y): " if opening else f"Your move, connect {goal} (x y, q to quit): "
    while True:
        text = input(prompt).strip().lower()
        if text in ("q", "quit", "exit"):
            raise KeyboardInterrupt
        pos = parse_position(text)
        if pos is None:
            print("Enter two numbers, e.g. '12 5'.")
            continue
        if opening and not is_valid_opening(pos, state.size):
            print(f"The opening peg must be within 2..{state.size - 1} on both axes.")
            continue
        if not opening and not state.is_valid_move(pos):
            print(f"{pos} is not a legal move for {PLAYER_DISPLAY_NAMES[state.to_move]}.")
            continue
        return pos


def choose_color_interactively() -> Player:
    while True:
        text = input("Choose your color (w/b): ").strip().lower()
        if text in ("w", "white"):
            return Player.WHITE
        if text in ("b", "black"):
            return Player.BLACK
        print("Please enter 'w' or 'b'.")


def setup_pie_rule(game: Game, rng: random.Random) -> Player:
    """
    Run the coin toss, opening peg and color choice.

    The toss winner places the (White) opening peg, and the other side
    chooses which color to play.

    Returns:
        The human's color
    """
    human_wins_toss = rng.random() < 0.5
    print(f"\nCoin toss: {'you win' if human_wins_toss else 'the AI wins'}.")

    if human_wins_toss:
        display_board(game.state)
        game.place_opening_peg(get_human_move(game.state, opening=True))
        ai_color = rng.choice([Player.WHITE, Player.BLACK])
        print(f"The AI chooses {PLAYER_DISPLAY_NAMES[ai_color]}.")
        return ai_color.opponent

    pos = game.place_opening_peg()
    print(f"The AI placed the opening peg at {pos}.")
    display_board(game.state, pos)
    return choose_color_interactively()


def play_game(args) -> None:
    """Play one game between the human and the AI."""
    rng = random.Random(args.seed)
    game = Game(pie_rule=args.pie_rule, random_seed=args.seed)

    if args.pie_rule:
        human_color = setup_pie_rule(game, rng)
    elif args.color == "random":
        human_color = rng.choice([Player.WHITE, Player.BLACK])
    else:
        human_color = Player[args.color.upper()]
    ai_color = human_color.opponent

    if args.iterations is not None:
        config = MCTSConfig(iterations=args.iterations)
    else:
        config = MCTSConfig.from_difficulty(args.difficulty)
    opponent = MCTSAgent(config=config, color=ai_color, name="MCTS AI",
                         verbose=args.debug, seed=args.seed)
    opponent.register_with_game(game)

    print(f"\nYou play {PLAYER_DISPLAY_NAMES[human_color]} "
          f"({PLAYER_SYMBOLS[human_color]}), the AI plays {PLAYER_DISPLAY_NAMES[ai_color]} "
          f"with {config.iterations} iterations per move.")

    last_move = game.history[-1][1] if game.history else None
    while not game.game_over:
        display_board(game.state, last_move)
        if game.current_player == human_color:
            move = get_human_move(game.state)
            try:
                game.step(move)
            except IllegalMoveError as e:
                print(f"{Colors.RED}{e}{Colors.RESET}")
                continue
        else:
            print(f"\n{opponent.name} is thinking...")
            game.step()
        last_move = game.history[-1][1] if game.history else None

    display_board(game.state, last_move)
    print("\n" + Colors.BOLD + Colors.YELLOW + "=== GAME OVER ===" + Colors.RESET)
    if game.result is GameResult.WINNER:
        if game.winner == human_color:
            print(Colors.BOLD + Colors.GREEN + "You win!" + Colors.RESET)
        else:
            print(Colors.BOLD + Colors.RED + f"{opponent.name} wins!" + Colors.RESET)
    else:
        print(Colors.BOLD + Colors.YELLOW + "No legal moves remain; the game is stalled." + Colors.RESET)

    stats = game.get_statistics()
    print("\nGame Statistics:")
    print(f"  Moves: {stats['moves']}")
    print(f"  Links: {stats['links']}")
    print(f"  Duration: {stats['duration']:.1f}s")


def main(argv=None):
    """Main function."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    # Set up colored output for Windows
    if os.name == 'nt':
        os.system('color')

    print(Colors.BOLD + Colors.YELLOW + "Welcome to Across!" + Colors.RESET)
    print("White links top to bottom, Black links left to right. Links may not cross.")

    try:
        play_game(args)
        while True:
            play_again = input("\nPlay again? (y/n): ").lower()
            if play_again in ['y', 'yes']:
                play_game(args)
            elif play_again in ['n', 'no']:
                print("Thanks for playing!")
                break
            else:
                print("Please enter 'y' or 'n'.")
    except (KeyboardInterrupt, EOFError):
        print("\nGame interrupted by user.")
        sys.exit(0)


if __name__ == "__main__":
    main()

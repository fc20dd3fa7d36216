#!/usr/bin/env python
"""
Demonstration script for Across AI agents playing against each other.

This script runs a series of AI vs AI games, alternating colors, and reports
win rates, game lengths and search speed.

Example usage:
    # Easy MCTS against a random agent, 10 games
    python demo_game.py --agent1 easy --agent2 random --games 10

    # Medium against easy, showing the final board of each game
    python demo_game.py --agent1 medium --agent2 easy --show-board

    # Custom budgets and a win-rate chart
    python demo_game.py --agent1 mcts --agent1-iterations 400 --agent2 easy --plot results/win_rates.png
"""
import argparse
import logging
import os
import random
import time
from typing import Any, Dict, List, Optional

import numpy as np
from tqdm import tqdm

from across_ai.core.constants import Player, DIFFICULTY_ITERATIONS
from across_ai.core.game import Game, GameResult
from across_ai.mcts.agent import MCTSAgent, MCTSAgentFactory, RandomAgent
from across_ai.mcts.config import MCTSConfig

AGENT_CHOICES = ["random", "mcts"] + sorted(DIFFICULTY_ITERATIONS)


def parse_args(argv=None):
    """Parse command-line arguments for the demo."""
    parser = argparse.ArgumentParser(description="Run AI vs AI games of Across")

    parser.add_argument("--agent1", type=str, default="easy", choices=AGENT_CHOICES,
                        help="First agent (a difficulty tier, 'mcts' for a custom budget, or 'random')")
    parser.add_argument("--agent2", type=str, default="random", choices=AGENT_CHOICES,
                        help="Second agent")
    parser.add_argument("--agent1-iterations", type=int, default=150,
                        help="MCTS iterations for agent1 when it is 'mcts'")
    parser.add_argument("--agent2-iterations", type=int, default=150,
                        help="MCTS iterations for agent2 when it is 'mcts'")
    parser.add_argument("--games", type=int, default=4,
                        help="Number of games (colors alternate)")
    parser.add_argument("--max-moves", type=int, default=300,
                        help="Move cap per game; longer games count as stalled")
    parser.add_argument("--pie-rule", action="store_true",
                        help="Start each game with a random central White opening peg")
    parser.add_argument("--seed", type=int, default=42,
                        help="Random seed")
    parser.add_argument("--show-board", action="store_true",
                        help="Print the final board of each game")
    parser.add_argument("--plot", type=str, default=None,
                        help="Save a win-rate bar chart to this path")
    parser.add_argument("--verbose", action="store_true",
                        help="Print search details for every MCTS move")

    return parser.parse_args(argv)


def create_agent(agent_type: str, iterations: int, seed: int, verbose: bool, name: str):
    """Create an agent from its command-line name."""
    if agent_type == "random":
        return RandomAgent(name=f"{name} (random)", seed=seed)
    if agent_type == "mcts":
        agent = MCTSAgent(config=MCTSConfig(iterations=iterations), seed=seed)
    else:
        agent = MCTSAgentFactory.create(agent_type, seed=seed)
    agent.name = f"{name} ({agent_type}, {agent.config.iterations} it)"
    agent.verbose = verbose
    return agent


def play_one(agents: Dict[Player, Any], args, seed: int) -> Dict[str, Any]:
    """
    Play a single game.

    Args:
        agents: Agent for each color
        args: Command-line arguments
        seed: Seed for the game's opening

    Returns:
        Game statistics
    """
    game = Game(pie_rule=args.pie_rule, random_seed=seed)
    for player, agent in agents.items():
        if isinstance(agent, MCTSAgent):
            agent.color = player
        game.register_agent(player, agent.get_action_callback())

    start = time.time()
    game.run_game(max_moves=args.max_moves)
    stats = game.get_statistics()
    stats["elapsed"] = time.time() - start

    if args.show_board:
        print()
        print(game)
    return stats


def run_demo(args) -> Dict[str, Any]:
    """Run the series of games and summarize them."""
    random.seed(args.seed)
    np.random.seed(args.seed)

    agent1 = create_agent(args.agent1, args.agent1_iterations, args.seed, args.verbose, "Agent 1")
    agent2 = create_agent(args.agent2, args.agent2_iterations, args.seed + 1, args.verbose, "Agent 2")

    wins = {agent1.name: 0, agent2.name: 0}
    stalled = 0
    lengths: List[int] = []
    durations: List[float] = []

    for game_index in tqdm(range(args.games), desc="Games"):
        # Alternate colors so neither agent always moves first
        if game_index % 2 == 0:
            agents = {Player.WHITE: agent1, Player.BLACK: agent2}
        else:
            agents = {Player.WHITE: agent2, Player.BLACK: agent1}

        stats = play_one(agents, args, args.seed + game_index)
        lengths.append(stats["moves"])
        durations.append(stats["elapsed"])

        if stats["result"] == GameResult.WINNER.name:
            winner = agents[Player[stats["winner"]]]
            wins[winner.name] += 1
        else:
            stalled += 1

    summary = {
        "games": args.games,
        "wins": wins,
        "stalled": stalled,
        "win_rates": {name: count / max(1, args.games) for name, count in wins.items()},
        "mean_moves": float(np.mean(lengths)) if lengths else 0.0,
        "std_moves": float(np.std(lengths)) if lengths else 0.0,
        "mean_duration": float(np.mean(durations)) if durations else 0.0,
    }
    return summary


def print_summary(summary: Dict[str, Any]) -> None:
    print("\nResults:")
    print(f"  Games: {summary['games']}")
    for name, count in summary["wins"].items():
        print(f"  {name}: {count} wins ({summary['win_rates'][name]:.0%})")
    print(f"  Stalled: {summary['stalled']}")
    print(f"  Moves per game: {summary['mean_moves']:.1f} +/- {summary['std_moves']:.1f}")
    print(f"  Seconds per game: {summary['mean_duration']:.2f}")


def plot_win_rates(summary: Dict[str, Any], path: str) -> None:
    """Save a bar chart of win rates."""
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    names = list(summary["win_rates"]) + ["Stalled"]
    rates = list(summary["win_rates"].values()) + [summary["stalled"] / max(1, summary["games"])]

    plt.figure(figsize=(8, 5))
    plt.bar(names, rates, color=["#c8bda0", "#3a3530", "#c8a96e"])
    plt.ylim(0, 1)
    plt.title(f"Across: {summary['games']} games")
    plt.ylabel("Rate")
    plt.tight_layout()
    plt.savefig(path)
    plt.close()
    print(f"Saved chart to {path}")


def main(argv: Optional[List[str]] = None):
    """Main function."""
    args = parse_args(argv)
    logging.basicConfig(level=logging.WARNING)

    summary = run_demo(args)
    print_summary(summary)

    if args.plot:
        plot_win_rates(summary, args.plot)


if __name__ == "__main__":
    main()

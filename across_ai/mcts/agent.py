"""
Monte Carlo Tree Search Agent for Across.

This module provides the MCTSAgent class, a ready-to-use AI player that
uses Monte Carlo Tree Search to choose moves, plus a RandomAgent baseline
and a factory for the difficulty tiers.
"""
from typing import Any, Callable, Dict, List, Optional, Tuple
import random
import time

from across_ai.core.board import BoardState
from across_ai.core.constants import Player, Position, DIFFICULTY_ITERATIONS
from across_ai.core.game import Game
from across_ai.mcts.config import MCTSConfig
from across_ai.mcts.node import SearchTree
from across_ai.mcts.search import (
    run_search, get_action_statistics, get_principal_variation
)


class MCTSAgent:
    """
    Monte Carlo Tree Search agent for playing Across.

    The agent searches from its own color's point of view and keeps
    statistics about its most recent search.
    """

    def __init__(
        self,
        config: Optional[MCTSConfig] = None,
        color: Optional[Player] = None,
        name: str = "MCTS Agent",
        verbose: bool = False,
        seed: Optional[int] = None,
    ):
        """
        Initialize an MCTS agent.

        Args:
            config: MCTS configuration parameters
            color: Side the agent plays (taken from the state if None)
            name: Name of the agent
            verbose: Whether to print a summary after each search
            seed: Seed for the agent's random source
        """
        self.config = config or MCTSConfig()
        self.color = Player(color) if color is not None else None
        self.name = name
        self.verbose = verbose
        self.rng = random.Random(seed)

        # Statistics from the most recent search
        self.last_stats: Dict[str, Any] = {}

        # History of all moves and their statistics
        self.action_history: List[Tuple[Optional[Position], Dict[str, Any]]] = []

        # Tree of the last search
        self.last_tree: Optional[SearchTree] = None

    def select_action(self, state: BoardState, player: Optional[Player] = None) -> Optional[Position]:
        """
        Select a move using Monte Carlo Tree Search.

        Args:
            state: Current board state (not modified)
            player: Side to play for (defaults to the agent's color, then
                the side to move)

        Returns:
            Selected position, or None if the game is already won or there
            is no legal move
        """
        player = Player(player) if player is not None else (self.color or state.to_move)

        # Check if it's actually our turn
        if state.to_move != player:
            raise ValueError(f"Not {player.name}'s turn")

        valid_moves = state.get_valid_moves()

        # If there's at most one move in an open game, no need to search
        if len(valid_moves) <= 1 and not state.is_terminal():
            move = valid_moves[0] if valid_moves else None
            self.last_stats = {"iterations": 0, "forced_move": True}
            self.last_tree = None
            self.action_history.append((move, self.last_stats))
            return move

        start_time = time.time()
        move, tree, stats = run_search(state, player, self.config, self.rng)
        stats["total_time"] = time.time() - start_time

        self.last_stats = stats
        self.last_tree = tree
        self.action_history.append((move, stats))

        if self.verbose:
            self._print_search_info(move, stats)

        return move

    def _print_search_info(self, move: Optional[Position], stats: Dict[str, Any]) -> None:
        """
        Print information about the search.

        Args:
            move: Selected move
            stats: Search statistics
        """
        print(f"\n{self.name} selected: {move}")
        print(f"Iterations: {stats['iterations']}")
        print(f"Time: {stats['time_elapsed']:.3f}s ({stats['iterations_per_second']:.1f} it/s)")
        print(f"Nodes: {stats['node_count']}")
        print(f"Max tree depth: {stats['max_tree_depth']}")

        if self.last_tree is not None:
            print("\nTop moves:")
            action_stats = get_action_statistics(self.last_tree)
            ranked = sorted(action_stats.items(), key=lambda item: item[1]["visits"], reverse=True)
            for i, (move_str, move_stats) in enumerate(ranked[:5]):
                print(f"{i+1}. {move_str} - {move_stats['visits']} visits, "
                      f"{move_stats['value']:.3f} value")

    def get_action_callback(self) -> Callable[[BoardState, Player], Optional[Position]]:
        """
        Get a callback function for selecting moves.

        This is useful for registering the agent with a Game object.
        """
        return lambda state, player: self.select_action(state, player)

    def register_with_game(self, game: Game, player: Optional[Player] = None) -> None:
        """
        Register this agent with a game.

        Args:
            game: Game object
            player: Side to play (defaults to the agent's color)
        """
        player = player if player is not None else self.color
        if player is None:
            raise ValueError("Agent has no color; pass the player to register as")
        self.color = Player(player)
        game.register_agent(self.color, self.get_action_callback())

    def get_last_statistics(self) -> Dict[str, Any]:
        return self.last_stats

    def get_principal_variation(self) -> List[Tuple[Position, float]]:
        """
        Get the principal variation (most visited path) from the last search.

        Returns:
            List of (move, mean score) pairs
        """
        if self.last_tree is None:
            return []
        return get_principal_variation(self.last_tree)

    def get_action_statistics(self) -> Dict[str, Dict[str, Any]]:
        if self.last_tree is None:
            return {}
        return get_action_statistics(self.last_tree)

    def reset_statistics(self) -> None:
        """Reset all statistics."""
        self.last_stats = {}
        self.action_history = []
        self.last_tree = None

    def __str__(self) -> str:
        return f"{self.name} (MCTS, {self.config.iterations} iterations)"


class RandomAgent:
    """Baseline agent that plays a uniformly random legal move."""

    def __init__(self, name: str = "Random Agent", seed: Optional[int] = None):
        self.name = name
        self.rng = random.Random(seed)

    def select_action(self, state: BoardState, player: Optional[Player] = None) -> Optional[Position]:
        if player is not None and state.to_move != player:
            raise ValueError(f"Not {Player(player).name}'s turn")
        valid_moves = state.get_valid_moves()
        return self.rng.choice(valid_moves) if valid_moves else None

    def get_action_callback(self) -> Callable[[BoardState, Player], Optional[Position]]:
        return lambda state, player: self.select_action(state, player)

    def __str__(self) -> str:
        return self.name


class MCTSAgentFactory:
    """
    Factory for creating MCTS agents with different strengths.
    """

    @staticmethod
    def create(difficulty: str, color: Optional[Player] = None, seed: Optional[int] = None) -> MCTSAgent:
        """
        Create an agent for a named difficulty tier.

        Args:
            difficulty: One of the names in DIFFICULTY_ITERATIONS
            color: Side the agent plays
            seed: Seed for the agent's random source

        Returns:
            MCTSAgent
        """
        config = MCTSConfig.from_difficulty(difficulty)
        return MCTSAgent(config=config, color=color, name=f"{difficulty.capitalize()} MCTS", seed=seed)

    @staticmethod
    def create_easy(color: Optional[Player] = None) -> MCTSAgent:
        return MCTSAgentFactory.create("easy", color)

    @staticmethod
    def create_medium(color: Optional[Player] = None) -> MCTSAgent:
        return MCTSAgentFactory.create("medium", color)

    @staticmethod
    def create_hard(color: Optional[Player] = None) -> MCTSAgent:
        return MCTSAgentFactory.create("hard", color)

    @staticmethod
    def create_custom(
        iterations: int = DIFFICULTY_ITERATIONS["easy"],
        exploration_weight: float = 1.414,
        max_depth: int = 60,
        color: Optional[Player] = None,
        name: str = "Custom MCTS",
        seed: Optional[int] = None,
    ) -> MCTSAgent:
        """
        Create a custom MCTS agent.

        Args:
            iterations: Number of MCTS iterations
            exploration_weight: UCT exploration parameter
            max_depth: Rollout depth cap
            color: Side the agent plays
            name: Name of the agent
            seed: Seed for the agent's random source

        Returns:
            MCTSAgent
        """
        config = MCTSConfig(
            iterations=iterations,
            exploration_weight=exploration_weight,
            max_depth=max_depth,
        )
        return MCTSAgent(config=config, color=color, name=name, seed=seed)

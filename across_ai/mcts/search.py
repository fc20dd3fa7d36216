"""
Monte Carlo Tree Search (MCTS) algorithm for Across.

This module implements the core MCTS algorithm with the four standard phases:
1. Selection: Descend by UCT while the node is fully expanded
2. Expansion: Add one child, choosing the move with the heuristic
3. Simulation: Heuristic-biased random playout with a depth cap
4. Backpropagation: +1 / -1 / 0 from the searching side's point of view

The search is synchronous and keeps no state between calls. All randomness
comes from a single random.Random, so a seeded generator reproduces the
same tree and the same move.
"""
from __future__ import annotations
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple
import logging
import random
import time

from across_ai.core.board import BoardState
from across_ai.core.constants import Player, Position
from across_ai.mcts.config import MCTSConfig
from across_ai.mcts.heuristic import select_move_with_heuristic
from across_ai.mcts.node import ROOT, SearchTree

logger = logging.getLogger(__name__)


def mcts_search(
    state: BoardState,
    iterations: int,
    ai_color: Player,
    config: Optional[MCTSConfig] = None,
    rng: Optional[random.Random] = None,
) -> Optional[Position]:
    """
    Run Monte Carlo Tree Search and return the chosen move.

    Args:
        state: Current board state (not modified)
        iterations: Number of MCTS iterations (0 picks a random legal move)
        ai_color: Side the search plays for
        config: Other MCTS parameters (its iteration count is overridden)
        rng: Random source

    Returns:
        The chosen position, or None if the game is already won or there is
        no legal move
    """
    config = replace(config, iterations=iterations) if config else MCTSConfig(iterations=iterations)
    move, _, _ = run_search(state, ai_color, config, rng)
    return move


def run_search(
    state: BoardState,
    ai_color: Player,
    config: Optional[MCTSConfig] = None,
    rng: Optional[random.Random] = None,
) -> Tuple[Optional[Position], SearchTree, Dict[str, Any]]:
    """
    Run the full MCTS loop.

    This function:
    1. Builds a tree rooted at a clone of the state
    2. Repeats selection, expansion, simulation and backpropagation
    3. Returns the move of the most visited root child

    Args:
        state: Current board state (not modified)
        ai_color: Side the search plays for
        config: MCTS configuration parameters
        rng: Random source

    Returns:
        Tuple of (best move or None, search tree, search statistics).
        The move is None when the position is already won or the side to
        move has no legal move.
    """
    if config is None:
        config = MCTSConfig()
    rng = rng or random.Random()

    tree = SearchTree(state.clone(), exploration_weight=config.exploration_weight)

    stats: Dict[str, Any] = {
        "iterations": 0,
        "max_tree_depth": 0,
        "total_rollout_plies": 0,
        "time_elapsed": 0.0,
        "used_fallback": False,
    }
    start_time = time.time()

    # A decided position has no move to search for
    decided = state.is_terminal()
    iterations = 0 if decided else config.iterations

    for _ in range(iterations):
        # 1. Selection
        selected = select_node(tree)

        # 2. Expansion
        node = expand_node(tree, selected, config, rng)

        # 3. Simulation
        winner, plies = simulate_game(tree[node].state, config, rng)

        # 4. Backpropagation
        backpropagate(tree, node, winner, ai_color)

        stats["iterations"] += 1
        stats["total_rollout_plies"] += plies
        stats["max_tree_depth"] = max(stats["max_tree_depth"], tree.depth(node))

    best_move = tree.best_move()
    if best_move is None and not decided:
        # No children: the budget was 0 or the root has nothing to expand
        valid_moves = state.get_valid_moves()
        if valid_moves:
            best_move = rng.choice(valid_moves)
            stats["used_fallback"] = True

    stats["node_count"] = len(tree)
    stats["time_elapsed"] = time.time() - start_time
    stats["iterations_per_second"] = stats["iterations"] / max(0.001, stats["time_elapsed"])
    stats["average_rollout_plies"] = stats["total_rollout_plies"] / max(1, stats["iterations"])
    stats["action_visits"] = {
        str(tree[child].move): tree[child].visits for child in tree.root.children
    }

    logger.debug(
        "MCTS for %s: %d iterations, %d nodes, move %s",
        ai_color.name, stats["iterations"], stats["node_count"], best_move,
    )
    return best_move, tree, stats


def select_node(tree: SearchTree) -> int:
    """
    Descend from the root to the node to expand.

    Follows the UCT-best child while the current node has no untried moves
    and at least one child.

    Args:
        tree: Search tree

    Returns:
        Index of the selected node
    """
    current = ROOT
    while not tree.has_untried_moves(current) and tree[current].children:
        current = tree.select_child(current)
    return current


def expand_node(
    tree: SearchTree,
    index: int,
    config: MCTSConfig,
    rng: random.Random,
) -> int:
    """
    Expand a node by one child.

    The untried move is chosen with the move heuristic, not uniformly.

    Args:
        tree: Search tree
        index: Node to expand
        config: MCTS configuration parameters
        rng: Random source

    Returns:
        Index of the new child, or index itself if nothing is left to try
    """
    untried = tree.untried_moves(index)
    if not untried:
        return index

    state = tree[index].state
    move = select_move_with_heuristic(untried, state, rng, config.heuristic_sample_size)
    untried.remove(move)

    child_state = state.clone()
    child_state.apply_move(move)
    return tree.add_child(index, move, child_state)


def simulate_game(
    state: BoardState,
    config: MCTSConfig,
    rng: random.Random,
) -> Tuple[Optional[Player], int]:
    """
    Play out a game from a state.

    Each ply uses the heuristic move with probability
    config.heuristic_probability and a uniform random legal move otherwise.
    The playout stops at a win, after config.max_depth plies, or when the
    side to move has no legal move.

    Args:
        state: State to start from (not modified)
        config: MCTS configuration parameters
        rng: Random source

    Returns:
        Tuple of (winner or None, number of plies played)
    """
    sim_state = state.clone()
    plies = 0
    while not sim_state.is_terminal() and plies < config.max_depth:
        moves = sim_state.get_valid_moves()
        if not moves:
            break
        if rng.random() < config.heuristic_probability:
            move = select_move_with_heuristic(moves, sim_state, rng, config.heuristic_sample_size)
        else:
            move = rng.choice(moves)
        sim_state.apply_move(move)
        plies += 1

    return sim_state.get_winner(), plies


def backpropagate(
    tree: SearchTree,
    index: int,
    winner: Optional[Player],
    ai_color: Player,
) -> None:
    """
    Update statistics from a node up to the root.

    Every node on the path gains a visit. The score goes up by one if the
    searching side won the playout, down by one if the other side won, and
    is unchanged if nobody won.

    Args:
        tree: Search tree
        index: Node the playout started from
        winner: Playout winner, or None
        ai_color: Side the search plays for
    """
    if winner is None:
        reward = 0.0
    elif winner == ai_color:
        reward = 1.0
    else:
        reward = -1.0

    for current in tree.path_to_root(index):
        node = tree[current]
        node.visits += 1
        node.score += reward


def get_principal_variation(tree: SearchTree, max_depth: int = 10) -> List[Tuple[Position, float]]:
    """
    Get the principal variation (most visited path) from the root.

    This is useful for analysis and debugging.

    Args:
        tree: Search tree
        max_depth: Maximum depth to explore

    Returns:
        List of (move, mean score) pairs along the most visited path
    """
    result = []
    current = ROOT
    while len(result) < max_depth:
        best = tree.most_visited_child(current)
        if best is None:
            break
        node = tree[best]
        result.append((node.move, node.mean_score))
        current = best
    return result


def get_action_statistics(tree: SearchTree) -> Dict[str, Dict[str, Any]]:
    """
    Get statistics for all moves from the root.

    Args:
        tree: Search tree

    Returns:
        Dictionary mapping move strings to visits, score, mean score and
        UCT value (None for unvisited children)
    """
    result = {}
    for child in tree.root.children:
        node = tree[child]
        unvisited, uct_value = tree.uct_key(child)
        result[str(node.move)] = {
            "visits": node.visits,
            "score": node.score,
            "value": node.mean_score,
            "uct": None if unvisited else uct_value,
        }
    return result

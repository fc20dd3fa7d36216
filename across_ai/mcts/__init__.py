"""
Monte Carlo Tree Search (MCTS) implementation for Across.

This package provides an MCTS player that needs no training. Each search:

1. Selection: Starting from the root, follow the UCT-best child while the
   node is fully expanded.
2. Expansion: Add a child for one untried move, chosen by the move heuristic.
3. Simulation: Play out from the new node, mixing heuristic and random moves,
   up to a depth cap.
4. Backpropagation: Add a visit and +1 / -1 / 0 to every node on the path.

The move returned is that of the most visited root child.
"""

from across_ai.mcts.config import MCTSConfig
from across_ai.mcts.node import MCTSNode, SearchTree
from across_ai.mcts.heuristic import score_move, select_move_with_heuristic
from across_ai.mcts.search import (
    mcts_search,
    run_search,
    select_node,
    expand_node,
    simulate_game,
    backpropagate
)
from across_ai.mcts.agent import MCTSAgent, MCTSAgentFactory, RandomAgent

# Default configuration
DEFAULT_CONFIG = MCTSConfig(
    iterations=150,             # Number of MCTS iterations per move
    exploration_weight=1.414,   # UCT exploration parameter (~sqrt(2))
    max_depth=60,               # Maximum plies per rollout
    heuristic_probability=0.3,  # Chance of a heuristic move in rollouts
    heuristic_sample_size=20    # Moves scored per heuristic call
)

__all__ = [
    'MCTSAgent',
    'MCTSAgentFactory',
    'RandomAgent',
    'MCTSNode',
    'SearchTree',
    'MCTSConfig',
    'score_move',
    'select_move_with_heuristic',
    'mcts_search',
    'run_search',
    'select_node',
    'expand_node',
    'simulate_game',
    'backpropagate',
    'DEFAULT_CONFIG'
]

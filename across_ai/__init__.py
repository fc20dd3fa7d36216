"""
Across AI - game engine and Monte Carlo Tree Search opponent for Across.

Across is a two-player peg-and-link connection game on a 24x24 lattice.
White links top to bottom, Black links left to right, and links may never
cross. This package provides the rules engine and an MCTS player.
"""

__version__ = "0.1.0"
__author__ = "Across AI Team"

# Make key components available at package level
from across_ai.core.constants import Player, Position
from across_ai.core.board import BoardState, get_valid_moves, apply_move, check_win
from across_ai.core.game import Game
from across_ai.mcts.search import mcts_search

# Version info as a tuple for programmatic access
VERSION_INFO = tuple(map(int, __version__.split('.')))

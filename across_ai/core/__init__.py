"""
Across AI Core Package

This package contains the core game logic for Across, including:
- Board constants and the two players
- Link geometry (crossing test)
- Board state, move generation, link formation and win detection
- Game flow, including the pie-rule opening

All core components can be imported directly from this package.
"""

# Constants
from across_ai.core.constants import (
    Player, Position,
    BOARD_SIZE, CORNERS, KNIGHT_OFFSETS, DIFFICULTY_ITERATIONS
)

# Geometry
from across_ai.core.geometry import segments_cross, is_knight_offset

# Board
from across_ai.core.board import (
    Peg, Link, BoardState, IllegalMoveError,
    get_valid_moves, apply_move, check_win, links_cross_free
)

# Game
from across_ai.core.game import (
    Game, GamePhase, GameResult,
    is_valid_opening, random_opening_position
)

__all__ = [
    # Constants
    'Player', 'Position',
    'BOARD_SIZE', 'CORNERS', 'KNIGHT_OFFSETS', 'DIFFICULTY_ITERATIONS',

    # Geometry
    'segments_cross', 'is_knight_offset',

    # Board
    'Peg', 'Link', 'BoardState', 'IllegalMoveError',
    'get_valid_moves', 'apply_move', 'check_win', 'links_cross_free',

    # Game
    'Game', 'GamePhase', 'GameResult',
    'is_valid_opening', 'random_opening_position',
]

"""
Constants for the Across game.

This module defines the board geometry, the two sides, the knight's-move
offsets used for linking, and the difficulty presets used by the AI.
"""
from enum import IntEnum
from typing import Dict, Final, FrozenSet, NamedTuple, Tuple


class Player(IntEnum):
    """Enum representing the two sides in Across."""
    WHITE = 1  # Vertical player, connects top to bottom
    BLACK = 2  # Horizontal player, connects left to right

    @property
    def opponent(self) -> "Player":
        """Get the other player."""
        return Player.BLACK if self is Player.WHITE else Player.WHITE


class Position(NamedTuple):
    """A lattice coordinate on the board (1-based)."""
    x: int
    y: int

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


# Board geometry
BOARD_SIZE: Final[int] = 24

CORNERS: Final[FrozenSet[Position]] = frozenset({
    Position(1, 1),
    Position(1, BOARD_SIZE),
    Position(BOARD_SIZE, 1),
    Position(BOARD_SIZE, BOARD_SIZE),
})

# The eight knight's-move offsets; same-owner pegs at one of these offsets link
KNIGHT_OFFSETS: Final[Tuple[Tuple[int, int], ...]] = (
    (1, 2), (2, 1), (2, -1), (1, -2),
    (-1, -2), (-2, -1), (-2, 1), (-1, 2),
)

# Display names for players (for pretty printing)
PLAYER_DISPLAY_NAMES: Final[Dict[Player, str]] = {
    Player.WHITE: "White",
    Player.BLACK: "Black",
}

# Board glyphs for terminal display
PLAYER_SYMBOLS: Final[Dict[Player, str]] = {
    Player.WHITE: "O",
    Player.BLACK: "X",
}

# Opening (pie rule): the first peg is always white and kept off the borders
OPENING_PLAYER: Final[Player] = Player.WHITE
OPENING_MIN: Final[int] = 2  # Opening area is [2, size - 1] on both axes
OPENING_SPREAD: Final[int] = 2  # Random AI opening lands within +/-2 of center

# AI and simulation settings
DEFAULT_MCTS_ITERATIONS: Final[int] = 150
DEFAULT_MCTS_EXPLORATION: Final[float] = 1.414  # UCT exploration parameter (~sqrt(2))
DEFAULT_ROLLOUT_DEPTH: Final[int] = 60
DEFAULT_HEURISTIC_PROBABILITY: Final[float] = 0.3
DEFAULT_HEURISTIC_SAMPLE_SIZE: Final[int] = 20

DIFFICULTY_ITERATIONS: Final[Dict[str, int]] = {
    "easy": 150,
    "medium": 500,
    "hard": 1500,
}

"""
Board state and rules for Across.

This module defines the core rules of the game:
- Peg and Link: the pieces placed on the lattice
- BoardState: pegs, links and side to move, with move generation,
  move application (including link formation) and win detection
- Module-level wrappers used by front ends that hold a BoardState

White connects the top row to the bottom row and may not play on the left
or right border columns. Black connects the left column to the right column
and may not play on the top or bottom border rows. Corners are never playable.
"""
from __future__ import annotations
from collections import deque
import copy
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from across_ai.core.constants import (
    Player, Position, BOARD_SIZE, KNIGHT_OFFSETS, PLAYER_SYMBOLS
)
from across_ai.core.geometry import segments_cross, is_knight_offset


class IllegalMoveError(ValueError):
    """Raised when a move is applied to a position the mover may not use."""


@dataclass(frozen=True)
class Peg:
    """A peg placed on the board by one player."""
    x: int
    y: int
    owner: Player

    @property
    def position(self) -> Position:
        return Position(self.x, self.y)


@dataclass(frozen=True)
class Link:
    """An undirected link between two pegs of the same owner."""
    a: Position
    b: Position
    owner: Player

    def touches(self, pos: Position) -> bool:
        return self.a == pos or self.b == pos


@dataclass
class BoardState:
    """
    Snapshot of an Across game: pegs, links and the side to move.

    A BoardState is owned by exactly one component at a time. The search
    works on clones so simulated play never touches the authoritative state.
    """
    pegs: List[Peg] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)
    to_move: Player = Player.WHITE
    size: int = BOARD_SIZE

    # Occupancy index, rebuilt from pegs on construction
    _occupied: Dict[Position, Peg] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        """Build the occupancy index and check the snapshot invariants."""
        self.to_move = Player(self.to_move)
        self._occupied = {}
        for peg in self.pegs:
            pos = peg.position
            if not self.in_bounds(pos):
                raise ValueError(f"Peg off the board at {pos}")
            if pos in self._occupied:
                raise ValueError(f"Two pegs at {pos}")
            if self.is_corner(pos):
                raise ValueError(f"Peg on corner {pos}")
            self._occupied[pos] = peg
        for link in self.links:
            first = self._occupied.get(link.a)
            second = self._occupied.get(link.b)
            if (first is None or second is None
                    or first.owner != link.owner or second.owner != link.owner
                    or not is_knight_offset(link.a, link.b)):
                raise ValueError(f"Link {link.a}-{link.b} does not join two {link.owner.name} pegs")
        if not links_cross_free(self.links):
            raise ValueError("Snapshot contains crossing links")

    @classmethod
    def empty(cls, to_move: Player = Player.WHITE, size: int = BOARD_SIZE) -> 'BoardState':
        """Create an empty board with the given side to move."""
        return cls(to_move=to_move, size=size)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def in_bounds(self, pos: Position) -> bool:
        return 1 <= pos.x <= self.size and 1 <= pos.y <= self.size

    def is_corner(self, pos: Position) -> bool:
        return pos.x in (1, self.size) and pos.y in (1, self.size)

    def is_forbidden_border(self, pos: Position, player: Player) -> bool:
        """Check whether pos lies on a border the player may not use."""
        if player is Player.WHITE:
            return pos.x == 1 or pos.x == self.size
        return pos.y == 1 or pos.y == self.size

    def peg_at(self, pos: Position) -> Optional[Peg]:
        return self._occupied.get(pos)

    def is_occupied(self, pos: Position) -> bool:
        return pos in self._occupied

    def pegs_of(self, player: Player) -> List[Peg]:
        """Get a player's pegs in placement order."""
        return [peg for peg in self.pegs if peg.owner == player]

    def links_of(self, player: Player) -> List[Link]:
        return [link for link in self.links if link.owner == player]

    def is_valid_move(self, pos: Position, player: Optional[Player] = None) -> bool:
        """
        Check whether a player may place a peg at pos.

        Args:
            pos: Candidate position
            player: Player placing the peg (defaults to the side to move)

        Returns:
            True if the placement is legal, False otherwise
        """
        player = self.to_move if player is None else player
        return (
            self.in_bounds(pos)
            and not self.is_corner(pos)
            and not self.is_forbidden_border(pos, player)
            and not self.is_occupied(pos)
        )

    def get_valid_moves(self) -> List[Position]:
        """
        Get every legal placement for the side to move.

        Moves are ordered by column, then row.

        Returns:
            List of legal positions (empty if none remain)
        """
        player = self.to_move
        moves = []
        for x in range(1, self.size + 1):
            for y in range(1, self.size + 1):
                pos = Position(x, y)
                if self.is_corner(pos) or self.is_forbidden_border(pos, player):
                    continue
                if pos not in self._occupied:
                    moves.append(pos)
        return moves

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def apply_move(self, pos: Position) -> List[Link]:
        """
        Place a peg for the side to move, form links, and pass the turn.

        A link is added to every same-owner peg a knight's move away, unless
        it would cross a link already on the board (of either owner).

        Args:
            pos: Position to place the peg at

        Returns:
            List of links formed by this move

        Raises:
            IllegalMoveError: If the position is not a legal placement
        """
        pos = Position(*pos)
        player = self.to_move
        if not self.is_valid_move(pos, player):
            raise IllegalMoveError(f"{player.name} may not play at {pos}")

        peg = Peg(pos.x, pos.y, player)
        self.pegs.append(peg)
        self._occupied[pos] = peg

        new_links = []
        for dx, dy in KNIGHT_OFFSETS:
            other = self._occupied.get(Position(pos.x + dx, pos.y + dy))
            if other is None or other.owner != player:
                continue
            link = Link(pos, other.position, player)
            if not self._crosses_any(link):
                self.links.append(link)
                new_links.append(link)

        self.to_move = player.opponent
        return new_links

    def _crosses_any(self, link: Link) -> bool:
        return any(segments_cross(link.a, link.b, existing.a, existing.b)
                   for existing in self.links)

    # ------------------------------------------------------------------
    # Win detection
    # ------------------------------------------------------------------

    def check_win(self, player: Player) -> bool:
        """
        Check whether a player has connected their two edges.

        White needs a chain of linked pegs from row 1 to the last row,
        Black from column 1 to the last column.

        Args:
            player: Player to check

        Returns:
            True if the player has a winning connection
        """
        player_pegs = {peg.position for peg in self.pegs if peg.owner == player}
        if not player_pegs:
            return False

        adjacency: Dict[Position, List[Position]] = {pos: [] for pos in player_pegs}
        for link in self.links:
            if link.owner != player:
                continue
            if link.a in adjacency and link.b in adjacency:
                adjacency[link.a].append(link.b)
                adjacency[link.b].append(link.a)

        if player is Player.WHITE:
            starts = [pos for pos in player_pegs if pos.y == 1]
            reached_goal = lambda pos: pos.y == self.size
        else:
            starts = [pos for pos in player_pegs if pos.x == 1]
            reached_goal = lambda pos: pos.x == self.size

        visited: Set[Position] = set(starts)
        queue = deque(starts)
        while queue:
            current = queue.popleft()
            if reached_goal(current):
                return True
            for neighbor in adjacency[current]:
                if neighbor not in visited:
                    visited.add(neighbor)
                    queue.append(neighbor)
        return False

    def is_terminal(self) -> bool:
        return self.check_win(Player.WHITE) or self.check_win(Player.BLACK)

    def get_winner(self) -> Optional[Player]:
        """
        Get the winner of the position, if any.

        White is checked before Black, so if both sides were connected
        White is reported.

        Returns:
            The winning player, or None
        """
        for player in (Player.WHITE, Player.BLACK):
            if self.check_win(player):
                return player
        return None

    # ------------------------------------------------------------------
    # Copying and display
    # ------------------------------------------------------------------

    def clone(self) -> 'BoardState':
        """Create an independent copy of this state."""
        # Pegs and links are frozen, so copying the containers is enough.
        # The source already passed validation, so the constructor is skipped.
        twin = copy.copy(self)
        twin.pegs = list(self.pegs)
        twin.links = list(self.links)
        twin._occupied = dict(self._occupied)
        return twin

    def render(self, highlight: Optional[Iterable[Position]] = None) -> str:
        """
        Render the board as text.

        Rows run top (y=1) to bottom, columns left (x=1) to right.
        Corners are blank, empty points are dots, pegs use the player symbols.
        Highlighted positions are marked with '*' if empty.
        """
        marked = set(highlight or ())
        width = len(str(self.size))
        header = " " * (width + 1) + " ".join(f"{x % 10}" for x in range(1, self.size + 1))
        lines = [header]
        for y in range(1, self.size + 1):
            cells = []
            for x in range(1, self.size + 1):
                pos = Position(x, y)
                peg = self._occupied.get(pos)
                if peg is not None:
                    cells.append(PLAYER_SYMBOLS[peg.owner])
                elif self.is_corner(pos):
                    cells.append(" ")
                elif pos in marked:
                    cells.append("*")
                else:
                    cells.append(".")
            lines.append(f"{y:>{width}} " + " ".join(cells))
        return "\n".join(lines)

    def __str__(self) -> str:
        return (f"BoardState(to_move={self.to_move.name}, "
                f"pegs={len(self.pegs)}, links={len(self.links)})")


def get_valid_moves(state: BoardState) -> List[Position]:
    """Get the legal placements for the side to move."""
    return state.get_valid_moves()


def apply_move(state: BoardState, pos: Position) -> List[Link]:
    """Apply a move to state in place and return the links it formed."""
    return state.apply_move(pos)


def check_win(state: BoardState, player: Player) -> bool:
    """Check whether player has connected their edges in state."""
    return state.check_win(player)


def links_cross_free(links: Iterable[Link]) -> bool:
    """Check that no two links in a collection properly cross."""
    links = list(links)
    for i, first in enumerate(links):
        for second in links[i + 1:]:
            if segments_cross(first.a, first.b, second.a, second.b):
                return False
    return True


def linkable_neighbors(state: BoardState, pos: Position, player: Player) -> List[Peg]:
    """Get the player's pegs a knight's move from pos (crossings ignored)."""
    neighbors = []
    for dx, dy in KNIGHT_OFFSETS:
        peg = state.peg_at(Position(pos.x + dx, pos.y + dy))
        if peg is not None and peg.owner == player:
            neighbors.append(peg)
    return neighbors

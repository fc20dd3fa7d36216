"""
Game flow management for Across.

This module defines:
- Game: owner of the authoritative BoardState, turn management and agents
- GamePhase / GameResult: where the game is and how it ended
- Helpers for the pie-rule opening

With the pie rule, the first peg is always White and is placed before the
players choose colors; play then continues with Black. Without it, White
simply moves first.
"""
from __future__ import annotations
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging
import random
import time

from across_ai.core.constants import (
    Player, Position, BOARD_SIZE, OPENING_PLAYER,
    OPENING_MIN, OPENING_SPREAD, PLAYER_DISPLAY_NAMES
)
from across_ai.core.board import BoardState, IllegalMoveError, Link

logger = logging.getLogger(__name__)

AgentCallback = Callable[[BoardState, Player], Optional[Position]]


class GamePhase(Enum):
    """Enum representing the phase of a game."""
    OPENING = auto()  # Waiting for the pie-rule opening peg
    PLAYING = auto()
    FINISHED = auto()


class GameResult(Enum):
    """Enum representing possible game results."""
    IN_PROGRESS = auto()
    WINNER = auto()  # A player connected their edges
    STALLED = auto()  # No legal move remained, or the move cap was reached


def is_valid_opening(pos: Position, size: int = BOARD_SIZE) -> bool:
    """Check whether pos is an allowed pie-rule opening square."""
    low, high = OPENING_MIN, size - 1
    return low <= pos.x <= high and low <= pos.y <= high


def random_opening_position(rng: Optional[random.Random] = None, size: int = BOARD_SIZE) -> Position:
    """
    Pick an opening square near the center of the board.

    Each coordinate is the center plus a uniform offset in
    [-OPENING_SPREAD, OPENING_SPREAD], clamped to the opening range.

    Args:
        rng: Random source (an unseeded generator if None)
        size: Board size

    Returns:
        Opening position
    """
    rng = rng or random.Random()
    center = (size + 2) // 2  # (size + 1) / 2 rounded half up
    high = size - 1

    def pick() -> int:
        offset = rng.randint(-OPENING_SPREAD, OPENING_SPREAD)
        return max(OPENING_MIN, min(high, center + offset))

    x = pick()
    y = pick()
    return Position(x, y)


class Game:
    """
    Manager for Across game flow and rules.

    The Game holds the single authoritative BoardState. Agents (and the
    search) only ever see it; they return a move which the Game validates
    and applies.
    """

    def __init__(self, pie_rule: bool = False, random_seed: Optional[int] = None):
        """
        Initialize a new game.

        Args:
            pie_rule: Whether the game starts with a White opening peg
                placed before colors are chosen
            random_seed: Random seed for the opening helper
        """
        self.pie_rule = pie_rule
        self.rng = random.Random(random_seed)
        self.agent_callbacks: Dict[Player, AgentCallback] = {}
        self.reset()

    def reset(self) -> BoardState:
        """
        Reset the game to a new initial state.

        Returns:
            New board state
        """
        self.state = BoardState.empty(to_move=OPENING_PLAYER)
        self.phase = GamePhase.OPENING if self.pie_rule else GamePhase.PLAYING
        self.result = GameResult.IN_PROGRESS
        self.winner: Optional[Player] = None
        self.history: List[Tuple[Player, Position]] = []
        self.start_time = time.time()
        self.end_time: Optional[float] = None
        return self.state

    @property
    def game_over(self) -> bool:
        return self.phase is GamePhase.FINISHED

    @property
    def current_player(self) -> Player:
        return self.state.to_move

    @property
    def move_count(self) -> int:
        return len(self.history)

    def place_opening_peg(self, pos: Optional[Position] = None) -> Position:
        """
        Place the pie-rule opening peg.

        The peg is always White. Play continues with Black.

        Args:
            pos: Opening position (a random central square if None)

        Returns:
            The position used

        Raises:
            IllegalMoveError: If the game is not in the opening phase or the
                position is outside the opening area
        """
        if self.phase is not GamePhase.OPENING:
            raise IllegalMoveError("The opening peg has already been placed")

        pos = random_opening_position(self.rng, self.state.size) if pos is None else Position(*pos)
        if not is_valid_opening(pos, self.state.size):
            raise IllegalMoveError(f"Opening peg must stay off the border rows and columns, got {pos}")

        self.state.to_move = OPENING_PLAYER
        self.state.apply_move(pos)
        self.history.append((OPENING_PLAYER, pos))
        self.phase = GamePhase.PLAYING
        return pos

    def play(self, pos: Position) -> List[Link]:
        """
        Place a peg for the side to move.

        Args:
            pos: Position to play at

        Returns:
            Links formed by the move

        Raises:
            IllegalMoveError: If the game is over, still in the opening,
                or the position is not legal for the side to move
        """
        if self.phase is GamePhase.OPENING:
            raise IllegalMoveError("Place the opening peg first")
        if self.phase is GamePhase.FINISHED:
            raise IllegalMoveError("The game is over")

        player = self.state.to_move
        new_links = self.state.apply_move(Position(*pos))
        self.history.append((player, Position(*pos)))

        # Only the mover can have completed a connection
        if self.state.check_win(player):
            self._finish(GameResult.WINNER, player)
        elif not self.state.get_valid_moves():
            self._finish(GameResult.STALLED)

        return new_links

    def _finish(self, result: GameResult, winner: Optional[Player] = None) -> None:
        self.phase = GamePhase.FINISHED
        self.result = result
        self.winner = winner
        self.end_time = time.time()
        if winner is not None:
            logger.info("%s wins after %d moves", PLAYER_DISPLAY_NAMES[winner], self.move_count)
        else:
            logger.info("Game stalled after %d moves", self.move_count)

    def register_agent(self, player: Player, agent_callback: AgentCallback) -> None:
        """
        Register an AI agent for a player.

        The callback takes the board state and the player, and returns a
        position (or None if it has no move).

        Args:
            player: Player the agent controls
            agent_callback: Function that selects a move given the state
        """
        self.agent_callbacks[Player(player)] = agent_callback

    def step(self, move: Optional[Position] = None) -> Tuple[BoardState, bool]:
        """
        Advance the game by one move.

        If no move is given, the agent registered for the side to move
        chooses one. An agent returning None stalls the game.

        Args:
            move: Optional move to apply

        Returns:
            Tuple of (board state, whether the game is over)
        """
        if self.game_over:
            return self.state, True

        if self.phase is GamePhase.OPENING:
            self.place_opening_peg(move)
            return self.state, False

        player = self.state.to_move
        if move is None:
            if player not in self.agent_callbacks:
                raise ValueError("No move provided and no agent registered for the side to move")
            move = self.agent_callbacks[player](self.state.clone(), player)
            if move is None:
                self._finish(GameResult.STALLED)
                return self.state, True

        self.play(move)
        return self.state, self.game_over

    def run_game(self, max_moves: int = BOARD_SIZE * BOARD_SIZE) -> BoardState:
        """
        Run the game until completion or max moves.

        Both players must have agents registered. A pending pie-rule opening
        is placed at a random central square.

        Args:
            max_moves: Maximum number of moves to play

        Returns:
            Final board state
        """
        for player in Player:
            if player not in self.agent_callbacks:
                raise ValueError(f"No agent registered for {player.name}")

        while not self.game_over:
            if self.move_count >= max_moves:
                self._finish(GameResult.STALLED)
                break
            self.step()

        return self.state

    def get_winner(self) -> Optional[Player]:
        return self.winner

    def get_result(self) -> GameResult:
        return self.result

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get statistics about the game.

        Returns:
            Dictionary of game statistics
        """
        end = self.end_time if self.end_time is not None else time.time()
        stats: Dict[str, Any] = {
            "moves": self.move_count,
            "links": len(self.state.links),
            "result": self.result.name,
            "winner": self.winner.name if self.winner is not None else None,
            "duration": end - self.start_time,
        }
        for player in Player:
            name = player.name.lower()
            stats[f"{name}_pegs"] = len(self.state.pegs_of(player))
            stats[f"{name}_links"] = len(self.state.links_of(player))
        return stats

    def __str__(self) -> str:
        lines = [
            f"Across - move {self.move_count}, {self.phase.name.lower()}",
            self.state.render(),
        ]
        if self.winner is not None:
            lines.append(f"{PLAYER_DISPLAY_NAMES[self.winner]} wins")
        elif not self.game_over:
            lines.append(f"{PLAYER_DISPLAY_NAMES[self.state.to_move]} to move")
        return "\n".join(lines)

"""
Move heuristic for Across.

A cheap positional score used to bias rollouts and to decide which untried
move to expand next. It is never used by UCT selection itself.
"""
from typing import Optional, Sequence
import random

from across_ai.core.constants import Player, Position, DEFAULT_HEURISTIC_SAMPLE_SIZE
from across_ai.core.board import BoardState, linkable_neighbors

CENTER_WEIGHT = 0.5
ADVANCE_WEIGHT = 0.3
LINK_BONUS = 2.0


def score_move(move: Position, state: BoardState) -> float:
    """
    Score a candidate move for the side to move.

    The score combines:
    - a penalty for Manhattan distance from the board center
    - Black: a bonus growing with x; White: a penalty for distance from the
      center row
    - a bonus for each own peg a knight's move away (crossings ignored, so
      this does not guarantee the link will form)

    Args:
        move: Candidate position
        state: Position the move would be played in

    Returns:
        Heuristic score (higher is better)
    """
    center = (state.size + 1) / 2
    player = state.to_move

    score = -CENTER_WEIGHT * (abs(move.x - center) + abs(move.y - center))
    if player is Player.BLACK:
        score += ADVANCE_WEIGHT * move.x
    else:
        score -= ADVANCE_WEIGHT * abs(move.y - center)

    score += LINK_BONUS * len(linkable_neighbors(state, move, player))
    return score


def select_move_with_heuristic(
    moves: Sequence[Position],
    state: BoardState,
    rng: Optional[random.Random] = None,
    sample_size: int = DEFAULT_HEURISTIC_SAMPLE_SIZE,
) -> Optional[Position]:
    """
    Pick the best-scoring move from a bounded sample.

    With more than sample_size moves, only a uniform random sample of
    sample_size is scored. Ties keep the first move seen.

    Args:
        moves: Candidate moves
        state: Position the moves would be played in
        rng: Random source
        sample_size: Maximum number of moves to score

    Returns:
        Chosen move, or None if there are no moves
    """
    if not moves:
        return None
    rng = rng or random.Random()

    sample = rng.sample(list(moves), sample_size) if len(moves) > sample_size else moves

    best = None
    best_score = None
    for move in sample:
        score = score_move(move, state)
        if best_score is None or score > best_score:
            best = move
            best_score = score

    if best is None:
        return rng.choice(moves)
    return best

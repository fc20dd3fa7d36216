"""
Monte Carlo Tree Search tree for Across.

The tree is an arena: every MCTSNode lives in SearchTree.nodes and refers to
its parent and children by index. Index 0 is always the root. A tree belongs
to a single search call and is dropped when the call returns.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple
import math

from across_ai.core.board import BoardState
from across_ai.core.constants import Position, DEFAULT_MCTS_EXPLORATION

ROOT = 0


@dataclass
class MCTSNode:
    """
    A node in the Monte Carlo Tree Search.

    Each node holds the board state reached by its move, plus the visit
    count and accumulated score of the rollouts that passed through it.
    """
    state: BoardState
    parent: Optional[int] = None
    move: Optional[Position] = None
    children: List[int] = field(default_factory=list)
    visits: int = 0
    score: float = 0.0
    # Computed lazily on first access through SearchTree.untried_moves
    untried_moves: Optional[List[Position]] = None

    @property
    def mean_score(self) -> float:
        return self.score / self.visits if self.visits else 0.0

    def __str__(self) -> str:
        untried = len(self.untried_moves) if self.untried_moves is not None else "unknown"
        return (f"MCTSNode(move={self.move}, "
                f"visits={self.visits}, "
                f"score={self.score:.1f}, "
                f"children={len(self.children)}, "
                f"untried={untried})")


class SearchTree:
    """
    Arena of MCTS nodes rooted at one board state.

    Parent/child links are node indices, so walking up for backpropagation
    is a chain of list lookups and the tree has no reference cycles.
    """

    def __init__(self, root_state: BoardState, exploration_weight: float = DEFAULT_MCTS_EXPLORATION):
        """
        Initialize a tree with a single root node.

        Args:
            root_state: State at the root (the tree takes ownership of it)
            exploration_weight: UCT exploration constant
        """
        self.exploration_weight = exploration_weight
        self.nodes: List[MCTSNode] = [MCTSNode(state=root_state)]

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, index: int) -> MCTSNode:
        return self.nodes[index]

    @property
    def root(self) -> MCTSNode:
        return self.nodes[ROOT]

    def untried_moves(self, index: int) -> List[Position]:
        """
        Get the moves not yet expanded from a node.

        The list is built from the node's legal moves the first time it is
        requested. Terminal positions have no moves to try.
        """
        node = self.nodes[index]
        if node.untried_moves is None:
            node.untried_moves = [] if node.state.is_terminal() else node.state.get_valid_moves()
        return node.untried_moves

    def has_untried_moves(self, index: int) -> bool:
        return bool(self.untried_moves(index))

    def add_child(self, parent: int, move: Position, state: BoardState) -> int:
        """
        Attach a new child node.

        Args:
            parent: Index of the parent node
            move: Move that leads from the parent to the child
            state: State after the move (owned by the new node)

        Returns:
            Index of the new child
        """
        index = len(self.nodes)
        self.nodes.append(MCTSNode(state=state, parent=parent, move=move))
        self.nodes[parent].children.append(index)
        return index

    def uct_key(self, index: int) -> Tuple[bool, float]:
        """
        Selection priority of a node under UCT.

        The key is (visited?, value) compared so that every unvisited node
        outranks every visited one; among visited nodes the UCT value
        score/visits + C * sqrt(ln(parent visits) / visits) decides.
        """
        node = self.nodes[index]
        if node.visits == 0:
            return (True, 0.0)

        parent_visits = self.nodes[node.parent].visits if node.parent is not None else node.visits
        exploitation = node.score / node.visits
        exploration = math.sqrt(math.log(parent_visits) / node.visits)
        return (False, exploitation + self.exploration_weight * exploration)

    def select_child(self, index: int) -> int:
        """
        Select the child with the highest UCT priority.

        Ties go to the earliest child.

        Returns:
            Index of the selected child
        """
        children = self.nodes[index].children
        if not children:
            raise ValueError("Cannot select child from node with no children")
        return max(children, key=self.uct_key)

    def most_visited_child(self, index: int = ROOT) -> Optional[int]:
        """Get the child with the most visits (earliest on ties), or None."""
        children = self.nodes[index].children
        if not children:
            return None
        return max(children, key=lambda child: self.nodes[child].visits)

    def best_move(self) -> Optional[Position]:
        """
        Get the move of the root's most visited child.

        Visit count is a more robust choice than average score.

        Returns:
            The best move, or None if the root has no children
        """
        best = self.most_visited_child(ROOT)
        return self.nodes[best].move if best is not None else None

    def path_to_root(self, index: int) -> Iterator[int]:
        """Yield node indices from index up to and including the root."""
        current: Optional[int] = index
        while current is not None:
            yield current
            current = self.nodes[current].parent

    def depth(self, index: int) -> int:
        return sum(1 for _ in self.path_to_root(index)) - 1

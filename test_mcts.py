#!/usr/bin/env python
"""
Tests for the MCTS components: configuration, move heuristic, search tree,
the search loop and the agents.
"""
import math
import random
import unittest

from across_ai.core.constants import Player, Position, BOARD_SIZE
from across_ai.core.board import BoardState, Peg
from across_ai.core.game import Game
from across_ai.mcts.config import MCTSConfig
from across_ai.mcts.heuristic import score_move, select_move_with_heuristic
from across_ai.mcts.node import ROOT, SearchTree
from across_ai.mcts.search import (
    mcts_search, run_search, select_node, expand_node, simulate_game,
    backpropagate, get_action_statistics, get_principal_variation
)
from across_ai.mcts.agent import MCTSAgent, MCTSAgentFactory, RandomAgent

# Small settings keep the search tests quick
FAST_CONFIG = MCTSConfig(iterations=15, max_depth=20)


def stalled_state() -> BoardState:
    """A 3x3 board where White has no legal move and nobody has won."""
    return BoardState(
        pegs=[Peg(2, 1, Player.WHITE), Peg(2, 2, Player.BLACK), Peg(2, 3, Player.WHITE)],
        to_move=Player.WHITE,
        size=3,
    )


def single_move_state() -> BoardState:
    """A 3x3 board where White's only legal move is (2, 1)."""
    return BoardState(
        pegs=[Peg(2, 2, Player.BLACK), Peg(2, 3, Player.WHITE)],
        to_move=Player.WHITE,
        size=3,
    )


def won_state() -> BoardState:
    """A full-size board where White has already joined row 1 to the last row."""
    state = BoardState.empty()
    chain = [Position(12 + (i % 2), 1 + 2 * i) for i in range(12)] + [Position(15, BOARD_SIZE)]
    for pos in chain:
        state.to_move = Player.WHITE
        state.apply_move(pos)
    return state


class TestMCTSConfig(unittest.TestCase):
    """Test case for MCTS configuration."""

    def test_defaults(self):
        config = MCTSConfig()
        self.assertEqual(config.iterations, 150)
        self.assertAlmostEqual(config.exploration_weight, 1.414)
        self.assertEqual(config.max_depth, 60)
        self.assertAlmostEqual(config.heuristic_probability, 0.3)
        self.assertEqual(config.heuristic_sample_size, 20)

    def test_validation(self):
        with self.assertRaises(ValueError):
            MCTSConfig(iterations=-1)
        with self.assertRaises(ValueError):
            MCTSConfig(exploration_weight=0)
        with self.assertRaises(ValueError):
            MCTSConfig(max_depth=0)
        with self.assertRaises(ValueError):
            MCTSConfig(heuristic_probability=1.5)
        with self.assertRaises(ValueError):
            MCTSConfig(heuristic_sample_size=0)
        # A zero budget is allowed
        self.assertEqual(MCTSConfig(iterations=0).iterations, 0)

    def test_difficulty_presets(self):
        self.assertEqual(MCTSConfig.easy().iterations, 150)
        self.assertEqual(MCTSConfig.medium().iterations, 500)
        self.assertEqual(MCTSConfig.hard().iterations, 1500)
        self.assertEqual(MCTSConfig.from_difficulty("HARD").iterations, 1500)
        with self.assertRaises(ValueError):
            MCTSConfig.from_difficulty("impossible")

    def test_dict_conversion(self):
        config = MCTSConfig.from_dict({"iterations": 42, "max_depth": 10, "unknown": True})
        self.assertEqual(config.iterations, 42)
        self.assertEqual(config.max_depth, 10)
        self.assertEqual(MCTSConfig.from_dict(config.to_dict()), config)
        self.assertIn("iterations=42", str(config))


class TestHeuristic(unittest.TestCase):
    """Test case for the move heuristic."""

    def test_white_center_score(self):
        state = BoardState.empty(Player.WHITE)
        # Center is 12.5: distance 1.0, row offset 0.5
        self.assertAlmostEqual(score_move(Position(12, 12), state), -0.5 - 0.15)

    def test_black_prefers_larger_x(self):
        state = BoardState.empty(Player.BLACK)
        self.assertAlmostEqual(score_move(Position(12, 12), state), -0.5 + 3.6)
        self.assertGreater(score_move(Position(14, 12), state), score_move(Position(11, 12), state))

    def test_white_prefers_central_rows(self):
        state = BoardState.empty(Player.WHITE)
        self.assertGreater(score_move(Position(12, 12), state), score_move(Position(12, 3), state))

    def test_link_bonus(self):
        state = BoardState(pegs=[Peg(10, 10, Player.WHITE), Peg(13, 11, Player.BLACK)], to_move=Player.WHITE)
        # Base: -0.5 * (1.5 + 0.5) - 0.3 * 0.5, plus one White knight neighbor
        self.assertAlmostEqual(score_move(Position(11, 12), state), -1.0 - 0.15 + 2.0)

    def test_select_best_from_small_set(self):
        state = BoardState.empty(Player.WHITE)
        moves = [Position(2, 2), Position(12, 12), Position(20, 5)]
        self.assertEqual(select_move_with_heuristic(moves, state, random.Random(0)), Position(12, 12))

    def test_ties_keep_first(self):
        state = BoardState.empty(Player.WHITE)
        moves = [Position(13, 13), Position(12, 12)]
        self.assertEqual(score_move(moves[0], state), score_move(moves[1], state))
        self.assertEqual(select_move_with_heuristic(moves, state, random.Random(0)), Position(13, 13))

    def test_empty_moves(self):
        state = BoardState.empty()
        self.assertIsNone(select_move_with_heuristic([], state, random.Random(0)))

    def test_large_set_is_sampled(self):
        state = BoardState.empty(Player.WHITE)
        moves = state.get_valid_moves()
        first = select_move_with_heuristic(moves, state, random.Random(11))
        second = select_move_with_heuristic(moves, state, random.Random(11))
        self.assertIn(first, moves)
        self.assertEqual(first, second)

        # The pick is the best of exactly the sample drawn from the generator
        sample = random.Random(11).sample(moves, 20)
        best = max(sample, key=lambda m: score_move(m, state))
        self.assertEqual(score_move(first, state), score_move(best, state))


class TestSearchTree(unittest.TestCase):
    """Test case for the arena search tree and UCT selection."""

    def setUp(self):
        self.tree = SearchTree(BoardState.empty())
        moves = [Position(5, 5), Position(6, 6), Position(7, 7)]
        self.children = []
        for move in moves:
            state = self.tree.root.state.clone()
            state.apply_move(move)
            self.children.append(self.tree.add_child(ROOT, move, state))

    def test_structure(self):
        self.assertEqual(len(self.tree), 4)
        self.assertEqual(self.tree.root.children, self.children)
        for child in self.children:
            self.assertEqual(self.tree[child].parent, ROOT)
        self.assertEqual(list(self.tree.path_to_root(self.children[1])), [self.children[1], ROOT])
        self.assertEqual(self.tree.depth(self.children[2]), 1)

    def test_unvisited_child_selected_first(self):
        self.tree.root.visits = 1000
        first, second, third = self.children
        self.tree[first].visits = 10
        self.tree[first].score = 1e9
        self.tree[second].visits = 0
        self.tree[third].visits = 500
        self.tree[third].score = 500
        self.assertEqual(self.tree.select_child(ROOT), second)

    def test_uct_value(self):
        self.tree.root.visits = 10
        child = self.children[0]
        self.tree[child].visits = 5
        self.tree[child].score = 3
        unvisited, value = self.tree.uct_key(child)
        self.assertFalse(unvisited)
        self.assertAlmostEqual(value, 0.6 + 1.414 * math.sqrt(math.log(10) / 5))

    def test_uct_prefers_better_score(self):
        self.tree.root.visits = 20
        for child in self.children:
            self.tree[child].visits = 5
        self.tree[self.children[2]].score = 4
        self.assertEqual(self.tree.select_child(ROOT), self.children[2])

    def test_most_visited_child(self):
        self.tree[self.children[0]].visits = 3
        self.tree[self.children[1]].visits = 7
        self.tree[self.children[2]].visits = 7
        self.assertEqual(self.tree.most_visited_child(ROOT), self.children[1])
        self.assertEqual(self.tree.best_move(), Position(6, 6))

    def test_select_child_without_children(self):
        with self.assertRaises(ValueError):
            self.tree.select_child(self.children[0])
        self.assertIsNone(self.tree.most_visited_child(self.children[0]))

    def test_untried_moves_are_lazy(self):
        self.assertIsNone(self.tree[self.children[0]].untried_moves)
        untried = self.tree.untried_moves(self.children[0])
        self.assertEqual(untried, self.tree[self.children[0]].state.get_valid_moves())

    def test_terminal_node_has_no_untried_moves(self):
        state = BoardState.empty()
        for i in range(12):
            state.to_move = Player.WHITE
            state.apply_move(Position(12 + (i % 2), 1 + 2 * i))
        state.to_move = Player.WHITE
        state.apply_move(Position(15, BOARD_SIZE))
        tree = SearchTree(state)
        self.assertEqual(tree.untried_moves(ROOT), [])
        self.assertEqual(select_node(tree), ROOT)


class TestSearchPhases(unittest.TestCase):
    """Test case for the individual MCTS phases."""

    def test_expand_removes_untried_move(self):
        tree = SearchTree(BoardState.empty())
        before = len(tree.untried_moves(ROOT))
        child = expand_node(tree, ROOT, FAST_CONFIG, random.Random(1))
        self.assertNotEqual(child, ROOT)
        self.assertEqual(len(tree.untried_moves(ROOT)), before - 1)
        move = tree[child].move
        self.assertNotIn(move, tree.untried_moves(ROOT))
        self.assertEqual(tree[child].state.peg_at(move).owner, Player.WHITE)
        self.assertEqual(tree[child].state.to_move, Player.BLACK)
        # The parent state is untouched
        self.assertIsNone(tree.root.state.peg_at(move))

    def test_expand_without_untried_moves(self):
        tree = SearchTree(stalled_state())
        self.assertEqual(expand_node(tree, ROOT, FAST_CONFIG, random.Random(1)), ROOT)

    def test_simulation_respects_depth_cap(self):
        state = BoardState.empty()
        winner, plies = simulate_game(state, MCTSConfig(max_depth=5), random.Random(2))
        self.assertEqual(plies, 5)
        self.assertIsNone(winner)
        self.assertEqual(len(state.pegs), 0)

    def test_simulation_from_terminal_state(self):
        state = BoardState.empty()
        for i in range(12):
            state.to_move = Player.BLACK
            state.apply_move(Position(1 + 2 * i, 12 + (i % 2)))
        state.to_move = Player.BLACK
        state.apply_move(Position(BOARD_SIZE, 15))
        winner, plies = simulate_game(state, FAST_CONFIG, random.Random(2))
        self.assertEqual(winner, Player.BLACK)
        self.assertEqual(plies, 0)

    def test_simulation_stops_without_moves(self):
        winner, plies = simulate_game(stalled_state(), FAST_CONFIG, random.Random(2))
        self.assertIsNone(winner)
        self.assertEqual(plies, 0)

    def test_backpropagate(self):
        tree = SearchTree(BoardState.empty())
        child = expand_node(tree, ROOT, FAST_CONFIG, random.Random(3))
        grandchild = expand_node(tree, child, FAST_CONFIG, random.Random(3))

        backpropagate(tree, grandchild, Player.WHITE, Player.WHITE)
        backpropagate(tree, grandchild, Player.BLACK, Player.WHITE)
        backpropagate(tree, grandchild, Player.WHITE, Player.WHITE)
        backpropagate(tree, child, None, Player.WHITE)

        self.assertEqual(tree.root.visits, 4)
        self.assertEqual(tree.root.score, 1)
        self.assertEqual(tree[child].visits, 4)
        self.assertEqual(tree[child].score, 1)
        self.assertEqual(tree[grandchild].visits, 3)
        self.assertEqual(tree[grandchild].score, 1)


class TestMCTSSearch(unittest.TestCase):
    """Test case for the full search."""

    def test_zero_budget_returns_random_legal_move(self):
        state = BoardState.empty()
        move = mcts_search(state, 0, Player.WHITE, rng=random.Random(5))
        self.assertEqual(move, random.Random(5).choice(state.get_valid_moves()))

    def test_zero_budget_without_moves(self):
        self.assertIsNone(mcts_search(stalled_state(), 0, Player.WHITE, rng=random.Random(5)))

    def test_no_legal_moves_returns_none(self):
        self.assertIsNone(mcts_search(stalled_state(), 10, Player.WHITE, rng=random.Random(5)))

    def test_won_position_returns_none(self):
        state = won_state()
        self.assertEqual(state.get_winner(), Player.WHITE)
        move, tree, stats = run_search(state, Player.BLACK, None, random.Random(0))
        self.assertIsNone(move)
        self.assertFalse(stats["used_fallback"])
        self.assertEqual(stats["iterations"], 0)
        self.assertEqual(len(tree), 1)
        self.assertEqual(tree.root.visits, 0)
        self.assertIsNone(mcts_search(state, 50, Player.BLACK, rng=random.Random(1)))

    def test_single_legal_move(self):
        for iterations in (1, 5):
            move = mcts_search(single_move_state(), iterations, Player.WHITE, rng=random.Random(iterations))
            self.assertEqual(move, Position(2, 1))

    def test_returns_legal_move_and_leaves_state_untouched(self):
        state = BoardState.empty()
        state.apply_move(Position(12, 12))
        pegs_before = list(state.pegs)
        links_before = list(state.links)

        move = mcts_search(state, 10, Player.BLACK, config=FAST_CONFIG, rng=random.Random(9))
        self.assertIn(move, state.get_valid_moves())
        self.assertEqual(state.pegs, pegs_before)
        self.assertEqual(state.links, links_before)
        self.assertEqual(state.to_move, Player.BLACK)

    def test_tree_statistics(self):
        move, tree, stats = run_search(BoardState.empty(), Player.WHITE, FAST_CONFIG, random.Random(4))
        self.assertEqual(stats["iterations"], FAST_CONFIG.iterations)
        self.assertEqual(tree.root.visits, FAST_CONFIG.iterations)
        self.assertEqual(sum(tree[c].visits for c in tree.root.children), FAST_CONFIG.iterations)
        self.assertEqual(stats["node_count"], len(tree))
        self.assertFalse(stats["used_fallback"])
        self.assertEqual(move, tree.best_move())
        # Every root child is visited once before any is revisited
        self.assertEqual(len(tree.root.children), FAST_CONFIG.iterations)

        action_stats = get_action_statistics(tree)
        self.assertEqual(len(action_stats), len(tree.root.children))
        pv = get_principal_variation(tree)
        self.assertGreaterEqual(len(pv), 1)
        self.assertEqual(pv[0][0], move)

    def test_deterministic_with_seeded_rng(self):
        state = BoardState.empty()
        state.apply_move(Position(12, 12))
        state.apply_move(Position(8, 14))

        first_move, first_tree, _ = run_search(state, Player.WHITE, FAST_CONFIG, random.Random(2024))
        second_move, second_tree, _ = run_search(state, Player.WHITE, FAST_CONFIG, random.Random(2024))

        self.assertEqual(first_move, second_move)
        summary = lambda tree: [(n.parent, n.move, n.visits, n.score, n.children) for n in tree.nodes]
        self.assertEqual(summary(first_tree), summary(second_tree))


class TestAgents(unittest.TestCase):
    """Test case for the MCTS and random agents."""

    def test_agent_selects_legal_move(self):
        agent = MCTSAgent(config=FAST_CONFIG, color=Player.WHITE, seed=1)
        state = BoardState.empty()
        move = agent.select_action(state)
        self.assertIn(move, state.get_valid_moves())
        self.assertEqual(agent.last_stats["iterations"], FAST_CONFIG.iterations)
        self.assertEqual(len(agent.action_history), 1)
        self.assertTrue(agent.get_action_statistics())
        self.assertTrue(agent.get_principal_variation())

        agent.reset_statistics()
        self.assertEqual(agent.last_stats, {})
        self.assertEqual(agent.get_action_statistics(), {})

    def test_agent_out_of_turn(self):
        agent = MCTSAgent(config=FAST_CONFIG, color=Player.BLACK)
        with self.assertRaises(ValueError):
            agent.select_action(BoardState.empty(Player.WHITE))

    def test_forced_and_missing_moves(self):
        agent = MCTSAgent(config=FAST_CONFIG)
        self.assertEqual(agent.select_action(single_move_state()), Position(2, 1))
        self.assertTrue(agent.last_stats["forced_move"])
        self.assertIsNone(agent.select_action(stalled_state()))

    def test_agent_declines_won_position(self):
        agent = MCTSAgent(config=FAST_CONFIG, color=Player.BLACK, seed=2)
        self.assertIsNone(agent.select_action(won_state()))

    def test_seeded_agents_agree(self):
        state = BoardState.empty()
        first = MCTSAgent(config=FAST_CONFIG, seed=77).select_action(state)
        second = MCTSAgent(config=FAST_CONFIG, seed=77).select_action(state)
        self.assertEqual(first, second)

    def test_register_with_game(self):
        game = Game()
        agent = MCTSAgent(config=FAST_CONFIG, seed=3)
        with self.assertRaises(ValueError):
            agent.register_with_game(game)
        agent.register_with_game(game, Player.WHITE)
        state, game_over = game.step()
        self.assertFalse(game_over)
        self.assertEqual(len(state.pegs), 1)
        self.assertEqual(state.pegs[0].owner, Player.WHITE)

    def test_random_agent(self):
        agent = RandomAgent(seed=4)
        state = BoardState.empty(Player.BLACK)
        self.assertIn(agent.select_action(state, Player.BLACK), state.get_valid_moves())
        with self.assertRaises(ValueError):
            agent.select_action(state, Player.WHITE)
        self.assertIsNone(agent.select_action(stalled_state()))

    def test_factory(self):
        self.assertEqual(MCTSAgentFactory.create_easy().config.iterations, 150)
        self.assertEqual(MCTSAgentFactory.create_medium().config.iterations, 500)
        hard = MCTSAgentFactory.create_hard(Player.BLACK)
        self.assertEqual(hard.config.iterations, 1500)
        self.assertEqual(hard.color, Player.BLACK)
        custom = MCTSAgentFactory.create_custom(iterations=7, max_depth=9, name="Tiny")
        self.assertEqual(custom.config.iterations, 7)
        self.assertEqual(custom.config.max_depth, 9)
        self.assertEqual(str(custom), "Tiny (MCTS, 7 iterations)")


if __name__ == "__main__":
    unittest.main()

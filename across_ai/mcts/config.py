"""
Configuration for Monte Carlo Tree Search (MCTS).

This module defines the configuration parameters for the MCTS algorithm,
including the iteration budget, exploration constant, rollout depth and
how strongly rollouts lean on the move heuristic.
"""
from dataclasses import dataclass, fields
from typing import Any, Dict

from across_ai.core.constants import (
    DEFAULT_MCTS_ITERATIONS, DEFAULT_MCTS_EXPLORATION, DEFAULT_ROLLOUT_DEPTH,
    DEFAULT_HEURISTIC_PROBABILITY, DEFAULT_HEURISTIC_SAMPLE_SIZE,
    DIFFICULTY_ITERATIONS
)


@dataclass
class MCTSConfig:
    """
    Configuration parameters for Monte Carlo Tree Search.

    This class defines all tunable parameters for the MCTS algorithm,
    with validation and sensible defaults.
    """
    # Search parameters
    iterations: int = DEFAULT_MCTS_ITERATIONS
    """Number of MCTS iterations to perform per move decision"""

    exploration_weight: float = DEFAULT_MCTS_EXPLORATION
    """UCT exploration parameter"""

    max_depth: int = DEFAULT_ROLLOUT_DEPTH
    """Maximum number of plies in a rollout"""

    # Heuristic parameters
    heuristic_probability: float = DEFAULT_HEURISTIC_PROBABILITY
    """Chance that a rollout ply uses the heuristic move instead of a random one"""

    heuristic_sample_size: int = DEFAULT_HEURISTIC_SAMPLE_SIZE
    """Number of candidate moves the heuristic scores when there are more"""

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.iterations < 0:
            raise ValueError("iterations must be non-negative")

        if self.exploration_weight <= 0:
            raise ValueError("exploration_weight must be positive")

        if self.max_depth <= 0:
            raise ValueError("max_depth must be positive")

        if not 0.0 <= self.heuristic_probability <= 1.0:
            raise ValueError("heuristic_probability must be between 0 and 1")

        if self.heuristic_sample_size <= 0:
            raise ValueError("heuristic_sample_size must be positive")

    @classmethod
    def default(cls) -> 'MCTSConfig':
        """
        Get the default configuration.

        Returns:
            Default MCTSConfig object
        """
        return cls()

    @classmethod
    def from_difficulty(cls, difficulty: str) -> 'MCTSConfig':
        """
        Get the configuration for a named difficulty tier.

        Args:
            difficulty: One of the names in DIFFICULTY_ITERATIONS

        Returns:
            MCTSConfig with that tier's iteration budget
        """
        key = difficulty.lower()
        if key not in DIFFICULTY_ITERATIONS:
            options = ", ".join(DIFFICULTY_ITERATIONS)
            raise ValueError(f"Unknown difficulty '{difficulty}' (expected one of: {options})")
        return cls(iterations=DIFFICULTY_ITERATIONS[key])

    @classmethod
    def easy(cls) -> 'MCTSConfig':
        return cls.from_difficulty("easy")

    @classmethod
    def medium(cls) -> 'MCTSConfig':
        return cls.from_difficulty("medium")

    @classmethod
    def hard(cls) -> 'MCTSConfig':
        return cls.from_difficulty("hard")

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'MCTSConfig':
        """
        Create a configuration from a dictionary.

        Unknown keys are ignored.

        Args:
            config_dict: Dictionary of configuration parameters

        Returns:
            MCTSConfig object
        """
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in config_dict.items() if k in names})

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the configuration to a dictionary.

        Returns:
            Dictionary of configuration parameters
        """
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def __str__(self) -> str:
        params = ", ".join(f"{name}={value}" for name, value in self.to_dict().items())
        return f"MCTSConfig({params})"

"""
Evolution progress analysis
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Sequence
import numpy as np
from scipy import stats


@dataclass(frozen=True)
class GenerationRecord:
    """Summary of one completed generation"""

    generation: int
    best_fitness: float
    average_fitness: float
    alive_count: int
    population_size: int
    mutation_rate: float
    mutation_strength: float
    low_diversity: bool

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary of the record fields"""
        return asdict(self)


class EvolutionAnalyzer:
    """Analyzes generation history for progress and stagnation"""

    def __init__(self, stagnation_window: int = 5, improvement_tolerance: float = 1e-6) -> None:
        """
        Initialize evolution analyzer

        Args:
            stagnation_window: Generations without a new best before the run counts as stagnant
            improvement_tolerance: Smallest best-fitness gain that counts as improvement
        """
        self.stagnation_window = stagnation_window
        self.improvement_tolerance = improvement_tolerance

    def analyze(self, history: Sequence[GenerationRecord]) -> Dict[str, Any]:
        """
        Analyze a run's generation history

        Args:
            history: Generation records in completion order

        Returns:
            Dictionary with analysis results
        """
        if not history:
            return {
                "generations": 0,
                "best_fitness": 0.0,
                "best_generation": None,
                "mean_best_fitness": 0.0,
                "mean_average_fitness": 0.0,
                "best_fitness_trend": 0.0,
                "trend_r_squared": 0.0,
                "is_improving": False,
                "is_stagnant": False,
                "generations_since_improvement": 0,
                "low_diversity_fraction": 0.0,
                "survival_rate": 0.0,
            }

        generations = np.array([r.generation for r in history], dtype=float)
        best = np.array([r.best_fitness for r in history], dtype=float)
        average = np.array([r.average_fitness for r in history], dtype=float)
        alive = np.array([r.alive_count for r in history], dtype=float)
        sizes = np.array([r.population_size for r in history], dtype=float)

        best_index = int(np.argmax(best))

        # Linear trend of best fitness per generation
        if len(history) >= 2 and np.ptp(generations) > 0:
            regression = stats.linregress(generations, best)
            trend = float(regression.slope)
            r_squared = float(regression.rvalue ** 2) if np.isfinite(regression.rvalue) else 0.0
        else:
            trend = 0.0
            r_squared = 0.0

        # Generations since the running best last improved
        running_best = np.maximum.accumulate(best)
        gains = np.diff(running_best, prepend=-np.inf)
        improved = np.nonzero(gains > self.improvement_tolerance)[0]
        since_improvement = len(best) - 1 - int(improved[-1])

        return {
            "generations": len(history),
            "best_fitness": float(best[best_index]),
            "best_generation": int(history[best_index].generation),
            "mean_best_fitness": float(np.mean(best)),
            "mean_average_fitness": float(np.mean(average)),
            "best_fitness_trend": trend,
            "trend_r_squared": r_squared,
            "is_improving": trend > 0,
            "is_stagnant": since_improvement >= self.stagnation_window,
            "generations_since_improvement": since_improvement,
            "low_diversity_fraction": float(np.mean([r.low_diversity for r in history])),
            "survival_rate": float(np.sum(alive) / np.sum(sizes)),
        }

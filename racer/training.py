"""
Headless multi-generation training
"""

from typing import Any, Dict, Optional
import logging

from racer.analysis import EvolutionAnalyzer
from racer.engine import GameEngine
from racer.params import EngineParams, EvolutionParams, PhysicsParams
from racer.state import Track
from racer.tracks import create_oval_track

logger = logging.getLogger(__name__)


class SimulatedClock:
    """Clock that advances a fixed amount every time it is read"""

    def __init__(self, step: float = 0.016) -> None:
        """
        Initialize clock

        Args:
            step: Seconds added on every read
        """
        self.step = step
        self.now = 0.0

    def __call__(self) -> float:
        """Advance by one step and return the new time (s)"""
        self.now += self.step
        return self.now


def run_training(
    generations: int,
    track: Optional[Track] = None,
    engine_params: Optional[EngineParams] = None,
    physics: Optional[PhysicsParams] = None,
    evolution: Optional[EvolutionParams] = None,
    max_ticks: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Evolve a population for a number of generations without a host loop

    The engine is driven by a simulated clock that advances exactly one
    ``max_step`` per tick, so a fixed seed gives a reproducible run.

    Args:
        generations: Number of generation rollovers to run
        track: Track to race on (default oval)
        engine_params: Engine parameters, including the seed
        physics: Physics constants
        evolution: Genetic algorithm constants
        max_ticks: Safety limit on the number of ticks

    Returns:
        Dictionary with history, analysis, best network record and the engine
    """
    if generations <= 0:
        raise ValueError(f"generations must be positive, got {generations}")

    engine_params = engine_params or EngineParams()
    track = track or create_oval_track()
    engine = GameEngine(
        track,
        engine_params=engine_params,
        physics=physics,
        evolution=evolution,
        clock=SimulatedClock(engine_params.max_step),
    )

    best_fitness_trace = []
    ticks = 0
    engine.start()
    while engine.get_game_state().generation <= generations:
        if max_ticks is not None and ticks >= max_ticks:
            logger.warning("Stopping after %d ticks before reaching generation %d", ticks, generations)
            break
        snapshot = engine.update()
        best_fitness_trace.append(snapshot.best_fitness_ever)
        ticks += 1
    engine.stop()

    history = engine.get_history()
    best_record = None
    if history:
        # Elitism puts the previous generation's best brain in the first slot
        best_record = engine.get_game_state().cars[0].brain.to_record()

    return {
        "history": history,
        "analysis": EvolutionAnalyzer().analyze(history),
        "best_record": best_record,
        "best_fitness_trace": best_fitness_trace,
        "ticks": ticks,
        "engine": engine,
    }

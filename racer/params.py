"""
Simulation and evolution parameters
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple
import numpy as np

from racer.errors import InvalidConfigurationError


@dataclass
class PhysicsParams:
    """Vehicle physics and sensing constants shared by every car in a run"""

    friction: float = 0.90  # multiplicative speed retention per tick
    brake_factor: float = 6.0  # speed removed per tick at full brake
    accel_factor: float = 2.0  # speed gained per second per unit of acceleration input
    stop_threshold: float = 0.05  # speeds below this snap to zero
    collision_radius: float = 8.0  # units, point-vs-segment contact distance
    max_speed: float = 125.0  # informational, copied onto each car
    turn_rate: float = 3.0  # rad per second of simulated time at full steering
    throttle_gain: float = 10.0  # network throttle output -> acceleration input
    # Sensors
    sensor_count: int = 5
    sensor_length: float = 300.0  # units
    speed_scale: float = 200.0  # speed normalisation for network inputs
    # Derived
    sensor_angles: Tuple[float, ...] = field(default=(), init=False)
    input_count: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        """Validate and calculate derived parameters"""
        if self.sensor_count < 2:
            raise InvalidConfigurationError(
                f"sensor_count must be at least 2, got {self.sensor_count}"
            )
        if self.sensor_length <= 0:
            raise InvalidConfigurationError(
                f"sensor_length must be positive, got {self.sensor_length}"
            )
        if not 0.0 < self.friction <= 1.0:
            raise InvalidConfigurationError(f"friction must be in (0, 1], got {self.friction}")
        # Fan spread evenly across the forward semicircle, -90 deg to +90 deg
        self.sensor_angles = tuple(
            float(a) for a in np.linspace(-np.pi / 2, np.pi / 2, self.sensor_count)
        )
        # sensors + speed + sin(heading) + cos(heading) + braking
        self.input_count = self.sensor_count + 4


@dataclass
class EvolutionParams:
    """Genetic algorithm and fitness constants"""

    hidden_count: int = 8
    output_count: int = 3  # steering, throttle, brake
    elite_fraction: float = 0.3  # share of the sorted population eligible as parents
    crossover_probability: float = 0.7
    # Adaptive mutation: (rate, strength) under low and high fitness diversity
    low_diversity_rate: float = 0.8
    low_diversity_strength: float = 1.5
    high_diversity_rate: float = 0.5
    high_diversity_strength: float = 0.3
    diversity_floor: float = 100.0  # minimum fitness range considered diverse
    diversity_ratio: float = 0.1  # fraction of mean fitness considered diverse
    # Fitness weights
    k_distance: float = 0.05
    k_checkpoint: float = 800.0
    k_survival: float = 0.01  # per ms of generation time
    death_penalty: float = 0.3  # multiplier applied to crashed cars
    brake_threshold: float = 0.8
    brake_penalty: float = 50.0

    def __post_init__(self) -> None:
        """Validate parameters"""
        if self.hidden_count <= 0:
            raise InvalidConfigurationError(f"hidden_count must be positive, got {self.hidden_count}")
        if self.output_count != 3:
            raise InvalidConfigurationError(
                f"output_count must be 3 (steering, throttle, brake), got {self.output_count}"
            )
        for name in ("elite_fraction", "crossover_probability", "death_penalty"):
            value = getattr(self, name)
            if not 0.0 < value <= 1.0:
                raise InvalidConfigurationError(f"{name} must be in (0, 1], got {value}")
        if self.death_penalty >= 1.0:
            raise InvalidConfigurationError("death_penalty must be below 1")


@dataclass
class EngineParams:
    """Generation lifecycle and clock constants"""

    population_size: int = 50
    max_generation_time: float = 40000.0  # ms of simulated time per generation
    max_step: float = 0.016  # s, wall-clock delta clamp
    simulation_speed: float = 12.0  # simulated seconds per wall-clock second
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate parameters"""
        validate_population_size(self.population_size)
        validate_generation_time(self.max_generation_time)
        if self.max_step <= 0 or self.simulation_speed <= 0:
            raise InvalidConfigurationError("max_step and simulation_speed must be positive")


def validate_population_size(size: int) -> int:
    """Reject non-positive population sizes"""
    if isinstance(size, bool) or not isinstance(size, (int, np.integer)) or size <= 0:
        raise InvalidConfigurationError(f"population size must be a positive integer, got {size!r}")
    return int(size)


def validate_generation_time(ms: float) -> float:
    """Reject non-numeric, non-positive or non-finite generation time limits"""
    if isinstance(ms, bool) or not isinstance(ms, (int, float, np.integer, np.floating)):
        raise InvalidConfigurationError(f"max generation time must be a number, got {ms!r}")
    if not np.isfinite(ms) or ms <= 0:
        raise InvalidConfigurationError(f"max generation time must be positive, got {ms!r}")
    return float(ms)

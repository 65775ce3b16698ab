"""
Simulation state representation
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple
import numpy as np

from racer.geometry import Vector2D, segment_array

if TYPE_CHECKING:
    from racer.network import NeuralNetwork


@dataclass
class Sensor:
    """Distance ray fixed to a car; recomputed every tick"""

    angle: float  # relative to car heading (rad)
    max_length: float  # units
    distance: float  # distance to nearest wall, max_length when nothing is hit
    hit: bool = False
    end_point: Vector2D = Vector2D(0.0, 0.0)


@dataclass(frozen=True)
class Wall:
    """Track boundary segment"""

    start: Vector2D
    end: Vector2D


@dataclass(frozen=True)
class Checkpoint:
    """Progress gate; must be contacted in id order"""

    start: Vector2D
    end: Vector2D
    id: int


@dataclass(frozen=True)
class Track:
    """Read-only track geometry and start pose"""

    walls: Tuple[Wall, ...]
    checkpoints: Tuple[Checkpoint, ...]
    start_position: Vector2D
    start_angle: float  # rad
    # [N x 4] arrays of (x1, y1, x2, y2), built once for vectorised queries
    wall_array: np.ndarray = field(init=False, repr=False, compare=False)
    checkpoint_array: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Freeze the segment sequences and build the segment arrays"""
        object.__setattr__(self, "walls", tuple(self.walls))
        object.__setattr__(self, "checkpoints", tuple(self.checkpoints))
        for name, segments in (("wall_array", self.walls), ("checkpoint_array", self.checkpoints)):
            array = segment_array(segments)
            array.setflags(write=False)
            object.__setattr__(self, name, array)


@dataclass
class Car:
    """A single vehicle; frozen once ``alive`` is False"""

    id: str
    position: Vector2D
    angle: float  # heading (rad)
    sensors: List[Sensor]
    brain: Optional["NeuralNetwork"]  # None for the manually driven car
    velocity: Vector2D = Vector2D(0.0, 0.0)  # informational
    speed: float = 0.0
    max_speed: float = 125.0
    acceleration_input: float = 0.0
    braking_input: float = 0.0
    friction: float = 0.90
    turn_rate: float = 3.0
    fitness: float = 0.0
    alive: bool = True
    distance_traveled: float = 0.0
    checkpoints_passed: int = 0
    color: str = "#FF6B6B"


@dataclass(frozen=True)
class SensorReading:
    """Read-only copy of one sensor at snapshot time"""

    angle: float
    max_length: float
    distance: float
    hit: bool
    end_point: Vector2D


@dataclass(frozen=True)
class CarView:
    """
    Read-only copy of a car handed to hosts

    Writing to a view never reaches the engine. The brain is a private copy,
    so hosts may export or inspect it freely.
    """

    id: str
    position: Vector2D
    angle: float
    velocity: Vector2D
    speed: float
    max_speed: float
    acceleration_input: float
    braking_input: float
    friction: float
    turn_rate: float
    fitness: float
    alive: bool
    distance_traveled: float
    checkpoints_passed: int
    color: str
    sensors: Tuple[SensorReading, ...]
    brain: Optional["NeuralNetwork"]

    @classmethod
    def from_car(cls, car: Car) -> "CarView":
        """Copy the current state of ``car``"""
        return cls(
            id=car.id,
            position=car.position,
            angle=car.angle,
            velocity=car.velocity,
            speed=car.speed,
            max_speed=car.max_speed,
            acceleration_input=car.acceleration_input,
            braking_input=car.braking_input,
            friction=car.friction,
            turn_rate=car.turn_rate,
            fitness=car.fitness,
            alive=car.alive,
            distance_traveled=car.distance_traveled,
            checkpoints_passed=car.checkpoints_passed,
            color=car.color,
            sensors=tuple(
                SensorReading(s.angle, s.max_length, s.distance, s.hit, s.end_point)
                for s in car.sensors
            ),
            brain=car.brain.copy() if car.brain is not None else None,
        )


@dataclass
class ManualControls:
    """Key state for the human-driven car"""

    forward: bool = False
    left: bool = False
    back: bool = False
    right: bool = False


@dataclass
class GameState:
    """Mutable simulation state; written only by GameEngine"""

    cars: List[Car]
    generation: int = 1
    best_fitness_ever: float = 0.0
    is_running: bool = False
    generation_elapsed_time: float = 0.0  # ms
    max_generation_time: float = 40000.0  # ms


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view of the game state handed to hosts"""

    cars: Tuple[CarView, ...]
    generation: int
    best_fitness_ever: float
    is_running: bool
    generation_elapsed_time: float
    max_generation_time: float
    alive_count: int
    average_fitness: float
    manual_car: Optional[CarView] = None

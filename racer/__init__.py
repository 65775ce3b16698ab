"""
Neuroevolution Racer

This package simulates a population of cars driven by small feed-forward
networks on a closed track and evolves the networks with a genetic
algorithm across generations.
"""

from racer.params import PhysicsParams, EvolutionParams, EngineParams
from racer.state import (
    Vector2D,
    Sensor,
    Wall,
    Checkpoint,
    Track,
    Car,
    CarView,
    SensorReading,
    ManualControls,
    GameState,
    GameSnapshot,
)
from racer.errors import (
    RacerError,
    DimensionError,
    InvalidConfigurationError,
    RecordFormatError,
    PopulationInvariantError,
)
from racer.network import NeuralNetwork
from racer.genetics import GeneticAlgorithm
from racer.engine import GameEngine
from racer.analysis import EvolutionAnalyzer, GenerationRecord
from racer.tracks import create_oval_track
from racer.training import run_training

__all__ = [
    "PhysicsParams",
    "EvolutionParams",
    "EngineParams",
    "Vector2D",
    "Sensor",
    "Wall",
    "Checkpoint",
    "Track",
    "Car",
    "CarView",
    "SensorReading",
    "ManualControls",
    "GameState",
    "GameSnapshot",
    "RacerError",
    "DimensionError",
    "InvalidConfigurationError",
    "RecordFormatError",
    "PopulationInvariantError",
    "NeuralNetwork",
    "GeneticAlgorithm",
    "GameEngine",
    "EvolutionAnalyzer",
    "GenerationRecord",
    "create_oval_track",
    "run_training",
]

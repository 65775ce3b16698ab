"""
Genetic algorithm: population creation, fitness scoring and reproduction
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence
import logging
import numpy as np

from racer.errors import PopulationInvariantError
from racer.network import NeuralNetwork
from racer.params import EvolutionParams, PhysicsParams
from racer.sensors import create_sensors
from racer.state import Car, GameState, Vector2D

logger = logging.getLogger(__name__)

CAR_COLORS = (
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4", "#FFEAA7",
    "#DDA0DD", "#98D8C8", "#F7DC6F", "#BB8FCE", "#85C1E9",
)


@dataclass(frozen=True)
class MutationPlan:
    """Mutation settings chosen from the fitness spread of one generation"""

    fitness_range: float
    mean_fitness: float
    low_diversity: bool
    rate: float
    strength: float


class GeneticAlgorithm:
    """Evolves car brains between generations"""

    def __init__(
        self,
        physics: PhysicsParams,
        evolution: EvolutionParams,
        rng: np.random.Generator,
    ) -> None:
        """
        Initialize genetic algorithm

        Args:
            physics: Physics constants copied onto every car
            evolution: Selection, mutation and fitness constants
            rng: Random generator used for every draw
        """
        self.physics = physics
        self.evolution = evolution
        self.rng = rng
        self.last_plan: Optional[MutationPlan] = None

    @property
    def topology(self) -> tuple:
        """(input, hidden, output) node counts of every brain"""
        return self.physics.input_count, self.evolution.hidden_count, self.evolution.output_count

    def random_brain(self) -> NeuralNetwork:
        """Fresh uniformly random network of the configured topology"""
        return NeuralNetwork.create_random(*self.topology, rng=self.rng)

    def create_car(
        self,
        brain: Optional[NeuralNetwork],
        start_position: Vector2D,
        start_angle: float,
        car_id: str,
    ) -> Car:
        """Fresh car at the start pose; the brain is copied, never aliased"""
        return Car(
            id=car_id,
            position=Vector2D(start_position.x, start_position.y),
            angle=start_angle,
            sensors=create_sensors(self.physics),
            brain=brain.copy() if brain is not None else None,
            max_speed=self.physics.max_speed,
            friction=self.physics.friction,
            turn_rate=self.physics.turn_rate,
            color=CAR_COLORS[int(self.rng.integers(len(CAR_COLORS)))],
        )

    def create_initial_population(
        self, size: int, start_position: Vector2D, start_angle: float
    ) -> List[Car]:
        """``size`` cars with freshly randomised brains at an identical start pose"""
        return [
            self.create_car(self.random_brain(), start_position, start_angle, f"car_{i}")
            for i in range(size)
        ]

    def calculate_fitness(self, car: Car, state: GameState) -> float:
        """
        Score a car and store the result on it

        Overwrites ``car.fitness`` rather than accumulating, so calling it
        every tick is safe.
        """
        ev = self.evolution
        fitness = (
            car.distance_traveled * ev.k_distance
            + car.checkpoints_passed * ev.k_checkpoint
            + state.generation_elapsed_time * ev.k_survival
        )
        if not car.alive:
            fitness *= ev.death_penalty
        # Discourage the degenerate always-brake strategy
        if car.braking_input > ev.brake_threshold:
            fitness -= ev.brake_penalty

        car.fitness = max(0.0, fitness)
        return car.fitness

    def plan_mutation(self, fitness_values: Sequence[float]) -> MutationPlan:
        """
        Pick mutation rate and strength from the population's fitness spread

        A narrow spread (below max(floor, ratio * mean)) is treated as low
        diversity and gets stronger mutation.
        """
        values = np.asarray(fitness_values, dtype=float)
        fitness_range = float(values.max() - values.min())
        mean_fitness = float(values.mean())
        ev = self.evolution

        threshold = max(ev.diversity_floor, mean_fitness * ev.diversity_ratio)
        low_diversity = fitness_range < threshold
        if low_diversity:
            rate, strength = ev.low_diversity_rate, ev.low_diversity_strength
        else:
            rate, strength = ev.high_diversity_rate, ev.high_diversity_strength

        return MutationPlan(fitness_range, mean_fitness, low_diversity, rate, strength)

    def evolve_population(
        self,
        population: Sequence[Car],
        start_position: Vector2D,
        start_angle: float,
        state: GameState,
    ) -> List[Car]:
        """
        Produce the next generation

        The best car's brain is carried over unchanged; every other slot is
        filled by crossover (or copy) of two parents drawn from the elite
        pool, followed by adaptive mutation.

        Args:
            population: Current generation; not modified apart from fitness
            start_position: Start pose for the new cars
            start_angle: Start heading for the new cars
            state: Game state used for fitness scoring

        Returns:
            New population of the same size

        Raises:
            PopulationInvariantError: if the population is empty
        """
        if not population:
            raise PopulationInvariantError("cannot evolve an empty population")

        for car in population:
            self.calculate_fitness(car, state)

        # Stable sort keeps population order among equal fitness
        ranked = sorted(population, key=lambda c: c.fitness, reverse=True)

        plan = self.plan_mutation([c.fitness for c in ranked])
        self.last_plan = plan
        logger.debug(
            "Fitness range %.2f, diversity %s, mutation rate %.2f, strength %.2f",
            plan.fitness_range,
            "LOW" if plan.low_diversity else "HIGH",
            plan.rate,
            plan.strength,
        )

        elite_count = max(1, int(len(ranked) * self.evolution.elite_fraction))
        elite_pool = ranked[:elite_count]
        if not elite_pool or elite_pool[0].brain is None:
            raise PopulationInvariantError("elite pool is empty or holds a car without a brain")

        new_population = [self.create_car(ranked[0].brain, start_position, start_angle, "car_0")]

        while len(new_population) < len(population):
            parent1 = elite_pool[int(self.rng.integers(len(elite_pool)))]
            parent2 = elite_pool[int(self.rng.integers(len(elite_pool)))]

            if self.rng.random() < self.evolution.crossover_probability:
                child_brain = parent1.brain.crossover(parent2.brain, self.rng)
            else:
                child_brain = parent1.brain.copy()
            child_brain = child_brain.mutate(plan.rate, plan.strength, self.rng)

            new_population.append(
                self.create_car(
                    child_brain, start_position, start_angle, f"car_{len(new_population)}"
                )
            )

        return new_population

    @staticmethod
    def get_best_car(population: Sequence[Car]) -> Car:
        """Car with the highest fitness; ties go to the earliest"""
        if not population:
            raise PopulationInvariantError("population is empty")
        best = population[0]
        for car in population[1:]:
            if car.fitness > best.fitness:
                best = car
        return best

    @staticmethod
    def get_average_fitness(population: Sequence[Car]) -> float:
        """Mean fitness of the population"""
        if not population:
            raise PopulationInvariantError("population is empty")
        return float(np.mean([car.fitness for car in population]))

    @staticmethod
    def get_alive_count(population: Sequence[Car]) -> int:
        """Number of cars still driving"""
        return sum(1 for car in population if car.alive)

"""
Generation lifecycle: per-tick simulation and evolution triggering
"""

from typing import Any, Callable, Dict, List, Optional, Union
import logging
import time
import numpy as np

from racer.analysis import GenerationRecord
from racer.contact import check_checkpoint_collisions, check_wall_collision
from racer.dynamics import apply_steering, update_car_physics
from racer.errors import DimensionError, InvalidConfigurationError
from racer.genetics import GeneticAlgorithm
from racer.network import ControlSignals, NeuralNetwork, build_network_inputs, interpret_outputs
from racer.params import (
    EngineParams,
    EvolutionParams,
    PhysicsParams,
    validate_generation_time,
    validate_population_size,
)
from racer.sensors import create_sensors, update_sensors
from racer.state import Car, CarView, GameSnapshot, GameState, ManualControls, Track, Vector2D

logger = logging.getLogger(__name__)

MANUAL_CAR_ID = "manual"


class GameEngine:
    """Owns the game state and advances it one tick per ``update`` call"""

    def __init__(
        self,
        track: Track,
        engine_params: Optional[EngineParams] = None,
        physics: Optional[PhysicsParams] = None,
        evolution: Optional[EvolutionParams] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        """
        Initialize engine with a fresh random population

        Args:
            track: Track to race on
            engine_params: Population size, generation time limit, clock scaling, seed
            physics: Physics constants shared by every car
            evolution: Genetic algorithm constants
            clock: Wall-clock source in seconds
        """
        if not isinstance(track, Track):
            raise InvalidConfigurationError(f"track must be a Track, got {type(track).__name__}")
        self.params = engine_params or EngineParams()
        self.physics = physics or PhysicsParams()
        self.evolution = evolution or EvolutionParams()
        self.rng = np.random.default_rng(self.params.seed)
        self.genetic_algorithm = GeneticAlgorithm(self.physics, self.evolution, self.rng)

        self._track = track
        self._clock = clock
        self._last_update_time = clock()
        self._max_generation_time = self.params.max_generation_time
        self._history: List[GenerationRecord] = []
        self._manual_car: Optional[Car] = None
        self._manual_controls = ManualControls()

        self._state = GameState(
            cars=self._new_population(self.params.population_size),
            max_generation_time=self._max_generation_time,
        )

    # Ticking

    def update(self) -> GameSnapshot:
        """
        Advance the simulation by one tick

        No-op while stopped. The wall-clock delta is clamped to ``max_step``
        and scaled by ``simulation_speed`` before use.
        """
        state = self._state
        if not state.is_running:
            return self.get_game_state()

        now = self._clock()
        delta = min(max(now - self._last_update_time, 0.0), self.params.max_step)
        self._last_update_time = now
        dt = delta * self.params.simulation_speed
        state.generation_elapsed_time += dt * 1000.0

        for car in state.cars:
            if car.alive:
                self._step_ai_car(car, dt)

        if self._manual_car is not None and self._manual_car.alive:
            self._step_manual_car(self._manual_car, dt)

        best = self.genetic_algorithm.get_best_car(state.cars)
        state.best_fitness_ever = max(state.best_fitness_ever, best.fitness)

        alive_count = self.genetic_algorithm.get_alive_count(state.cars)
        if alive_count == 0 or state.generation_elapsed_time >= state.max_generation_time:
            self._next_generation()

        return self.get_game_state()

    def _step_ai_car(self, car: Car, dt: float) -> None:
        """Sense, run the brain and drive one AI car for one tick"""
        update_sensors(car, self._track.wall_array)
        inputs = build_network_inputs(
            [sensor.distance for sensor in car.sensors],
            self.physics.sensor_length,
            car.speed,
            self.physics.speed_scale,
            car.angle,
            car.braking_input,
        )
        controls = interpret_outputs(car.brain.feed_forward(inputs))
        self._drive(car, controls, dt)

    def _step_manual_car(self, car: Car, dt: float) -> None:
        """Drive the manual car from the current key state"""
        update_sensors(car, self._track.wall_array)
        keys = self._manual_controls
        controls = ControlSignals(
            steering=float(keys.right) - float(keys.left),
            throttle=1.0 if keys.forward else 0.0,
            brake=1.0 if keys.back else 0.0,
        )
        self._drive(car, controls, dt)

    def _drive(self, car: Car, controls: ControlSignals, dt: float) -> None:
        """Apply controls, integrate, resolve contact and rescore the car"""
        apply_steering(car, controls.steering, dt)
        car.acceleration_input = controls.throttle * self.physics.throttle_gain
        car.braking_input = controls.brake
        update_car_physics(car, dt, self.physics)

        if check_wall_collision(car, self._track.wall_array, self.physics.collision_radius):
            car.alive = False
            logger.debug("Car %s crashed after %.1f units", car.id, car.distance_traveled)
        else:
            self.check_checkpoint_collisions(car)

        self.genetic_algorithm.calculate_fitness(car, self._state)

    def check_checkpoint_collisions(self, car: Car) -> bool:
        """Credit ``car`` for the next checkpoint in sequence if it is touching it"""
        return check_checkpoint_collisions(
            car,
            self._track.checkpoints,
            self.physics.collision_radius,
            self._track.checkpoint_array,
        )

    def _next_generation(self) -> None:
        """Evolve the population, record the finished generation and restart the clock"""
        state = self._state
        old_cars = state.cars

        state.cars = self.genetic_algorithm.evolve_population(
            old_cars, self._track.start_position, self._track.start_angle, state
        )

        # Fitness of the finished generation was recomputed by evolve_population
        best = self.genetic_algorithm.get_best_car(old_cars)
        average = self.genetic_algorithm.get_average_fitness(old_cars)
        alive_count = self.genetic_algorithm.get_alive_count(old_cars)
        state.best_fitness_ever = max(state.best_fitness_ever, best.fitness)

        plan = self.genetic_algorithm.last_plan
        self._history.append(
            GenerationRecord(
                generation=state.generation,
                best_fitness=best.fitness,
                average_fitness=average,
                alive_count=alive_count,
                population_size=len(old_cars),
                mutation_rate=plan.rate,
                mutation_strength=plan.strength,
                low_diversity=plan.low_diversity,
            )
        )
        logger.info(
            "Generation %d completed: best %.2f, average %.2f, alive %d/%d",
            state.generation,
            best.fitness,
            average,
            alive_count,
            len(old_cars),
        )

        state.generation += 1
        state.generation_elapsed_time = 0.0
        state.max_generation_time = self._max_generation_time
        if self._manual_car is not None:
            self._reset_car(self._manual_car)

    # Lifecycle

    def start(self) -> None:
        """Resume ticking from the current state"""
        self._state.is_running = True
        self._last_update_time = self._clock()
        logger.info("Simulation started at generation %d", self._state.generation)

    def stop(self) -> None:
        """Pause ticking; state is kept for resume"""
        self._state.is_running = False
        self._last_update_time = self._clock()
        logger.info("Simulation stopped at generation %d", self._state.generation)

    def reset(self) -> None:
        """Discard the population and start over at generation 1"""
        state = self._state
        state.cars = self._new_population(len(state.cars))
        state.generation = 1
        state.best_fitness_ever = 0.0
        state.generation_elapsed_time = 0.0
        state.max_generation_time = self._max_generation_time
        state.is_running = False
        self._history.clear()
        if self._manual_car is not None:
            self._reset_car(self._manual_car)
        logger.info("Simulation reset with %d cars", len(state.cars))

    # Configuration

    def set_track(self, track: Track) -> None:
        """
        Switch tracks, keeping every brain

        All cars are moved back to the new start pose with cleared physics
        state; evolution continues from the current generation.
        """
        if not isinstance(track, Track):
            raise InvalidConfigurationError(f"track must be a Track, got {type(track).__name__}")
        self._track = track
        self._restart_generation()
        logger.info(
            "Track changed: %d walls, %d checkpoints", len(track.walls), len(track.checkpoints)
        )

    def set_population_size(self, size: int) -> None:
        """Replace the population with ``size`` fresh random cars if the size changes"""
        size = validate_population_size(size)
        if size != len(self._state.cars):
            self._state.cars = self._new_population(size)
            self._state.generation_elapsed_time = 0.0
            logger.info("Population size set to %d", size)

    def set_max_generation_time(self, ms: float) -> None:
        """Change the generation time limit (ms of simulated time)"""
        self._max_generation_time = validate_generation_time(ms)
        self._state.max_generation_time = self._max_generation_time

    def load_brain(self, brain: Union[NeuralNetwork, Dict[str, Any]]) -> None:
        """
        Install a copy of ``brain`` in every car and restart the generation window

        Args:
            brain: Network, or a network record as produced by ``NeuralNetwork.to_record``

        Raises:
            RecordFormatError: if a record is malformed
            DimensionError: if the network does not fit this engine's topology
        """
        network = brain if isinstance(brain, NeuralNetwork) else NeuralNetwork.from_record(brain)
        expected = self.genetic_algorithm.topology
        if network.shape != expected:
            raise DimensionError(f"network has shape {network.shape}, engine expects {expected}")
        for car in self._state.cars:
            car.brain = network.copy()
        self._restart_generation()
        logger.info("Loaded network into %d cars", len(self._state.cars))

    # Manual driving

    def start_manual_race(self) -> CarView:
        """Add (or re-place) the human-driven car and restart the generation window"""
        self._manual_car = self.genetic_algorithm.create_car(
            None, self._track.start_position, self._track.start_angle, MANUAL_CAR_ID
        )
        self._manual_car.color = "#FFFFFF"
        self._manual_controls = ManualControls()
        self._restart_generation()
        return CarView.from_car(self._manual_car)

    def update_manual_vehicle(self, controls: ManualControls) -> None:
        """Set the key state applied to the manual car on the next ticks"""
        self._manual_controls = ManualControls(
            forward=bool(controls.forward),
            left=bool(controls.left),
            back=bool(controls.back),
            right=bool(controls.right),
        )

    def remove_manual_vehicle(self) -> None:
        """Drop the manual car and its key state"""
        self._manual_car = None
        self._manual_controls = ManualControls()

    # Queries

    def get_game_state(self) -> GameSnapshot:
        """Read-only snapshot of the current state; cars are copied into views"""
        state = self._state
        return GameSnapshot(
            cars=tuple(CarView.from_car(car) for car in state.cars),
            generation=state.generation,
            best_fitness_ever=state.best_fitness_ever,
            is_running=state.is_running,
            generation_elapsed_time=state.generation_elapsed_time,
            max_generation_time=state.max_generation_time,
            alive_count=self.genetic_algorithm.get_alive_count(state.cars),
            average_fitness=self.genetic_algorithm.get_average_fitness(state.cars),
            manual_car=self.get_manual_vehicle(),
        )

    def get_track(self) -> Track:
        """Active track"""
        return self._track

    def get_best_car(self) -> CarView:
        """View of the highest-scoring AI car; ties go to the earliest"""
        return CarView.from_car(self.genetic_algorithm.get_best_car(self._state.cars))

    def get_alive_cars(self) -> List[CarView]:
        """Views of the AI cars still driving"""
        return [CarView.from_car(car) for car in self._state.cars if car.alive]

    def get_time_elapsed(self) -> float:
        """Simulated time of the current generation (ms)"""
        return self._state.generation_elapsed_time

    def get_history(self) -> List[GenerationRecord]:
        """Records of every completed generation since the last reset"""
        return list(self._history)

    def get_manual_vehicle(self) -> Optional[CarView]:
        """View of the manual car, or None when no manual race is active"""
        if self._manual_car is None:
            return None
        return CarView.from_car(self._manual_car)

    # Helpers

    def _new_population(self, size: int) -> List[Car]:
        """Fresh random population at the track start pose"""
        return self.genetic_algorithm.create_initial_population(
            size, self._track.start_position, self._track.start_angle
        )

    def _reset_car(self, car: Car) -> None:
        """Return a car to the start pose with cleared physics and score"""
        start = self._track.start_position
        car.position = Vector2D(start.x, start.y)
        car.angle = self._track.start_angle
        car.velocity = Vector2D(0.0, 0.0)
        car.speed = 0.0
        car.acceleration_input = 0.0
        car.braking_input = 0.0
        car.sensors = create_sensors(self.physics)
        car.fitness = 0.0
        car.alive = True
        car.distance_traveled = 0.0
        car.checkpoints_passed = 0

    def _restart_generation(self) -> None:
        """Put every car back on the start pose and zero the generation timer"""
        for car in self._state.cars:
            self._reset_car(car)
        if self._manual_car is not None:
            self._reset_car(self._manual_car)
        self._state.generation_elapsed_time = 0.0

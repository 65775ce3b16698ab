"""
Car kinematics
"""

import math

from racer.params import PhysicsParams
from racer.state import Car, Vector2D


def apply_steering(car: Car, steering: float, dt: float) -> None:
    """Turn the car by ``steering`` in [-1, 1] at its turn rate for ``dt`` seconds"""
    car.angle += max(-1.0, min(1.0, steering)) * car.turn_rate * dt


def update_car_physics(car: Car, dt: float, params: PhysicsParams) -> None:
    """
    Integrate one tick of forward motion

    Throttle is time-scaled, braking removes speed instantly, then speeds
    under the stop threshold snap to zero and multiplicative friction is
    applied. Speed never goes negative (no reverse).

    Args:
        car: Car updated in place
        dt: Simulated time step (s)
        params: Physics constants shared by the whole run
    """
    speed = car.speed
    speed += car.acceleration_input * params.accel_factor * dt
    speed -= params.brake_factor * car.braking_input

    if speed < params.stop_threshold:
        speed = 0.0
    speed *= car.friction
    speed = max(speed, 0.0)

    heading_x = math.cos(car.angle)
    heading_y = math.sin(car.angle)
    step = speed * dt

    car.speed = speed
    car.velocity = Vector2D(heading_x * speed, heading_y * speed)
    car.position = Vector2D(car.position.x + heading_x * step, car.position.y + heading_y * step)
    car.distance_traveled += step

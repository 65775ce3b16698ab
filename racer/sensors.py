"""
Ray-cast distance sensors
"""

from typing import List
import math
import numpy as np

from racer.geometry import ray_intersections, segment_array
from racer.params import PhysicsParams
from racer.state import Car, Sensor, Vector2D


def create_sensors(params: PhysicsParams) -> List[Sensor]:
    """Fresh sensor fan spread across the forward semicircle"""
    return [
        Sensor(angle=angle, max_length=params.sensor_length, distance=params.sensor_length)
        for angle in params.sensor_angles
    ]


def update_sensors(car: Car, walls) -> None:
    """
    Cast every sensor ray and record the nearest wall hit

    Each ray starts at the car position and points along heading + sensor
    angle for ``max_length``. When no wall is crossed the distance is
    ``max_length`` and ``hit`` is False. Among equal distances the first
    wall in track order wins.

    Args:
        car: Car whose sensors are refreshed in place
        walls: Track walls, as Wall objects or an [N x 4] segment array
    """
    segments = segment_array(walls)
    origin = car.position

    for sensor in car.sensors:
        direction = car.angle + sensor.angle
        end = Vector2D(
            origin.x + math.cos(direction) * sensor.max_length,
            origin.y + math.sin(direction) * sensor.max_length,
        )
        sensor.distance = sensor.max_length
        sensor.end_point = end
        sensor.hit = False

        t, hit_mask = ray_intersections(origin, end, segments)
        if not hit_mask.any():
            continue

        # t is the fraction of the ray length, so the nearest hit has the smallest t
        t_hits = np.where(hit_mask, t, np.inf)
        nearest = int(np.argmin(t_hits))
        fraction = float(t_hits[nearest])
        sensor.distance = min(fraction * sensor.max_length, sensor.max_length)
        sensor.end_point = Vector2D(
            origin.x + fraction * (end.x - origin.x),
            origin.y + fraction * (end.y - origin.y),
        )
        sensor.hit = True

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Optional

from simuro_core.entities.data.vector import Vector2D


def mirror_rotation(rotation: float) -> float:
    """Turn a heading by half a revolution. The result is in (-180, 180]."""
    rotation = normalize_rotation(rotation)
    return rotation - 180.0 if rotation > 0 else rotation + 180.0


def normalize_rotation(rotation: float) -> float:
    """Wrap any heading in degrees into (-180, 180]. Non-finite headings are returned as they are."""
    if not math.isfinite(rotation):
        return rotation
    wrapped = math.fmod(rotation, 360.0)
    if wrapped > 180.0:
        wrapped -= 360.0
    elif wrapped <= -180.0:
        wrapped += 360.0
    return wrapped


@dataclass(frozen=True)
class Wheel:
    left: float = 0.0
    right: float = 0.0


@dataclass(frozen=True)
class Robot:
    """Full-fidelity robot state. ``rotation`` is in degrees, 0 faces +x, kept in (-180, 180]."""

    pos: Vector2D
    rotation: float = 0.0
    wheel: Wheel = field(default_factory=Wheel)
    velocity: Vector2D = field(default_factory=lambda: Vector2D(0.0, 0.0))
    angular_velocity: float = 0.0
    # set on mirrored copies only; mirroring back returns it unchanged
    _unmirrored: Optional["Robot"] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "rotation", normalize_rotation(self.rotation))

    def mirrored(self) -> "Robot":
        if self._unmirrored is not None:
            return self._unmirrored
        # wheel speeds are in the robot's own frame and do not change
        mirror = replace(
            self,
            pos=-self.pos,
            rotation=mirror_rotation(self.rotation),
            velocity=-self.velocity,
        )
        object.__setattr__(mirror, "_unmirrored", self)
        return mirror

    def as_opponent(self) -> "OpponentRobot":
        return OpponentRobot(pos=self.pos, rotation=self.rotation)

    def still(self) -> "Robot":
        return replace(
            self,
            wheel=Wheel(),
            velocity=Vector2D(0.0, 0.0),
            angular_velocity=0.0,
        )


@dataclass(frozen=True)
class OpponentRobot:
    """Reduced view of an opposing robot: pose only."""

    pos: Vector2D
    rotation: float = 0.0
    _unmirrored: Optional["OpponentRobot"] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "rotation", normalize_rotation(self.rotation))

    def mirrored(self) -> "OpponentRobot":
        if self._unmirrored is not None:
            return self._unmirrored
        mirror = OpponentRobot(pos=-self.pos, rotation=mirror_rotation(self.rotation))
        object.__setattr__(mirror, "_unmirrored", self)
        return mirror


@dataclass(frozen=True)
class Ball:
    pos: Vector2D = field(default_factory=lambda: Vector2D(0.0, 0.0))
    velocity: Vector2D = field(default_factory=lambda: Vector2D(0.0, 0.0))

    def mirrored(self) -> "Ball":
        return Ball(pos=-self.pos, velocity=-self.velocity)

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import List, Tuple

import numpy as np

from simuro_core.config.settings import MAX_WHEEL_SPEED, ROBOTS_PER_TEAM
from simuro_core.entities.data.objects import Ball, Robot, Wheel


@dataclass(frozen=True)
class TeamInfo:
    """Static metadata reported by a strategy when it connects."""

    name: str


@dataclass(frozen=True)
class WheelInfo:
    """Wheel speeds for the five robots of one team, as returned by a strategy."""

    wheels: Tuple[Wheel, ...]

    def __post_init__(self):
        if len(self.wheels) != ROBOTS_PER_TEAM:
            raise ValueError(f"WheelInfo requires {ROBOTS_PER_TEAM} wheels, got {len(self.wheels)}")

    @classmethod
    def still(cls) -> "WheelInfo":
        return cls(tuple(Wheel() for _ in range(ROBOTS_PER_TEAM)))

    def normalize(self, max_speed: float = MAX_WHEEL_SPEED) -> "WheelInfo":
        """Return a copy with every speed clamped into [-max_speed, max_speed].

        NaN speeds become 0; infinite speeds saturate at the limit.
        """
        speeds = np.array([(w.left, w.right) for w in self.wheels], dtype=float)
        speeds = np.nan_to_num(speeds, nan=0.0, posinf=max_speed, neginf=-max_speed)
        speeds = np.clip(speeds, -max_speed, max_speed)
        return WheelInfo(tuple(Wheel(float(left), float(right)) for left, right in speeds))

    def is_normalized(self, max_speed: float = MAX_WHEEL_SPEED) -> bool:
        return all(
            math.isfinite(s) and abs(s) <= max_speed for w in self.wheels for s in (w.left, w.right)
        )


@dataclass(frozen=True)
class PlacementInfo:
    """Robot poses (and proposed ball position) returned by a strategy for a reposition.

    ``mirrored`` is True while the placement is expressed in the converted
    (other side) frame and has to be converted back before it is merged.
    """

    robots: Tuple[Robot, ...]
    ball: Ball = field(default_factory=Ball)
    mirrored: bool = False

    def __post_init__(self):
        if len(self.robots) != ROBOTS_PER_TEAM:
            raise ValueError(f"PlacementInfo requires {ROBOTS_PER_TEAM} robots, got {len(self.robots)}")

    def convert_to_other_side(self) -> "PlacementInfo":
        return replace(
            self,
            robots=tuple(r.mirrored() for r in self.robots),
            ball=self.ball.mirrored(),
            mirrored=not self.mirrored,
        )

    def in_field_frame(self) -> "PlacementInfo":
        """Return the placement in the authoritative field frame."""
        return self.convert_to_other_side() if self.mirrored else self

    @property
    def robot_list(self) -> List[Robot]:
        return list(self.robots)

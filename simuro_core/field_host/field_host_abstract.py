import abc
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from simuro_core.config.settings import ROBOTS_PER_TEAM
from simuro_core.entities.data.command import WheelInfo
from simuro_core.entities.data.objects import Ball, Robot
from simuro_core.referee.geometry import RefereeGeometry


@dataclass(frozen=True)
class FieldState:
    """Robot and ball state reported by a field host, in field coordinates."""

    blue_robots: Tuple[Robot, ...]
    yellow_robots: Tuple[Robot, ...]
    ball: Ball


class AbstractFieldHost:
    """Template for the process that owns the physical field.

    Public setters validate their arguments and delegate to the ``_do_*`` hooks, so a host
    implementation never receives the wrong number of robots or a pose outside the field.
    """

    def __init__(self, geometry: Optional[RefereeGeometry] = None):
        self.geometry = geometry if geometry is not None else RefereeGeometry()

    def set_blue_wheels(self, wheels: WheelInfo) -> None:
        """Sends wheel speeds for the blue team. Speeds must already be normalised."""
        self._check_wheels(wheels)
        self._do_set_wheels(False, wheels)

    def set_yellow_wheels(self, wheels: WheelInfo) -> None:
        self._check_wheels(wheels)
        self._do_set_wheels(True, wheels)

    def set_blue_placement(self, robots: Sequence[Robot]) -> None:
        """Teleports the blue robots.

        Args:
            robots (Sequence[Robot]): One pose per robot, in field coordinates.

        Raises:
            ValueError: If the number of robots is wrong or a robot lies outside the field.
        """
        self._check_robots(robots)
        self._do_set_placement(False, list(robots))

    def set_yellow_placement(self, robots: Sequence[Robot]) -> None:
        self._check_robots(robots)
        self._do_set_placement(True, list(robots))

    def set_ball_placement(self, ball: Ball) -> None:
        x, y = ball.pos.x, ball.pos.y
        if not ball.pos.is_finite() or not self.geometry.is_in_field(x, y):
            raise ValueError(f"Cannot place ball at ({x}, {y}) as it is outside of the field.")
        self._do_set_ball(ball)

    def _check_wheels(self, wheels: WheelInfo) -> None:
        if not wheels.is_normalized():
            raise ValueError(f"Wheel speeds must be normalised before they are sent: {wheels}")

    def _check_robots(self, robots: Sequence[Robot]) -> None:
        if len(robots) != ROBOTS_PER_TEAM:
            raise ValueError(f"Expected {ROBOTS_PER_TEAM} robots, got {len(robots)}")
        for i, robot in enumerate(robots):
            x, y = robot.pos.x, robot.pos.y
            if not robot.pos.is_finite() or not self.geometry.is_in_field(x, y):
                raise ValueError(f"Cannot place robot {i} at ({x}, {y}) as it is outside of the field.")

    ### Below methods are implemented in the specific field hosts ####

    @abc.abstractmethod
    def pause(self) -> None:
        """Freezes the simulation."""
        ...

    @abc.abstractmethod
    def resume(self) -> None: ...

    @abc.abstractmethod
    def set_to_default(self) -> None:
        """Puts every robot and the ball back on the default kick-off layout."""
        ...

    @abc.abstractmethod
    def set_still(self) -> None:
        """Zeroes every velocity on the field."""
        ...

    @abc.abstractmethod
    def read_field(self) -> FieldState:
        """Current positions and velocities of everything on the field."""
        ...

    @abc.abstractmethod
    def _do_set_wheels(self, is_team_yellow: bool, wheels: WheelInfo) -> None: ...

    @abc.abstractmethod
    def _do_set_placement(self, is_team_yellow: bool, robots: Sequence[Robot]) -> None: ...

    @abc.abstractmethod
    def _do_set_ball(self, ball: Ball) -> None: ...

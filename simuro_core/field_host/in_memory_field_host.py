import logging
from typing import List, Optional, Sequence

from simuro_core.config.defaults import BALL_START, BLUE_START, YELLOW_START
from simuro_core.entities.data.command import WheelInfo
from simuro_core.entities.data.objects import Ball, Robot
from simuro_core.entities.data.vector import Vector2D
from simuro_core.field_host.field_host_abstract import AbstractFieldHost, FieldState
from simuro_core.referee.geometry import RefereeGeometry

logger = logging.getLogger(__name__)


def _layout(start) -> List[Robot]:
    return [Robot(pos=Vector2D(x, y), rotation=theta) for x, y, theta in start]


class InMemoryFieldHost(AbstractFieldHost):
    """Field host without physics: keeps whatever it is told and records every command.

    Robots only move when they are placed; wheel speeds are stored but not integrated.
    Used for dry runs of the match core and in tests.
    """

    def __init__(self, geometry: Optional[RefereeGeometry] = None):
        super().__init__(geometry)
        self.paused = False
        self.calls: List[str] = []
        self.blue_wheels = WheelInfo.still()
        self.yellow_wheels = WheelInfo.still()
        self._reset_layout()

    def _reset_layout(self) -> None:
        self.blue_robots = _layout(BLUE_START)
        self.yellow_robots = _layout(YELLOW_START)
        self.ball = Ball(pos=Vector2D(BALL_START))

    def pause(self) -> None:
        self.calls.append("pause")
        self.paused = True

    def resume(self) -> None:
        self.calls.append("resume")
        self.paused = False

    def set_to_default(self) -> None:
        self.calls.append("set_to_default")
        self._reset_layout()
        self.blue_wheels = WheelInfo.still()
        self.yellow_wheels = WheelInfo.still()

    def set_still(self) -> None:
        self.calls.append("set_still")
        self.blue_robots = [r.still() for r in self.blue_robots]
        self.yellow_robots = [r.still() for r in self.yellow_robots]
        self.ball = Ball(pos=self.ball.pos)
        self.blue_wheels = WheelInfo.still()
        self.yellow_wheels = WheelInfo.still()

    def read_field(self) -> FieldState:
        return FieldState(
            blue_robots=tuple(self.blue_robots),
            yellow_robots=tuple(self.yellow_robots),
            ball=self.ball,
        )

    def _do_set_wheels(self, is_team_yellow: bool, wheels: WheelInfo) -> None:
        self.calls.append("set_yellow_wheels" if is_team_yellow else "set_blue_wheels")
        if is_team_yellow:
            self.yellow_wheels = wheels
        else:
            self.blue_wheels = wheels

    def _do_set_placement(self, is_team_yellow: bool, robots: Sequence[Robot]) -> None:
        self.calls.append("set_yellow_placement" if is_team_yellow else "set_blue_placement")
        if is_team_yellow:
            self.yellow_robots = list(robots)
        else:
            self.blue_robots = list(robots)
        logger.debug("Placed %s robots", "yellow" if is_team_yellow else "blue")

    def _do_set_ball(self, ball: Ball) -> None:
        self.calls.append("set_ball_placement")
        self.ball = ball

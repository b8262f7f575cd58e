from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

from simuro_core.config.settings import ROBOTS_PER_TEAM
from simuro_core.entities.data.objects import Ball, OpponentRobot, Robot


@dataclass(frozen=True)
class SideInfo:
    """The field as seen by one team: its own robots, the opponents' poses, the ball and the clocks.

    A SideInfo is what gets sent to a strategy. When ``mirrored`` is True every
    position, heading and velocity has been rotated by half a turn about the
    field centre so that the team perceives itself attacking towards +x.
    """

    home_robots: Tuple[Robot, ...]
    opponent_robots: Tuple[OpponentRobot, ...]
    ball: Ball
    tick_match: int
    tick_round: int
    mirrored: bool = False

    def __post_init__(self):
        if len(self.home_robots) != ROBOTS_PER_TEAM:
            raise ValueError(f"SideInfo requires {ROBOTS_PER_TEAM} home robots, got {len(self.home_robots)}")
        if len(self.opponent_robots) != ROBOTS_PER_TEAM:
            raise ValueError(
                f"SideInfo requires {ROBOTS_PER_TEAM} opponent robots, got {len(self.opponent_robots)}"
            )

    def convert_to_other_side(self) -> "SideInfo":
        """Mirror the view. Applying this twice gives back the original view."""
        return replace(
            self,
            home_robots=tuple(r.mirrored() for r in self.home_robots),
            opponent_robots=tuple(r.mirrored() for r in self.opponent_robots),
            ball=self.ball.mirrored(),
            mirrored=not self.mirrored,
        )

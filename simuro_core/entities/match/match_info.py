from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Sequence

from simuro_core.config.defaults import BALL_START, BLUE_START, YELLOW_START
from simuro_core.config.enums import MatchPhase, Side
from simuro_core.config.settings import ROBOTS_PER_TEAM
from simuro_core.entities.data.command import PlacementInfo
from simuro_core.entities.data.objects import Ball, Robot
from simuro_core.entities.data.vector import Vector2D
from simuro_core.entities.match.side_info import SideInfo

if TYPE_CHECKING:
    from simuro_core.referee.referee import Referee


@dataclass
class MatchScore:
    blue_score: int = 0
    yellow_score: int = 0

    def add_goal(self, side: Side) -> None:
        """Credit one goal to ``side``. NOBODY is a no-op."""
        if side is Side.BLUE:
            self.blue_score += 1
        elif side is Side.YELLOW:
            self.yellow_score += 1

    def of(self, side: Side) -> int:
        if side is Side.BLUE:
            return self.blue_score
        if side is Side.YELLOW:
            return self.yellow_score
        raise ValueError("Side.NOBODY has no score")

    @property
    def leader(self) -> Side:
        if self.blue_score > self.yellow_score:
            return Side.BLUE
        if self.yellow_score > self.blue_score:
            return Side.YELLOW
        return Side.NOBODY


def _layout(start) -> List[Robot]:
    return [Robot(pos=Vector2D(x, y), rotation=theta) for x, y, theta in start]


@dataclass
class MatchInfo:
    """Authoritative state of a match. Only the MatchRunner mutates it."""

    ball: Ball
    blue_robots: List[Robot]
    yellow_robots: List[Robot]
    score: MatchScore = field(default_factory=MatchScore)
    match_phase: MatchPhase = MatchPhase.FIRST_HALF
    tick_match: int = 0
    tick_round: int = 0
    referee: Optional["Referee"] = None

    @classmethod
    def new_default(cls, referee: Optional["Referee"] = None) -> "MatchInfo":
        return cls(
            ball=Ball(pos=Vector2D(BALL_START)),
            blue_robots=_layout(BLUE_START),
            yellow_robots=_layout(YELLOW_START),
            referee=referee,
        )

    @classmethod
    def from_placements(cls, blue: PlacementInfo, yellow: PlacementInfo, actor: Side) -> "MatchInfo":
        """Merge two field-frame placements. The ball comes from the actor's placement."""
        if blue.mirrored or yellow.mirrored:
            raise ValueError("Placements must be converted back to the field frame before merging")
        if actor is Side.BLUE:
            ball = blue.ball
        elif actor is Side.YELLOW:
            ball = yellow.ball
        else:
            ball = Ball(pos=Vector2D(BALL_START))
        return cls(ball=ball, blue_robots=blue.robot_list, yellow_robots=yellow.robot_list)

    def robots(self, side: Side) -> List[Robot]:
        if side is Side.BLUE:
            return self.blue_robots
        if side is Side.YELLOW:
            return self.yellow_robots
        raise ValueError("Side.NOBODY has no robots")

    def get_side(self, side: Side) -> SideInfo:
        """Build a field-frame SideInfo for ``side``. The opponents lose their wheel state."""
        home = self.robots(side)
        opponents = self.robots(side.other())
        return SideInfo(
            home_robots=tuple(home),
            opponent_robots=tuple(r.as_opponent() for r in opponents),
            ball=self.ball,
            tick_match=self.tick_match,
            tick_round=self.tick_round,
        )

    def update_from(self, robots: Sequence[Robot], side: Side) -> None:
        if len(robots) != ROBOTS_PER_TEAM:
            raise ValueError(f"Expected {ROBOTS_PER_TEAM} robots, got {len(robots)}")
        if side is Side.BLUE:
            self.blue_robots = list(robots)
        elif side is Side.YELLOW:
            self.yellow_robots = list(robots)
        else:
            raise ValueError("Cannot update robots of Side.NOBODY")

    def clone(self) -> "MatchInfo":
        """Deep copy of everything except the referee, which is shared."""
        memo = {id(self.referee): self.referee} if self.referee is not None else {}
        return copy.deepcopy(self, memo)

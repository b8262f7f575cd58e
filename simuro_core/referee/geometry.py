"""RefereeGeometry: configurable field dimensions for the Referee."""

from dataclasses import dataclass

from simuro_core.config.enums import Side


@dataclass(frozen=True)
class RefereeGeometry:
    """Immutable field geometry used by referee rule checkers.

    All measurements are in centimetres, origin at the centre spot, +x toward
    the right goal (attacked by blue, defended by yellow), +y toward the top.
    """

    half_length: float = 110.0
    half_width: float = 90.0
    half_goal_width: float = 20.0
    goal_depth: float = 15.0
    penalty_area_depth: float = 35.0
    half_penalty_area_width: float = 40.0
    goal_area_depth: float = 15.0
    half_goal_area_width: float = 25.0
    center_circle_radius: float = 25.0
    penalty_spot_distance: float = 72.5
    free_kick_x: float = 55.0
    free_kick_y: float = 60.0
    robot_size: float = 7.87

    @classmethod
    def from_dict(cls, data: dict) -> "RefereeGeometry":
        known = {k: float(v) for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    # ------------------------------------------------------------------
    # Spatial query helpers
    # ------------------------------------------------------------------

    def is_in_field(self, x: float, y: float) -> bool:
        """True if (x, y) is within the playing field (including boundary)."""
        return abs(x) <= self.half_length and abs(y) <= self.half_width

    def is_in_left_goal(self, x: float, y: float) -> bool:
        """True if the ball has crossed the left goal line inside the goal."""
        return x < -self.half_length and abs(y) < self.half_goal_width

    def is_in_right_goal(self, x: float, y: float) -> bool:
        """True if the ball has crossed the right goal line inside the goal."""
        return x > self.half_length and abs(y) < self.half_goal_width

    def is_in_left_penalty_area(self, x: float, y: float) -> bool:
        return -self.half_length <= x <= -self.half_length + self.penalty_area_depth and (
            abs(y) <= self.half_penalty_area_width
        )

    def is_in_right_penalty_area(self, x: float, y: float) -> bool:
        return self.half_length - self.penalty_area_depth <= x <= self.half_length and (
            abs(y) <= self.half_penalty_area_width
        )

    def is_in_left_goal_area(self, x: float, y: float) -> bool:
        return -self.half_length <= x <= -self.half_length + self.goal_area_depth and (
            abs(y) <= self.half_goal_area_width
        )

    def is_in_right_goal_area(self, x: float, y: float) -> bool:
        return self.half_length - self.goal_area_depth <= x <= self.half_length and (
            abs(y) <= self.half_goal_area_width
        )

    # ------------------------------------------------------------------
    # Side-relative helpers (blue defends the left goal)
    # ------------------------------------------------------------------

    @staticmethod
    def attack_sign(side: Side) -> float:
        """+1 if ``side`` attacks toward +x, -1 otherwise."""
        return 1.0 if side is Side.BLUE else -1.0

    def is_in_own_penalty_area(self, side: Side, x: float, y: float) -> bool:
        if side is Side.BLUE:
            return self.is_in_left_penalty_area(x, y)
        return self.is_in_right_penalty_area(x, y)

    def is_in_own_goal_area(self, side: Side, x: float, y: float) -> bool:
        if side is Side.BLUE:
            return self.is_in_left_goal_area(x, y)
        return self.is_in_right_goal_area(x, y)

    def is_in_own_half(self, side: Side, x: float) -> bool:
        return x * self.attack_sign(side) <= 0.0

    def penalty_spot(self, defending: Side) -> tuple[float, float]:
        """Penalty spot in front of the goal defended by ``defending``."""
        return (-self.attack_sign(defending) * self.penalty_spot_distance, 0.0)

    def goal_kick_spot(self, defending: Side) -> tuple[float, float]:
        return (-self.attack_sign(defending) * (self.half_length - self.goal_area_depth / 2), 0.0)

    def clamp_to_field(self, x: float, y: float, margin: float = 0.0) -> tuple[float, float]:
        max_x = self.half_length - margin
        max_y = self.half_width - margin
        return (max(-max_x, min(max_x, x)), max(-max_y, min(max_y, y)))

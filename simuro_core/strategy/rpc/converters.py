"""Conversions between native match types and wire messages."""

from typing import Optional

from simuro_core.config.settings import ROBOTS_PER_TEAM
from simuro_core.entities.data import objects
from simuro_core.entities.data.command import PlacementInfo, WheelInfo
from simuro_core.entities.data.vector import Vector2D
from simuro_core.entities.match.side_info import SideInfo
from simuro_core.strategy.rpc import messages


def _fill_robot(msg, pos: Vector2D, rotation: float, wheel: Optional[objects.Wheel]) -> None:
    msg.position.x = pos.x
    msg.position.y = pos.y
    msg.rotation = rotation
    if wheel is not None:
        msg.wheel.left_speed = wheel.left
        msg.wheel.right_speed = wheel.right


def side_info_to_field(side_info: SideInfo):
    """Encode one team's view of the field. Opponent robots are sent without wheel speeds."""
    field = messages.Field(tick_total=side_info.tick_match, tick_round=side_info.tick_round)
    for robot in side_info.home_robots:
        _fill_robot(field.our_robots.add(), robot.pos, robot.rotation, robot.wheel)
    for robot in side_info.opponent_robots:
        _fill_robot(field.opponent_robots.add(), robot.pos, robot.rotation, None)
    field.ball.position.x = side_info.ball.pos.x
    field.ball.position.y = side_info.ball.pos.y
    return field


def wheel_info_from_instruction(instruction) -> WheelInfo:
    """Decode an Instruction. Raises ValueError unless it holds exactly one wheel pair per robot."""
    if len(instruction.wheels) != ROBOTS_PER_TEAM:
        raise ValueError(f"expected {ROBOTS_PER_TEAM} wheels, got {len(instruction.wheels)}")
    return WheelInfo(tuple(objects.Wheel(w.left_speed, w.right_speed) for w in instruction.wheels))


def wheel_info_to_instruction(wheel_info: WheelInfo):
    instruction = messages.Instruction()
    for wheel in wheel_info.wheels:
        instruction.wheels.add(left_speed=wheel.left, right_speed=wheel.right)
    return instruction


def placement_info_from_message(placement, mirrored: bool = False) -> PlacementInfo:
    """Decode a Placement expressed in the frame of the view it answers.

    ``mirrored`` must match the frame of the SideInfo that was sent, so the
    caller can later bring the placement back into the field frame.
    """
    if len(placement.robots) != ROBOTS_PER_TEAM:
        raise ValueError(f"expected {ROBOTS_PER_TEAM} robots, got {len(placement.robots)}")
    robots = tuple(
        objects.Robot(pos=Vector2D(r.position.x, r.position.y), rotation=r.rotation) for r in placement.robots
    )
    ball = objects.Ball(pos=Vector2D(placement.ball.position.x, placement.ball.position.y))
    return PlacementInfo(robots=robots, ball=ball, mirrored=mirrored)


def placement_info_to_message(placement_info: PlacementInfo):
    placement = messages.Placement()
    for robot in placement_info.robots:
        _fill_robot(placement.robots.add(), robot.pos, robot.rotation, None)
    placement.ball.position.x = placement_info.ball.pos.x
    placement.ball.position.y = placement_info.ball.pos.y
    return placement

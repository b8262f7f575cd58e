from typing import NamedTuple

from simuro_core.config.enums import ResultType, Side


class JudgeResult(NamedTuple):
    """Namedtuple for one referee decision. Produced and consumed within a single tick."""

    result_type: ResultType

    # Side credited with a goal on this tick, if any.
    who_goal: Side = Side.NOBODY

    # Side that submits its placement first during a reposition.
    # The other side places second and sees the first layout.
    who_is_first: Side = Side.NOBODY

    # Side taking the kick that follows the reposition (the ball owner).
    actor: Side = Side.NOBODY

    # Human-readable cause, for logs and displays.
    reason: str = ""

    @classmethod
    def normal_match(cls) -> "JudgeResult":
        return cls(ResultType.NORMAL_MATCH)

    @classmethod
    def reposition(cls, result_type: ResultType, actor: Side, reason: str, who_goal: Side = Side.NOBODY):
        # The kicking side places last so it can react to the defending layout.
        return cls(
            result_type=result_type,
            who_goal=who_goal,
            who_is_first=actor.other(),
            actor=actor,
            reason=reason,
        )

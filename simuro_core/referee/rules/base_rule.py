"""Base class and violation dataclass for all referee rules."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from simuro_core.config.enums import ResultType, Side
from simuro_core.entities.match.match_info import MatchInfo
from simuro_core.referee.geometry import RefereeGeometry


@dataclass(frozen=True)
class RuleViolation:
    """Describes a detected infringement and the reposition that answers it."""

    rule_name: str
    result_type: ResultType
    actor: Side
    status_message: str
    who_goal: Side = Side.NOBODY


class BaseRule(ABC):
    """Abstract base class for all modular referee rules.

    Rules only see live play; phase starts and phase ends are handled by the
    Referee itself.
    """

    @abstractmethod
    def check(self, match_info: MatchInfo, geometry: RefereeGeometry) -> Optional[RuleViolation]:
        """Check for a rule violation in the current match state.

        Returns a RuleViolation if one is detected, otherwise None. Must not
        modify ``match_info``.
        """
        ...

    def reset(self) -> None:
        """Called after any violation or phase change; reset internal state."""
        pass

from simuro_core.referee.rules.base_rule import BaseRule, RuleViolation
from simuro_core.referee.rules.goal_area_rule import GoalAreaRule
from simuro_core.referee.rules.goal_rule import GoalRule
from simuro_core.referee.rules.penalty_area_rule import PenaltyAreaRule
from simuro_core.referee.rules.stalemate_rule import StalemateRule

__all__ = [
    "BaseRule",
    "RuleViolation",
    "GoalRule",
    "PenaltyAreaRule",
    "GoalAreaRule",
    "StalemateRule",
]

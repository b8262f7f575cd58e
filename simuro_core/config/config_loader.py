"""Config loader: parses YAML platform profiles into typed dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from simuro_core.config.settings import (
    BLUE_STRATEGY_PORT,
    PLACEMENT_PAUSE_SECONDS,
    POST_PLACEMENT_HOLD_SECONDS,
    STRATEGY_CALL_TIMEOUT,
    STRATEGY_CONNECT_TIMEOUT,
    TICKS_PER_SECOND,
    YELLOW_STRATEGY_PORT,
)
from simuro_core.referee.geometry import RefereeGeometry

_PROFILES_DIR = Path(__file__).parent / "profiles"


# ---------------------------------------------------------------------------
# Strategy / match config
# ---------------------------------------------------------------------------


@dataclass
class StrategyConfig:
    connect_timeout: float = STRATEGY_CONNECT_TIMEOUT
    call_timeout: float = STRATEGY_CALL_TIMEOUT
    blue_port: int = BLUE_STRATEGY_PORT
    yellow_port: int = YELLOW_STRATEGY_PORT
    # Mirror the yellow view so both strategies can assume they attack +x.
    convert_yellow_data: bool = True


@dataclass
class MatchConfig:
    ticks_per_second: int = TICKS_PER_SECOND
    placement_pause_seconds: float = PLACEMENT_PAUSE_SECONDS
    post_placement_hold_seconds: float = POST_PLACEMENT_HOLD_SECONDS


# ---------------------------------------------------------------------------
# Rule config dataclasses
# ---------------------------------------------------------------------------


@dataclass
class GoalDetectionConfig:
    enabled: bool = True


@dataclass
class PenaltyAreaConfig:
    enabled: bool = True
    max_defenders: int = 1
    violation_persistence_ticks: int = 66


@dataclass
class GoalAreaConfig:
    enabled: bool = True
    max_attackers: int = 1
    violation_persistence_ticks: int = 66


@dataclass
class StalemateConfig:
    enabled: bool = True
    stalemate_seconds: float = 10.0
    radius: float = 5.0


@dataclass
class RulesConfig:
    goal_detection: GoalDetectionConfig = field(default_factory=GoalDetectionConfig)
    penalty_area: PenaltyAreaConfig = field(default_factory=PenaltyAreaConfig)
    goal_area: GoalAreaConfig = field(default_factory=GoalAreaConfig)
    stalemate: StalemateConfig = field(default_factory=StalemateConfig)


@dataclass
class RefereeConfig:
    half_duration_seconds: float = 300.0
    overtime_enabled: bool = True
    overtime_duration_seconds: float = 180.0
    penalty_kick_seconds: float = 5.0
    shootout_rounds: int = 5
    rules: RulesConfig = field(default_factory=RulesConfig)
    geometry: RefereeGeometry = field(default_factory=RefereeGeometry)


# ---------------------------------------------------------------------------
# Top-level profile
# ---------------------------------------------------------------------------


@dataclass
class PlatformConfig:
    profile_name: str = "default"
    strategy: StrategyConfig = field(default_factory=StrategyConfig)
    match: MatchConfig = field(default_factory=MatchConfig)
    referee: RefereeConfig = field(default_factory=RefereeConfig)


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


def load_config(name_or_path: str = "default") -> PlatformConfig:
    """Load a PlatformConfig from a built-in name or an absolute/relative path.

    Built-in names: "default", "exhibition".
    """
    p = Path(name_or_path)
    if not p.is_absolute():
        # Try built-in profiles directory
        candidate = _PROFILES_DIR / f"{name_or_path}.yaml"
        if candidate.exists():
            p = candidate
        elif not p.exists():
            raise FileNotFoundError(f"Profile '{name_or_path}' not found as a built-in name or file path.")

    with open(p, "r") as fh:
        data = yaml.safe_load(fh) or {}

    return parse_config(data)


def parse_config(data: dict) -> PlatformConfig:
    st = data.get("strategy", {})
    strategy = StrategyConfig(
        connect_timeout=float(st.get("connect_timeout", STRATEGY_CONNECT_TIMEOUT)),
        call_timeout=float(st.get("call_timeout", STRATEGY_CALL_TIMEOUT)),
        blue_port=int(st.get("blue_port", BLUE_STRATEGY_PORT)),
        yellow_port=int(st.get("yellow_port", YELLOW_STRATEGY_PORT)),
        convert_yellow_data=bool(st.get("convert_yellow_data", True)),
    )

    ma = data.get("match", {})
    match = MatchConfig(
        ticks_per_second=int(ma.get("ticks_per_second", TICKS_PER_SECOND)),
        placement_pause_seconds=float(ma.get("placement_pause_seconds", PLACEMENT_PAUSE_SECONDS)),
        post_placement_hold_seconds=float(ma.get("post_placement_hold_seconds", POST_PLACEMENT_HOLD_SECONDS)),
    )

    ref_d = data.get("referee", {})
    rules_d = ref_d.get("rules", {})

    gd = rules_d.get("goal_detection", {})
    goal_cfg = GoalDetectionConfig(enabled=gd.get("enabled", True))

    pa = rules_d.get("penalty_area", {})
    pa_cfg = PenaltyAreaConfig(
        enabled=pa.get("enabled", True),
        max_defenders=pa.get("max_defenders", 1),
        violation_persistence_ticks=pa.get("violation_persistence_ticks", 66),
    )

    ga = rules_d.get("goal_area", {})
    ga_cfg = GoalAreaConfig(
        enabled=ga.get("enabled", True),
        max_attackers=ga.get("max_attackers", 1),
        violation_persistence_ticks=ga.get("violation_persistence_ticks", 66),
    )

    sm = rules_d.get("stalemate", {})
    sm_cfg = StalemateConfig(
        enabled=sm.get("enabled", True),
        stalemate_seconds=sm.get("stalemate_seconds", 10.0),
        radius=sm.get("radius", 5.0),
    )

    referee = RefereeConfig(
        half_duration_seconds=ref_d.get("half_duration_seconds", 300.0),
        overtime_enabled=ref_d.get("overtime_enabled", True),
        overtime_duration_seconds=ref_d.get("overtime_duration_seconds", 180.0),
        penalty_kick_seconds=ref_d.get("penalty_kick_seconds", 5.0),
        shootout_rounds=ref_d.get("shootout_rounds", 5),
        rules=RulesConfig(
            goal_detection=goal_cfg,
            penalty_area=pa_cfg,
            goal_area=ga_cfg,
            stalemate=sm_cfg,
        ),
        geometry=RefereeGeometry.from_dict(ref_d.get("geometry", {})),
    )

    return PlatformConfig(
        profile_name=data.get("profile_name", "unknown"),
        strategy=strategy,
        match=match,
        referee=referee,
    )

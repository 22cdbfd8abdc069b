from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from .models import DifficultyTier, Personality


class DrawPolicy(str, Enum):
    KEEP = "keep"    # draw leaves both streaks untouched
    RESET = "reset"  # draw zeroes both streaks


def _default_follow() -> Dict[DifficultyTier, float]:
    return {
        DifficultyTier.EASY: 0.4,
        DifficultyTier.MEDIUM: 0.7,
        DifficultyTier.HARD: 0.9,
    }


@dataclass
class EngineConfig:
    """
    Tuning knobs for the opponent engine.

    - win_streak / lose_streak: streak length that flips the tier to hard / easy
    - follow_probability: chance the AI plays the counter to its prediction
    - history_limit: max history entries accepted per request and kept per session
    - request_history: how many entries a session sends with each request
    - summary_window / last_moves: how much history reaches the model prompt
    """

    win_streak: int = 2
    lose_streak: int = 2
    follow_probability: Dict[DifficultyTier, float] = field(default_factory=_default_follow)
    history_limit: int = 50
    request_history: int = 40
    summary_window: int = 10
    last_moves: int = 5
    draw_policy: DrawPolicy = DrawPolicy.KEEP
    default_personality: Personality = Personality.COACH
    model: str = "gemini-2.5-flash"
    llm_timeout: float = 8.0
    api_key: Optional[str] = None
    gcp_project: Optional[str] = None
    gcp_location: str = "us-central1"

    @staticmethod
    def from_env() -> "EngineConfig":
        follow = _default_follow()
        for tier in DifficultyTier:
            v = os.getenv(f"RPS_FOLLOW_{tier.value.upper()}")
            if v:
                follow[tier] = float(v)
        return EngineConfig(
            win_streak=int(os.getenv("RPS_WIN_STREAK", "2")),
            lose_streak=int(os.getenv("RPS_LOSE_STREAK", "2")),
            follow_probability=follow,
            draw_policy=DrawPolicy(os.getenv("RPS_DRAW_POLICY", DrawPolicy.KEEP.value).lower()),
            default_personality=Personality(os.getenv("RPS_DEFAULT_PERSONALITY", Personality.COACH.value)),
            model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
            llm_timeout=float(os.getenv("LLM_TIMEOUT", "8")),
            api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
            gcp_project=os.getenv("GCP_PROJECT_ID"),
            gcp_location=os.getenv("GCP_LOCATION", "us-central1"),
        )


DEFAULT_CONFIG = EngineConfig()

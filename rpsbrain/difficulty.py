from __future__ import annotations

import random
from typing import Optional

from .config import DEFAULT_CONFIG, EngineConfig
from .models import DifficultyTier


def difficulty_tier(win_streak: int, lose_streak: int, config: EngineConfig = DEFAULT_CONFIG) -> DifficultyTier:
    if win_streak >= config.win_streak:
        return DifficultyTier.HARD
    if lose_streak >= config.lose_streak:
        return DifficultyTier.EASY
    return DifficultyTier.MEDIUM


def follow_probability(tier: DifficultyTier, config: EngineConfig = DEFAULT_CONFIG) -> float:
    return float(config.follow_probability[DifficultyTier(tier)])


def should_follow_prediction(
    tier: DifficultyTier,
    rng: Optional[random.Random] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> bool:
    """One Bernoulli trial: True means the AI plays the counter to its prediction."""
    roll = (rng or random).random()
    return roll < follow_probability(tier, config)

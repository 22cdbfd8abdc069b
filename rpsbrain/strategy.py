from __future__ import annotations

import random
from typing import Optional

from .config import DEFAULT_CONFIG, EngineConfig
from .difficulty import should_follow_prediction
from .models import DifficultyTier, Move, Prediction
from .utils import counter, random_move


def resolve_ai_move(
    prediction: Prediction,
    tier: DifficultyTier,
    rng: Optional[random.Random] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> Move:
    # Hard trusts the prediction (plays its counter), easy randomizes often.
    # A random pick may coincide with the counter.
    optimal = counter(prediction.predicted_move)
    if should_follow_prediction(tier, rng, config):
        return optimal
    return random_move(rng)

from __future__ import annotations

from typing import Sequence

import numpy as np

from .history import move_counts
from .models import MOVES, Prediction, RoundRecord

EMPTY_CONFIDENCE = 30
PATTERN_CONFIDENCE = 60


def freq_expert(history: Sequence[RoundRecord]) -> int:
    """Index of the player's most frequent move; ties go to the earliest in MOVES."""
    return int(np.argmax(move_counts(history)))


def fallback_prediction(history: Sequence[RoundRecord]) -> Prediction:
    """Network-free prediction used whenever the model path is unavailable.

    Crude on purpose: confidence does not scale with how lopsided the tally is.
    """
    if not history:
        return Prediction(
            predicted_move=MOVES[0],
            confidence=EMPTY_CONFIDENCE,
            player_style="random",
            explanation="I'm still learning your patterns.",
            coach_tip="Play a few more rounds!",
            source="fallback",
        )
    predicted = MOVES[freq_expert(history)]
    return Prediction(
        predicted_move=predicted,
        confidence=PATTERN_CONFIDENCE,
        player_style="pattern",
        explanation=f"You seem to favor {predicted.value}.",
        coach_tip="Try mixing up your moves.",
        source="fallback",
    )

from .config import DrawPolicy, EngineConfig
from .core import OpponentBrain
from .models import (
    BiometricSignal,
    DifficultyTier,
    Move,
    Outcome,
    Personality,
    Prediction,
    RoundRecord,
    RoundResult,
    Stats,
)
from .session import Session
from .storage import SessionStore
from .validate import PlayValidationError, validate_play_request

__all__ = [
    "BiometricSignal",
    "DifficultyTier",
    "DrawPolicy",
    "EngineConfig",
    "Move",
    "OpponentBrain",
    "Outcome",
    "Personality",
    "PlayValidationError",
    "Prediction",
    "RoundRecord",
    "RoundResult",
    "Session",
    "SessionStore",
    "Stats",
    "validate_play_request",
]

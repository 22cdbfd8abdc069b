from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from .config import DEFAULT_CONFIG, EngineConfig
from .models import (
    BiometricSignal,
    Emotion,
    Move,
    Outcome,
    Personality,
    PlayRequest,
    RoundRecord,
    Stats,
)
from .utils import winner

VALID_MOVES = tuple(m.value for m in Move)
VALID_PERSONALITIES = tuple(p.value for p in Personality)
STAT_FIELDS = ("wins", "losses", "draws", "winStreak", "loseStreak")


class PlayValidationError(ValueError):
    """Rejected round request; the round never starts."""

    def __init__(self, error: str):
        super().__init__(error)
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": False, "error": self.error}


@dataclass
class ValidationResult:
    valid: bool
    error: Optional[str] = None
    request: Optional[PlayRequest] = None


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _is_int(v: Any) -> bool:
    return _is_number(v) and float(v).is_integer()


def parse_record(entry: Any) -> RoundRecord:
    if not isinstance(entry, Mapping):
        raise PlayValidationError("History entries must be objects")
    # legacy clients send {player, ai, winner}
    p = entry.get("playerMove", entry.get("player"))
    a = entry.get("aiMove", entry.get("ai"))
    if p not in VALID_MOVES or a not in VALID_MOVES:
        raise PlayValidationError("History entry has an invalid move")
    w = entry.get("winner")
    if w is None:
        outcome = winner(p, a)
    elif w in tuple(o.value for o in Outcome):
        outcome = Outcome(w)
    else:
        raise PlayValidationError("History entry has an invalid winner")
    return RoundRecord(Move(p), Move(a), outcome)


def _parse_stats(stats: Any) -> Stats:
    if not isinstance(stats, Mapping) or not _is_number(stats.get("wins")):
        raise PlayValidationError("Invalid stats object")
    for k in STAT_FIELDS:
        v = stats.get(k, 0)
        if not _is_int(v) or v < 0:
            raise PlayValidationError(f"stats.{k} must be a non-negative integer")
    return Stats.from_dict(dict(stats))


def _parse_biometric(b: Any) -> BiometricSignal:
    if not isinstance(b, Mapping):
        raise PlayValidationError("Invalid biometric object")
    hesitation = b.get("hesitationMs")
    movement = b.get("movementScore")
    emotion = b.get("inferredEmotion")
    if not _is_int(hesitation) or hesitation < 0:
        raise PlayValidationError("biometric.hesitationMs must be a non-negative integer")
    if not _is_int(movement) or not 0 <= movement <= 100:
        raise PlayValidationError("biometric.movementScore must be an integer 0-100")
    if emotion is None:
        return BiometricSignal.from_movement(int(hesitation), int(movement))
    if emotion not in tuple(e.value for e in Emotion):
        raise PlayValidationError("biometric.inferredEmotion is invalid")
    return BiometricSignal(int(hesitation), int(movement), Emotion(emotion))


def parse_play_request(payload: Any, config: EngineConfig = DEFAULT_CONFIG) -> PlayRequest:
    """Validate a raw round request, raising PlayValidationError on the first problem."""
    if not isinstance(payload, Mapping):
        raise PlayValidationError("Request body must be an object")

    player_move = payload.get("playerMove")
    if player_move not in VALID_MOVES:
        raise PlayValidationError("Invalid or missing playerMove")

    history = payload.get("history")
    if not isinstance(history, list):
        raise PlayValidationError("History must be an array")
    # Limit history size for token usage
    if len(history) > config.history_limit:
        raise PlayValidationError("History array too large")
    records: List[RoundRecord] = [parse_record(h) for h in history]

    stats = _parse_stats(payload.get("stats"))

    personality = payload.get("personality")
    if personality is None:
        personality = config.default_personality.value
    elif personality not in VALID_PERSONALITIES:
        raise PlayValidationError("Invalid personality")

    onboarding = payload.get("onboardingAnswer")
    if onboarding is not None and not isinstance(onboarding, str):
        raise PlayValidationError("onboardingAnswer must be a string")

    biometric = payload.get("biometric")
    return PlayRequest(
        player_move=Move(player_move),
        history=records,
        stats=stats,
        personality=Personality(personality),
        onboarding_answer=onboarding,
        biometric=_parse_biometric(biometric) if biometric is not None else None,
    )


def validate_play_request(payload: Any, config: EngineConfig = DEFAULT_CONFIG) -> ValidationResult:
    try:
        request = parse_play_request(payload, config)
    except PlayValidationError as e:
        return ValidationResult(valid=False, error=e.error)
    return ValidationResult(valid=True, request=request)

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Move(str, Enum):
    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"


# Enumeration order is also the tie-break order for frequency tallies
MOVES: List[Move] = [Move.ROCK, Move.PAPER, Move.SCISSORS]


class Outcome(str, Enum):
    PLAYER = "player"
    AI = "ai"
    DRAW = "draw"


class DifficultyTier(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Personality(str, Enum):
    FRIENDLY = "Friendly"
    COMPETITIVE = "Competitive"
    COACH = "Coach"


class Emotion(str, Enum):
    AGITATED = "Agitated"
    CALM = "Calm/Focused"


EMOTIONAL_STATES = ("calm", "frustrated", "excited", "neutral")
MIND_GAME_EVENTS = ("none", "bluff_round", "psychological_pressure", "confidence_trap")
PLAYER_STYLES = (
    "pattern",
    "rock-biased",
    "paper-biased",
    "scissors-biased",
    "reactive-to-loss",
    "random",
    "tilted",
    "confident",
)

# Movement score above which the client heuristic reads the player as agitated
AGITATION_THRESHOLD = 20


@dataclass(frozen=True)
class RoundRecord:
    player_move: Move
    ai_move: Move
    winner: Outcome

    def to_dict(self) -> Dict[str, str]:
        return {
            "playerMove": self.player_move.value,
            "aiMove": self.ai_move.value,
            "winner": self.winner.value,
        }


@dataclass
class Stats:
    wins: int = 0
    losses: int = 0
    draws: int = 0
    win_streak: int = 0
    lose_streak: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "wins": self.wins,
            "losses": self.losses,
            "draws": self.draws,
            "winStreak": self.win_streak,
            "loseStreak": self.lose_streak,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Stats":
        return Stats(
            wins=int(d.get("wins", 0)),
            losses=int(d.get("losses", 0)),
            draws=int(d.get("draws", 0)),
            win_streak=int(d.get("winStreak", 0)),
            lose_streak=int(d.get("loseStreak", 0)),
        )


@dataclass(frozen=True)
class BiometricSignal:
    """Per-round reading derived client-side from elapsed time and frame differences."""

    hesitation_ms: int
    movement_score: int
    inferred_emotion: Emotion

    @staticmethod
    def from_movement(hesitation_ms: int, movement_score: int) -> "BiometricSignal":
        emotion = Emotion.AGITATED if movement_score > AGITATION_THRESHOLD else Emotion.CALM
        return BiometricSignal(hesitation_ms, movement_score, emotion)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hesitationMs": self.hesitation_ms,
            "movementScore": self.movement_score,
            "inferredEmotion": self.inferred_emotion.value,
        }


@dataclass
class Prediction:
    predicted_move: Move
    confidence: int
    player_style: str
    explanation: str
    coach_tip: str
    emotional_state: str = "neutral"
    mind_game_event: str = "none"
    source: str = "model"  # model | fallback


@dataclass
class PlayRequest:
    player_move: Move
    history: List[RoundRecord]
    stats: Stats
    personality: Personality
    onboarding_answer: Optional[str] = None
    biometric: Optional[BiometricSignal] = None


@dataclass
class RoundResult:
    ai_move: Move
    predicted_player_move: Move
    confidence: int
    winner: Outcome
    player_style: str
    explanation: str
    coach_tip: str
    difficulty_level: DifficultyTier
    emotional_state: str = "neutral"
    mind_game_event: str = "none"
    player_move: Optional[Move] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aiMove": self.ai_move.value,
            "predictedPlayerMove": self.predicted_player_move.value,
            "confidence": self.confidence,
            "winner": self.winner.value,
            "playerStyle": self.player_style,
            "explanation": self.explanation,
            "coachTip": self.coach_tip,
            "difficultyLevel": self.difficulty_level.value,
            "emotionalState": self.emotional_state,
            "mindGameEvent": self.mind_game_event,
        }

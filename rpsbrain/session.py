from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import DEFAULT_CONFIG, DrawPolicy, EngineConfig
from .models import BiometricSignal, Move, Outcome, Personality, RoundRecord, RoundResult, Stats
from .utils import MoveLike
from .validate import parse_record


@dataclass
class Session:
    """Per-player game state: history (most-recent-first), stats, personality."""

    history: List[RoundRecord] = field(default_factory=list)
    stats: Stats = field(default_factory=Stats)
    personality: Personality = Personality.COACH
    onboarding_answer: Optional[str] = None
    config: EngineConfig = field(default_factory=lambda: DEFAULT_CONFIG, repr=False, compare=False)

    @property
    def total_rounds(self) -> int:
        return self.stats.wins + self.stats.losses + self.stats.draws

    def build_request(self, player_move: MoveLike, biometric: Optional[BiometricSignal] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            # raw strings pass through; the orchestrator validates them
            "playerMove": getattr(player_move, "value", player_move),
            "history": [h.to_dict() for h in self.history[: self.config.request_history]],
            "stats": self.stats.to_dict(),
            "personality": self.personality.value,
        }
        if self.onboarding_answer is not None:
            payload["onboardingAnswer"] = self.onboarding_answer
        if biometric is not None:
            payload["biometric"] = biometric.to_dict()
        return payload

    def apply(self, result: RoundResult, player_move: Optional[Move] = None) -> None:
        """Record a completed round. Call only after the round was resolved."""
        player_move = player_move or result.player_move
        if player_move is None:
            raise ValueError("player_move is required to record a round")
        s = self.stats
        if result.winner == Outcome.PLAYER:
            s.wins += 1
            s.win_streak += 1
            s.lose_streak = 0
        elif result.winner == Outcome.AI:
            s.losses += 1
            s.lose_streak += 1
            s.win_streak = 0
        else:
            s.draws += 1
            if self.config.draw_policy == DrawPolicy.RESET:
                s.win_streak = 0
                s.lose_streak = 0
        self.history.insert(0, RoundRecord(Move(player_move), result.ai_move, result.winner))
        del self.history[self.config.history_limit:]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "history": [h.to_dict() for h in self.history],
            "stats": self.stats.to_dict(),
            "personality": self.personality.value,
            "onboardingAnswer": self.onboarding_answer,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any], config: EngineConfig = DEFAULT_CONFIG) -> "Session":
        return Session(
            history=[parse_record(h) for h in d.get("history", [])][: config.history_limit],
            stats=Stats.from_dict(d.get("stats", {})),
            personality=Personality(d.get("personality") or config.default_personality.value),
            onboarding_answer=d.get("onboardingAnswer"),
            config=config,
        )

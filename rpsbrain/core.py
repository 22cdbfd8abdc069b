from __future__ import annotations

import logging
import random
from typing import Any, Optional

from .config import EngineConfig
from .difficulty import difficulty_tier
from .llm import OpponentClient, PredictionContext, PredictionService, build_service
from .models import PlayRequest, RoundResult
from .strategy import resolve_ai_move
from .utils import winner
from .validate import parse_play_request

logger = logging.getLogger(__name__)


class OpponentBrain:
    """
    Adaptive Rock-Paper-Scissors opponent.

    One round runs Received -> Validated -> Predicted -> Resolved -> Responded:
    - validates the client-reported request (history, stats, personality, biometrics)
    - derives the difficulty tier from the win/lose streaks
    - asks the model client for a prediction (deterministic fallback on any failure)
    - plays the counter to the prediction or a random move, per the tier's follow probability
    - scores the round

    Nothing is persisted here; the caller applies the result to its session.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        service: Optional[PredictionService] = None,
        random_seed: Optional[int] = None,
        use_env_service: bool = False,
    ):
        self.config = config or EngineConfig()
        self.rng = random.Random(random_seed)
        if service is None and use_env_service:
            service = build_service(self.config)
        self.client = OpponentClient(service, timeout=self.config.llm_timeout)

    @property
    def service(self) -> Optional[PredictionService]:
        return self.client.service

    def validate(self, payload: Any) -> PlayRequest:
        return parse_play_request(payload, self.config)

    async def play(self, payload: Any) -> RoundResult:
        req = self.validate(payload)
        return await self.play_request(req)

    async def play_request(self, req: PlayRequest) -> RoundResult:
        tier = difficulty_tier(req.stats.win_streak, req.stats.lose_streak, self.config)

        prediction = await self.client.predict(
            PredictionContext(
                history=req.history,
                stats=req.stats,
                personality=req.personality,
                difficulty=tier,
                onboarding_answer=req.onboarding_answer,
                biometric=req.biometric,
                summary_window=self.config.summary_window,
                last_moves=self.config.last_moves,
            )
        )

        ai_move = resolve_ai_move(prediction, tier, self.rng, self.config)
        outcome = winner(req.player_move, ai_move)
        logger.info(
            "Round resolved: tier=%s source=%s predicted=%s ai=%s player=%s winner=%s",
            tier.value,
            prediction.source,
            prediction.predicted_move.value,
            ai_move.value,
            req.player_move.value,
            outcome.value,
        )

        return RoundResult(
            ai_move=ai_move,
            predicted_player_move=prediction.predicted_move,
            confidence=prediction.confidence,
            winner=outcome,
            player_style=prediction.player_style,
            explanation=prediction.explanation,
            coach_tip=prediction.coach_tip,
            difficulty_level=tier,
            emotional_state=prediction.emotional_state,
            mind_game_event=prediction.mind_game_event,
            player_move=req.player_move,
        )

"""
Language-model opponent client.

Pattern recognition is delegated to Gemini through ``google-genai`` with a
schema-constrained JSON response. The external call is unreliable by default:
every failure (no credentials, transport error, timeout, malformed output) is
logged and answered by the deterministic fallback predictor instead.
"""
from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

from .config import EngineConfig
from .decoder import decode_prediction
from .experts import fallback_prediction
from .history import last_moves, summarize
from .models import (
    EMOTIONAL_STATES,
    MIND_GAME_EVENTS,
    PLAYER_STYLES,
    BiometricSignal,
    DifficultyTier,
    Personality,
    Prediction,
    RoundRecord,
    Stats,
)

logger = logging.getLogger(__name__)


PREDICTION_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "predicted_player_move": {"type": "STRING", "enum": ["rock", "paper", "scissors"]},
        "prediction_confidence": {"type": "INTEGER"},
        "player_style": {"type": "STRING", "enum": list(PLAYER_STYLES)},
        "emotional_state": {"type": "STRING", "enum": list(EMOTIONAL_STATES)},
        "mind_game_event": {"type": "STRING", "enum": list(MIND_GAME_EVENTS)},
        "explanation": {"type": "STRING"},
        "coach_tip": {"type": "STRING"},
    },
    "required": [
        "predicted_player_move",
        "prediction_confidence",
        "player_style",
        "emotional_state",
        "mind_game_event",
        "explanation",
        "coach_tip",
    ],
}

PERSONALITY_TONES = {
    Personality.FRIENDLY: "warm and encouraging, celebrate the player's good reads",
    Personality.COMPETITIVE: "cocky trash talk, short and punchy",
    Personality.COACH: "calm and instructive, point out the pattern you exploited",
}

SYSTEM_PROMPT = """You are a behavioral Rock Paper Scissors AI opponent. You read the player's move history, \
stats and (when present) biometric signals, and predict the player's NEXT move. Output strict JSON only.

Inputs:
- History & Stats: use pattern matching (repeats, cycles, win-stay/lose-shift, reactions to losses).
- Biometrics:
  * Hesitation: <1000ms (impulsive/confident), >3000ms (hesitant/calculating).
  * Emotion: Agitated (likely to play randomly or repeat), Calm/Focused (likely to stick to a strategy).

Mind games (trigger occasionally, they only flavor the narrative):
- "bluff_round": claim you predicted something other than what you predicted.
- "confidence_trap": use the player's confidence against them.
- "psychological_pressure": taunt a hesitation.
- "none": standard play.

Fields:
- predicted_player_move: rock|paper|scissors
- prediction_confidence: integer 0-100
- player_style: one of the allowed style tags
- emotional_state: calm|frustrated|excited|neutral
- mind_game_event: none|bluff_round|psychological_pressure|confidence_trap
- explanation: one or two sentences, in the requested tone
- coach_tip: one short tactical tip for the player"""


class PredictionService(Protocol):
    """External prediction service: one call, a conforming JSON string or an exception."""

    async def generate(self, system_prompt: str, user_message: str, schema: Dict[str, Any]) -> str:
        ...


class GeminiService:
    """PredictionService backed by Gemini (API key or Vertex AI)."""

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        project: Optional[str] = None,
        location: str = "us-central1",
    ):
        self.model = model
        self.api_key = api_key
        self.project = project
        self.location = location
        self._client = None

    @property
    def provider(self) -> str:
        return "gemini-api" if self.api_key else "vertex-ai"

    def _get_client(self):
        """Lazy initialization of the genai client."""
        if self._client is None:
            from google import genai

            if self.api_key:
                self._client = genai.Client(api_key=self.api_key)
            else:
                self._client = genai.Client(vertexai=True, project=self.project, location=self.location)
        return self._client

    async def generate(self, system_prompt: str, user_message: str, schema: Dict[str, Any]) -> str:
        from google.genai import types

        client = self._get_client()
        start = time.perf_counter()
        response = await client.aio.models.generate_content(
            model=self.model,
            contents=user_message,
            config=types.GenerateContentConfig(
                system_instruction=system_prompt,
                response_mime_type="application/json",
                response_schema=schema,
                temperature=0.7,
            ),
        )
        logger.info("Gemini call: model=%s latency=%.0fms", self.model, (time.perf_counter() - start) * 1000)
        text = response.text
        if not text:
            raise RuntimeError("No candidates in model response")
        return text


def build_service(config: EngineConfig) -> Optional[GeminiService]:
    if not (config.api_key or config.gcp_project):
        logger.warning("Neither GEMINI_API_KEY nor GCP_PROJECT_ID set. Model predictions disabled.")
        return None
    return GeminiService(
        model=config.model,
        api_key=config.api_key,
        project=config.gcp_project,
        location=config.gcp_location,
    )


@dataclass
class PredictionContext:
    history: List[RoundRecord]
    stats: Stats
    personality: Personality
    difficulty: DifficultyTier
    onboarding_answer: Optional[str] = None
    biometric: Optional[BiometricSignal] = None
    summary_window: int = 10
    last_moves: int = 5


def build_user_message(ctx: PredictionContext) -> str:
    lines = [
        "Context:",
        f"- Mode: {ctx.personality.value} | Difficulty: {ctx.difficulty.value}",
        f"- Tone: {PERSONALITY_TONES[ctx.personality]}",
        f"- Player Intent: {ctx.onboarding_answer or 'unknown'}",
        (
            f"- Stats: W{ctx.stats.wins}/L{ctx.stats.losses}/D{ctx.stats.draws} "
            f"Streak: W{ctx.stats.win_streak}/L{ctx.stats.lose_streak}"
        ),
    ]
    if ctx.biometric is not None:
        b = ctx.biometric
        lines.append(
            f"- BIOMETRICS: Hesitation: {b.hesitation_ms}ms. Inferred Emotion: {b.inferred_emotion.value}. "
            f"Movement Score: {b.movement_score}."
        )
    lines.append(f"- History: {summarize(ctx.history, ctx.summary_window)}")
    lines.append(f"- Last {ctx.last_moves}: {json.dumps(last_moves(ctx.history, ctx.last_moves))}")
    lines.append("")
    lines.append("Analyze the signals. Predict the next move. Explain.")
    return "\n".join(lines)


class OpponentClient:
    """Obtains a Prediction from the model, degrading silently to the fallback predictor."""

    def __init__(self, service: Optional[PredictionService] = None, timeout: float = 8.0):
        self.service = service
        self.timeout = timeout

    async def predict(self, ctx: PredictionContext) -> Prediction:
        if self.service is None:
            return fallback_prediction(ctx.history)

        try:
            text = await asyncio.wait_for(
                self.service.generate(SYSTEM_PROMPT, build_user_message(ctx), PREDICTION_SCHEMA),
                timeout=self.timeout,
            )
            prediction = decode_prediction(text)
        except asyncio.TimeoutError:
            logger.warning("Model prediction timed out after %.1fs, using fallback", self.timeout)
            return fallback_prediction(ctx.history)
        except Exception as e:
            logger.error("Model prediction failed (%s: %s), using fallback", type(e).__name__, e)
            return fallback_prediction(ctx.history)

        logger.debug(
            "Model predicted %s (confidence=%d, style=%s)",
            prediction.predicted_move.value,
            prediction.confidence,
            prediction.player_style,
        )
        return prediction

from __future__ import annotations

import logging
import os
import re
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from rpsbrain import EngineConfig, OpponentBrain, Personality, PlayValidationError, Session, SessionStore

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

MAX_BODY_BYTES = int(os.getenv("MAX_BODY_BYTES", str(10 * 1024)))
SESSION_KEY = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class BodyLimitMiddleware:
    """Reject request bodies over ``max_bytes``, counting the bytes actually received."""

    def __init__(self, app, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        too_large = JSONResponse({"error": "Request body too large"}, status_code=413)
        length = dict(scope["headers"]).get(b"content-length", b"")
        if length.isdigit() and int(length) > self.max_bytes:
            await too_large(scope, receive, send)
            return

        # chunked bodies carry no content-length, so buffer up to the limit
        chunks = []
        size = 0
        while True:
            message = await receive()
            if message["type"] != "http.request":
                break
            chunk = message.get("body", b"")
            size += len(chunk)
            if size > self.max_bytes:
                await too_large(scope, receive, send)
                return
            chunks.append(chunk)
            if not message.get("more_body", False):
                break
        body = b"".join(chunks)
        replayed = False

        async def replay():
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)


app = FastAPI(title="RPS Mind Game API")
app.add_middleware(BodyLimitMiddleware, max_bytes=MAX_BODY_BYTES)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("ALLOW_ORIGINS", "*").split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

config = EngineConfig.from_env()
brain = OpponentBrain(config=config, use_env_service=True)
# Sessions default to an ephemeral path suitable for free tier hosting
store = SessionStore(os.getenv("STATE_DIR", "/var/tmp/rps_state"), redis_url=os.getenv("REDIS_URL"))


class PlayRes(BaseModel):
    aiMove: str
    predictedPlayerMove: str
    confidence: int
    winner: str
    playerStyle: str
    explanation: str
    coachTip: str
    difficultyLevel: str
    emotionalState: Optional[str] = None
    mindGameEvent: Optional[str] = None


class SessionPlayRes(BaseModel):
    round: PlayRes
    stats: Dict[str, int]


@app.exception_handler(PlayValidationError)
async def validation_error(request: Request, exc: PlayValidationError):
    return JSONResponse(exc.to_dict(), status_code=400)


@app.exception_handler(Exception)
async def internal_error(request: Request, exc: Exception):
    logger.exception("API error on %s", request.url.path)
    return JSONResponse({"error": "Internal Server Error"}, status_code=500)


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        raise PlayValidationError("Request body must be valid JSON") from None


def _session_key(key: str) -> str:
    if not SESSION_KEY.match(key):
        raise HTTPException(status_code=400, detail="Invalid session key")
    return key


def _load_session(key: str) -> Session:
    state = store.load(key)
    if state is None:
        return Session(personality=brain.config.default_personality, config=brain.config)
    return Session.from_dict(state, brain.config)


@app.get("/health")
def health():
    service = brain.service
    return {
        "status": "ok",
        "service": "rps-mind-game",
        "ai_provider": getattr(service, "provider", "fallback") if service is not None else "fallback",
        "model": brain.config.model,
        "region": brain.config.gcp_location,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.post("/api/play", response_model=PlayRes)
async def play(request: Request):
    payload = await _read_json(request)
    result = await brain.play(payload)
    return PlayRes(**result.to_dict())


@app.get("/api/sessions/{key}")
def get_session(key: str):
    state = store.load(_session_key(key))
    if state is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return state


@app.delete("/api/sessions/{key}")
def delete_session(key: str):
    return {"ok": store.delete(_session_key(key))}


@app.post("/api/sessions/{key}/play", response_model=SessionPlayRes)
async def play_session(key: str, request: Request):
    key = _session_key(key)
    body = await _read_json(request)
    if not isinstance(body, Mapping):
        raise PlayValidationError("Request body must be an object")

    # storage is blocking redis/file I/O; keep it off the event loop
    session = await run_in_threadpool(_load_session, key)
    payload = session.build_request(body.get("playerMove"))
    for field in ("personality", "onboardingAnswer", "biometric"):
        if body.get(field) is not None:
            payload[field] = body[field]

    result = await brain.play(payload)

    # Only a resolved round touches the stored session
    if body.get("personality") is not None:
        session.personality = Personality(body["personality"])
    if body.get("onboardingAnswer") is not None:
        session.onboarding_answer = body["onboardingAnswer"]
    session.apply(result)
    await run_in_threadpool(store.save, key, session.to_dict())
    return SessionPlayRes(round=PlayRes(**result.to_dict()), stats=session.stats.to_dict())

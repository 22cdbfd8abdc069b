from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

import redis

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Session persistence with optional Redis backend.
    - If a Redis URL is given (REDIS_URL), sessions live in Redis.
    - Otherwise one JSON file per session key under state_dir.
    Keys:
      rps:session:<key> -> JSON string
    """

    def __init__(self, state_dir: str, redis_url: Optional[str] = None):
        self.state_dir = state_dir
        self._redis = None
        if redis_url:
            self._redis = redis.from_url(redis_url, decode_responses=True)  # str <-> str
            logger.info("Session store using Redis at %s", redis_url)
        else:
            os.makedirs(self.state_dir, exist_ok=True)

    @property
    def backend(self) -> str:
        return "redis" if self._redis is not None else "file"

    # ---------------- Filesystem helpers ----------------
    def _path(self, key: str) -> str:
        safe = "".join(c for c in key if c.isalnum() or c in ("-", "_"))
        return os.path.join(self.state_dir, f"session_{safe}.json")

    # ---------------- Redis helpers ----------------
    def _k(self, key: str) -> str:
        return f"rps:session:{key}"

    # ---------------- Public API ----------------
    def save(self, key: str, state: Dict[str, Any]) -> None:
        if self._redis is not None:
            self._redis.set(self._k(key), json.dumps(state))
            return
        with open(self._path(key), "w", encoding="utf-8") as f:
            json.dump(state, f)

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        if self._redis is not None:
            s = self._redis.get(self._k(key))
            return None if s is None else json.loads(s)
        p = self._path(key)
        if not os.path.exists(p):
            return None
        with open(p, "r", encoding="utf-8") as f:
            return json.load(f)

    def delete(self, key: str) -> bool:
        if self._redis is not None:
            return bool(self._redis.delete(self._k(key)))
        p = self._path(key)
        if not os.path.exists(p):
            return False
        os.remove(p)
        return True

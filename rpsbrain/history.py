from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from .models import RoundRecord
from .utils import move_index

NO_HISTORY = "No history."


def move_counts(history: Sequence[RoundRecord], window: Optional[int] = None) -> np.ndarray:
    """Player-move tally over the most recent ``window`` rounds, indexed rock/paper/scissors."""
    recent = history if window is None else history[:window]
    idx = [move_index(h.player_move) for h in recent]
    return np.bincount(np.asarray(idx, dtype=np.int64), minlength=3)


def last_moves(history: Sequence[RoundRecord], n: int = 5) -> List[Dict[str, Any]]:
    return [h.to_dict() for h in history[:n]]


def summarize(history: Sequence[RoundRecord], window: int = 10) -> str:
    # history is most-recent-first
    if not history:
        return NO_HISTORY
    recent = history[:window]
    r, p, s = (int(c) for c in move_counts(recent))
    pairs = ", ".join(f"P:{h.player_move.value}/AI:{h.ai_move.value}" for h in recent)
    return f"Rounds: {len(history)}. R:{r}, P:{p}, S:{s}. Last {len(recent)}: {pairs}"

from __future__ import annotations

import random
from typing import Optional, Union

import numpy as np

from .models import MOVES, Move, Outcome

# Payoff matrix A[i, j] = result of playing i against j (1 win, 0 draw, -1 lose)
# indices follow MOVES: 0=Rock, 1=Paper, 2=Scissors
PAYOFF = np.array([
    [0, -1, 1],   # Rock vs [R,P,S]
    [1, 0, -1],   # Paper
    [-1, 1, 0],   # Scissors
], dtype=np.int8)

MoveLike = Union[Move, str]


def as_move(move: MoveLike) -> Move:
    return move if isinstance(move, Move) else Move(move)


def move_index(move: MoveLike) -> int:
    return MOVES.index(as_move(move))


def one_hot(i: int, n: int = 3) -> np.ndarray:
    v = np.zeros(n, dtype=np.float32)
    if 0 <= i < n:
        v[i] = 1.0
    return v


def best_response_move(p_opp: np.ndarray) -> int:
    # Expected value of each of our moves against the opponent distribution
    ev = PAYOFF.astype(np.float32) @ np.asarray(p_opp, dtype=np.float32)
    return int(np.argmax(ev))


def winner(player_move: MoveLike, ai_move: MoveLike) -> Outcome:
    r = int(PAYOFF[move_index(player_move), move_index(ai_move)])
    if r == 0:
        return Outcome.DRAW
    return Outcome.PLAYER if r > 0 else Outcome.AI


def counter(move: MoveLike) -> Move:
    """The unique move that beats ``move``."""
    return MOVES[best_response_move(one_hot(move_index(move)))]


def random_move(rng: Optional[random.Random] = None) -> Move:
    return (rng or random).choice(MOVES)

from rpsbrain.experts import fallback_prediction
from rpsbrain.history import NO_HISTORY, last_moves, move_counts, summarize
from rpsbrain.models import Move, RoundRecord
from rpsbrain.utils import winner


def rec(p: str, a: str = "rock") -> RoundRecord:
    return RoundRecord(Move(p), Move(a), winner(p, a))


def test_summarize_empty():
    assert summarize([]) == NO_HISTORY


def test_summarize_counts_recent_window():
    # most-recent-first; only the first 10 are counted and listed
    history = [rec("paper", "rock")] * 3 + [rec("scissors")] * 12
    s = summarize(history)
    assert s.startswith("Rounds: 15. R:0, P:3, S:7. Last 10: ")
    assert s.count("P:paper/AI:rock") == 3
    assert "P:scissors/AI:rock" in s


def test_summarize_only_move_labels():
    s = summarize([rec("rock", "paper")])
    assert s == "Rounds: 1. R:1, P:0, S:0. Last 1: P:rock/AI:paper"


def test_move_counts_and_last_moves():
    history = [rec("rock"), rec("rock"), rec("paper")]
    assert list(move_counts(history)) == [2, 1, 0]
    assert list(move_counts(history, window=1)) == [1, 0, 0]
    assert last_moves(history, 2) == [
        {"playerMove": "rock", "aiMove": "rock", "winner": "draw"},
        {"playerMove": "rock", "aiMove": "rock", "winner": "draw"},
    ]


def test_fallback_empty_history():
    p = fallback_prediction([])
    assert p.predicted_move == Move.ROCK
    assert p.confidence == 30
    assert p.player_style == "random"
    assert p.explanation and p.coach_tip
    assert p.source == "fallback"
    assert p.emotional_state == "neutral"
    assert p.mind_game_event == "none"


def test_fallback_most_frequent():
    p = fallback_prediction([rec("rock"), rec("rock"), rec("paper")])
    assert p.predicted_move == Move.ROCK
    assert p.confidence == 60
    assert p.player_style == "pattern"
    assert p.explanation == "You seem to favor rock."
    assert p.coach_tip == "Try mixing up your moves."


def test_fallback_tie_goes_to_enumeration_order():
    assert fallback_prediction([rec("scissors"), rec("paper")]).predicted_move == Move.PAPER
    assert fallback_prediction([rec("scissors"), rec("rock")]).predicted_move == Move.ROCK


def test_fallback_confidence_ignores_skew():
    lopsided = [rec("scissors")] * 40 + [rec("rock")]
    p = fallback_prediction(lopsided)
    assert p.predicted_move == Move.SCISSORS
    assert p.confidence == 60

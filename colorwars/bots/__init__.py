"""
Bots module - AI opponent implementations.

Provides:
- BotPolicy: Interface for bot decision-making
- RandomPolicy / AggressivePolicy / GreedyPolicy: easy, medium, hard tiers
- HeuristicEvaluator: Scores boards and moves
- ai_move / evaluate_hint: entry points used by hosting layers
"""

from .policy import (
    BotPolicy,
    BotDecision,
    Difficulty,
    RandomPolicy,
    AggressivePolicy,
    GreedyPolicy,
    get_policy,
    ai_move,
    evaluate_hint,
)
from .evaluator import HeuristicEvaluator, MoveEvaluation, score_board

__all__ = [
    "BotPolicy",
    "BotDecision",
    "Difficulty",
    "RandomPolicy",
    "AggressivePolicy",
    "GreedyPolicy",
    "get_policy",
    "ai_move",
    "evaluate_hint",
    "HeuristicEvaluator",
    "MoveEvaluation",
    "score_board",
]

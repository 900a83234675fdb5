"""Feedback-driven reliability weight updates."""

from typing import Protocol

from ..models.knowledge import clamp_weight
from ..models.source import Feedback

RELIABILITY_STEP = 0.05


class ReliabilityModel(Protocol):
    """Protocol for rules that turn feedback into a new reliability weight."""

    def adjust(self, weight: float, feedback: Feedback) -> float:
        """Return the weight after applying one piece of feedback."""
        ...


class StepReliabilityModel:
    """Moves a weight by a fixed step per feedback, clamped to [0, 1]."""

    def __init__(self, step: float = RELIABILITY_STEP):
        self._step = step

    def adjust(self, weight: float, feedback: Feedback) -> float:
        delta = self._step if feedback == Feedback.POSITIVE else -self._step
        # Rounded so repeated steps do not accumulate float drift.
        return clamp_weight(round(weight + delta, 6))

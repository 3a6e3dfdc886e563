"""Revival package __init__.py"""
from .classifier import is_activity
from .logic import RevivalDecision, RevivalMachine, RevivalWindow
from .rotation import MarkerRotator, RotationOutcome, RotationResult

__all__ = [
    "is_activity",
    "RevivalDecision", "RevivalMachine", "RevivalWindow",
    "MarkerRotator", "RotationOutcome", "RotationResult",
]

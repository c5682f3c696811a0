"""Intent classification and command processing."""

from .classifier import IntentClassifier
from .processor import CommandProcessor
from .types import CommandResult, Intent, IntentResult

__all__ = ["CommandProcessor", "CommandResult", "Intent", "IntentClassifier", "IntentResult"]

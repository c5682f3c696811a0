"""Transcript in, actionable ``CommandResult`` out."""

import logging
from typing import Optional

from ..markup.generator import MarkupGenerator
from .classifier import IntentClassifier
from .types import ACTION_CLASSIFICATION_ERROR, ACTION_GENERATION_ERROR, CommandResult, Intent

logger = logging.getLogger(__name__)


class CommandProcessor:
    """Classifies a transcript and, for map requests, generates the KML.

    ``process`` never raises: every failure comes back as an unsuccessful
    ``CommandResult``. It also never touches the rig.
    """

    def __init__(
        self,
        classifier: IntentClassifier,
        generator: MarkupGenerator,
        log: Optional[logging.Logger] = None,
    ):
        self.classifier = classifier
        self.generator = generator
        self.log = log or logger

    async def process(self, transcript: str) -> CommandResult:
        try:
            intent = await self.classifier.classify(transcript)
        except Exception as e:
            self.log.error("Intent classification failed: %s", e)
            return CommandResult(
                success=False,
                action=ACTION_CLASSIFICATION_ERROR,
                message="Failed to understand command intent.",
                error=str(e),
            )

        if intent.intent is Intent.UNKNOWN:
            self.log.info("Intent is UNKNOWN for %r", transcript)
            return CommandResult(
                success=False,
                action=Intent.UNKNOWN.value,
                message="Sorry, I didn't understand that command or it's not supported.",
                intent=intent,
                original_query=transcript,
            )

        if intent.intent is Intent.GENERATE_MARKUP:
            query = intent.query or transcript
            try:
                document = await self.generator.generate(query)
            except Exception as e:
                self.log.error("KML generation failed for %r: %s", query, e)
                return CommandResult(
                    success=False,
                    action=ACTION_GENERATION_ERROR,
                    message="Failed to generate map content for your request.",
                    intent=intent,
                    error=str(e),
                )
            return CommandResult(success=True, action=intent.intent.value, intent=intent, markup=document)

        self.log.info("Direct command: %s", intent.intent.value)
        return CommandResult(success=True, action=intent.intent.value, intent=intent)

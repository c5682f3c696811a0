"""Executes processed commands on the rig."""

import logging
from typing import Any, Optional

from .cluster.session import ClusterSession
from .errors import MissingParameterError, RigError
from .intent.processor import CommandProcessor
from .intent.types import CommandResult, Intent
from .markup.generator import MarkupGenerator

logger = logging.getLogger(__name__)


class CommandExecutor:
    """Maps a successful ``CommandResult`` onto a ``ClusterSession`` sequence."""

    def __init__(self, session: ClusterSession, generator: MarkupGenerator, log: Optional[logging.Logger] = None):
        self.session = session
        self.generator = generator
        self.log = log or logger

    async def execute(self, result: CommandResult) -> bool:
        """Run the sequence for ``result``. Returns False for failed results, which are never executed."""
        if not result.success:
            self.log.info("Not executing failed result %s", result.action)
            return False

        intent = Intent.from_wire(result.action)
        self.log.info("Executing %s", result.action)

        if intent is Intent.GENERATE_MARKUP:
            if result.markup is None:
                raise MissingParameterError("GENERATE_KML result carries no KML document")
            await self.session.send_markup(result.markup)
        elif intent is Intent.CLEAR_MARKUP:
            await self.session.clear_markup()
        elif intent is Intent.CLEAR_OVERLAY:
            await self.session.clear_logo()
        elif intent is Intent.PLAY_SEQUENCE:
            await self.session.play_tour()
        elif intent is Intent.EXIT_SEQUENCE:
            await self.session.exit_tour()
        elif intent is Intent.FLY_TO:
            await self._fly_to(result)
        elif intent is Intent.REBOOT:
            await self.session.reboot()
        else:
            raise MissingParameterError(f"No rig command for action {result.action!r}")
        return True

    async def _fly_to(self, result: CommandResult) -> None:
        params = result.intent
        if params is not None and params.camera_view:
            await self.session.fly_to_camera_view(params.camera_view)
            return

        location = (params.location_name or params.query) if params is not None else None
        if not location:
            raise MissingParameterError("FLY_TO needs a camera view or a location name")
        # The display sequence flies to the generated placemark.
        document = await self.generator.generate(location)
        await self.session.send_markup(document)


class VoiceTurn:
    """One transcript processed and, if successful, executed."""

    def __init__(self, processor: CommandProcessor, executor: CommandExecutor, log: Optional[logging.Logger] = None):
        self.processor = processor
        self.executor = executor
        self.log = log or logger

    async def run(self, transcript: str) -> dict[str, Any]:
        result = await self.processor.process(transcript)
        summary = result.to_dict()
        if not result.success:
            summary["executed"] = False
            return summary

        try:
            summary["executed"] = await self.executor.execute(result)
        except RigError as e:
            self.log.error("Executing %s failed: %s", result.action, e)
            summary["executed"] = False
            summary["execution_error"] = {"error": e.user_message, "action": e.action, "detail": str(e)}
        return summary

"""Intent and command result types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..markup.document import MarkupDocument

ACTION_CLASSIFICATION_ERROR = "ERROR_CLASSIFICATION"
ACTION_GENERATION_ERROR = "ERROR_KML_GENERATION"


class Intent(Enum):
    """Classified action. Values are the tags the model emits and the UI receives."""

    GENERATE_MARKUP = "GENERATE_KML"
    CLEAR_MARKUP = "CLEAR_KML"
    CLEAR_OVERLAY = "CLEAR_LOGO"
    PLAY_SEQUENCE = "PLAY_TOUR"
    EXIT_SEQUENCE = "EXIT_TOUR"
    FLY_TO = "FLY_TO"
    REBOOT = "REBOOT_LG"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_wire(cls, value: str) -> Optional["Intent"]:
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


@dataclass(frozen=True)
class IntentResult:
    """One classification. ``raw`` is the parsed JSON object as the model sent it."""

    intent: Intent
    query: Optional[str] = None
    location_name: Optional[str] = None
    camera_view: Optional[str] = None
    original_query: Optional[str] = None
    error: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)
    raw_text: str = field(default="", compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.raw)
        data["intent"] = self.intent.value
        optional = {
            "query": self.query,
            "location_name": self.location_name,
            "lookAt": self.camera_view,
            "original_query": self.original_query,
            "error": self.error,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        return data


@dataclass(frozen=True)
class CommandResult:
    """Outcome of processing one transcript. Nothing here has been executed yet."""

    success: bool
    action: str
    message: str = ""
    intent: Optional[IntentResult] = None
    markup: Optional[MarkupDocument] = None
    error: Optional[str] = None
    original_query: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success, "action": self.action}
        if self.message:
            data["message"] = self.message
        if self.error is not None:
            data["error"] = self.error
        if self.original_query is not None:
            data["original_query"] = self.original_query
        if self.markup is not None:
            data["kml"] = self.markup.text
        if self.intent is not None:
            if self.action == Intent.UNKNOWN.value:
                data["details"] = self.intent.to_dict()
            elif self.success and self.markup is None:
                data["params"] = self.intent.to_dict()
            else:
                data["original_intent"] = self.intent.to_dict()
        return data

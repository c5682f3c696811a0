"""Error taxonomy shared by the model, markup and cluster layers.

Every error carries a short ``user_message`` and a machine ``action`` tag so
the UI layer can show something readable without a stack trace.
"""

from typing import Optional


class RigError(Exception):
    """Base class for all errors raised by this package."""

    user_message = "Something went wrong."
    action = "ERROR_UNKNOWN"


# ---------------------------------------------------------------------------
# Model provider errors
# ---------------------------------------------------------------------------

class ProviderError(RigError):
    """Non-2xx response or transport failure from a model provider."""

    user_message = "There was an issue with the AI service."
    action = "ERROR_PROVIDER"

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        if self.status_code is None:
            return super().__str__()
        return f"{super().__str__()} (status {self.status_code}): {self.body[:500]}"


class RequestTimeoutError(RigError, TimeoutError):
    """Connect or inactivity timeout, distinct from other transport errors."""

    user_message = "The request timed out."
    action = "ERROR_TIMEOUT"


class EmptyResponseError(RigError):
    user_message = "The AI service returned an empty answer."
    action = "ERROR_EMPTY_RESPONSE"


class FormatError(RigError):
    """A model returned unparseable JSON where structured output was required."""

    user_message = "The AI service returned an answer in an unexpected format."
    action = "ERROR_FORMAT"


class ClassificationFormatError(FormatError):
    user_message = "Failed to understand command intent."
    action = "ERROR_CLASSIFICATION"

    def __init__(self, message: str, raw_text: str = "", cleaned_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text
        self.cleaned_text = cleaned_text


class MarkupValidationError(RigError):
    """Generated markup is not a well-formed KML document."""

    user_message = "The generated map content was invalid."
    action = "ERROR_VALIDATION"


class GenerationFailedError(RigError):
    """Generation succeeded but the output could not be used."""

    user_message = "Failed to generate the requested map content."
    action = "ERROR_KML_GENERATION"


class ConfigurationError(RigError):
    user_message = "Configuration is missing or incomplete. Check Settings."
    action = "ERROR_CONFIGURATION"


class CredentialError(ConfigurationError):
    user_message = "No AI provider or API key is configured."
    action = "ERROR_CREDENTIALS"


# ---------------------------------------------------------------------------
# Cluster errors
# ---------------------------------------------------------------------------

class ClusterError(RigError):
    user_message = "The display rig reported an error."
    action = "ERROR_CLUSTER"


class NotConnectedError(ClusterError):
    user_message = "Not connected to the display rig."
    action = "ERROR_NOT_CONNECTED"


class ClusterConnectError(ClusterError):
    user_message = "Failed to connect to the display rig. Check IP/port and network."
    action = "ERROR_CONNECT"


class CommandError(ClusterError):
    """A remote command failed at the transport level or exited non-zero."""

    user_message = "A command on the display rig failed."
    action = "ERROR_COMMAND"

    def __init__(self, message: str, command: str = "", exit_status: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.command = command
        self.exit_status = exit_status
        self.stderr = stderr


class RebootPermissionError(CommandError):
    user_message = "Reboot was rejected. Check the rig user's sudo permissions."
    action = "ERROR_REBOOT_PERMISSION"


class UploadError(ClusterError):
    user_message = "Failed to upload a file to the display rig."
    action = "ERROR_UPLOAD"


class InvalidCameraViewError(ClusterError, ValueError):
    user_message = "The requested camera view was malformed."
    action = "ERROR_CAMERA_VIEW"


class MissingParameterError(RigError):
    """A classified command lacks the parameter needed to execute it."""

    user_message = "The command is missing details needed to run it."
    action = "ERROR_MISSING_PARAMETER"

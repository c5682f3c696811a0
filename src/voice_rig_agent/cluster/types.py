"""Cluster connection types and the fixed display-node protocol."""

from dataclasses import dataclass, field
from enum import Enum


# Paths and URLs used by the display-node software. These must match it exactly.
QUERY_PATH = "/tmp/query.txt"
MARKUP_LIST_PATH = "/var/www/html/kmls.txt"
CONTENT_DIR = "/var/www/html/"
REMOTE_LOGO_PATH = "/var/www/html/logo.png"
NODE_MARKUP_DIR = "/var/www/html/kml/"
CONTENT_BASE_URL = "http://lg1:81/"

EXIT_TOUR_COMMAND = f'echo "exittour=true" > {QUERY_PATH}'
REFRESH_COMMAND = f'echo "playtour=Refresh" > {QUERY_PATH}'
CLEAR_MARKUP_LIST_COMMAND = f"> {MARKUP_LIST_PATH}"
CONNECTION_TEST_COMMAND = 'echo "Connection test successful"'


def fly_to_command(camera_view: str) -> str:
    return f'echo "flytoview={camera_view}" > {QUERY_PATH}'


def node_markup_path(node: int) -> str:
    return f"{NODE_MARKUP_DIR}slave_{node}.kml"


class SessionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass(frozen=True)
class ClusterConnectionConfig:
    """SSH details for the control node plus the number of display nodes."""
    host: str
    port: int
    username: str
    secret: str = field(repr=False)
    node_count: int

    @property
    def is_complete(self) -> bool:
        return bool(
            self.host
            and self.port
            and self.username
            and self.secret
            and self.node_count
            and self.node_count > 0
        )


@dataclass(frozen=True)
class SequenceDelays:
    """Pauses between steps. The display software polls for command files."""
    short: float = 0.5
    medium: float = 1.0
    fly_to: float = 3.0

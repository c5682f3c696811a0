"""Display-cluster session, transport and connection configuration."""

from .config_store import ClusterConfigStore, parse_connection_descriptor
from .geometry import Coordinate, build_look_at, calculate_center, calculate_range, extract_coordinates
from .session import ClusterSession, leftmost_node
from .transport import CommandOutput, SSHTransport
from .types import ClusterConnectionConfig, SequenceDelays, SessionState

__all__ = [
    "ClusterConfigStore",
    "ClusterConnectionConfig",
    "ClusterSession",
    "CommandOutput",
    "Coordinate",
    "SSHTransport",
    "SequenceDelays",
    "SessionState",
    "build_look_at",
    "calculate_center",
    "calculate_range",
    "extract_coordinates",
    "leftmost_node",
    "parse_connection_descriptor",
]

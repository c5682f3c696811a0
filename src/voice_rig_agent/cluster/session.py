"""Stateful command channel to a display cluster.

A ``ClusterSession`` owns at most one SSH transport to the control node and
exposes the command sequences the display software understands: loading a
KML document, clearing it, flying the camera, tours, the logo overlay and
reboot. Each sequence issues its commands strictly in order with fixed
pauses in between, because the display nodes poll for their command files.

The session does no locking. Callers are expected to run one composite
sequence at a time per session.
"""

import asyncio
import logging
import os
import re
import shlex
import tempfile
from typing import Awaitable, Callable, Iterable, Optional, Protocol

from ..errors import (
    CommandError,
    ConfigurationError,
    InvalidCameraViewError,
    NotConnectedError,
    RebootPermissionError,
    UploadError,
)
from .geometry import build_look_at, calculate_center, calculate_range, extract_coordinates
from .transport import CommandOutput, SSHTransport
from .types import (
    CLEAR_MARKUP_LIST_COMMAND,
    CONNECTION_TEST_COMMAND,
    CONTENT_BASE_URL,
    CONTENT_DIR,
    EXIT_TOUR_COMMAND,
    MARKUP_LIST_PATH,
    REFRESH_COMMAND,
    REMOTE_LOGO_PATH,
    ClusterConnectionConfig,
    SequenceDelays,
    SessionState,
    fly_to_command,
    node_markup_path,
)

logger = logging.getLogger(__name__)

UPLOAD_CHUNK_SIZE = 32 * 1024
DEFAULT_FILE_NAME = "voice_rig.kml"
FILE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+\.kml$")
# Characters that would break out of the double-quoted echo in fly_to_command.
UNSAFE_VIEW_CHARS = ('"', "`", "$", "\\", "\n", "\r")
REBOOT_COMMAND_SHOWN = "echo **** | sudo -S reboot"
REBOOT_PERMISSION_MARKERS = (
    "permission denied",
    "no tty present",
    "incorrect password",
    "sorry, try again",
    "not in the sudoers",
    "a password is required",
)

LOGO_OVERLAY_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2" xmlns:gx="http://www.google.com/kml/ext/2.2">
  <Document>
    <name>Logo</name>
    <ScreenOverlay>
      <name>Logo</name>
      <Icon>
        <href>{href}</href>
      </Icon>
      <overlayXY x="0" y="1" xunits="fraction" yunits="fraction"/>
      <screenXY x="0.02" y="0.98" xunits="fraction" yunits="fraction"/>
      <rotationXY x="0" y="0" xunits="fraction" yunits="fraction"/>
      <size x="0.3" y="0" xunits="fraction" yunits="fraction"/>
    </ScreenOverlay>
  </Document>
</kml>"""

BLANK_MARKUP = """<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2" xmlns:gx="http://www.google.com/kml/ext/2.2">
  <Document>
  </Document>
</kml>"""


class Transport(Protocol):
    """What a session needs from its transport. ``SSHTransport`` is the real one."""

    def connect(self) -> None: ...
    def run(self, command: str) -> CommandOutput: ...
    def open_remote(self, path: str, mode: str = "wb"): ...
    def is_active(self) -> bool: ...
    def close(self) -> None: ...


TransportFactory = Callable[[ClusterConnectionConfig, float], Transport]
ConnectHook = Callable[["ClusterSession"], Awaitable[None]]


def leftmost_node(node_count: int) -> int:
    """Node that shows the logo. On a standard rig the highest-numbered node is leftmost."""
    return node_count if node_count > 0 else 3


class ClusterSession:
    def __init__(
        self,
        config: Optional[ClusterConnectionConfig] = None,
        *,
        transport_factory: TransportFactory = SSHTransport,
        connect_timeout: float = 15.0,
        logo_path: Optional[str] = None,
        target_node: Callable[[int], int] = leftmost_node,
        on_connect: Optional[Iterable[ConnectHook]] = None,
        delays: SequenceDelays = SequenceDelays(),
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        temp_dir: Optional[str] = None,
        log: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._transport: Optional[Transport] = None
        self.state = SessionState.DISCONNECTED
        self.transport_factory = transport_factory
        self.connect_timeout = connect_timeout
        self.logo_path = logo_path
        self.target_node = target_node
        self.on_connect: list[ConnectHook] = (
            list(on_connect) if on_connect is not None else [ClusterSession.set_logo]
        )
        self.delays = delays
        self._sleep = sleep
        self.temp_dir = temp_dir
        self.log = log or logger

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    @property
    def config(self) -> Optional[ClusterConnectionConfig]:
        return self._config

    @property
    def is_connected(self) -> bool:
        return self.state is SessionState.CONNECTED and self._transport is not None

    def status(self) -> dict:
        config = self._config
        return {
            "state": self.state.value,
            "connected": self.is_connected,
            "host": config.host if config else None,
            "port": config.port if config else None,
            "username": config.username if config else None,
            "node_count": config.node_count if config else None,
        }

    async def connect(self) -> None:
        """Open the transport, run a test command, then the post-connect hooks.

        A hook failure is logged and re-raised but leaves the session connected.
        """
        if self.is_connected:
            self.log.info("Already connected to %s", self._config.host)
            return

        config = self._config
        if config is None or not config.is_complete:
            raise ConfigurationError("Cluster connection details are missing or incomplete.")

        # Never hold two transports at once.
        await self.disconnect()

        self.state = SessionState.CONNECTING
        self.log.info("Connecting to %s@%s:%d", config.username, config.host, config.port)
        transport = self.transport_factory(config, self.connect_timeout)
        try:
            await asyncio.to_thread(transport.connect)
            output = await asyncio.to_thread(transport.run, CONNECTION_TEST_COMMAND)
        except BaseException:
            # Includes cancellation while a blocking call is still in its thread.
            self.state = SessionState.DISCONNECTED
            await self._close_quietly(transport)
            raise

        if output.exit_status != 0:
            self.state = SessionState.DISCONNECTED
            await self._close_quietly(transport)
            raise CommandError(
                "Connection test command failed",
                command=CONNECTION_TEST_COMMAND,
                exit_status=output.exit_status,
                stderr=output.stderr,
            )

        self._transport = transport
        self.state = SessionState.CONNECTED
        self.log.info("Connected to %s (test output: %s)", config.host, output.stdout.strip())

        for hook in self.on_connect:
            try:
                await hook(self)
            except Exception as e:
                self.log.error("Post-connect step %s failed: %s",
                               getattr(hook, "__name__", repr(hook)), e)
                raise

    async def disconnect(self) -> None:
        transport, self._transport = self._transport, None
        self.state = SessionState.DISCONNECTED
        if transport is not None:
            self.log.info("Disconnecting from the rig")
            await self._close_quietly(transport)

    async def _close_quietly(self, transport: Transport) -> None:
        try:
            await asyncio.to_thread(transport.close)
        except Exception as e:
            self.log.warning("Error while closing SSH transport: %s", e)

    async def update_connection_details(self, config: ClusterConnectionConfig) -> None:
        """Replace the connection details; an open session to the old target is closed."""
        changed = config != self._config
        self._config = config
        if changed and self._transport is not None:
            self.log.info("Connection details changed, disconnecting")
            await self.disconnect()

    def _require_transport(self) -> Transport:
        if not self.is_connected:
            raise NotConnectedError("Not connected to the rig.")
        return self._transport

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    async def run(self, command: str, shown: Optional[str] = None) -> str:
        """Run one shell command on the control node and return its stdout.

        ``shown`` replaces the command in logs and errors when it embeds a secret.
        """
        transport = self._require_transport()
        shown = shown or command
        self.log.debug("Executing: %s", shown)
        try:
            output = await asyncio.to_thread(transport.run, command)
        except Exception as e:
            self.log.error("Command failed on transport: %s (%s)", shown, e)
            if not transport.is_active():
                await self.disconnect()
            raise CommandError(f"Failed to execute command on the rig: {e}", command=shown) from e

        if output.exit_status != 0:
            self.log.error("Command exited with status %d: %s", output.exit_status, shown)
            raise CommandError(
                f"Command exited with status {output.exit_status}",
                command=shown,
                exit_status=output.exit_status,
                stderr=output.stderr,
            )
        return output.stdout

    async def upload_file(self, local_path: str, remote_path: str) -> int:
        """Copy a local file to the control node in fixed-size chunks.

        Returns:
            Number of bytes written.
        """
        transport = self._require_transport()
        self.log.info("Uploading %s to %s", local_path, remote_path)
        try:
            written = await asyncio.to_thread(self._upload_blocking, transport, local_path, remote_path)
        except Exception as e:
            self.log.error("Upload of %s failed: %s", local_path, e)
            raise UploadError(f"Failed to upload {local_path} to {remote_path}: {e}") from e
        self.log.info("Upload complete: %s (%d bytes)", remote_path, written)
        return written

    def _upload_blocking(self, transport: Transport, local_path: str, remote_path: str) -> int:
        total = os.path.getsize(local_path)
        written = 0
        last_logged = -1
        with open(local_path, "rb") as src, transport.open_remote(remote_path, "wb") as dst:
            while True:
                chunk = src.read(UPLOAD_CHUNK_SIZE)
                if not chunk:
                    break
                dst.write(chunk)
                written += len(chunk)
                percent = written * 100 // total if total else 100
                if percent // 5 != last_logged // 5:
                    self.log.debug("Upload progress %s: %d%%", remote_path, percent)
                    last_logged = percent
        return written

    # ------------------------------------------------------------------
    # Composite sequences
    # ------------------------------------------------------------------

    async def send_markup(self, document, file_name: str = DEFAULT_FILE_NAME) -> None:
        """Show a KML document on the rig, flying to its content first if it has coordinates."""
        self._require_transport()
        if not FILE_NAME_PATTERN.match(file_name):
            raise ValueError(f"Invalid KML file name: {file_name!r}")
        text = str(document)

        coordinates = extract_coordinates(text, self.log)
        look_at = None
        if coordinates:
            center = calculate_center(coordinates)
            look_at = build_look_at(center.latitude, center.longitude, calculate_range(coordinates))
        else:
            self.log.info("No coordinates found in KML, skipping fly-to")

        await self.run(CLEAR_MARKUP_LIST_COMMAND)
        await self.run(EXIT_TOUR_COMMAND)
        await self._sleep(self.delays.medium)

        if look_at is not None:
            await self.run(fly_to_command(look_at))
            await self._sleep(self.delays.fly_to)

        local_path = self._write_temp(text)
        try:
            await self.upload_file(local_path, CONTENT_DIR + file_name)
        finally:
            os.remove(local_path)

        # The list was just truncated, so appending leaves exactly one entry.
        await self.run(f'echo "{CONTENT_BASE_URL}{file_name}" >> {MARKUP_LIST_PATH}')
        await self._sleep(self.delays.short)
        await self.run(REFRESH_COMMAND)
        await self._sleep(self.delays.medium)
        await self.run(EXIT_TOUR_COMMAND)
        self.log.info("KML %s sent to the rig", file_name)

    def _write_temp(self, text: str) -> str:
        try:
            fd, path = tempfile.mkstemp(suffix=".kml", dir=self.temp_dir)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            raise UploadError(f"Failed to write temporary KML file: {e}") from e
        return path

    async def clear_markup(self) -> None:
        await self.run(EXIT_TOUR_COMMAND)
        await self._sleep(self.delays.short)
        await self.run(CLEAR_MARKUP_LIST_COMMAND)
        await self.run(REFRESH_COMMAND)
        await self._sleep(self.delays.short)
        self.log.info("Cleared KML from the rig")

    async def play_tour(self) -> None:
        await self.run(REFRESH_COMMAND)

    async def exit_tour(self) -> None:
        await self.run(EXIT_TOUR_COMMAND)

    async def fly_to(
        self,
        latitude: float,
        longitude: float,
        range_m: float = 50000,
        tilt: float = 60,
        heading: float = 0,
        altitude_mode: str = "relativeToGround",
    ) -> None:
        view = build_look_at(latitude, longitude, range_m, tilt, heading, altitude_mode)
        await self._fly(view)

    async def fly_to_camera_view(self, view: str) -> None:
        """Fly to a caller-supplied ``<LookAt>...</LookAt>`` fragment."""
        view = view.strip()
        if not (view.startswith("<LookAt>") and view.endswith("</LookAt>")):
            raise InvalidCameraViewError("Camera view must start with <LookAt> and end with </LookAt>")
        if any(ch in view for ch in UNSAFE_VIEW_CHARS):
            raise InvalidCameraViewError("Camera view contains characters that cannot be sent to the rig")
        await self._fly(view)

    async def _fly(self, view: str) -> None:
        await self.run(EXIT_TOUR_COMMAND)
        await self._sleep(self.delays.short)
        await self.run(fly_to_command(view))

    async def set_logo(self) -> None:
        """Upload the logo image and show it as an overlay on the leftmost node."""
        if not self.logo_path:
            raise ConfigurationError("No logo image configured.")
        await self.upload_file(self.logo_path, REMOTE_LOGO_PATH)
        overlay = LOGO_OVERLAY_TEMPLATE.format(href=CONTENT_BASE_URL + os.path.basename(REMOTE_LOGO_PATH))
        await self._write_node_markup(overlay)

    async def clear_logo(self) -> None:
        await self._write_node_markup(BLANK_MARKUP)

    async def _write_node_markup(self, markup: str) -> None:
        self._require_transport()
        node = self.target_node(self._config.node_count)
        await self.run(f"echo {shlex.quote(markup)} > {node_markup_path(node)}")

    async def reboot(self) -> None:
        """Reboot the control node via sudo.

        The session is disconnected afterwards unless sudo rejected the request.
        """
        self._require_transport()
        command = f"echo {shlex.quote(self._config.secret)} | sudo -S reboot"
        self.log.warning("Sending reboot command to %s", self._config.host)
        rejected = False
        try:
            await self.run(command, shown=REBOOT_COMMAND_SHOWN)
        except CommandError as e:
            details = f"{e} {e.stderr}".lower()
            if any(marker in details for marker in REBOOT_PERMISSION_MARKERS):
                rejected = True
                raise RebootPermissionError(
                    "Reboot failed: permission denied. The user may need passwordless sudo for reboot.",
                    command=e.command,
                    exit_status=e.exit_status,
                    stderr=e.stderr,
                ) from e
            if e.exit_status != -1:
                raise
            # The host dropped the channel before reporting an exit status.
            self.log.info("Rig closed the channel during reboot")
        finally:
            if not rejected:
                await self.disconnect()

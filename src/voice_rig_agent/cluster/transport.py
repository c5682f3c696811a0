"""Blocking SSH/SFTP transport to the cluster control node (paramiko)."""

import logging
import socket
from contextlib import contextmanager
from dataclasses import dataclass
from typing import IO, Iterator, Optional

import paramiko

from ..errors import ClusterConnectError, NotConnectedError, RequestTimeoutError
from .types import ClusterConnectionConfig

logger = logging.getLogger(__name__)


@dataclass
class CommandOutput:
    stdout: str
    stderr: str
    exit_status: int


class SSHTransport:
    """One paramiko SSH connection. Every method blocks; callers run them in a thread."""

    def __init__(self, config: ClusterConnectionConfig, timeout: float = 15.0):
        self.config = config
        self.timeout = timeout
        self._client: Optional[paramiko.SSHClient] = None
        self._closed = False

    def connect(self) -> None:
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        try:
            client.connect(
                hostname=self.config.host,
                port=self.config.port,
                username=self.config.username,
                password=self.config.secret,
                timeout=self.timeout,
                auth_timeout=self.timeout,
                banner_timeout=self.timeout,
                look_for_keys=False,
                allow_agent=False,
            )
        except paramiko.AuthenticationException as e:
            client.close()
            raise ClusterConnectError("Authentication failed. Check username/password.") from e
        except socket.timeout as e:
            client.close()
            raise RequestTimeoutError("Connection to the rig timed out.") from e
        except (paramiko.SSHException, OSError) as e:
            client.close()
            raise ClusterConnectError(f"Failed to connect to the rig. Check IP/Port and network: {e}") from e
        if self._closed:
            # close() ran while this thread was still connecting.
            client.close()
            raise ClusterConnectError("Transport was closed while connecting.")
        self._client = client

    def _require_client(self) -> paramiko.SSHClient:
        if self._client is None:
            raise NotConnectedError("SSH transport is not connected")
        return self._client

    def is_active(self) -> bool:
        if self._client is None:
            return False
        transport = self._client.get_transport()
        return transport is not None and transport.is_active()

    def run(self, command: str) -> CommandOutput:
        _, stdout, stderr = self._require_client().exec_command(command, timeout=self.timeout)
        out = stdout.read().decode("utf-8", errors="replace")
        err = stderr.read().decode("utf-8", errors="replace")
        status = stdout.channel.recv_exit_status()
        return CommandOutput(stdout=out, stderr=err, exit_status=status)

    @contextmanager
    def open_remote(self, path: str, mode: str = "wb") -> Iterator[IO[bytes]]:
        """Open a remote file over SFTP; the SFTP channel is closed with it."""
        sftp = self._require_client().open_sftp()
        try:
            with sftp.open(path, mode) as handle:
                handle.set_pipelined(True)
                yield handle
        finally:
            sftp.close()

    def close(self) -> None:
        self._closed = True
        if self._client is not None:
            self._client.close()
            self._client = None

"""Incremental splitting of a server-sent-event byte stream into lines."""

import codecs


class SSELineBuffer:
    """Turns arbitrarily chunked bytes into complete lines.

    A network read can end in the middle of a record (or in the middle of a
    multi-byte character), so the incomplete tail is held back and prepended
    to the next chunk. The output does not depend on where chunks were split.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._residual = ""

    def feed(self, chunk: bytes) -> list[str]:
        """Add a chunk and return the lines it completed."""
        data = self._residual + self._decoder.decode(chunk)
        lines = data.split("\n")
        self._residual = lines.pop()
        return [line.rstrip("\r") for line in lines]

    def flush(self) -> list[str]:
        """Return whatever is left once the stream has ended."""
        tail = self._residual + self._decoder.decode(b"", final=True)
        self._residual = ""
        tail = tail.rstrip("\r")
        return [tail] if tail else []


def event_data(line: str) -> str | None:
    """Return the payload of a ``data:`` line, or None for any other line."""
    if not line.startswith("data:"):
        return None
    payload = line[5:]
    if payload.startswith(" "):
        payload = payload[1:]
    return payload

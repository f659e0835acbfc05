"""Incremental parser for Docker's multiplexed exec stream.

Without a TTY, Docker frames exec output as::

    [stream id: 1 byte][padding: 3 bytes][length: uint32 big-endian][payload]

Stream 0 (stdin echo) and 1 are stdout, 2 is stderr. Reads from the socket
do not line up with frames: one read may hold several frames or end in the
middle of a header, so bytes are buffered until a whole frame is available.
"""

from __future__ import annotations

import codecs
import struct
from collections.abc import Callable, Iterable, Iterator
from typing import Literal

from bros_runner.errors import ExecTransportError

HEADER_SIZE = 8
_HEADER = struct.Struct(">BxxxL")

StreamName = Literal["stdout", "stderr"]

STREAM_NAMES: dict[int, StreamName] = {0: "stdout", 1: "stdout", 2: "stderr"}

ChunkSink = Callable[[StreamName, str], None]


class StreamDemuxer:
    """Split a multiplexed byte stream into stdout/stderr.

    Each complete frame is appended to its stream's buffer and, when a sink
    is given, its payload is decoded and forwarded as it arrives. Decoding
    is incremental, so a UTF-8 sequence split across frames is not mangled.

    Args:
        sink: Optional ``sink(stream, text)`` called once per frame.

    Example:
        >>> demux = StreamDemuxer()
        >>> demux.feed(b"\\x01\\x00\\x00\\x00\\x00\\x00\\x00\\x02hi")
        >>> demux.close()
        >>> demux.stdout
        'hi'
    """

    def __init__(self, sink: ChunkSink | None = None) -> None:
        self._sink = sink
        self._pending = bytearray()
        self._buffers: dict[StreamName, bytearray] = {"stdout": bytearray(), "stderr": bytearray()}
        self._decoders = {
            name: codecs.getincrementaldecoder("utf-8")(errors="replace")
            for name in self._buffers
        }
        self._closed = False

    def feed(self, data: bytes) -> None:
        """Consume one read from the stream."""
        if self._closed:
            raise ExecTransportError("Stream demuxer already closed")
        self._pending.extend(data)
        for stream, payload in self._frames():
            self._buffers[stream].extend(payload)
            if self._sink is not None and payload:
                text = self._decoders[stream].decode(payload)
                if text:
                    self._sink(stream, text)

    def close(self) -> None:
        """Mark end of stream. A partial frame left over is an error."""
        if self._closed:
            return
        self._closed = True
        if self._pending:
            raise ExecTransportError(
                "Exec stream ended in the middle of a frame",
                details={"pending_bytes": str(len(self._pending))},
            )
        if self._sink is not None:
            for stream, decoder in self._decoders.items():
                tail = decoder.decode(b"", final=True)
                if tail:
                    self._sink(stream, tail)

    def _frames(self) -> Iterator[tuple[StreamName, bytes]]:
        while len(self._pending) >= HEADER_SIZE:
            stream_id, length = _HEADER.unpack_from(self._pending)
            stream = STREAM_NAMES.get(stream_id)
            if stream is None:
                raise ExecTransportError(
                    "Unknown stream id in exec stream",
                    details={"stream_id": str(stream_id)},
                )
            end = HEADER_SIZE + length
            if len(self._pending) < end:
                return
            payload = bytes(self._pending[HEADER_SIZE:end])
            del self._pending[:end]
            yield stream, payload

    @property
    def stdout_bytes(self) -> bytes:
        return bytes(self._buffers["stdout"])

    @property
    def stderr_bytes(self) -> bytes:
        return bytes(self._buffers["stderr"])

    @property
    def stdout(self) -> str:
        return self.stdout_bytes.decode("utf-8", errors="replace")

    @property
    def stderr(self) -> str:
        return self.stderr_bytes.decode("utf-8", errors="replace")


def demux_stream(chunks: Iterable[bytes], sink: ChunkSink | None = None) -> tuple[str, str]:
    """Demultiplex a whole stream given as chunks; returns (stdout, stderr)."""
    demuxer = StreamDemuxer(sink)
    for chunk in chunks:
        demuxer.feed(chunk)
    demuxer.close()
    return demuxer.stdout, demuxer.stderr

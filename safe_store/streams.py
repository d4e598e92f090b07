"""Chunked stream copying and close-and-ignore helpers for open handles."""

import logging
from typing import BinaryIO

from .errors import from_os_error

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024


def copy_stream(
    source: BinaryIO,
    destination: BinaryIO,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    *,
    locator: object = None,
) -> int:
    """Copy ``source`` into ``destination`` chunk by chunk.

    Stops at the first empty read, then flushes ``destination`` once.
    Neither stream is closed. There is no retry: the first failing read
    or write aborts the copy. ``locator`` names the transfer in the
    raised error; streams' host paths are never reported.

    Returns:
        Number of bytes copied.

    Raises:
        StoreError: Typed translation of the OSError that aborted the copy.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")

    copied = 0
    try:
        while True:
            chunk = source.read(chunk_size)
            if not chunk:
                break
            destination.write(chunk)
            copied += len(chunk)
        destination.flush()
    except OSError as exc:
        raise from_os_error(exc, locator) from exc
    return copied


def safely_close_input(stream: BinaryIO | None) -> None:
    """Close a read-side stream, ignoring any failure."""
    if stream is None:
        return
    try:
        stream.close()
    except Exception:
        pass  # nothing to lose on the read side


def safely_close_output(stream: BinaryIO | None) -> None:
    """Close a write-side stream, logging any failure instead of raising.

    Flush explicitly before calling this: an error raised by the implicit
    flush inside ``close()`` is only logged here, never reported.
    """
    if stream is None:
        return
    try:
        stream.close()
    except Exception as exc:
        logger.debug("got error in safely_close_output for %r: %s", stream, exc)


def safely_close_connection(connection) -> None:
    """Release a Connection, ignoring any failure."""
    if connection is None:
        return
    try:
        connection.close()
    except Exception:
        pass

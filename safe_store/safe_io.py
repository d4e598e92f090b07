"""Atomic file writing for crash-safe persistence on the device.

An existing target is never truncated in place. New content is staged in
a temp sibling (``<target>.tmp``), and only after the copy succeeded is
the original deleted and the sibling renamed to the original's stored
name. Interrupting the process before that rename leaves the old file
intact; the orphaned sibling is removed by the next write to the target.
"""

import io
import logging
from typing import BinaryIO, Union

from .device import AccessMode, Connection, Device
from .errors import InsufficientSpaceError, StoreError, StoreIOError, from_os_error
from .locator import Locator, parse
from .streams import (
    copy_stream,
    safely_close_connection,
    safely_close_input,
    safely_close_output,
)

logger = logging.getLogger(__name__)

Source = Union[bytes, bytearray, memoryview, str, BinaryIO]


def _as_stream(source: Source) -> tuple[BinaryIO, int | None]:
    """Wrap buffers in a stream; report their length for the space probe."""
    if isinstance(source, str):
        source = source.encode("utf-8")
    if isinstance(source, (bytes, bytearray, memoryview)):
        data = bytes(source)
        return io.BytesIO(data), len(data)
    return source, None


def _check_free_space(conn: Connection, needed: int) -> None:
    available = conn.available_size()
    if available < needed:
        raise InsufficientSpaceError(
            f"Need {needed} bytes on {conn.locator.root!r}, only {available} available",
            locator=conn.locator,
        )


def _copy_into(conn: Connection, source: BinaryIO, chunk_size: int) -> int:
    """Copy ``source`` into the file behind ``conn``, closing the output stream."""
    out = None
    try:
        out = conn.open_output_stream()
        return copy_stream(source, out, chunk_size, locator=conn.locator)
    finally:
        safely_close_output(out)


def _discard(conn: Connection) -> None:
    """Best-effort delete after a failed copy. Errors here must not mask the original."""
    try:
        if conn.exists():
            conn.delete()
    except (StoreError, OSError) as exc:
        logger.debug("Could not remove %s after failed write: %s", conn.locator, exc)


def write_atomically(
    device: Device,
    target: "str | Locator",
    source: Source,
    *,
    expected_size: int | None = None,
) -> int:
    """Replace or create ``target`` with the bytes from ``source``.

    The target ends up holding either its complete old content or the
    complete new content, never a mix.

    Args:
        device: Device the target lives on.
        target: File locator to write.
        source: Bytes (``str`` is encoded as UTF-8) or a readable binary
            stream. Streams are read to the end but not closed.
        expected_size: Byte count to probe free space with when
            ``source`` is a stream. Buffers always use their own length.

    Returns:
        Number of bytes written.

    Raises:
        InsufficientSpaceError: If the volume reports less free space than
            the data needs. Nothing on disk is touched.
        FilesystemUnavailableError: If the volume is not accessible.
        StoreError: Any other failure; the previous content is kept.
    """
    loc = parse(target)
    stream, size = _as_stream(source)
    if size is None:
        size = expected_size
    chunk_size = device.config.chunk_size

    conn = None
    tmp_conn = None
    try:
        conn = device.open(loc, AccessMode.READ_WRITE)

        if size is not None:
            _check_free_space(conn, size)

        if loc.is_directory or conn.is_directory():
            raise StoreIOError(f"Cannot write file content to a directory: {loc}", locator=loc)

        # A crash inside the commit window leaves the sibling and no target
        tmp_conn = device.open(loc.temp_sibling(device.config.tmp_suffix), AccessMode.READ_WRITE)
        if tmp_conn.exists():
            logger.info("Removing stale temp file %s", tmp_conn.locator)
            tmp_conn.delete()

        if not conn.exists():
            conn.create()
            try:
                written = _copy_into(conn, stream, chunk_size)
            except Exception:
                _discard(conn)
                raise
            logger.debug("Created %s (%d bytes)", loc, written)
            return written

        tmp_conn.create()

        try:
            written = _copy_into(tmp_conn, stream, chunk_size)
        except Exception:
            _discard(tmp_conn)
            raise

        # Commit point: the old file goes away only once the new one is complete
        stored_name = conn.name
        conn.delete()
        tmp_conn.rename(stored_name)
        logger.debug("Replaced %s (%d bytes)", loc, written)
        return written
    except OSError as exc:
        raise from_os_error(exc, loc) from exc
    finally:
        safely_close_connection(tmp_conn)
        safely_close_connection(conn)


def copy_file(device: Device, source: "str | Locator", destination: "str | Locator") -> int:
    """Copy one device file onto another, overwriting the destination atomically.

    Free space is probed with the source's size before anything is written.

    Raises:
        NotFoundError: If the source does not exist.
        StoreError: Any failure from write_atomically; the destination
            keeps its previous content.
    """
    src_conn = None
    stream = None
    try:
        src_conn = device.open(source, AccessMode.READ)
        size = src_conn.file_size()
        stream = src_conn.open_input_stream()
        return write_atomically(device, destination, stream, expected_size=size)
    finally:
        safely_close_input(stream)
        safely_close_connection(src_conn)

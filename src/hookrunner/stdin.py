"""Bounded read of the hook payload from stdin.

A hook binary launched without piped input (manual testing, a broken
settings file) would otherwise block forever on ``read()``. The reader
waits at most ``timeout`` seconds for the first byte, then reads to EOF.
"""

import io
import logging
import selectors
import sys
import threading
from typing import BinaryIO, TextIO

from hookrunner.errors import InputError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 1.0


def _binary(stream: BinaryIO | TextIO) -> BinaryIO:
    return getattr(stream, "buffer", stream)


def _read_all(stream: BinaryIO | TextIO) -> bytes:
    data = _binary(stream).read()
    if isinstance(data, str):
        return data.encode("utf-8")
    return data


def _wait_readable(stream: BinaryIO | TextIO, timeout: float) -> bool | None:
    """Wait until the stream has data or EOF.

    Returns True/False for ready/timed out, or None when the stream cannot
    be polled (no file descriptor, or a platform that cannot select on it).
    """
    try:
        fd = stream.fileno()
    except (AttributeError, OSError, io.UnsupportedOperation):
        return None

    try:
        with selectors.DefaultSelector() as selector:
            selector.register(fd, selectors.EVENT_READ)
            return bool(selector.select(timeout))
    except (OSError, ValueError):
        return None


def _read_in_thread(stream: BinaryIO | TextIO, timeout: float) -> bytes:
    result: list[bytes] = []
    failure: list[Exception] = []

    def target() -> None:
        try:
            result.append(_read_all(stream))
        except Exception as exc:  # reported on the calling thread
            failure.append(exc)

    reader = threading.Thread(target=target, name="hookrunner-stdin", daemon=True)
    reader.start()
    reader.join(timeout)
    if reader.is_alive():
        raise InputError("timeout reading stdin")
    if failure:
        raise InputError(f"failed to read stdin: {failure[0]}") from failure[0]
    return result[0]


def read_stdin(
    stream: BinaryIO | TextIO | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> bytes:
    """Read the whole payload from stdin.

    Args:
        stream: Stream to read. Defaults to ``sys.stdin``.
        timeout: Seconds to wait for data to start arriving.

    Returns:
        The raw bytes, possibly empty.

    Raises:
        InputError: If no data arrives within ``timeout`` or the read fails.
    """
    stream = stream if stream is not None else sys.stdin

    ready = _wait_readable(stream, timeout)
    if ready is False:
        raise InputError("timeout reading stdin")

    if ready is None and isinstance(stream, (io.BytesIO, io.StringIO)):
        # In-memory streams never block.
        ready = True

    if ready is None:
        data = _read_in_thread(stream, timeout)
    else:
        try:
            data = _read_all(stream)
        except OSError as exc:
            raise InputError(f"failed to read stdin: {exc}") from exc

    logger.debug("read %d bytes from stdin", len(data))
    return data

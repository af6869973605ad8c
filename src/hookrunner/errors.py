"""Error taxonomy for hook invocations.

Every failure inside a hook invocation is surfaced as a ``HookError``.
The ``kind`` attribute records which stage produced it:

- input: stdin could not be read (I/O failure or read timeout)
- decode: malformed top-level JSON, or a payload that fails to decode
- dispatch: absent/invalid ``hook_event_name`` or an unknown event kind
- handler: a callback returned an error, or raised (a recovered panic)
- encode: the handler's response could not be serialized
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Stage of the pipeline an error originated from."""

    INPUT = "input"
    DECODE = "decode"
    DISPATCH = "dispatch"
    HANDLER = "handler"
    ENCODE = "encode"


class HookError(Exception):
    """Base class for every error the runner reports."""

    kind: ErrorKind = ErrorKind.HANDLER

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class InputError(HookError):
    """Reading stdin failed or timed out."""

    kind = ErrorKind.INPUT


class DecodeError(HookError):
    """Input JSON or a kind-specific payload could not be decoded."""

    kind = ErrorKind.DECODE


class DispatchError(HookError):
    """The event kind is missing, invalid or unknown."""

    kind = ErrorKind.DISPATCH


class HandlerError(HookError):
    """A handler reported a failure.

    Attributes:
        panic: True when the error was recovered from an exception raised
            by the handler rather than returned by it.
    """

    kind = ErrorKind.HANDLER

    def __init__(self, message: str, panic: bool = False) -> None:
        super().__init__(message)
        self.panic = panic

    @classmethod
    def from_panic(cls, exc: BaseException) -> "HandlerError":
        """Convert an exception raised by a callback into a HandlerError.

        The message is normalized to ``panic: <value>``. Exceptions with an
        empty message fall back to their type name.
        """
        value = str(exc) or type(exc).__name__
        error = cls(f"panic: {value}", panic=True)
        error.__cause__ = exc
        return error


class EncodeError(HookError):
    """A handler response could not be serialized."""

    kind = ErrorKind.ENCODE

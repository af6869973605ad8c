from hookrunner.errors import (
    DecodeError,
    DispatchError,
    EncodeError,
    ErrorKind,
    HandlerError,
    HookError,
    InputError,
)


class TestHookErrors:
    """Test the error taxonomy."""

    def test_kinds(self) -> None:
        assert InputError("x").kind is ErrorKind.INPUT
        assert DecodeError("x").kind is ErrorKind.DECODE
        assert DispatchError("x").kind is ErrorKind.DISPATCH
        assert HandlerError("x").kind is ErrorKind.HANDLER
        assert EncodeError("x").kind is ErrorKind.ENCODE

    def test_str_is_message(self) -> None:
        error = DispatchError("unknown event type: Foo")

        assert str(error) == "unknown event type: Foo"
        assert error.message == "unknown event type: Foo"
        assert isinstance(error, HookError)
        assert repr(error) == "DispatchError('unknown event type: Foo')"


class TestPanicConversion:
    """Test conversion of raised exceptions to handler errors."""

    def test_message_and_flag(self) -> None:
        exc = RuntimeError("boom")

        error = HandlerError.from_panic(exc)

        assert str(error) == "panic: boom"
        assert error.panic is True
        assert error.__cause__ is exc

    def test_empty_message_uses_type_name(self) -> None:
        error = HandlerError.from_panic(ZeroDivisionError())

        assert str(error) == "panic: ZeroDivisionError"

    def test_returned_error_is_not_panic(self) -> None:
        assert HandlerError("bad").panic is False

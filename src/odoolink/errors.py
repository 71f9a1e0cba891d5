"""
Error Taxonomy Module.

Every exception raised by the SDK derives from `OdooError`, so callers can
catch the whole family at once or branch on the specific kinds:

- `TransportError`: the endpoint could not be reached or answered garbage.
- `AccessDenied`: the server refused the credentials (fault code 3).
- `RpcError`: any other remote fault, carrying the remote code and message.
- `MappingError`: a remote record could not be coerced into a typed record.
- `ObjectNotFound`: a record id that does not exist server-side.
- `NotAuthenticatedError`: an operation was attempted without a session identity.
"""

from typing import Any, List, Optional

ACCESS_DENIED_FAULT_CODE = 3
"""Reserved remote fault code meaning 'access denied'."""


class OdooError(Exception):
    """Base class for all the errors raised by the SDK."""

    pass


class TransportError(OdooError):
    """Connection, endpoint or decoding failure. Never retried by the SDK."""

    pass


class AccessDenied(OdooError):
    """The remote server rejected the credentials or the session identity."""

    def __init__(self, message: str = "Access Denied"):
        super().__init__(message)
        self.code = ACCESS_DENIED_FAULT_CODE
        self.message = message


class RpcError(OdooError):
    """A remote fault other than 'access denied'."""

    def __init__(self, code: int, message: str):
        super().__init__(f"XML-RPC fault {code}: {message}")
        self.code = code
        self.message = message


class MappingError(OdooError):
    """A remote record field could not be coerced into the target record type."""

    def __init__(
        self,
        model: str,
        field: Optional[str],
        value: Any = None,
        message: str = "",
    ):
        where = f"field '{field}'" if field else "record"
        super().__init__(
            f"Unable to map {where} of '{model}' (value: {value!r}): {message}"
        )
        self.model = model
        self.field = field
        self.value = value


class ObjectNotFound(OdooError):
    """The referenced record id does not exist on the server."""

    def __init__(self, model: str, record_id: int):
        super().__init__(f"Object '{model}' with id {record_id} does not exist")
        self.model = model
        self.record_id = record_id


class NotAuthenticatedError(OdooError):
    """Raised when an operation requires an authenticated session."""

    pass


class ConfigError(OdooError):
    """Invalid or incomplete client configuration. Lists every problem found."""

    def __init__(self, problems: List[str]):
        super().__init__("Invalid client configuration: " + "; ".join(problems))
        self.problems = list(problems)


def _make_exception(
    msg: str, exc: Optional[Exception] = None, cls: type = TransportError
) -> OdooError:
    """
    Creates a new SDK exception that chains an inner exception's message.
    Useful for adding context to low-level socket or protocol errors.

    Args:
        msg (str): The high-level error message.
        exc (Optional[Exception]): The original exception.
        cls (type): The SDK exception class to instantiate.

    Returns:
        OdooError: A new exception combining both messages.
    """
    if exc is None:
        return cls(msg)
    return cls(f"{msg}\nInner err: {exc}")

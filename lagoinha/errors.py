"""
Error types for postal code lookups.

Every failure coming out of a service adapter is one of the ServiceError
subclasses below and names the service it came from. The race coordinator
only ever raises AllServicesFailed or InternalError.
"""

from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

# Raw bodies attached to parsing errors are cut to this many characters.
MAX_BODY_CHARS = 2000


class Source(str, Enum):
    """The backing lookup services, in fan-out order."""

    VIACEP = "viacep"
    CEPLA = "cepla"
    CORREIOS = "correios"


class LagoinhaError(Exception):
    """Base class for every error raised by this library."""

    def to_dict(self) -> Dict[str, Any]:
        return {"type": type(self).__name__, "message": str(self)}


class ServiceError(LagoinhaError):
    """A lookup failure attributed to a single service."""

    def __init__(self, source: Source, message: str):
        self.source = Source(source)
        super().__init__(f"{self.source.value}: {message}")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["service"] = self.source.value
        return data


class ClientError(ServiceError):
    """The service answered with a 4xx status."""

    def __init__(self, source: Source, code: int):
        self.code = code
        super().__init__(source, f"received a client error {code}")

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "code": self.code}


class ServerError(ServiceError):
    """The service answered with a 5xx status."""

    def __init__(self, source: Source, code: int):
        self.code = code
        super().__init__(source, f"received a server error {code}")

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "code": self.code}


class UnknownServerError(ServiceError):
    """The service answered with a status outside the mapped ranges."""

    def __init__(self, source: Source, code: int):
        self.code = code
        super().__init__(source, f"received an unknown status {code}")

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "code": self.code}


class MissingBodyError(ServiceError):
    """The request went through but the response had no body."""

    def __init__(self, source: Source):
        super().__init__(source, "received a response without a body")


class BodyParsingError(ServiceError):
    """
    The body could not be decoded or did not match the expected schema.

    The raw body is kept (capped at MAX_BODY_CHARS) so malformed responses
    can be inspected.
    """

    def __init__(self, source: Source, error: str, body: str = ""):
        self.error = error
        self.body = (body or "")[:MAX_BODY_CHARS]
        super().__init__(source, f"failed to parse body: {error}")

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "error": self.error, "body": self.body}


class TransportError(ServiceError):
    """The request never produced a response (timeout, DNS, refused connection)."""

    def __init__(self, source: Source, reason: str):
        self.reason = reason
        super().__init__(source, f"transport failure: {reason}")

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "reason": self.reason}


class UnexpectedLibraryError(ServiceError):
    """An adapter broke its own contract, e.g. built an invalid request."""

    def __init__(self, source: Source, detail: str = ""):
        self.detail = detail
        message = "unexpected library error"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(source, message)

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "detail": self.detail}


class AllServicesFailed(LagoinhaError):
    """Every service failed; holds one failure per service in Source order."""

    def __init__(self, failures: Iterable[ServiceError]):
        self.failures: Tuple[ServiceError, ...] = tuple(failures)
        summary = "; ".join(str(f) for f in self.failures)
        super().__init__(f"all {len(self.failures)} services failed: {summary}")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["failures"] = [f.to_dict() for f in self.failures]
        return data


class InternalError(LagoinhaError):
    """
    The coordinator expected an outcome from a service that never published one.

    This points at a bug in the library, not at any of the services.
    """

    def __init__(
        self,
        missing: Iterable[Source],
        failures: Optional[Iterable[ServiceError]] = None,
    ):
        self.missing: Tuple[Source, ...] = tuple(Source(s) for s in missing)
        self.failures: Tuple[ServiceError, ...] = tuple(failures or ())
        names = ", ".join(s.value for s in self.missing)
        super().__init__(f"no outcome was published by: {names}")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["missing"] = [s.value for s in self.missing]
        data["failures"] = [f.to_dict() for f in self.failures]
        return data

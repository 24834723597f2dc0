"""Resolve Brazilian postal codes (CEP) by racing several lookup services."""

__version__ = "0.3.0"

from .errors import (
    AllServicesFailed,
    BodyParsingError,
    ClientError,
    InternalError,
    LagoinhaError,
    MissingBodyError,
    ServerError,
    ServiceError,
    Source,
    TransportError,
    UnexpectedLibraryError,
    UnknownServerError,
)
from .normalize import Address, normalize
from .race import get_address

__all__ = [
    "Address",
    "AllServicesFailed",
    "BodyParsingError",
    "ClientError",
    "InternalError",
    "LagoinhaError",
    "MissingBodyError",
    "ServerError",
    "ServiceError",
    "Source",
    "TransportError",
    "UnexpectedLibraryError",
    "UnknownServerError",
    "get_address",
    "normalize",
]

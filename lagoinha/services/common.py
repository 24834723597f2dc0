"""Shared request handling for all postal code services."""

from typing import Any, Dict, Optional

import requests

from ..env import get_settings
from ..errors import (
    BodyParsingError,
    ClientError,
    MissingBodyError,
    ServerError,
    ServiceError,
    Source,
    TransportError,
    UnexpectedLibraryError,
    UnknownServerError,
)
from ..logger import get_logger

logger = get_logger()

# Raised by requests when the request itself is malformed, before anything is sent
_INVALID_REQUEST = (
    requests.exceptions.URLRequired,
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.InvalidHeader,
)


def strip_separator(code: str) -> str:
    """Drop surrounding whitespace and the '-' separator: '70150-903' -> '70150903'."""
    return code.strip().replace("-", "", 1)


def record_failure(error: ServiceError) -> ServiceError:
    """Count and log a service failure, then hand it back for raising."""
    logger.record_lookup_failure(error.source.value, type(error).__name__)
    context = error.to_dict()
    if isinstance(error, (ServerError, TransportError, UnexpectedLibraryError)):
        logger.error("Service lookup failed", error=context)
    else:
        logger.warning("Service lookup failed", error=context)
    return error


def _send(method: str, url: str, session, timeout: float, **kwargs) -> requests.Response:
    if session is not None:
        return session.request(method, url, timeout=timeout, **kwargs)
    with requests.Session() as s:
        return s.request(method, url, timeout=timeout, **kwargs)


def fetch_with_error_handling(
    source: Source,
    method: str,
    url: str,
    *,
    session=None,
    timeout: Optional[float] = None,
    **kwargs: Any,
) -> requests.Response:
    """Send one request to a service and classify what came back.

    Args:
        source: The service being called
        method: HTTP method
        url: Full request URL
        session: Object with a requests.Session compatible request(); a
            short-lived Session is used when omitted
        timeout: Seconds to wait for the service (default from settings)
        **kwargs: Passed on to request() (headers, data, ...)

    Returns:
        Response object with a 2xx status and a non-empty body

    Raises:
        ServiceError: One subclass per failure kind, never a requests exception
    """
    if timeout is None:
        timeout = get_settings().http_timeout

    logger.record_lookup_attempt(source.value)
    logger.debug("Sending service request", service=source.value, method=method, url=url)
    try:
        resp = _send(method, url, session, timeout, **kwargs)
    except _INVALID_REQUEST as e:
        raise record_failure(UnexpectedLibraryError(source, f"invalid request: {e}"))
    except requests.exceptions.Timeout as e:
        raise record_failure(TransportError(source, f"timed out after {timeout}s: {e}"))
    except requests.exceptions.RequestException as e:
        raise record_failure(TransportError(source, str(e) or type(e).__name__))

    status = resp.status_code
    if 400 <= status <= 499:
        raise record_failure(ClientError(source, status))
    if 500 <= status <= 599:
        raise record_failure(ServerError(source, status))
    if not 200 <= status <= 299:
        raise record_failure(UnknownServerError(source, status))

    if not resp.content:
        raise record_failure(MissingBodyError(source))
    return resp


def decode_json_object(source: Source, resp: requests.Response) -> Dict[str, Any]:
    """Decode a JSON response body that must be an object."""
    try:
        data = resp.json()
    except ValueError as e:
        raise record_failure(BodyParsingError(source, f"invalid JSON: {e}", resp.text))
    if not isinstance(data, dict):
        raise record_failure(
            BodyParsingError(source, f"expected a JSON object, got {type(data).__name__}", resp.text)
        )
    return data


def reject_invalid(source: Source, errors, resp: requests.Response) -> None:
    """Raise BodyParsingError when schema validation produced any errors."""
    if errors:
        raise record_failure(BodyParsingError(source, "; ".join(errors), resp.text))

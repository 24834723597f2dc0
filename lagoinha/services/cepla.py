"""
CepLá service: http://cep.la/

The service matches request headers case-sensitively and only answers with
JSON when it sees "Accept" spelled exactly that way. requests keeps header
names as given, so the header below must stay title-cased.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from ..errors import Source
from ..schema import pick_fields, validate_payload
from .common import (
    decode_json_object,
    fetch_with_error_handling,
    logger,
    reject_invalid,
    strip_separator,
)

ENDPOINT = "http://cep.la/{code}"

REQUIRED_FIELDS = ["uf", "cidade"]
OPTIONAL_FIELDS = ["cep", "bairro", "logradouro", "aux"]


@dataclass(frozen=True)
class CepLaAddress:
    """Address as returned by CepLá, with its own field names."""

    cep: str = ""
    uf: str = ""
    cidade: str = ""
    bairro: str = ""
    logradouro: str = ""
    aux: str = ""


def build_url(code: str) -> str:
    return ENDPOINT.format(code=quote(strip_separator(code), safe=""))


def lookup(code: str, session=None, timeout: Optional[float] = None) -> CepLaAddress:
    """Look up a CEP on CepLá.

    Unknown codes come back as an empty list or an HTML page, both of which
    end up as a BodyParsingError carrying the body.
    """
    resp = fetch_with_error_handling(
        Source.CEPLA,
        "GET",
        build_url(code),
        headers={"Accept": "application/json"},
        session=session,
        timeout=timeout,
    )
    data = decode_json_object(Source.CEPLA, resp)
    reject_invalid(Source.CEPLA, validate_payload(data, REQUIRED_FIELDS, OPTIONAL_FIELDS), resp)

    logger.record_lookup_success(Source.CEPLA.value)
    return CepLaAddress(**pick_fields(data, REQUIRED_FIELDS + OPTIONAL_FIELDS))

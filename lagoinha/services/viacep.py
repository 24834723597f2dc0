"""ViaCEP service: https://viacep.com.br/"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from ..errors import BodyParsingError, Source
from ..schema import pick_fields, validate_payload
from .common import (
    decode_json_object,
    fetch_with_error_handling,
    logger,
    record_failure,
    reject_invalid,
    strip_separator,
)

ENDPOINT = "https://viacep.com.br/ws/{code}/json/"

REQUIRED_FIELDS = ["uf", "localidade"]
OPTIONAL_FIELDS = ["cep", "logradouro", "complemento", "bairro", "unidade", "ibge", "gia"]


@dataclass(frozen=True)
class ViaCepAddress:
    """Address as returned by ViaCEP, with its own field names."""

    cep: str = ""
    logradouro: str = ""
    complemento: str = ""
    bairro: str = ""
    localidade: str = ""
    uf: str = ""
    unidade: str = ""
    ibge: str = ""
    gia: str = ""


def build_url(code: str) -> str:
    return ENDPOINT.format(code=quote(strip_separator(code), safe=""))


def lookup(code: str, session=None, timeout: Optional[float] = None) -> ViaCepAddress:
    """Look up a CEP on ViaCEP.

    Raises a ServiceError subclass on any failure. ViaCEP answers unknown
    codes with 200 and {"erro": true}, which is reported as a BodyParsingError.
    """
    resp = fetch_with_error_handling(
        Source.VIACEP,
        "GET",
        build_url(code),
        headers={"Accept": "application/json"},
        session=session,
        timeout=timeout,
    )
    data = decode_json_object(Source.VIACEP, resp)
    if data.get("erro"):
        raise record_failure(BodyParsingError(Source.VIACEP, "service reported no address for this code", resp.text))
    reject_invalid(Source.VIACEP, validate_payload(data, REQUIRED_FIELDS, OPTIONAL_FIELDS), resp)

    logger.record_lookup_success(Source.VIACEP.value)
    return ViaCepAddress(**pick_fields(data, REQUIRED_FIELDS + OPTIONAL_FIELDS))

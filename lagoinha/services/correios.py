"""Correios service (SIGEP SOAP API)."""

from dataclasses import dataclass
from typing import Dict, Optional
from xml.sax.saxutils import escape

from bs4 import BeautifulSoup

from ..errors import BodyParsingError, Source
from ..schema import pick_fields, validate_payload
from .common import (
    fetch_with_error_handling,
    logger,
    record_failure,
    reject_invalid,
    strip_separator,
)

ENDPOINT = "https://apps.correios.com.br/SigepMasterJPA/AtendeClienteService/AtendeCliente?wsdl"

HEADERS = {
    "content-type": "application/soap+xml;charset=utf-8",
    "cache-control": "no-cache",
}

ENVELOPE = """<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/" xmlns:cli="http://cliente.bean.master.sigep.bsb.correios.com.br/">
    <soapenv:Header/>
    <soapenv:Body>
        <cli:consultaCEP>
            <cep>{code}</cep>
        </cli:consultaCEP>
    </soapenv:Body>
</soapenv:Envelope>"""

REQUIRED_FIELDS = ["uf", "cidade"]
OPTIONAL_FIELDS = ["cep", "bairro", "end"]


@dataclass(frozen=True)
class CorreiosAddress:
    """Address as returned by Correios. There is no details field."""

    cep: str = ""
    uf: str = ""
    cidade: str = ""
    bairro: str = ""
    end: str = ""


def build_envelope(code: str) -> str:
    return ENVELOPE.format(code=escape(strip_separator(code)))


def parse_envelope(body: bytes) -> Optional[Dict[str, str]]:
    """Pull the fields out of a consultaCEPResponse document.

    Returns None when the document has no <return> element, which is the
    case for SOAP faults.
    """
    soup = BeautifulSoup(body, "xml")
    ret = soup.find("return")
    if ret is None:
        return None
    fields = {}
    for name in REQUIRED_FIELDS + OPTIONAL_FIELDS:
        el = ret.find(name, recursive=False)
        if el is not None:
            fields[name] = el.get_text(strip=True)
    return fields


def _fault_message(body: bytes) -> str:
    fault = BeautifulSoup(body, "xml").find("faultstring")
    if fault is not None and fault.get_text(strip=True):
        return f"SOAP fault: {fault.get_text(strip=True)}"
    return "response has no <return> element"


def lookup(code: str, session=None, timeout: Optional[float] = None) -> CorreiosAddress:
    """Look up a CEP on the Correios SOAP endpoint."""
    resp = fetch_with_error_handling(
        Source.CORREIOS,
        "POST",
        ENDPOINT,
        headers=dict(HEADERS),
        data=build_envelope(code).encode("utf-8"),
        session=session,
        timeout=timeout,
    )
    data = parse_envelope(resp.content)
    if data is None:
        raise record_failure(BodyParsingError(Source.CORREIOS, _fault_message(resp.content), resp.text))
    reject_invalid(Source.CORREIOS, validate_payload(data, REQUIRED_FIELDS, OPTIONAL_FIELDS), resp)

    logger.record_lookup_success(Source.CORREIOS.value)
    return CorreiosAddress(**pick_fields(data, REQUIRED_FIELDS + OPTIONAL_FIELDS))

"""
Pytest configuration and shared fixtures.
"""

import json
import time
from typing import Any, Dict
from urllib.parse import urlparse

import pytest
import requests

VIACEP_HOST = "viacep.com.br"
CEPLA_HOST = "cep.la"
CORREIOS_HOST = "apps.correios.com.br"


def make_response(status_code: int = 200, body: Any = b"", url: str = "") -> requests.Response:
    """Build a real requests.Response without touching the network."""
    resp = requests.Response()
    resp.status_code = status_code
    if isinstance(body, (dict, list)):
        body = json.dumps(body, ensure_ascii=False)
    if isinstance(body, str):
        body = body.encode("utf-8")
    resp._content = body
    resp.encoding = "utf-8"
    resp.url = url
    return resp


def delayed(seconds: float, route):
    """Wrap a route so the fake service answers after a pause."""
    def handler(method, url, **kwargs):
        time.sleep(seconds)
        if isinstance(route, Exception):
            raise route
        return route
    return handler


class FakeSession:
    """Stand-in for requests.Session that answers by host.

    A route is a Response, an exception instance to raise, or a callable
    taking (method, url, **kwargs).
    """

    def __init__(self, routes: Dict[str, Any]):
        self.routes = routes
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        route = self.routes[urlparse(url).netloc]
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(method, url, **kwargs)
        return route

    def calls_to(self, host: str):
        return [c for c in self.calls if urlparse(c[1]).netloc == host]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep LAGOINHA_* settings from the outer environment out of tests."""
    for name in ("LAGOINHA_SETTLE_DELAY", "LAGOINHA_HTTP_TIMEOUT", "LAGOINHA_LOG_LEVEL", "LAGOINHA_LOG_DIR"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def viacep_payload() -> Dict[str, str]:
    """ViaCEP answer for 70150-903."""
    return {
        "cep": "70150-903",
        "logradouro": "SPP",
        "complemento": "",
        "bairro": "Zona Cívico-Administrativa",
        "localidade": "Brasília",
        "uf": "DF",
        "unidade": "",
        "ibge": "5300108",
        "gia": "",
    }


@pytest.fixture
def cepla_payload() -> Dict[str, str]:
    """CepLá answer for 70150903."""
    return {
        "cep": "70150903",
        "uf": "DF",
        "cidade": "Brasília",
        "bairro": "Zona Cívico-Administrativa",
        "logradouro": "SPP",
        "aux": "Palácio da Alvorada (Residência Oficial do Presidente da República)",
    }


@pytest.fixture
def correios_xml() -> str:
    """Correios consultaCEP SOAP answer for 70150903."""
    return (
        '<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">'
        "<soap:Body>"
        '<ns2:consultaCEPResponse xmlns:ns2="http://cliente.bean.master.sigep.bsb.correios.com.br/">'
        "<return>"
        "<bairro>Zona Cívico-Administrativa</bairro>"
        "<cep>70150903</cep>"
        "<cidade>Brasília</cidade>"
        "<complemento2></complemento2>"
        "<end>SPP</end>"
        "<uf>DF</uf>"
        "</return>"
        "</ns2:consultaCEPResponse>"
        "</soap:Body>"
        "</soap:Envelope>"
    )


@pytest.fixture
def correios_fault_xml() -> str:
    """Correios SOAP fault for a malformed CEP."""
    return (
        '<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">'
        "<soap:Body>"
        "<soap:Fault>"
        "<faultcode>soap:Server</faultcode>"
        "<faultstring>CEP INVÁLIDO</faultstring>"
        "</soap:Fault>"
        "</soap:Body>"
        "</soap:Envelope>"
    )


@pytest.fixture
def all_ok_session(viacep_payload, cepla_payload, correios_xml) -> FakeSession:
    """Every service answers successfully and immediately."""
    return FakeSession({
        VIACEP_HOST: make_response(200, viacep_payload),
        CEPLA_HOST: make_response(200, cepla_payload),
        CORREIOS_HOST: make_response(200, correios_xml),
    })

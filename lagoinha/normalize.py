import re
from dataclasses import asdict, dataclass
from typing import Callable, Dict, Union

from .services.cepla import CepLaAddress
from .services.correios import CorreiosAddress
from .services.viacep import ViaCepAddress

ServiceAddress = Union[ViaCepAddress, CepLaAddress, CorreiosAddress]

_CEP_RE = re.compile(r"^(\d{5})-?(\d{3})$")


@dataclass(frozen=True)
class Address:
    """Canonical address, the same shape whichever service produced it."""

    cep: str = ""
    address: str = ""
    details: str = ""
    neighborhood: str = ""
    state: str = ""
    city: str = ""

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def normalize_text(s: str) -> str:
    return " ".join((s or "").split())


def normalize_cep(cep: str) -> str:
    """'70150-903' and '70150903' both become '70150903'; anything else is kept."""
    text = normalize_text(cep)
    m = _CEP_RE.match(text)
    return m.group(1) + m.group(2) if m else text


def normalize_viacep(record: ViaCepAddress) -> Address:
    return Address(
        cep=normalize_cep(record.cep),
        address=normalize_text(record.logradouro),
        details=normalize_text(record.complemento),
        neighborhood=normalize_text(record.bairro),
        state=normalize_text(record.uf),
        city=normalize_text(record.localidade),
    )


def normalize_cepla(record: CepLaAddress) -> Address:
    return Address(
        cep=normalize_cep(record.cep),
        address=normalize_text(record.logradouro),
        details=normalize_text(record.aux),
        neighborhood=normalize_text(record.bairro),
        state=normalize_text(record.uf),
        city=normalize_text(record.cidade),
    )


def normalize_correios(record: CorreiosAddress) -> Address:
    # Correios has no details field
    return Address(
        cep=normalize_cep(record.cep),
        address=normalize_text(record.end),
        details="",
        neighborhood=normalize_text(record.bairro),
        state=normalize_text(record.uf),
        city=normalize_text(record.cidade),
    )


_NORMALIZERS: Dict[type, Callable[..., Address]] = {
    ViaCepAddress: normalize_viacep,
    CepLaAddress: normalize_cepla,
    CorreiosAddress: normalize_correios,
}


def normalize(record: ServiceAddress) -> Address:
    """Convert any service-specific record into an Address."""
    try:
        fn = _NORMALIZERS[type(record)]
    except KeyError:
        raise TypeError(f"No normalizer for {type(record).__name__}")
    return fn(record)

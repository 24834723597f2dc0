"""Adapters for the three postal code services, keyed by Source."""

from ..errors import Source
from . import cepla, correios, viacep

SERVICES = {
    Source.VIACEP: viacep,
    Source.CEPLA: cepla,
    Source.CORREIOS: correios,
}

__all__ = ["SERVICES", "cepla", "correios", "viacep"]

"""HTTP-facing helpers for the AnyCalc backend."""

from .request_parser import parse_calculation_payload
from .response_builder import build_calculation_response

__all__ = [
    "parse_calculation_payload",
    "build_calculation_response",
]

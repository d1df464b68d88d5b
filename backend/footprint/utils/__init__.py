"""Utility functions and helpers for the footprint tracker application."""

from .emission_factors import (
    EMISSION_FACTORS,
    get_emission_factor,
    estimate_emission
)
from .serialization import to_json_ready

__all__ = [
    'EMISSION_FACTORS',
    'get_emission_factor',
    'estimate_emission',
    'to_json_ready'
]

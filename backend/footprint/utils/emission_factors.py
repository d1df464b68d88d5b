"""
Emission factors.
All values are stored in kg CO2e in the database.
Factors convert an activity amount (km, kg, kWh, ...) into kg CO2e.
"""

from typing import Dict, Optional


EMISSION_FACTORS: Dict[str, Dict[str, float]] = {
    'transport': {
        'car': 0.21,        # kg CO2 per km
        'bus': 0.105,       # kg CO2 per km
        'train': 0.041,     # kg CO2 per km
        'plane': 0.255,     # kg CO2 per km
        'bike': 0.0,
        'walk': 0.0,
    },
    'food': {
        'beef': 27.0,       # kg CO2 per kg
        'pork': 12.1,
        'chicken': 6.9,
        'fish': 6.1,
        'vegetables': 2.0,
        'dairy': 4.8,
    },
    'energy': {
        'electricity': 0.42,    # kg CO2 per kWh
        'natural_gas': 2.0,     # kg CO2 per m3
        'heating': 0.185,       # kg CO2 per kWh
    },
    'housing': {
        'water': 0.298,     # kg CO2 per L
        'waste': 0.5,       # kg CO2 per kg
    },
}


def _normalize(label: str) -> str:
    return label.strip().lower().replace(' ', '_').replace('-', '_')


def get_emission_factor(category: str, activity: str) -> Optional[float]:
    if not category or not activity:
        return None
    factors = EMISSION_FACTORS.get(_normalize(category))
    if not factors:
        return None
    return factors.get(_normalize(activity))


def estimate_emission(category: str, activity: str, amount: float) -> Optional[float]:
    """kg CO2e for `amount` units of activity, or None when no factor is known."""
    if amount is None:
        return None
    factor = get_emission_factor(category, activity)
    if factor is None:
        return None
    return round(float(amount) * factor, 3)

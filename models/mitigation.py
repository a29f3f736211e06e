"""
Mitigation Rule Engine.

Rescales a predicted concentration according to a named mitigation
tactic.  Each tactic has a decay kind, a reduction rate and a geographic
applicability predicate:

    NONE:      value unchanged
    ONE_TIME:  value * (1 - rate)                 (independent of time)
    PER_YEAR:  value * (1 - rate) ** floor(years) (whole years only)

Tactics only act where their predicate holds; elsewhere the value passes
through unchanged.  Non-positive inputs always map to 0.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Union


class TacticKind(Enum):
    NONE = "none"
    ONE_TIME = "one_time"
    PER_YEAR = "per_year"


def _always(lat: float, lon: float) -> bool:
    return True


@dataclass(frozen=True)
class MitigationTactic:
    """A named, immutable mitigation policy rule.

    Args:
        id: Short identifier used in the UI and the CLI.
        label: Human-readable description.
        kind: How the reduction compounds over time.
        rate: Fractional reduction in [0, 1] (per year for PER_YEAR).
        applies_at: Predicate on (latitude, longitude).
    """

    id: str
    label: str
    kind: TacticKind
    rate: float
    applies_at: Callable[[float, float], bool] = _always

    def __post_init__(self):
        if not 0.0 <= self.rate <= 1.0:
            raise ValueError(f"rate must be in [0, 1], got {self.rate}")


_CATALOG = [
    MitigationTactic("none", "No Mitigation", TacticKind.NONE, 0.0),
    MitigationTactic(
        "coastal", "Coastal Cleanup (-20%/yr near coasts)", TacticKind.PER_YEAR, 0.20,
        lambda lat, lon: abs(lat) < 15 or abs(lon) < 15,
    ),
    MitigationTactic(
        "openocean", "Open Ocean Skimming (-30%/yr offshore)", TacticKind.PER_YEAR, 0.30,
        lambda lat, lon: abs(lat) >= 15 and abs(lon) >= 15,
    ),
    MitigationTactic(
        "globalban", "Global Single-Use Ban (-50% overall)", TacticKind.ONE_TIME, 0.50,
    ),
    MitigationTactic(
        "river", "River Interceptors (-40%/yr, lat -10..10)", TacticKind.PER_YEAR, 0.40,
        lambda lat, lon: -10 <= lat <= 10,
    ),
    MitigationTactic(
        "biodegradable", "Biodegradable Alternatives (-25% overall)", TacticKind.ONE_TIME, 0.25,
    ),
    MitigationTactic(
        "industrial", "Industrial Discharge Controls (-35%/yr, |lat|,|lon| < 30)",
        TacticKind.PER_YEAR, 0.35,
        lambda lat, lon: abs(lat) < 30 and abs(lon) < 30,
    ),
    MitigationTactic(
        "awareness", "Public Awareness Campaigns (-15% overall)", TacticKind.ONE_TIME, 0.15,
    ),
    MitigationTactic(
        "wastemanagement", "Waste Management Upgrades (-40%/yr, |lat|,|lon| <= 45)",
        TacticKind.PER_YEAR, 0.40,
        lambda lat, lon: abs(lat) <= 45 and abs(lon) <= 45,
    ),
    MitigationTactic(
        "legislation", "Plastic Legislation (-30% overall)", TacticKind.ONE_TIME, 0.30,
    ),
    MitigationTactic(
        "oceanrestoration", "Ocean Restoration (-20% overall)", TacticKind.ONE_TIME, 0.20,
    ),
    MitigationTactic(
        "erosioncontrol", "Erosion Control (-25%/yr, lat -20..20)", TacticKind.PER_YEAR, 0.25,
        lambda lat, lon: -20 <= lat <= 20,
    ),
]

TACTICS: Dict[str, MitigationTactic] = {t.id: t for t in _CATALOG}


def get_tactic(tactic: Union[str, MitigationTactic]) -> MitigationTactic:
    """Resolve a tactic id to its catalog entry.

    Raises:
        KeyError: If the id is not in the catalog.
    """
    if isinstance(tactic, MitigationTactic):
        return tactic
    try:
        return TACTICS[tactic]
    except KeyError:
        raise KeyError(f"Unknown mitigation tactic: {tactic!r}") from None


def apply_mitigation(
    raw_value: float,
    tactic: Union[str, MitigationTactic],
    latitude: float,
    longitude: float,
    elapsed_years: float,
) -> float:
    """Return the concentration after applying *tactic*.

    Args:
        raw_value: Unmitigated (predicted) concentration.
        tactic: A MitigationTactic or its catalog id.
        latitude: Point latitude in degrees.
        longitude: Point longitude in degrees.
        elapsed_years: Time since the tactic was introduced.  Only whole
            years count for PER_YEAR decay; negative values count as 0.

    Returns:
        Adjusted concentration in [0, raw_value].
    """
    if raw_value <= 0:
        return 0.0

    t = get_tactic(tactic)
    if t.kind is TacticKind.NONE or not t.applies_at(latitude, longitude):
        return float(raw_value)

    if t.kind is TacticKind.ONE_TIME:
        adjusted = raw_value * (1.0 - t.rate)
    else:
        whole_years = max(0, math.floor(elapsed_years))
        adjusted = raw_value * (1.0 - t.rate) ** whole_years

    return max(0.0, float(adjusted))

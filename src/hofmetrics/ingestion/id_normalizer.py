from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple

from ..models import HofFlag
from ..standards.naming import collapse_ws, is_blank, normalize_header, normalize_key


CANONICAL_HOTELS = ("MARRIOTT", "SHERATON BCR", "SHERATON MDQ", "MAITEI")

NO_DATA_CONTINENT = "Sin dato"
OTHER_TIER = "Other"


def normalize_hotel(value: Any) -> str:
    """Map any hotel spelling onto the canonical identifier.

    Unknown names are returned uppercased (not an error), so the function is
    idempotent: ``normalize_hotel(normalize_hotel(x)) == normalize_hotel(x)``.
    """

    if is_blank(value):
        return ""
    s = collapse_ws(str(value)).upper()
    if "MARRIOTT" in s:
        return "MARRIOTT"
    if "SHERATON" in s and ("BCR" in s or "BRC" in s or "BARILOCHE" in s):
        return "SHERATON BCR"
    if "SHERATON" in s and ("MDQ" in s or "MAR DEL PLATA" in s):
        return "SHERATON MDQ"
    if "MAITEI" in s:
        return "MAITEI"
    return s


@dataclass(frozen=True)
class Tier:
    name: str
    code: str
    elite: bool

    @property
    def label(self) -> str:
        if self.code:
            return f"{self.name} ({self.code})"
        return self.name


# Matching order matters: "AMBASSADOR ELITE" must not fall through to a later tier.
TIERS: Tuple[Tier, ...] = (
    Tier("Ambassador Elite", "AMB", True),
    Tier("Titanium Elite", "TTM", True),
    Tier("Platinum Elite", "PLT", True),
    Tier("Gold Elite", "GLD", True),
    Tier("Silver Elite", "SLR", False),
    Tier("Member", "MRD", False),
)
_TIER_KEYWORDS = {
    "AMB": "AMBASSADOR",
    "TTM": "TITANIUM",
    "PLT": "PLATINUM",
    "GLD": "GOLD",
    "SLR": "SILVER",
    "MRD": "MEMBER",
}
OTHER = Tier(OTHER_TIER, "", False)


def bucket_tier(value: Any) -> Tier:
    """Bucket a raw membership label into one of the known tiers.

    Recognizes the full tier name ("Gold Elite") or the parenthetical code
    ("(GLD) Gold", "Member (MRD)"). Anything else is ``Other``.
    """

    s = normalize_header(value)
    if not s:
        return OTHER
    for tier in TIERS:
        if f"({tier.code})" in s or _TIER_KEYWORDS[tier.code] in s:
            return tier
    return OTHER


def is_elite(value: Any) -> bool:
    return bucket_tier(value).elite


_CONTINENTS = (
    ("America", ("america",)),
    ("Europa", ("europa", "europe")),
    ("Asia", ("asia",)),
    ("Africa", ("africa",)),
    ("Oceania", ("oceania",)),
)
CONTINENT_LABELS = {
    "America": "América",
    "Europa": "Europa",
    "Asia": "Asia",
    "Africa": "África",
    "Oceania": "Oceanía",
}


def normalize_continent(value: Any) -> str:
    """Canonical continent name; "Sin dato" when empty, passthrough when unknown."""

    if is_blank(value):
        return NO_DATA_CONTINENT
    key = normalize_key(value)
    for canonical, needles in _CONTINENTS:
        if any(n in key for n in needles):
            return CONTINENT_LABELS[canonical]
    return collapse_ws(str(value))


def normalize_country(value: Any) -> str:
    if is_blank(value):
        return ""
    return collapse_ws(str(value))


def parse_hof(value: Any) -> HofFlag:
    s = normalize_key(value)
    if "hist" in s:
        return HofFlag.HISTORY
    if "fore" in s:
        return HofFlag.FORECAST
    if s == "h":
        return HofFlag.HISTORY
    if s == "f":
        return HofFlag.FORECAST
    return HofFlag.UNKNOWN

"""Region short-code lookup table (``"TX"`` -> ``"Texas"``).

The table is loaded once per run, either from the built-in US list or from the
``fm_state_names`` table, and is read-only afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

_US_REGIONS: dict[str, str] = {
    "AL": "Alabama",
    "AK": "Alaska",
    "AZ": "Arizona",
    "AR": "Arkansas",
    "CA": "California",
    "CO": "Colorado",
    "CT": "Connecticut",
    "DE": "Delaware",
    "DC": "District of Columbia",
    "FL": "Florida",
    "GA": "Georgia",
    "HI": "Hawaii",
    "ID": "Idaho",
    "IL": "Illinois",
    "IN": "Indiana",
    "IA": "Iowa",
    "KS": "Kansas",
    "KY": "Kentucky",
    "LA": "Louisiana",
    "ME": "Maine",
    "MD": "Maryland",
    "MA": "Massachusetts",
    "MI": "Michigan",
    "MN": "Minnesota",
    "MS": "Mississippi",
    "MO": "Missouri",
    "MT": "Montana",
    "NE": "Nebraska",
    "NV": "Nevada",
    "NH": "New Hampshire",
    "NJ": "New Jersey",
    "NM": "New Mexico",
    "NY": "New York",
    "NC": "North Carolina",
    "ND": "North Dakota",
    "OH": "Ohio",
    "OK": "Oklahoma",
    "OR": "Oregon",
    "PA": "Pennsylvania",
    "RI": "Rhode Island",
    "SC": "South Carolina",
    "SD": "South Dakota",
    "TN": "Tennessee",
    "TX": "Texas",
    "UT": "Utah",
    "VT": "Vermont",
    "VA": "Virginia",
    "WA": "Washington",
    "WV": "West Virginia",
    "WI": "Wisconsin",
    "WY": "Wyoming",
    "AS": "American Samoa",
    "GU": "Guam",
    "MP": "Northern Mariana Islands",
    "PR": "Puerto Rico",
    "VI": "U.S. Virgin Islands",
}


class RegionTable:
    """Read-only mapping of two-letter region codes to full names.

    Usage
    -----
    regions = RegionTable.default()
    regions.resolve("TX")  # -> "Texas"
    regions.resolve("ZZ")  # -> None
    """

    __slots__ = ("_by_code", "_names")

    def __init__(self, mapping: Mapping[str, str]) -> None:
        self._by_code: Mapping[str, str] = MappingProxyType(dict(mapping))
        self._names = frozenset(self._by_code.values())

    @classmethod
    def default(cls) -> RegionTable:
        return cls(_US_REGIONS)

    @classmethod
    def from_rows(cls, rows: Iterable[tuple[str, str]]) -> RegionTable:
        """Build from ``(code, name)`` pairs such as rows of ``fm_state_names``."""

        return cls({code.strip(): name.strip() for code, name in rows})

    def resolve(self, code: str | None) -> str | None:
        """Return the full name for ``code``, or ``None`` when not found.

        Lookup is exact: codes are stored and matched as given (upper case).
        """

        if code is None:
            return None
        return self._by_code.get(code)

    def is_name(self, value: str) -> bool:
        """Whether ``value`` is already one of the full region names."""

        return value in self._names

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(self._by_code.items())

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    def __len__(self) -> int:
        return len(self._by_code)


__all__ = ["RegionTable"]

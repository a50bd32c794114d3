"""Shared inclusion rules applied by every source adapter.

Only explicit signals exclude a listing: a junior-level title, or a location
that names a non-US region without also naming a US one. Anything the rules
do not recognize is kept.
"""
from __future__ import annotations

import re

# Junior/intern level titles.
EXCLUDED_TITLE_PATTERN = re.compile(
    r"\b(?:intern|internship|junior|jr\.?|entry[\s_-]?level|graduate|trainee)\b",
    re.IGNORECASE,
)

NON_US_TERMS: tuple[str, ...] = (
    # Europe
    "europe", "european", "emea", "eu", "uk", "united kingdom", "london",
    "berlin", "paris", "amsterdam", "lisbon", "barcelona", "spain", "germany",
    "france", "netherlands", "portugal", "ireland", "switzerland", "poland",
    "warsaw", "czech", "austria", "italy", "sweden", "denmark", "norway",
    "finland", "belgium", "romania", "hungary", "croatia", "serbia", "greece",
    "ukraine", "russia", "turkey",
    # Middle East / Africa
    "israel", "tel aviv", "dubai", "uae", "saudi", "qatar", "middle east",
    "africa", "nigeria", "south africa", "kenya",
    # Asia-Pacific
    "india", "bangalore", "mumbai", "hyderabad", "delhi", "pakistan",
    "bangladesh", "china", "beijing", "shanghai", "shenzhen", "hong kong",
    "japan", "tokyo", "korea", "south korea", "singapore", "philippines",
    "vietnam", "thailand", "indonesia", "malaysia", "taiwan", "apac", "asia",
    "australia", "sydney", "melbourne", "new zealand",
    # Americas outside the US
    "latin america", "latam", "brazil", "são paulo", "sao paulo", "mexico",
    "argentina", "colombia", "chile", "peru", "canada", "vancouver",
    "toronto", "montreal", "ottawa",
)

US_TERMS: tuple[str, ...] = (
    "united states", "usa", "us",
    # cities
    "new york", "nyc", "san francisco", "los angeles", "chicago", "austin",
    "miami", "boston", "seattle", "denver", "portland", "atlanta", "dallas",
    "houston", "philadelphia", "phoenix", "minneapolis", "detroit",
    "nashville", "raleigh", "charlotte", "pittsburgh", "salt lake",
    "san diego", "san jose",
    # states
    "california", "texas", "florida", "georgia", "colorado", "virginia",
    "washington", "oregon", "north carolina", "south carolina", "illinois",
    "massachusetts", "pennsylvania", "ohio", "michigan", "arizona",
    "tennessee", "maryland", "minnesota", "wisconsin", "indiana", "missouri",
    "connecticut", "iowa", "utah", "nevada", "new jersey", "new hampshire",
    "alabama", "kentucky", "louisiana", "oklahoma", "arkansas", "mississippi",
    "hawaii", "idaho", "montana", "nebraska", "new mexico", "rhode island",
    "vermont", "wyoming", "maine", "delaware", "west virginia",
    "south dakota", "north dakota", "alaska",
    # common state codes
    "ca", "ny", "nc", "fl", "tx", "wa", "co", "il", "ma",
)


def _vocabulary(terms: tuple[str, ...]) -> str:
    # Longest first so "south korea" wins over "korea" in match output.
    ordered = sorted(terms, key=len, reverse=True)
    return r"\b(?:" + "|".join(re.escape(t) for t in ordered) + r")\b"


NON_US_PATTERN = re.compile(_vocabulary(NON_US_TERMS), re.IGNORECASE)
US_PATTERN = re.compile(
    _vocabulary(US_TERMS) + r"|\bu\.s\.(?!\w)|\bwashington\s*d\.?c\.?",
    re.IGNORECASE,
)
OUTSIDE_US_PATTERN = re.compile(
    r"outside\s*(?:of\s*)?(?:the\s*)?(?:u\.?s\.?a?\b|united states)", re.IGNORECASE
)
REMOTE_PATTERN = re.compile(r"\b(?:remote|global|worldwide|anywhere)\b", re.IGNORECASE)
NORTH_AMERICA_PATTERN = re.compile(r"\bnorth america\b", re.IGNORECASE)


def is_excluded_title(title: str | None) -> bool:
    if not title:
        return False
    return EXCLUDED_TITLE_PATTERN.search(title) is not None


def is_location_acceptable(location: str | None, location_type: str | None = None) -> bool:
    """Return True when a listing is US-based, globally remote, or unlabeled."""
    if location_type == "REMOTE" and not location:
        return True

    loc = (location or "").strip()
    if not loc:
        return True

    if OUTSIDE_US_PATTERN.search(loc):
        return False

    # A US mention wins over any non-US one ("New York / Remote, London").
    if NON_US_PATTERN.search(loc):
        return US_PATTERN.search(loc) is not None

    if US_PATTERN.search(loc):
        return True

    if REMOTE_PATTERN.search(loc):
        return True

    if NORTH_AMERICA_PATTERN.search(loc):
        return True

    return True

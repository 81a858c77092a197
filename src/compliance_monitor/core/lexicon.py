"""
Static keyword data used by the field extractors.
"""
from typing import Dict, List, Tuple

DEFAULT_RESTRICTION = "restriction"

# Iteration order matters: the first category with a keyword hit wins.
RESTRICTION_KEYWORDS: Dict[str, List[str]] = {
    "tariff": ["tariff", "duty", "tax", "levy", "import tax", "export tax"],
    "ban": ["ban", "prohibition", "restricted", "not allowed", "illegal", "forbidden"],
    "quota": ["quota", "limit", "threshold", "ceiling", "cap"],
    "license": ["license", "permit", "authorization", "certificate", "documentation"],
    "sanction": ["sanction", "penalty", "punishment", "embargo", "boycott"],
    "embargo": ["embargo", "blockade", "siege"],
}

RESTRICTION_TYPES: Tuple[str, ...] = tuple(RESTRICTION_KEYWORDS) + (DEFAULT_RESTRICTION,)

# Ordered; specific categories come before generic ones.
PRODUCT_CATEGORIES: List[str] = [
    "semiconductor",
    "crude oil",
    "petroleum",
    "natural gas",
    "steel",
    "aluminum",
    "copper",
    "lumber",
    "automotive",
    "electric vehicle",
    "battery",
    "solar panel",
    "pharmaceutical",
    "medical device",
    "electronics",
    "agricultural",
    "soybean",
    "wheat",
    "dairy",
    "seafood",
    "textile",
    "rare earth",
    "critical mineral",
]

# Canonical name -> aliases (the canonical name is always matched too).
COUNTRY_ALIASES: Dict[str, List[str]] = {
    "United States": ["United States", "USA", "U.S.", "US", "America"],
    "United Kingdom": ["United Kingdom", "Britain", "UK"],
    "European Union": ["European Union", "Europe", "EU"],
    "China": ["China"],
    "Taiwan": ["Taiwan"],
    "Japan": ["Japan"],
    "South Korea": ["South Korea"],
    "India": ["India"],
    "Canada": ["Canada"],
    "Mexico": ["Mexico"],
    "Brazil": ["Brazil"],
    "Russia": ["Russia"],
    "Ukraine": ["Ukraine"],
    "Germany": ["Germany"],
    "France": ["France"],
    "Italy": ["Italy"],
    "Australia": ["Australia"],
    "Vietnam": ["Vietnam"],
    "Indonesia": ["Indonesia"],
    "Iran": ["Iran"],
    "Turkey": ["Turkey"],
    "Saudi Arabia": ["Saudi Arabia"],
    "South Africa": ["South Africa"],
    "Argentina": ["Argentina"],
    "Switzerland": ["Switzerland"],
}

# Aliases this short only match as whole words.
SHORT_ALIAS_MAX_LEN = 3

TRIGGER_WORDS = r"(?:effective|starting|beginning|from)"

MONTHS = (
    r"(?:January|February|March|April|May|June|July|August|September|October|November|December"
    r"|Jan|Feb|Mar|Apr|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)"
)

# Tried in this order; group 1 is the phrase returned.
EFFECTIVE_DATE_PATTERNS: List[str] = [
    TRIGGER_WORDS + r"\s+(?:on\s+)?(" + MONTHS + r"\.?\s+\d{1,2}(?:st|nd|rd|th)?(?:,?\s+\d{4})?)",
    TRIGGER_WORDS + r"\s+(?:on\s+)?(\d{1,2}/\d{1,2}/\d{2,4}|\d{4}-\d{2}-\d{2})",
    TRIGGER_WORDS + r"\s+(next\s+(?:week|month|year)|today|tomorrow|immediately)",
    r"\b(next\s+week|next\s+month|immediately)\b",
]

TARIFF_RATE_PATTERN = r"\d+(?:\.\d+)?\s*%"

"""
Lead signal extraction for property chat messages.

Keyword tables map a tag to the substrings that trigger it. Matching is
plain substring containment on the lower-cased message: no stemming and no
word boundaries, so "see" also fires inside "seem".
"""

import logging
import re
from typing import Any, Dict, Iterable, List

logger = logging.getLogger(__name__)


# Buyer-intent signals, checked in this order
SIGNAL_KEYWORDS: Dict[str, List[str]] = {
    "budget_discussion": ["budget", "afford", "price range"],
    "timeline_interest": ["when", "timeline", "move", "buy"],
    "financing_discussion": ["mortgage", "loan", "financing", "pre-approved"],
    "viewing_interest": ["see", "visit", "tour", "viewing"],
    "family_situation": ["family", "kids", "children", "spouse"],
    "urgency": ["urgent", "asap", "quickly", "soon"],
}

# Property and location features the visitor cares about
INTEREST_KEYWORDS: Dict[str, List[str]] = {
    # Property features
    "kitchen": ["kitchen"],
    "bathrooms": ["bathroom"],
    "bedrooms": ["bedroom"],
    "garage": ["garage"],
    "outdoor_space": ["yard", "garden"],
    "basement": ["basement"],
    "pool": ["pool"],
    # Location
    "schools": ["school"],
    "commute": ["commute", "work"],
    "shopping": ["shopping"],
    "dining": ["restaurant"],
    "parks": ["park"],
    "transportation": ["transport"],
}

SCORE_INCREMENTS: Dict[str, int] = {
    "budget_discussion": 15,
    "timeline_interest": 12,
    "viewing_interest": 20,
    "financing_discussion": 10,
    "family_situation": 8,
    "urgency": 15,
}

MAX_SCORE = 100
MIN_SCORE = 0

BUDGET_PATTERN = re.compile(r"\$([\d,]+)(?:\s*(?:to|and|-)\s*\$([\d,]+))?")
TIMELINE_PATTERN = re.compile(r"(\d+)\s*months?")


def _match_tags(message: str, table: Dict[str, List[str]]) -> List[str]:
    lowered = message.lower()
    return [
        tag for tag, keywords in table.items()
        if any(keyword in lowered for keyword in keywords)
    ]


def analyze_lead_signals(message: str) -> List[str]:
    """
    Detect buyer-intent signals in a chat message.

    Args:
        message: Raw visitor message

    Returns:
        Signal tags in table order; empty when nothing matches
    """
    return _match_tags(message, SIGNAL_KEYWORDS)


def extract_interests(message: str) -> List[str]:
    """Detect property and neighborhood interests in a chat message."""
    return _match_tags(message, INTEREST_KEYWORDS)


def _parse_amount(raw: str) -> int:
    return int(raw.replace(",", ""))


def extract_qualification_data(message: str) -> Dict[str, Any]:
    """
    Best-effort extraction of budget and timeline from a message.

    "$300,000 to $350,000" gives
    {"budget_range": {"min": 300000, "max": 350000}}; a single amount leaves
    max as None. "in 6 months" gives {"timeline_months": 6}.
    """
    data: Dict[str, Any] = {}

    budget_match = BUDGET_PATTERN.search(message)
    if budget_match:
        low, high = budget_match.groups()
        # "$," has no digits
        try:
            data["budget_range"] = {
                "min": _parse_amount(low),
                "max": _parse_amount(high) if high else None,
            }
        except ValueError:
            logger.debug(f"Ignoring malformed budget amount: {budget_match.group(0)}")

    if "month" in message.lower():
        month_match = TIMELINE_PATTERN.search(message)
        if month_match:
            data["timeline_months"] = int(month_match.group(1))

    return data


def calculate_lead_score(current_score: int, signals: Iterable[str]) -> int:
    """
    Add the fixed increment of each distinct signal and clamp to [0, 100].

    There is no per-session dedup: a signal detected again in a later turn
    adds its increment again.
    """
    new_score = current_score
    for signal in dict.fromkeys(signals):
        new_score += SCORE_INCREMENTS.get(signal, 0)
    return max(MIN_SCORE, min(new_score, MAX_SCORE))

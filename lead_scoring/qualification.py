"""
Per-session lead qualification for property chat.

Folds one analysed visitor message into a chat session's running score and
interest list, and decides which thresholds the session now crosses.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .signals import (
    analyze_lead_signals,
    calculate_lead_score,
    extract_interests,
    extract_qualification_data,
)

logger = logging.getLogger(__name__)


@dataclass
class TurnAnalysis:
    """Signals, interests and qualification data found in one message."""
    lead_signals: List[str] = field(default_factory=list)
    identified_interests: List[str] = field(default_factory=list)
    qualification_updates: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_message(cls, message: str) -> "TurnAnalysis":
        return cls(
            lead_signals=analyze_lead_signals(message),
            identified_interests=extract_interests(message),
            qualification_updates=extract_qualification_data(message),
        )


@dataclass
class QualificationResult:
    """Session bookkeeping after a turn."""
    previous_score: int
    score: int
    interests: List[str]
    is_qualified: bool
    should_show_contact: bool
    should_notify: bool


def merge_interests(existing: Optional[List[str]], new: List[str]) -> List[str]:
    """Ordered union: existing interests first, new ones appended once."""
    return list(dict.fromkeys([*(existing or []), *new]))


class LeadQualifier:
    """
    Applies turn analyses to a session's qualification state.

    Thresholds:
    - score >= qualified_threshold: qualified lead
    - score >= contact_threshold: show agent contact details
    - score >= notify_threshold and not yet notified: notify the agent
    """

    def __init__(
        self,
        qualified_threshold: int = 70,
        contact_threshold: int = 50,
        notify_threshold: int = 70,
    ):
        self.qualified_threshold = qualified_threshold
        self.contact_threshold = contact_threshold
        self.notify_threshold = notify_threshold

    def apply(
        self,
        current_score: Optional[int],
        current_interests: Optional[List[str]],
        analysis: TurnAnalysis,
        already_notified: bool = False,
    ) -> QualificationResult:
        """
        Score a turn against the session state.

        Args:
            current_score: Session score before this turn (None treated as 0)
            current_interests: Interests recorded so far
            analysis: Analysis of the visitor's message
            already_notified: Whether the agent was already told about this lead

        Returns:
            QualificationResult with the new score and flags
        """
        previous = current_score or 0
        score = calculate_lead_score(previous, analysis.lead_signals)
        interests = merge_interests(current_interests, analysis.identified_interests)

        if score != previous:
            logger.debug(
                "Lead score updated",
                extra={"previous": previous, "score": score, "signals": analysis.lead_signals},
            )

        return QualificationResult(
            previous_score=previous,
            score=score,
            interests=interests,
            is_qualified=score >= self.qualified_threshold,
            should_show_contact=score >= self.contact_threshold,
            should_notify=score >= self.notify_threshold and not already_notified,
        )

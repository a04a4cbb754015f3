"""
Follow-up question and action selection for property chat.

Both tables are evaluated against the session score as it stood before the
current turn was scored, plus the signals detected in the current turn.
"""

from typing import Any, Callable, Dict, List, Sequence, Tuple

# (predicate on score, questions); first match wins
QUESTION_BANDS: List[Tuple[Callable[[int], bool], List[str]]] = [
    (lambda score: score < 30, [
        "What's most important to you in your next home?",
        "Are you currently looking to buy in this area?",
    ]),
    (lambda score: score < 60, [
        "What's your timeline for making a move?",
        "Would you like to schedule a viewing of this property?",
    ]),
    (lambda score: True, [
        "Would you like me to connect you directly with our agent?",
        "Are you ready to make an offer if this property meets your needs?",
    ]),
]

# (predicate on signals and score, action); every match applies
ACTION_RULES: List[Tuple[Callable[[Sequence[str], int], bool], str]] = [
    (lambda signals, score: "viewing_interest" in signals, "schedule_viewing"),
    (
        lambda signals, score: "budget_discussion" in signals and "timeline_interest" in signals,
        "contact_agent",
    ),
    (lambda signals, score: score >= 70, "priority_follow_up"),
    (lambda signals, score: "urgency" in signals, "immediate_response"),
]

SUMMARY_PREVIEW_CHARS = 100


def generate_follow_up_questions(score: int) -> List[str]:
    """Pick the question list for the score band."""
    for matches, questions in QUESTION_BANDS:
        if matches(score):
            return list(questions)
    return []


def determine_suggested_actions(signals: Sequence[str], score: int) -> List[str]:
    """Collect every action whose rule holds for this turn."""
    return [action for applies, action in ACTION_RULES if applies(signals, score)]


def generate_conversation_summary(history: List[Dict[str, Any]], message: str) -> str:
    """
    One-line summary used in qualified-lead notifications.

    Key interests are the signals recorded on earlier turns; the current
    turn only contributes the message preview.
    """
    total_messages = len(history) + 1
    signals = [s for turn in history for s in (turn.get("lead_signals") or [])]
    interests = ", ".join(signals) or "General inquiry"
    return (
        f"{total_messages} message conversation. Key interests: {interests}. "
        f"Latest: {message[:SUMMARY_PREVIEW_CHARS]}..."
    )

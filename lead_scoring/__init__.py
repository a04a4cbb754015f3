"""
Lead Scoring Module for the Nester property chat service.

This module provides lead qualification for property chat:
- Signal and interest extraction (keyword tables)
- Budget / timeline extraction
- Additive lead score (0-100 scale)
- Follow-up questions and suggested actions
- Qualified lead notifications
"""

from .signals import (
    analyze_lead_signals,
    extract_interests,
    extract_qualification_data,
    calculate_lead_score,
)
from .follow_up import (
    generate_follow_up_questions,
    determine_suggested_actions,
    generate_conversation_summary,
)
from .qualification import LeadQualifier, QualificationResult, TurnAnalysis
from .lead_notifier import LeadNotifier, QualifiedLead

__all__ = [
    "analyze_lead_signals",
    "extract_interests",
    "extract_qualification_data",
    "calculate_lead_score",
    "generate_follow_up_questions",
    "determine_suggested_actions",
    "generate_conversation_summary",
    "LeadQualifier",
    "QualificationResult",
    "TurnAnalysis",
    "LeadNotifier",
    "QualifiedLead",
]

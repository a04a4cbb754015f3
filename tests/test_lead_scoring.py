"""Tests for lead signal extraction and scoring."""

import asyncio

import pytest

from lead_scoring.signals import (
    SCORE_INCREMENTS,
    analyze_lead_signals,
    calculate_lead_score,
    extract_interests,
    extract_qualification_data,
)
from lead_scoring.qualification import LeadQualifier, TurnAnalysis, merge_interests


# ── Signals ───────────────────────────────────────────

class TestAnalyzeLeadSignals:
    @pytest.mark.parametrize("message", [
        "What's the budget?",
        "My BUDGET is tight",
        "Budget matters",
        "is this within budGet",
    ])
    def test_budget_any_case(self, message):
        assert "budget_discussion" in analyze_lead_signals(message)

    def test_no_signals(self):
        assert analyze_lead_signals("Nice photos") == []

    def test_signals_in_table_order(self):
        signals = analyze_lead_signals("Urgent: can we tour it? We have kids and a mortgage")
        assert signals == [
            "financing_discussion",
            "viewing_interest",
            "family_situation",
            "urgency",
        ]

    def test_substring_matching(self):
        # "see" inside "seems"
        assert "viewing_interest" in analyze_lead_signals("It seems nice")


class TestExtractInterests:
    def test_features_and_location(self):
        interests = extract_interests("Is the kitchen big? How are the schools and the commute?")
        assert interests == ["kitchen", "schools", "commute"]

    def test_garden_maps_to_outdoor_space(self):
        assert extract_interests("Tell me about the garden") == ["outdoor_space"]

    def test_nothing(self):
        assert extract_interests("Hello") == []


class TestExtractQualificationData:
    def test_budget_range_with_and(self):
        assert extract_qualification_data("between $300,000 and $350,000") == {
            "budget_range": {"min": 300000, "max": 350000}
        }

    def test_budget_range_with_to(self):
        data = extract_qualification_data("$400,000 to $450,000")
        assert data["budget_range"] == {"min": 400000, "max": 450000}

    def test_single_amount(self):
        data = extract_qualification_data("We can spend $275,000")
        assert data["budget_range"] == {"min": 275000, "max": None}

    def test_timeline_months(self):
        assert extract_qualification_data("Looking to move in 6 months") == {"timeline_months": 6}

    def test_month_without_number(self):
        assert extract_qualification_data("Maybe next month") == {}

    def test_no_numbers(self):
        assert extract_qualification_data("no numbers here") == {}

    def test_malformed_amount_ignored(self):
        assert extract_qualification_data("costs $, right?") == {}


# ── Score ─────────────────────────────────────────────

class TestCalculateLeadScore:
    def test_clamped_at_100(self):
        assert calculate_lead_score(90, ["viewing_interest"]) == 100

    def test_empty_signals(self):
        assert calculate_lead_score(0, []) == 0

    def test_additive(self):
        assert calculate_lead_score(50, ["budget_discussion", "timeline_interest"]) == 77

    def test_unknown_signal_ignored(self):
        assert calculate_lead_score(10, ["weather_chat"]) == 10

    @pytest.mark.parametrize("current", [0, 1, 35, 69, 70, 99, 100])
    def test_always_in_range(self, current):
        every_signal = list(SCORE_INCREMENTS)
        assert 0 <= calculate_lead_score(current, every_signal) <= 100
        assert 0 <= calculate_lead_score(current, []) <= 100

    def test_repeated_signal_across_turns_adds_twice(self):
        first = calculate_lead_score(0, ["viewing_interest"])
        second = calculate_lead_score(first, ["viewing_interest"])
        assert (first, second) == (20, 40)


# ── Qualifier ─────────────────────────────────────────

class TestLeadQualifier:
    def test_merge_interests_is_ordered_union(self):
        assert merge_interests(["kitchen", "pool"], ["pool", "schools"]) == [
            "kitchen", "pool", "schools",
        ]
        assert merge_interests(None, ["garage"]) == ["garage"]

    def test_thresholds(self):
        qualifier = LeadQualifier()
        analysis = TurnAnalysis(lead_signals=["budget_discussion", "timeline_interest"])

        result = qualifier.apply(50, [], analysis)
        assert result.score == 77
        assert result.is_qualified
        assert result.should_show_contact
        assert result.should_notify

    def test_contact_before_qualified(self):
        result = LeadQualifier().apply(40, [], TurnAnalysis(lead_signals=["financing_discussion"]))
        assert result.score == 50
        assert result.should_show_contact
        assert not result.is_qualified
        assert not result.should_notify

    def test_no_second_notification(self):
        result = LeadQualifier().apply(
            80, [], TurnAnalysis(lead_signals=["urgency"]), already_notified=True
        )
        assert result.is_qualified
        assert not result.should_notify

    def test_custom_thresholds(self):
        qualifier = LeadQualifier(qualified_threshold=90, contact_threshold=20, notify_threshold=95)
        result = qualifier.apply(0, [], TurnAnalysis(lead_signals=["viewing_interest"]))
        assert result.should_show_contact
        assert not result.is_qualified

    def test_turn_analysis_from_message(self):
        analysis = TurnAnalysis.from_message("Can we visit? Budget is $600,000 and we like the pool")
        assert analysis.lead_signals == ["budget_discussion", "viewing_interest"]
        assert analysis.identified_interests == ["pool"]
        assert analysis.qualification_updates == {"budget_range": {"min": 600000, "max": None}}

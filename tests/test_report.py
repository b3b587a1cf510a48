"""Tests for report building and text rendering."""

import json

import numpy as np
import pytest

from stock_consensus.engine import (
    AnalysisSubject,
    ConsolidatedSignal,
    Failure,
    ProjectionPolicy,
    ResultStore,
    Success,
    build_report,
    render_outcome,
    render_value,
)


@pytest.fixture
def mixed_store() -> ResultStore:
    """Nested successes, an empty payload and a failure."""
    return ResultStore(
        {
            "technical": Success(
                {
                    "analysis": {
                        "signals": {"overall_signal": "Buy", "bullish": ["golden_cross"]},
                        "indicators": {"rsi_14": 55.25, "sma_50": None},
                    }
                }
            ),
            "empty": Success({}),
            "news": Failure("news analysis failed: HTTP 503", "HTTPError"),
            "scalar": Success(1234567.0),
        }
    )


class TestRenderValue:
    """Tests for the generic document renderer."""

    def test_nested_maps_are_indented(self) -> None:
        """Test each level of nesting adds indentation."""
        lines = render_value({"a": {"b": {"c": 1}}})

        assert lines == ["• a:", "  • b:", "    • c: 1"]

    def test_arrays_are_bulleted(self) -> None:
        """Test array items render as dash bullets."""
        assert render_value({"items": ["x", "y"]}) == ["• items:", "  - x", "  - y"]

    def test_empty_array(self) -> None:
        """Test an empty array renders the no-data marker."""
        assert render_value({"items": []}) == ["• items:", "  No data available"]

    def test_empty_nested_map(self) -> None:
        """Test a nested map with nothing to show renders the no-data marker."""
        assert render_value({"a": {}}) == ["• a:", "  No data available"]
        assert render_value({"a": {"b": None}}) == ["• a:", "  No data available"]

    def test_array_item_map_of_nulls(self) -> None:
        """Test a map item whose values are all null is still listed."""
        lines = render_value({"items": [{"x": None}, "y"]})

        assert lines == ["• items:", "  - No data available", "  - y"]

    def test_nulls_skipped(self) -> None:
        """Test null fields are omitted."""
        assert render_value({"a": None, "b": "x"}) == ["• b: x"]

    def test_scalars(self) -> None:
        """Test number and bool formatting."""
        lines = render_value({"big": 1234.5, "small": 0.25, "flag": True, "whole": 3.0})

        assert lines == ["• big: 1,234.50", "• small: 0.25", "• flag: yes", "• whole: 3"]

    def test_array_of_maps(self) -> None:
        """Test maps inside arrays share the bullet line with their first key."""
        lines = render_value([{"title": "Up", "score": 1}])

        assert lines == ["- title: Up", "  • score: 1"]

    def test_untrusted_text_flattened(self) -> None:
        """Test control characters in values cannot break the layout."""
        assert render_value({"t": "line\nbreak"}) == ["• t: line break"]


class TestRenderOutcome:
    """Tests for per-analyzer rendering."""

    def test_failure_uses_no_data_pattern(self) -> None:
        """Test failures render with their identity and message."""
        text = render_outcome("news", Failure("news analysis failed: HTTP 503"))

        assert text == "No data available for news: news analysis failed: HTTP 503"

    def test_empty_success(self) -> None:
        """Test an empty payload has its own marker."""
        assert render_outcome("empty", Success({})) == "No detailed data available for empty"


class TestReport:
    """Tests for the Report value."""

    def test_every_identity_rendered(
        self, subject: AnalysisSubject, mixed_store: ResultStore, policy: ProjectionPolicy
    ) -> None:
        """Test the text report mentions every analyzer that ran."""
        report = build_report(subject, mixed_store, policy=policy, floor=30)
        text = report.to_text()

        for identity in mixed_store:
            assert identity in text
        assert "No data available for news: news analysis failed: HTTP 503" in text
        assert "No detailed data available for empty" in text
        assert "3 of 4 analyzers returned data" in text
        assert "golden_cross" in text
        assert "1,234,567" in text

    def test_header_and_recommendation(
        self, subject: AnalysisSubject, mixed_store: ResultStore, policy: ProjectionPolicy
    ) -> None:
        """Test the report opens with the subject and its signal."""
        report = build_report(subject, mixed_store, policy=policy, floor=30)
        text = report.to_text()

        assert text.startswith("Analysis Report for Acme Corp (ACME)")
        assert "*** STRONG BUY ***" in text
        assert "• Technical Position: Buy" in text
        assert "• Risk Rating: N/A" in text

    def test_projections_section(
        self, subject: AnalysisSubject, scenario_a_store: ResultStore, rng: np.random.Generator
    ) -> None:
        """Test projections are listed per horizon."""
        report = build_report(subject, scenario_a_store, policy=ProjectionPolicy(), rng=rng)
        text = report.to_text()

        for key in ("3m", "6m", "12m", "24m"):
            assert f"• {key}: " in text

    def test_missing_price_renders_no_projections(self, scenario_a_store: ResultStore) -> None:
        """Test a subject without any price still renders."""
        report = build_report(AnalysisSubject("XYZ"), scenario_a_store, floor=30)

        assert report.price_projections == {}
        assert "No data available for price projections" in report.to_text()

    def test_to_dict_is_json_serializable(
        self, subject: AnalysisSubject, mixed_store: ResultStore, policy: ProjectionPolicy
    ) -> None:
        """Test the structured report round-trips through json."""
        report = build_report(subject, mixed_store, policy=policy, floor=30, duration_ms=12.34)

        document = json.loads(json.dumps(report.to_dict()))

        assert document["symbol"] == "ACME"
        assert document["consolidated_signal"] == ConsolidatedSignal.STRONG_BUY.value
        assert document["consolidated_signal_label"] == "STRONG BUY"
        assert document["votes"]["total_signals"] == 1
        assert document["run_health"] == {
            "total": 4,
            "succeeded": 3,
            "failed": 1,
            "failed_analyzers": ["news"],
        }
        assert document["results"]["news"]["ok"] is False
        assert document["meta"]["component"] == "report"
        assert document["meta"]["duration_ms"] == 12.3
        assert set(document["price_projections"]) == {"3m", "6m", "12m", "24m"}

    def test_all_failures_still_render(self, subject: AnalysisSubject) -> None:
        """Test a run where everything failed is HOLD at the floor and renders fully."""
        store = ResultStore({f"a{i}": Failure(f"a{i} analysis failed: down") for i in range(50)})

        report = build_report(subject, store, floor=30)
        text = report.to_text()

        assert report.signal is ConsolidatedSignal.HOLD
        assert report.confidence_score == 30.0
        assert "0 of 50 analyzers returned data" in text
        assert all(f"No data available for a{i}:" in text for i in range(50))

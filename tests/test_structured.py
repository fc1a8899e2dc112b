"""Tests for structured-output validation and lenient parsing."""

import pytest

from marketlens.exceptions import AnalysisValidationError
from marketlens.llm.structured import (
    LENIENT_PARSE_ASSUMPTION,
    build_analysis_tool_schema,
    infer_sentiment,
    parse_fallback_content,
    parse_tool_arguments,
    validate_structured_analysis,
)
from tests.helpers import binary_payload

LABELS = ["YES", "NO"]


def test_tool_schema_constrains_labels():
    schema = build_analysis_tool_schema(["A", "B", "C"])
    params = schema["function"]["parameters"]

    assert schema["function"]["name"] == "submit_market_analysis"
    assert params["properties"]["topPick"]["enum"] == ["A", "B", "C"]
    assert params["properties"]["outcomes"]["items"]["properties"]["label"]["enum"] == ["A", "B", "C"]
    assert set(params["required"]) == {
        "outcomes", "topPick", "sentiment", "confidence", "assumptions", "keyRisks"
    }


class TestParseToolArguments:
    def test_valid_json(self):
        assert parse_tool_arguments('{"topPick": "YES"}') == {"topPick": "YES"}

    @pytest.mark.parametrize("raw", ["not json", "[1, 2]", "null"])
    def test_rejects_non_objects(self, raw):
        with pytest.raises(AnalysisValidationError):
            parse_tool_arguments(raw)


class TestValidateStructuredAnalysis:
    def test_valid_payload(self):
        result = validate_structured_analysis(binary_payload(), LABELS)

        assert result.top_pick == "YES"
        assert [o.label for o in result.outcomes] == ["YES", "NO"]
        assert result.outcomes[0].probability == 70.0
        assert result.outcomes[0].data_points == ["a", "b"]
        assert result.sentiment == "bullish"
        assert result.confidence == "medium"
        assert result.assumptions == ["x"]
        assert result.key_risks == ["y"]
        assert result.data_point_count == 2

    def test_labels_matched_case_insensitively(self):
        payload = binary_payload(top_pick=" yes ")
        payload["outcomes"][0]["label"] = "Yes"

        result = validate_structured_analysis(payload, LABELS)

        assert result.top_pick == "YES"
        assert result.outcomes[0].label == "YES"

    def test_unknown_outcomes_are_dropped(self):
        payload = binary_payload()
        payload["outcomes"].append(
            {"label": "MAYBE", "probability": 10, "reasoning": "", "dataPoints": []}
        )
        result = validate_structured_analysis(payload, LABELS)
        assert [o.label for o in result.outcomes] == ["YES", "NO"]

    def test_missing_outcomes(self):
        payload = binary_payload()
        del payload["outcomes"]
        with pytest.raises(AnalysisValidationError, match="Missing outcomes"):
            validate_structured_analysis(payload, LABELS)

    def test_missing_top_pick(self):
        payload = binary_payload()
        del payload["topPick"]
        with pytest.raises(AnalysisValidationError, match="Missing topPick"):
            validate_structured_analysis(payload, LABELS)

    def test_top_pick_must_be_known(self):
        with pytest.raises(AnalysisValidationError, match="Invalid topPick"):
            validate_structured_analysis(binary_payload(top_pick="MAYBE"), LABELS)

    @pytest.mark.parametrize("probability", [150, -1, "70", None, True])
    def test_invalid_probability(self, probability):
        payload = binary_payload()
        payload["outcomes"][0]["probability"] = probability
        with pytest.raises(AnalysisValidationError, match="Invalid probability"):
            validate_structured_analysis(payload, LABELS)

    def test_probability_bounds_inclusive(self):
        result = validate_structured_analysis(binary_payload(yes=100, no=0), LABELS)
        assert [o.probability for o in result.outcomes] == [100.0, 0.0]

    def test_unrecognised_sentiment_and_confidence_use_defaults(self):
        payload = binary_payload(sentiment="euphoric", confidence="certain")
        result = validate_structured_analysis(payload, LABELS)
        assert result.sentiment == "neutral"
        assert result.confidence == "medium"

    def test_probability_mass_off_is_accepted(self):
        payload = {
            "outcomes": [
                {"label": label, "probability": 60, "reasoning": "", "dataPoints": []}
                for label in ["A", "B", "C"]
            ],
            "topPick": "A",
            "sentiment": "neutral",
            "confidence": "low",
            "assumptions": [],
            "keyRisks": [],
        }
        result = validate_structured_analysis(payload, ["A", "B", "C"])
        assert len(result.outcomes) == 3


class TestLenientParse:
    def test_extracts_percentages_per_label(self):
        result = parse_fallback_content("I think YES: 65% likely, NO: 35%.", LABELS)

        assert [(o.label, o.probability) for o in result.outcomes] == [("YES", 65.0), ("NO", 35.0)]
        assert result.top_pick == "YES"
        assert result.confidence == "low"
        assert result.assumptions == [LENIENT_PARSE_ASSUMPTION]
        assert result.sentiment == "bullish"

    def test_unmatched_labels_get_equal_share_of_fifty(self):
        result = parse_fallback_content("No numbers here at all.", ["A", "B", "C", "D"])
        assert [o.probability for o in result.outcomes] == [12.5] * 4
        assert result.top_pick == "A"

    def test_sorted_descending(self):
        result = parse_fallback_content("Lakers 20% Celtics 55% Knicks 25%", ["Lakers", "Celtics", "Knicks"])
        assert [o.label for o in result.outcomes] == ["Celtics", "Knicks", "Lakers"]
        assert result.top_pick == "Celtics"

    def test_percentages_clamped(self):
        result = parse_fallback_content("YES 250%", LABELS)
        assert result.outcomes[0].probability == 100.0


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Strong momentum favors the bulls", "bullish"),
        ("This looks unlikely to happen", "bearish"),
        ("Plenty of upside but real risk", "bearish"),
        ("The outcome is uncertain", "neutral"),
    ],
)
def test_infer_sentiment(text, expected):
    assert infer_sentiment(text) == expected

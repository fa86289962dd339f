import pytest

from services.evaluation import (
    DEFAULT_SUMMARY,
    clamp_score,
    normalize_evaluation,
    parse_evaluation,
)


HUGE_SCORE = "1" + "0" * 400


@pytest.mark.parametrize("raw, expected", [(-5, 0), (0, 0), (7, 7), (15, 10), (HUGE_SCORE, 10), ("-" + HUGE_SCORE, 0)])
def test_score_is_clamped(raw, expected):
    result = parse_evaluation(f'{{"overallScore": {raw}, "summary": "ok"}}')
    assert result.overall_score == expected


@pytest.mark.parametrize("raw, expected", [("8", 8), (6.6, 7), ("abc", 0), (None, 0), (True, 0), (float("nan"), 0), (10 ** 400, 10), ("1e400", 10)])
def test_clamp_score_coercion(raw, expected):
    assert clamp_score(raw) == expected


def test_alias_precedence():
    result = normalize_evaluation({
        "overall_score": 4,
        "score": 9,
        "Strengths": ["Concise"],
        "positives": ["ignored"],
        "weaknesses": ["Testing"],
        "feedback": "Decent attempt.",
    })
    assert result.overall_score == 4
    assert result.strengths == ["Concise"]
    assert result.areas_to_improve == ["Testing"]
    assert result.summary == "Decent attempt."


def test_null_values_fall_through_to_next_alias():
    result = normalize_evaluation({"overallScore": None, "overall_score": 6, "summary": None, "feedback": "Fine"})
    assert result.overall_score == 6
    assert result.summary == "Fine"


def test_missing_fields_use_defaults():
    result = normalize_evaluation({})
    assert result.overall_score == 0
    assert result.strengths == []
    assert result.areas_to_improve == []
    assert result.summary == DEFAULT_SUMMARY


def test_scalar_list_fields_are_wrapped():
    result = normalize_evaluation({"strengths": "Good communication", "areasToImprove": ["", "  ", "Depth"]})
    assert result.strengths == ["Good communication"]
    assert result.areas_to_improve == ["Depth"]


def test_json_wrapped_in_prose_is_extracted():
    raw = 'Here is the evaluation:\n```json\n{"overallScore": 8, "summary": "Strong"}\n```'
    result = parse_evaluation(raw)
    assert result.overall_score == 8
    assert result.summary == "Strong"
    assert result.raw == raw.strip()


@pytest.mark.parametrize("raw", ["not json at all", "", None, "[1, 2, 3]"])
def test_unparsable_output_falls_back(raw):
    result = parse_evaluation(raw)
    assert result.overall_score == 0
    assert result.summary
    assert result.raw == (raw or "").strip()


def test_payload_uses_wire_keys():
    payload = parse_evaluation('{"overallScore": 5, "summary": "ok"}').to_payload()
    assert set(payload) == {"overallScore", "strengths", "areasToImprove", "summary", "raw"}


def test_oversized_integer_literal_falls_back():
    raw = '{"overallScore": ' + "9" * 5000 + "}"
    result = parse_evaluation(raw)
    assert result.overall_score == 0
    assert result.raw == raw


def test_deeply_nested_output_falls_back():
    raw = "[" * 100000 + "]" * 100000
    result = parse_evaluation(raw)
    assert result.overall_score == 0
    assert result.raw == raw

"""
Tests for visibility condition parsing and evaluation
"""
import pytest

from report_export.conditions import (
    ConditionSyntaxError,
    evaluate_condition,
    is_truthy,
    parse_condition,
    validate_condition,
)

DATA = {
    "status": "PASS",
    "score": 84,
    "score_text": "84",
    "items": [1, 2],
    "empty": [],
    "hidden": False,
    "name": "",
}


class TestEvaluateCondition:
    """Test condition evaluation against data"""

    @pytest.mark.parametrize(
        "condition,expected",
        [
            ("data.status === 'PASS'", True),
            ('data.status === "FAIL"', False),
            ("data.status !== 'FAIL'", True),
            ("data.score > 80", True),
            ("data.score >= 85", False),
            ("data.score < 100 && data.score > 0", True),
            ("data.items.length > 0", True),
            ("data.empty.length > 0", False),
            ("!data.hidden", True),
            ("data.hidden || data.score", True),
            ("data.name", False),
            ("(data.score > 90 || data.status === 'PASS') && !data.hidden", True),
            ("data.missing === undefined", True),
            ("data.missing === null", True),
        ],
    )
    def test_conditions(self, condition, expected):
        assert evaluate_condition(condition, DATA) is expected

    def test_strict_equality_does_not_coerce(self):
        assert evaluate_condition("data.score_text === 84", DATA) is False
        assert evaluate_condition("data.score_text == 84", DATA) is True

    def test_empty_condition_is_visible(self):
        assert evaluate_condition("", DATA) is True
        assert evaluate_condition("   ", DATA) is True
        assert evaluate_condition(None, DATA) is True

    def test_missing_data_is_visible(self):
        assert evaluate_condition("data.status === 'FAIL'", None) is True

    def test_unparseable_condition_is_visible(self):
        assert evaluate_condition("data.status === ", DATA) is True
        assert evaluate_condition("data.a; alert(1)", DATA) is True

    @pytest.mark.parametrize("condition", [True, False, 0, 3.5, ["data.a"], {"op": "=="}])
    def test_non_string_condition_is_visible(self, condition):
        assert evaluate_condition(condition, DATA) is True


class TestParseCondition:
    """Test the condition grammar"""

    def test_parse_comparison(self):
        assert parse_condition("data.score > 1") == ("cmp", ">", ("path", "data.score"), ("lit", 1))

    def test_optional_chaining_is_plain_access(self):
        assert parse_condition("data?.score") == ("path", "data.score")

    def test_unbalanced_parenthesis(self):
        with pytest.raises(ConditionSyntaxError):
            parse_condition("(data.a > 1")

    def test_validate_condition(self):
        assert validate_condition("data.a > 1") == (True, None)
        valid, error = validate_condition("data.a >")
        assert valid is False
        assert error

    @pytest.mark.parametrize("condition", [True, 0, 3.5, ["data.a"]])
    def test_non_string_condition_is_invalid(self, condition):
        assert validate_condition(condition) == (False, "condition must be a string")
        assert validate_condition(None) == (True, None)


class TestTruthiness:
    def test_javascript_truthiness(self):
        assert is_truthy([]) is True
        assert is_truthy({}) is True
        assert is_truthy(0) is False
        assert is_truthy(float("nan")) is False
        assert is_truthy("") is False
        assert is_truthy("0") is True
        assert is_truthy(None) is False

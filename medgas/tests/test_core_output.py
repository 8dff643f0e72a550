"""Tests for core output formatters."""

import json

from medgas.core.output import OutputFormat, format_number, format_result


def test_format_human_with_title():
    text = format_result({"key": "val"}, title="Test Title")
    assert "Test Title" in text
    assert "===" in text


def test_format_json():
    text = format_result({"flow_lpm": 29.5}, fmt=OutputFormat.JSON)
    assert json.loads(text)["flow_lpm"] == 29.5


def test_format_accepts_plain_string_format():
    text = format_result({"flow_lpm": 29.5}, fmt="json")
    assert json.loads(text) == {"flow_lpm": 29.5}


def test_format_markdown():
    text = format_result({"outer_diameter": 22.0}, fmt=OutputFormat.MARKDOWN)
    assert "| Parameter | Value |" in text
    assert "| Outer Diameter | 22.000 |" in text


def test_nested_dicts_flattened():
    text = format_result({"pipe": {"wall_thickness": 1.0}})
    assert "Pipe / Wall Thickness" in text


def test_format_float_precision():
    assert format_number(0.12345) == "0.123"
    assert format_number(12345.6) == "12,345.6"


def test_format_list_and_empty_list():
    assert "- a" in format_result({"items": ["a", "b"]})
    assert "(none)" in format_result({"items": []})


def test_booleans_and_none():
    text = format_result({"standard": True, "emergency": None})
    assert "yes" in text
    assert ": -" in text


def test_objects_with_to_dict():
    class Result:
        def to_dict(self):
            return {"cylinders": 21}

    assert json.loads(format_result(Result(), fmt=OutputFormat.JSON)) == {"cylinders": 21}

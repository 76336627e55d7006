"""Response shaping."""

from __future__ import annotations

from gemini_bridge.utils.output import extract_generation_result, format_output, success_output
from tests.conftest import gemini_success


def test_finish_reason_and_usage_surface_unchanged() -> None:
    result = extract_generation_result(gemini_success(finish_reason="STOP", usage={"totalTokenCount": 42}))

    output = success_output(result)

    assert output["status"] == 200
    assert output["message"] == "success"
    assert output["finishReason"] == "STOP"
    assert output["usage"] == {"totalTokenCount": 42}
    assert output["textOutput"] == "Hello from Gemini"
    assert output["geminiResponse"]["candidates"][0]["finishReason"] == "STOP"


def test_json_mode_strips_only_surrounding_whitespace() -> None:
    data = gemini_success(text='  {"a":1}  \n')

    assert extract_generation_result(data, is_json_response=True).text_output == '{"a":1}'
    assert extract_generation_result(data, is_json_response=False).text_output == '  {"a":1}  \n'

    inner = gemini_success(text='\n{\n  "a": 1\n}\n')
    assert extract_generation_result(inner, is_json_response=True).text_output == '{\n  "a": 1\n}'


def test_missing_fields_default_to_empty() -> None:
    result = extract_generation_result({"promptFeedback": {"blockReason": "SAFETY"}})

    assert result.text_output == ""
    assert result.finish_reason == ""
    assert result.usage == {}
    assert result.raw_response == {"promptFeedback": {"blockReason": "SAFETY"}}


def test_format_output_orders_declared_fields_and_keeps_extras() -> None:
    output = format_output({"traceId": "t-1", "message": "success", "status": 200})

    assert list(output) == ["status", "message", "traceId"]


def test_format_output_requires_status_and_message() -> None:
    assert format_output({"message": "oops"}) == {
        "status": 500,
        "message": "Internal error: missing required output property",
    }


def test_format_output_stringifies_detail() -> None:
    output = format_output({"status": 400, "message": "Failed", "detail": {"error": {"code": 400}}})

    assert output["detail"] == '{"error": {"code": 400}}'

import base64
from unittest.mock import MagicMock, patch

import pytest
import requests

from lp_builder.clients import gemini
from lp_builder.errors import ServiceUnavailable
from lp_builder.utils.encryption import encrypt


def _response(status, payload=None, text=""):
    res = MagicMock()
    res.status_code = status
    res.ok = 200 <= status < 300
    res.text = text
    res.json.return_value = payload or {}
    return res


@patch("lp_builder.clients.gemini.time.sleep")
@patch("lp_builder.clients.gemini.requests.request")
def test_retries_on_overload_with_backoff(mock_request, mock_sleep):
    mock_request.side_effect = [
        _response(503, text="overloaded"),
        _response(429, text="rate limited"),
        _response(200, {"ok": True}),
    ]

    res = gemini.fetch_with_retry("POST", "https://example.test", max_retries=3, initial_delay=2.0)

    assert res.json() == {"ok": True}
    assert mock_request.call_count == 3
    assert [c.args[0] for c in mock_sleep.call_args_list] == [2.0, 4.0]


@patch("lp_builder.clients.gemini.time.sleep")
@patch("lp_builder.clients.gemini.requests.request")
def test_other_errors_raise_immediately(mock_request, mock_sleep):
    mock_request.return_value = _response(400, text="bad request")

    with pytest.raises(gemini.GeminiError) as exc:
        gemini.fetch_with_retry("POST", "https://example.test", max_retries=3)

    assert exc.value.status_code == 400
    assert mock_request.call_count == 1
    mock_sleep.assert_not_called()


@patch("lp_builder.clients.gemini.time.sleep")
@patch("lp_builder.clients.gemini.requests.request")
def test_gives_up_after_max_retries(mock_request, mock_sleep):
    mock_request.side_effect = requests.ConnectionError("reset")

    with pytest.raises(requests.ConnectionError):
        gemini.fetch_with_retry("POST", "https://example.test", max_retries=3, initial_delay=1.0)

    assert mock_request.call_count == 3
    assert mock_sleep.call_count == 2


@patch("lp_builder.clients.gemini.requests.request")
def test_generate_text_joins_parts_and_reports_usage(mock_request, app):
    mock_request.return_value = _response(200, {
        "candidates": [{"content": {"parts": [{"text": "Hello "}, {"text": "world"}]}}],
        "usageMetadata": {"promptTokenCount": 12, "candidatesTokenCount": 3},
    })

    text, usage = gemini.generate_text("Say hello", api_key="k")

    assert text == "Hello world"
    assert usage == {"input_tokens": 12, "output_tokens": 3}
    assert mock_request.call_args.kwargs["params"] == {"key": "k"}


@patch("lp_builder.clients.gemini.requests.request")
def test_generate_image_decodes_inline_data(mock_request, app):
    encoded = base64.b64encode(b"\x89PNG").decode()
    mock_request.return_value = _response(200, {
        "candidates": [{"content": {"parts": [
            {"text": "here you go"},
            {"inlineData": {"mimeType": "image/png", "data": encoded}},
        ]}}],
    })

    data, mime = gemini.generate_image("a cat", aspect_ratio="16:9", api_key="k")

    assert data == b"\x89PNG"
    assert mime == "image/png"
    payload = mock_request.call_args.kwargs["json"]
    assert payload["generationConfig"]["imageConfig"] == {"aspectRatio": "16:9"}


@patch("lp_builder.clients.gemini.requests.request")
def test_generate_image_without_image_part_fails(mock_request, app):
    mock_request.return_value = _response(200, {
        "candidates": [{"content": {"parts": [{"text": "no image"}]}}],
    })

    with pytest.raises(gemini.GeminiError):
        gemini.generate_image("a cat", api_key="k")


def test_resolve_api_key_prefers_users_own_key(app):
    settings = MagicMock(google_api_key=encrypt("user-key"))

    assert gemini.resolve_api_key(settings) == ("user-key", True)


def test_resolve_api_key_falls_back_to_platform_key(app):
    settings = MagicMock(google_api_key=None)

    assert gemini.resolve_api_key(settings) == ("test-google-key", False)


def test_resolve_api_key_without_any_key(app):
    app.config["GOOGLE_GENERATIVE_AI_API_KEY"] = None

    with pytest.raises(ServiceUnavailable):
        gemini.resolve_api_key(None)


@patch("lp_builder.clients.gemini.requests.request")
def test_non_json_success_body_is_a_gemini_error(mock_request, app):
    res = _response(200)
    res.json.side_effect = ValueError("Expecting value")
    mock_request.return_value = res

    with pytest.raises(gemini.GeminiError, match="non-JSON"):
        gemini.generate_text("Say hello", api_key="k")


@patch("lp_builder.clients.gemini.time.sleep")
@patch("lp_builder.clients.gemini.requests.request", side_effect=requests.ConnectionError("reset"))
def test_network_failure_while_generating_is_a_gemini_error(mock_request, mock_sleep, app):
    with pytest.raises(gemini.GeminiError, match="reset"):
        gemini.generate_text("Say hello", api_key="k")

import json
from decimal import Decimal
from unittest.mock import MagicMock, patch

from lp_builder.application import credits
from lp_builder.clients.gemini import GeminiError
from lp_builder.models.credit import CreditTransaction, TX_API_USAGE
from lp_builder.models.generation_run import GenerationRun
from lp_builder.models.media_image import MediaImage
from lp_builder.utils.encryption import encrypt

COPY_URL = "/api/v1/ai/generate-copy"
IMAGE_URL = "/api/v1/ai/generate-image"
PUBLIC_URL = "https://proj.supabase.co/storage/v1/object/public/images/gen.png"


def _fund(user_id, amount="10"):
    credits.grant_plan_credit(user_id=user_id, credit_usd=Decimal(amount), plan_name="Pro")


def test_free_plan_is_refused(client, user):
    _, headers = user

    res = client.post(COPY_URL, json={"prompt": "Write a headline"}, headers=headers)

    assert res.status_code == 402
    assert res.get_json()["allowed"] is False


def test_empty_balance_needs_purchase(client, pro_user):
    _, headers = pro_user

    res = client.post(IMAGE_URL, json={"prompt": "a cat"}, headers=headers)

    assert res.status_code == 402
    assert res.get_json()["needPurchase"] is True


@patch("lp_builder.clients.gemini.generate_text", return_value=("Buy now", {"input_tokens": 1000, "output_tokens": 1000}))
def test_generate_copy_logs_run_and_charges_credit(mock_generate, client, pro_user):
    user_id, headers = pro_user
    _fund(user_id)

    res = client.post(COPY_URL, json={"prompt": "Write a headline"}, headers=headers)

    assert res.status_code == 200
    assert res.get_json() == {"text": "Buy now"}
    assert mock_generate.call_args.kwargs["api_key"] == "test-google-key"

    run = GenerationRun.query.one()
    assert (run.type, run.status, run.user_id) == ("copy", "succeeded", user_id)

    tx = CreditTransaction.query.filter_by(type=TX_API_USAGE).one()
    assert tx.generation_run_id == run.id
    assert tx.amount_usd == Decimal("-0.000375")
    assert credits.current_balance(user_id) == Decimal("9.999625")


@patch("lp_builder.clients.gemini.generate_text")
def test_generate_copy_from_sections_parses_json(mock_generate, client, pro_user):
    user_id, headers = pro_user
    _fund(user_id)
    proposals = [{"id": "s1", "text": "Headline", "dsl": {"constraints": "short"}}]
    mock_generate.return_value = (f"Here you go:\n{json.dumps(proposals)}", {})

    res = client.post(
        COPY_URL,
        json={"productInfo": "Skin care", "taste": "luxury", "sections": [{"id": "s1"}]},
        headers=headers,
    )

    assert res.status_code == 200
    assert res.get_json() == proposals
    prompt = mock_generate.call_args.args[0]
    assert "Skin care" in prompt and "luxury" in prompt and "s1" in prompt


@patch("lp_builder.clients.gemini.generate_text", return_value=("no json here", {}))
def test_generate_copy_with_unparseable_output_fails(mock_generate, client, pro_user):
    user_id, headers = pro_user
    _fund(user_id)

    res = client.post(COPY_URL, json={"sections": [{"id": "s1"}]}, headers=headers)

    assert res.status_code == 502
    assert GenerationRun.query.one().status == "failed"
    assert CreditTransaction.query.filter_by(type=TX_API_USAGE).count() == 0


def test_generate_copy_needs_prompt_or_sections(client, pro_user):
    user_id, headers = pro_user
    _fund(user_id)

    assert client.post(COPY_URL, json={}, headers=headers).status_code == 400


@patch("lp_builder.clients.storage.upload_bytes", return_value=PUBLIC_URL)
@patch("lp_builder.clients.gemini.generate_image", return_value=(b"\x89PNG", "image/png"))
def test_generate_image_stores_media(mock_generate, mock_upload, client, pro_user):
    user_id, headers = pro_user
    _fund(user_id)

    res = client.post(IMAGE_URL, json={"prompt": "a cat", "aspectRatio": "16:9"}, headers=headers)

    assert res.status_code == 201
    media = res.get_json()
    assert media["filePath"] == PUBLIC_URL
    assert media["sourceType"] == "ai-generate"
    assert (media["width"], media["height"]) == (1344, 768)
    assert media["prompt"] == "a cat"
    assert mock_upload.call_args.args[2] == "image/png"

    run = GenerationRun.query.one()
    assert (run.type, run.image_count) == ("image", 1)
    assert credits.current_balance(user_id) == Decimal("9.866")


@patch("lp_builder.clients.gemini.generate_image", side_effect=GeminiError("Gemini API error: 500", status_code=500))
def test_generate_image_failure_is_logged(mock_generate, client, pro_user):
    user_id, headers = pro_user
    _fund(user_id)

    res = client.post(IMAGE_URL, json={"prompt": "a cat"}, headers=headers)

    assert res.status_code == 502
    run = GenerationRun.query.one()
    assert run.status == "failed"
    assert "500" in run.error_message
    assert MediaImage.query.count() == 0
    assert credits.current_balance(user_id) == Decimal("10")


def test_generate_image_validates_input(client, pro_user):
    user_id, headers = pro_user
    _fund(user_id)

    assert client.post(IMAGE_URL, json={"prompt": ""}, headers=headers).status_code == 400
    assert client.post(IMAGE_URL, json={"prompt": "x", "aspectRatio": "2:1"}, headers=headers).status_code == 400


@patch("lp_builder.clients.storage.upload_bytes", return_value=PUBLIC_URL)
@patch("lp_builder.clients.gemini.generate_image", return_value=(b"\x89PNG", "image/png"))
def test_own_api_key_skips_credit(mock_generate, mock_upload, client, make_user):
    user_id, headers = make_user(plan="pro", google_api_key=encrypt("own-key"))

    res = client.post(IMAGE_URL, json={"prompt": "a cat"}, headers=headers)

    assert res.status_code == 201
    assert mock_generate.call_args.kwargs["api_key"] == "own-key"
    assert CreditTransaction.query.count() == 0


@patch("lp_builder.clients.gemini.requests.request")
def test_non_json_gemini_body_fails_the_run(mock_request, client, pro_user):
    user_id, headers = pro_user
    _fund(user_id)
    res = MagicMock(status_code=200, ok=True, text="<html>")
    res.json.side_effect = ValueError("Expecting value")
    mock_request.return_value = res

    res = client.post(COPY_URL, json={"prompt": "Write a headline"}, headers=headers)

    assert res.status_code == 502
    run = GenerationRun.query.one()
    assert run.status == "failed"
    assert "non-JSON" in run.error_message
    assert credits.current_balance(user_id) == Decimal("10")

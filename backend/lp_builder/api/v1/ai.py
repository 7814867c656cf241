import json
import re

from flask import current_app, jsonify, request

from lp_builder.application.generation_log import log_generation, start_timer
from lp_builder.application.usage import (
    check_image_generation_limit,
    check_text_generation_limit,
    record_api_usage,
)
from lp_builder.clients import gemini, storage
from lp_builder.domain.ai_costs import (
    IMAGE_MODEL,
    TEXT_MODEL,
    estimate_image_cost,
    estimate_text_cost,
    estimate_tokens,
)
from lp_builder.errors import BadGateway, BadRequest, PaymentRequired
from lp_builder.extensions import db
from lp_builder.models.generation_run import STATUS_FAILED, STATUS_SUCCEEDED
from lp_builder.models.media_image import MediaImage, SOURCE_AI_GENERATE
from lp_builder.normalizers.media import normalize_media
from lp_builder.utils.decorators import auth_required, current_user_settings
from . import v1_bp

MAX_PROMPT_LENGTH = 5000

ASPECT_RATIO_SIZES = {
    "1:1": (1024, 1024),
    "16:9": (1344, 768),
    "9:16": (768, 1344),
    "4:3": (1184, 864),
    "3:4": (864, 1184),
}

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")

COPY_PROMPT = """You are a professional landing page copywriter and director.
Propose one Japanese headline per section so the whole page reads as one story,
and define design data for each section.

Promotion: "{product_info}"
Overall taste: "{taste}"
Section ids: {section_ids}

Reply with a pure JSON array only:
[
  {{
    "id": "section id",
    "text": "headline",
    "dsl": {{
      "constraints": "length, required keywords, selling points",
      "brand_guidelines": "sentence endings, tone, spelling rules",
      "image_intent": "intent, composition and what to avoid in the image"
    }}
  }}
]"""


def _check_or_refuse(check):
    if not check.allowed:
        raise PaymentRequired(check.reason, **check.to_dict())


def _copy_prompt(data):
    sections = data.get("sections")
    if not isinstance(sections, list) or not sections:
        raise BadRequest("prompt or sections is required")

    section_ids = [str(s.get("id")) for s in sections if isinstance(s, dict) and s.get("id")]
    if not section_ids:
        raise BadRequest("sections must carry ids")

    return COPY_PROMPT.format(
        product_info=data.get("productInfo") or "not specified, infer from the page",
        taste=data.get("taste") or "professional",
        section_ids=", ".join(section_ids),
    )


def _failed(settings, gen_type, model, prompt, error, started_at):
    log_generation(
        user_id=settings.user_id,
        type=gen_type,
        endpoint=request.path,
        model=model,
        input_prompt=prompt,
        status=STATUS_FAILED,
        error_message=str(error),
        started_at=started_at,
        image_count=1 if gen_type == "image" else 0,
    )
    current_app.logger.error("%s generation failed for %s: %s", gen_type, settings.user_id, error)
    raise BadGateway("AI generation failed", detail=str(error))


@v1_bp.route("/ai/generate-copy", methods=["POST"])
@auth_required()
def generate_copy():
    settings = current_user_settings()
    data = request.get_json(silent=True) or {}

    prompt = data.get("prompt")
    structured = not prompt
    if structured:
        prompt = _copy_prompt(data)
    elif not isinstance(prompt, str) or len(prompt) > MAX_PROMPT_LENGTH:
        raise BadRequest(f"prompt must be a string of at most {MAX_PROMPT_LENGTH} characters")

    _check_or_refuse(check_text_generation_limit(settings, estimated_input_tokens=estimate_tokens(prompt)))
    api_key, uses_own_key = gemini.resolve_api_key(settings)

    started_at = start_timer()
    try:
        text, usage = gemini.generate_text(prompt, model=TEXT_MODEL, api_key=api_key)
    except gemini.GeminiError as exc:
        _failed(settings, "copy", TEXT_MODEL, prompt, exc, started_at)

    result = {"text": text}
    if structured:
        match = _JSON_ARRAY.search(text)
        try:
            result = json.loads(match.group(0)) if match else None
        except ValueError:
            result = None
        if result is None:
            _failed(settings, "copy", TEXT_MODEL, prompt, "JSON format mismatch", started_at)

    run = log_generation(
        user_id=settings.user_id,
        type="copy",
        endpoint=request.path,
        model=TEXT_MODEL,
        input_prompt=prompt,
        output_result=text,
        status=STATUS_SUCCEEDED,
        started_at=started_at,
    )

    if not uses_own_key:
        input_tokens = usage.get("input_tokens") or estimate_tokens(prompt)
        output_tokens = usage.get("output_tokens") or estimate_tokens(text)
        record_api_usage(
            user_id=settings.user_id,
            generation_run_id=run.id if run else None,
            cost=estimate_text_cost(TEXT_MODEL, input_tokens, output_tokens),
            model=TEXT_MODEL,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

    return jsonify(result)


@v1_bp.route("/ai/generate-image", methods=["POST"])
@auth_required()
def generate_image():
    settings = current_user_settings()
    data = request.get_json(silent=True) or {}

    prompt = data.get("prompt")
    if not isinstance(prompt, str) or not prompt.strip():
        raise BadRequest("prompt is required")
    if len(prompt) > MAX_PROMPT_LENGTH:
        raise BadRequest(f"prompt must be at most {MAX_PROMPT_LENGTH} characters")

    aspect_ratio = data.get("aspectRatio") or "1:1"
    if aspect_ratio not in ASPECT_RATIO_SIZES:
        raise BadRequest(f"aspectRatio must be one of {sorted(ASPECT_RATIO_SIZES)}")

    _check_or_refuse(check_image_generation_limit(settings, model=IMAGE_MODEL))
    api_key, uses_own_key = gemini.resolve_api_key(settings)

    started_at = start_timer()
    try:
        image_bytes, mime = gemini.generate_image(
            prompt, aspect_ratio=aspect_ratio, api_key=api_key, model=IMAGE_MODEL
        )
    except gemini.GeminiError as exc:
        _failed(settings, "image", IMAGE_MODEL, prompt, exc, started_at)

    extension = mime.split("/")[-1]
    public_url = storage.upload_bytes(image_bytes, f"ai-generated.{extension}", mime)

    width, height = ASPECT_RATIO_SIZES[aspect_ratio]
    image = MediaImage(
        user_id=settings.user_id,
        file_path=public_url,
        mime=mime,
        width=width,
        height=height,
        prompt=prompt,
        source_type=SOURCE_AI_GENERATE,
        file_size=len(image_bytes),
    )
    db.session.add(image)
    db.session.commit()

    run = log_generation(
        user_id=settings.user_id,
        type="image",
        endpoint=request.path,
        model=IMAGE_MODEL,
        input_prompt=prompt,
        output_result=public_url,
        image_count=1,
        status=STATUS_SUCCEEDED,
        started_at=started_at,
    )

    if not uses_own_key:
        record_api_usage(
            user_id=settings.user_id,
            generation_run_id=run.id if run else None,
            cost=estimate_image_cost(IMAGE_MODEL, 1),
            model=IMAGE_MODEL,
            image_count=1,
        )

    return jsonify(normalize_media(image)), 201

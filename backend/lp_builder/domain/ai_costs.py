"""Gemini pricing table and cost estimates, in USD."""
import math
import re
from decimal import Decimal

TEXT_MODEL = "gemini-2.0-flash"
IMAGE_MODEL = "gemini-3-pro-image-preview"
VIDEO_MODEL = "veo-2.0-generate-001"

# text: per 1M tokens, image: per image, video: per second
GEMINI_PRICING = {
    "gemini-2.0-flash": {"type": "text", "input": Decimal("0.075"), "output": Decimal("0.30")},
    "gemini-1.5-flash": {"type": "text", "input": Decimal("0.075"), "output": Decimal("0.30")},
    "gemini-1.5-flash-latest": {"type": "text", "input": Decimal("0.075"), "output": Decimal("0.30")},
    "gemini-3-pro-image-preview": {"type": "image", "per_image": Decimal("0.134")},
    "veo-2.0-generate-001": {"type": "video", "per_second": Decimal("0.35")},
}

_JAPANESE = re.compile(r"[\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FAF]")
_MILLION = Decimal(1_000_000)


def _pricing(model, kind):
    pricing = GEMINI_PRICING.get(model)
    if not pricing or pricing["type"] != kind:
        return None
    return pricing


def estimate_text_cost(model, input_tokens, output_tokens) -> Decimal:
    pricing = _pricing(model, "text")
    if pricing is None:
        return Decimal("0")
    return (
        Decimal(input_tokens) / _MILLION * pricing["input"]
        + Decimal(output_tokens) / _MILLION * pricing["output"]
    )


def estimate_image_cost(model, image_count) -> Decimal:
    pricing = _pricing(model, "image")
    if pricing is None:
        return Decimal("0")
    return Decimal(image_count) * pricing["per_image"]


def estimate_video_cost(model, duration_seconds) -> Decimal:
    pricing = _pricing(model, "video")
    if pricing is None:
        return Decimal("0")
    return Decimal(str(duration_seconds)) * pricing["per_second"]


def estimate_tokens(text) -> int:
    """Two characters per token for Japanese script, four otherwise."""
    if not text:
        return 0
    japanese = len(_JAPANESE.findall(text))
    other = len(text) - japanese
    return math.ceil(japanese / 2 + other / 4)

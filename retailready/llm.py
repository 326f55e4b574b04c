# retailready/llm.py
# Boundary to the external extraction model (OpenAI chat completions).
# - Output is untrusted; decode_response only guarantees "a JSON object"
# - Service failures -> UpstreamServiceError(reason=quota|auth|transport)
# - Unparseable payloads -> UpstreamFormatError

import json
import logging
import re
from typing import Any, Dict, Optional

from openai import (
    APIConnectionError,
    APIStatusError,
    AuthenticationError,
    OpenAI,
    OpenAIError,
    PermissionDeniedError,
    RateLimitError,
)

from .errors import UpstreamFormatError, UpstreamServiceError
from .prompts import SYSTEM_PROMPT, ExtractionRequest, build_prompt
from .schemas import RetailerProfile
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

_FENCED = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)


def make_client(settings: Optional[Settings] = None) -> OpenAI:
    settings = settings or get_settings()
    key = settings.openai_api_key.get_secret_value() if settings.openai_api_key else None
    try:
        return OpenAI(api_key=key, timeout=settings.openai_timeout_seconds)
    except OpenAIError as exc:
        # raised when no API key is configured anywhere
        raise UpstreamServiceError("auth", f"OpenAI client not configured: {exc}") from exc


def decode_response(content: Optional[str]) -> Dict[str, Any]:
    """Strip code-fence markers and parse the model output as a JSON object."""
    if not content or not content.strip():
        raise UpstreamFormatError("Empty response from extraction model")

    m = _FENCED.search(content)
    body = m.group(1) if m else content.strip()

    try:
        data = json.loads(body)
    except json.JSONDecodeError as exc:
        raise UpstreamFormatError(f"Failed to parse AI response as JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise UpstreamFormatError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def _service_error(exc: OpenAIError) -> UpstreamServiceError:
    if isinstance(exc, RateLimitError):
        code = getattr(exc, "code", None)
        if code == "insufficient_quota":
            return UpstreamServiceError("quota", "OpenAI API quota exceeded. Please check your billing.")
        return UpstreamServiceError("quota", f"OpenAI rate limit reached: {exc}")
    if isinstance(exc, (AuthenticationError, PermissionDeniedError)):
        return UpstreamServiceError("auth", "Invalid OpenAI API key. Please check your configuration.")
    if isinstance(exc, APIConnectionError):
        return UpstreamServiceError("transport", f"Could not reach OpenAI: {exc}")
    if isinstance(exc, APIStatusError):
        return UpstreamServiceError("transport", f"OpenAI returned HTTP {exc.status_code}: {exc}")
    return UpstreamServiceError("transport", f"OpenAI request failed: {exc}")


def complete_extraction(
    request: ExtractionRequest,
    client: Any = None,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    """
    One extraction call. Returns the decoded (still unvalidated) JSON object;
    run it through normalizer.normalize_extraction before use.
    """
    settings = settings or get_settings()
    client = client or make_client(settings)

    logger.info("Sending %s routing guide to %s for extraction", request.profile.name, settings.openai_model)
    try:
        response = client.chat.completions.create(
            model=settings.openai_model,
            messages=[
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.user_prompt},
            ],
            temperature=settings.openai_temperature,
        )
    except OpenAIError as exc:
        err = _service_error(exc)
        logger.error("Extraction call failed (%s): %s", err.reason, exc)
        raise err from exc

    try:
        content = response.choices[0].message.content
    except (AttributeError, IndexError) as exc:
        raise UpstreamFormatError("Extraction model returned no choices") from exc

    data = decode_response(content)
    logger.info("Extraction model answered with keys: %s", sorted(data))
    return data


def extract_candidate_requirements(
    document_text: str,
    profile: RetailerProfile,
    client: Any = None,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    """Extraction call for an already chosen retailer profile."""
    settings = settings or get_settings()
    request = ExtractionRequest(
        profile=profile,
        system_prompt=SYSTEM_PROMPT,
        user_prompt=build_prompt(profile, document_text, max_chars=settings.max_text_length),
        truncated=len(document_text) > settings.max_text_length,
    )
    return complete_extraction(request, client=client, settings=settings)

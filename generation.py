import base64
import binascii
from typing import Optional

from google import genai
from google.genai import types
from loguru import logger

import settings
from images import DEFAULT_MIME_TYPE, ImagePayload

GENERATE_TEMPLATE = (
    "Transform this person into a professional headshot. Maintain their facial features and identity accurately."
    " Apply this style: {style_prompt}. The result should be a single, high-quality professional headshot."
)
EDIT_TEMPLATE = (
    "Edit this professional headshot based on this instruction: {instruction}."
    " Keep the person's identity consistent."
)


class HeadshotError(RuntimeError):
    pass


class GenerationFailed(HeadshotError):
    """The model answered but returned no image."""


class TransportFailed(HeadshotError):
    """The request to the model raised before a response came back."""


class MissingCredentials(HeadshotError):
    pass


def create_client(api_key: Optional[str] = None, *, timeout_ms: Optional[int] = None) -> genai.Client:
    api_key = api_key or settings.get_api_key()
    if not api_key:
        logger.error("GEMINI_API_KEY (or GOOGLE_API_KEY) environment variable is not set.")
        raise MissingCredentials("Set GEMINI_API_KEY (or GOOGLE_API_KEY) before generating headshots.")

    if timeout_ms is None:
        timeout_ms = settings.get_request_timeout_ms()

    logger.info("Initializing Google GenAI client; timeout_ms={}", timeout_ms)
    if timeout_ms:
        return genai.Client(api_key=api_key, http_options=types.HttpOptions(timeout=timeout_ms))
    return genai.Client(api_key=api_key)


def compose_generate_prompt(style_prompt: str) -> str:
    return GENERATE_TEMPLATE.format(style_prompt=style_prompt)


def compose_edit_prompt(instruction: str) -> str:
    return EDIT_TEMPLATE.format(instruction=instruction.strip())


def _extract_image(response: types.GenerateContentResponse) -> Optional[ImagePayload]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates or candidates[0].content is None:
        return None

    for part in candidates[0].content.parts or []:
        inline = getattr(part, "inline_data", None)
        if not inline or not inline.data:
            continue
        data = inline.data
        if isinstance(data, str):
            data = base64.b64decode(data)
        return ImagePayload(data=data, mime_type=inline.mime_type or DEFAULT_MIME_TYPE)
    return None


def _request_image(
    client: genai.Client,
    image: ImagePayload,
    instruction: str,
    model: Optional[str],
) -> ImagePayload:
    model_name = model or settings.MODEL_NAME
    logger.debug(
        "Calling model '{}'; image_type={}, image_size={} bytes, prompt_len={}",
        model_name,
        image.mime_type,
        len(image.data),
        len(instruction),
    )

    try:
        response = client.models.generate_content(
            model=model_name,
            contents=[
                types.Part.from_bytes(data=image.data, mime_type=image.mime_type),
                instruction,
            ],
            config=types.GenerateContentConfig(
                response_modalities=["TEXT", "IMAGE"],
            ),
        )
    except Exception as exc:  # noqa: BLE001
        logger.warning("Model '{}' failed to generate content: {}", model_name, exc)
        raise TransportFailed(f"Request to model '{model_name}' failed.") from exc

    logger.info("Model '{}' returned a response.", model_name)

    try:
        generated = _extract_image(response)
    except (binascii.Error, ValueError) as exc:
        logger.error("Model returned an image payload that could not be decoded: {}", exc)
        raise GenerationFailed("The model returned an unreadable image.") from exc

    if generated is None:
        feedback = getattr(response, "prompt_feedback", None)
        logger.error(
            "Model response did not contain an image payload; block_reason={}",
            getattr(feedback, "block_reason", None),
        )
        raise GenerationFailed("No image was returned by the model.")

    logger.debug("Generated image ready; type={}, size={} bytes.", generated.mime_type, len(generated.data))
    return generated


def generate_headshot(
    client: genai.Client,
    source: ImagePayload,
    style_prompt: str,
    *,
    model: Optional[str] = None,
) -> ImagePayload:
    """Turn ``source`` into a professional headshot in the given style.

    Raises:
        GenerationFailed: the model answered without an image part.
        TransportFailed: the SDK raised while making the request.
    """
    if not source.data:
        raise ValueError("A source image is required.")
    if not style_prompt:
        raise ValueError("A style prompt is required.")

    logger.info("Generating headshot; style_prompt_len={}", len(style_prompt))
    return _request_image(client, source, compose_generate_prompt(style_prompt), model)


def edit_headshot(
    client: genai.Client,
    image: ImagePayload,
    instruction: str,
    *,
    model: Optional[str] = None,
) -> ImagePayload:
    """Apply a free-text edit to a generated headshot. Same failures as :func:`generate_headshot`."""
    if not image.data:
        raise ValueError("An image to edit is required.")
    if not instruction or not instruction.strip():
        raise ValueError("An edit instruction is required.")

    logger.info("Editing headshot; instruction_len={}", len(instruction.strip()))
    return _request_image(client, image, compose_edit_prompt(instruction), model)

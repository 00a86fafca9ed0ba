from io import BytesIO
from unittest.mock import MagicMock

import pytest
from google.genai import types
from PIL import Image

from images import ImagePayload


def encode_image(fmt: str, color: str = "grey", size=(8, 8)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def image_response(data: bytes, mime_type: str = "image/png") -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(
                    role="model",
                    parts=[
                        types.Part(text="Here is your headshot."),
                        types.Part.from_bytes(data=data, mime_type=mime_type),
                    ],
                )
            )
        ]
    )


def text_only_response(text: str = "I can't help with that.") -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=[types.Part(text=text)]))]
    )


@pytest.fixture
def png_bytes() -> bytes:
    return encode_image("PNG")


@pytest.fixture
def source_image(png_bytes) -> ImagePayload:
    return ImagePayload(data=png_bytes, mime_type="image/png")


@pytest.fixture
def generated_bytes() -> bytes:
    return encode_image("PNG", color="navy")


@pytest.fixture
def client():
    return MagicMock(name="genai_client")

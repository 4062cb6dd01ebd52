"""Calligraphy signature generation through the Gemini API.

The generator sends the name and the chosen style to an image-capable Gemini
model and returns the first inline image of the response as a ``data:`` URI,
ready to be loaded as the overlay of the compositing surface.
"""

import base64
import logging
from uuid import uuid4

from google import genai
from google.genai import types as genai_types

from inkflow.errors import (
    InvalidNameError,
    MissingCredentialError,
    NoImageDataError,
    RemoteServiceError,
)
from inkflow.models.core_models import CalligraphyStyle, GeneratedSignature
from inkflow.models.settings_models import GenerationParams, InkflowSettings

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a master Chinese calligrapher AI agent.\n"
    "Your task is to generate high-quality, authentic-looking Chinese "
    "calligraphy images.\n"
    "The images should always be black ink on a pure white background.\n"
    "Focus on the flow, stroke weight, and artistic balance of the characters.\n"
    "Do not add any colored stamps, seals, or background textures. "
    "Strictly black on white."
)


def build_prompt(name: str, style: CalligraphyStyle) -> str:
    """Build the user prompt for one signature.

    Args:
        name: Text to write, normally a person's name.
        style: Calligraphy style to write it in.

    Returns:
        Prompt text sent alongside the system instruction.
    """
    return (
        f'Please create a calligraphy image for the name "{name}".\n'
        f"Style: {style.label}.\n"
        "\n"
        "Requirements:\n"
        "1. The text must be clearly written in rich, deep black Chinese ink.\n"
        "2. The background must be pure, flat white (RGB 255, 255, 255).\n"
        "3. The composition should be balanced and artistic, suitable for a "
        "signature.\n"
        "4. Ensure high contrast.\n"
    )


def create_client(
    settings: InkflowSettings, params: GenerationParams | None = None
) -> genai.Client:
    """Create a Gemini client from the user's settings.

    The alternate base URL, when set, replaces the default endpoint.

    Raises:
        MissingCredentialError: If no API key is configured.
    """
    if not settings.has_credential:
        raise MissingCredentialError("API key is not configured")

    params = params or GenerationParams()
    base_url = settings.base_url.strip() or None
    http_options = genai_types.HttpOptions(base_url=base_url, timeout=params.timeout_ms)
    return genai.Client(api_key=settings.api_key.strip(), http_options=http_options)


def extract_image_data_uri(response) -> str:
    """Return the first inline image of a response as a data URI.

    Raises:
        NoImageDataError: If no candidate part carries image bytes.
    """
    for candidate in response.candidates or []:
        content = candidate.content
        if content is None:
            continue
        for part in content.parts or []:
            inline = getattr(part, "inline_data", None)
            if inline is None or not inline.data:
                continue
            data = inline.data
            if isinstance(data, bytes):
                data = base64.b64encode(data).decode("ascii")
            mime_type = inline.mime_type or "image/png"
            return f"data:{mime_type};base64,{data}"

    raise NoImageDataError("Response contained no inline image data")


def generate_signature(
    name: str,
    style: CalligraphyStyle,
    settings: InkflowSettings,
    params: GenerationParams | None = None,
    client=None,
) -> GeneratedSignature:
    """Generate a calligraphy signature image.

    Args:
        name: Text to write.
        style: Calligraphy style.
        settings: User settings providing the API key and base URL.
        params: Model and timeout configuration.
        client: Optional pre-built client exposing ``models.generate_content``;
            a Gemini client is created from ``settings`` when omitted.

    Returns:
        GeneratedSignature whose ``url`` is a ``data:`` URI.

    Raises:
        InvalidNameError: If the name is blank.
        MissingCredentialError: If no API key is configured.
        RemoteServiceError: If the request fails or times out.
        NoImageDataError: If the response contains no image.
    """
    name = name.strip()
    if not name:
        raise InvalidNameError("Name is empty")
    if not settings.has_credential:
        raise MissingCredentialError("API key is not configured")

    params = params or GenerationParams()

    logger.info(f"Requesting {style.value} signature from {params.model}")
    try:
        if client is None:
            client = create_client(settings, params)
        response = client.models.generate_content(
            model=params.model,
            contents=build_prompt(name, style),
            config=genai_types.GenerateContentConfig(
                system_instruction=SYSTEM_INSTRUCTION,
                response_modalities=["IMAGE", "TEXT"],
            ),
        )
    except Exception as e:
        logger.error(f"Gemini request failed: {e}")
        raise RemoteServiceError(str(e)) from e

    url = extract_image_data_uri(response)
    return GeneratedSignature(id=str(uuid4()), url=url, name=name, style=style)

"""Recipe image flow: recipe title in, displayable image reference out.

Called once per rendered recipe card, independently of the suggestion call and
of sibling cards. The generated image comes back from Gemini as inline bytes and
is turned into a `data:` URI so the card can show it without another fetch.

Core Functions:
- validate_image_format(): Sniff inline bytes (JPEG/PNG/WEBP only)
- compress_image(): Re-encode large images as JPEG with Pillow
- to_data_uri(): Build a base64 data URI
- RecipeImageGenerator.generate(): One provider call, placeholder on empty output
"""

import asyncio
import base64
from io import BytesIO
from typing import Optional

import filetype
from google import genai
from google.genai import types
from PIL import Image

from src.models.models import GenerateRecipeImageInput, GenerateRecipeImageOutput
from src.prompts.prompts import build_image_prompt
from src.utils.config import config
from src.utils.logger import logger


SUPPORTED_IMAGE_TYPES = {
    "jpg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
}


class ImageProviderError(RuntimeError):
    """Calling the image provider failed or timed out."""


def validate_image_format(image_bytes: bytes) -> Optional[str]:
    """Return the MIME type of the image bytes, or None if unsupported.

    Uses magic bytes rather than the MIME type declared by the provider.
    """
    kind = filetype.guess(image_bytes) if image_bytes else None
    if kind is None or kind.extension not in SUPPORTED_IMAGE_TYPES:
        logger.warning(f"Unsupported generated image format: {kind.mime if kind else 'unknown'}")
        return None
    return SUPPORTED_IMAGE_TYPES[kind.extension]


def compress_image(image_bytes: bytes, mime_type: str) -> tuple[bytes, str]:
    """Compress a generated image before inlining it in a data URI.

    Images below COMPRESS_IMG_THRESHOLD_KB are returned unchanged. Larger ones
    are converted to RGB, resized to MAX_IMAGE_WIDTH and saved as progressive JPEG.
    On any Pillow error the original bytes are kept.

    Args:
        image_bytes: Raw image bytes.
        mime_type: MIME type of image_bytes.

    Returns:
        Tuple of (bytes, mime_type) to inline.
    """
    size_kb = len(image_bytes) / 1024
    if size_kb < config.COMPRESS_IMG_THRESHOLD_KB:
        logger.debug(f"Image {size_kb:.1f}KB below compression threshold, keeping original")
        return image_bytes, mime_type

    try:
        img = Image.open(BytesIO(image_bytes))

        if img.mode in ("RGBA", "LA", "P"):
            img = img.convert("RGBA")
            rgb_img = Image.new("RGB", img.size, (255, 255, 255))
            rgb_img.paste(img, mask=img.split()[-1])
            img = rgb_img
        elif img.mode != "RGB":
            img = img.convert("RGB")

        if img.width > config.MAX_IMAGE_WIDTH:
            ratio = config.MAX_IMAGE_WIDTH / img.width
            img = img.resize((config.MAX_IMAGE_WIDTH, int(img.height * ratio)), Image.Resampling.LANCZOS)

        output = BytesIO()
        img.save(output, format="JPEG", quality=85, optimize=True, progressive=True)
        compressed = output.getvalue()
    except Exception as e:
        logger.warning(f"Image compression failed, keeping original: {e}")
        return image_bytes, mime_type

    logger.debug(f"Image compressed: {size_kb:.1f}KB → {len(compressed) / 1024:.1f}KB")
    return compressed, "image/jpeg"


def to_data_uri(image_bytes: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def extract_image_url(response) -> Optional[str]:
    """Pick the first usable image from a generate_content response.

    Inline bytes become a data URI; a file part is returned as its URI.
    Text parts are ignored.
    """
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                mime_type = validate_image_format(inline.data)
                if mime_type is None:
                    continue
                data = inline.data
                if config.COMPRESS_IMG:
                    data, mime_type = compress_image(data, mime_type)
                return to_data_uri(data, mime_type)

            file_data = getattr(part, "file_data", None)
            if file_data is not None and file_data.file_uri:
                return file_data.file_uri

    return None


class RecipeImageGenerator:
    """Image Requester.

    Each call is a single provider request bounded by IMAGE_TIMEOUT_SECONDS.
    No retries: the card falls back to the placeholder instead.
    """

    def __init__(self, client: Optional[genai.Client] = None) -> None:
        self.client = client if client is not None else genai.Client(api_key=config.GEMINI_API_KEY)

    async def generate(self, request: GenerateRecipeImageInput) -> GenerateRecipeImageOutput:
        """Generate an illustration for one recipe.

        Args:
            request: Validated image request (recipe title).

        Returns:
            GenerateRecipeImageOutput with a data URI, a remote URL, or the
            placeholder when the provider returned no image.

        Raises:
            ImageProviderError: If the provider call fails or times out.
        """
        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(
                    self.client.models.generate_content,
                    model=config.IMAGE_GENERATION_MODEL,
                    contents=build_image_prompt(request.title),
                    config=types.GenerateContentConfig(response_modalities=["TEXT", "IMAGE"]),
                ),
                timeout=config.IMAGE_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError as e:
            raise ImageProviderError(
                f"Image generation timed out after {config.IMAGE_TIMEOUT_SECONDS}s"
            ) from e
        except Exception as e:
            raise ImageProviderError(f"Image generation failed: {e}") from e

        image_url = extract_image_url(response)
        if not image_url:
            logger.info(
                "Image provider returned no image, using placeholder",
                extra={"recipe_title": request.title},
            )
            image_url = config.PLACEHOLDER_IMAGE_URL

        return GenerateRecipeImageOutput(image_url=image_url)

    async def get_image(self, title: str) -> str:
        """Return an image reference for the recipe title (see generate)."""
        output = await self.generate(GenerateRecipeImageInput(title=title))
        return output.image_url

    async def __call__(self, title: str) -> str:
        return await self.get_image(title)

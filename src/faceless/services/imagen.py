"""Google Imagen API client wrapper via Vertex AI."""

import base64
import logging
from pathlib import Path
from typing import Optional

from ..config import config
from ..errors import ProviderError, ValidationError
from .vertex import VertexClient

logger = logging.getLogger(__name__)

ASPECT_RATIOS = ("1:1", "16:9", "9:16", "4:3", "3:4")


def thumbnail_prompt(title: str, channel_url: str = "") -> str:
    """Build the prompt for a click-worthy 16:9 video thumbnail."""
    channel_context = (
        f"Style matches channel: {channel_url}" if channel_url
        else "General trending YouTube style"
    )
    return "\n".join([
        "Create a high-CTR YouTube thumbnail.",
        f'VIDEO TITLE: "{title}"',
        f"CHANNEL CONTEXT: {channel_context}",
        "",
        "REQUIREMENTS:",
        "- Aspect Ratio 16:9",
        "- High contrast, vibrant colors",
        "- If the title is provided, ensure the text in the image is legible and punchy.",
        "- Photorealistic or 3D Render style (high quality).",
    ])


class ImagenClient(VertexClient):
    """Client wrapper for Google Imagen image generation via Vertex AI."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        location: Optional[str] = None,
        model: Optional[str] = None,
        **kwargs,
    ) -> None:
        """Initialize the Imagen client.

        Args:
            project_id: Google Cloud project ID.
            location: GCP region for Vertex AI.
            model: Imagen model name.
        """
        super().__init__(project_id=project_id, location=location, **kwargs)
        self._model = model or config.imagen_model

    @property
    def model(self) -> str:
        return self._model

    def generate(
        self,
        prompt: str,
        aspect_ratio: str = "16:9",
        negative_prompt: Optional[str] = None,
    ) -> bytes:
        """Generate one image from a text prompt.

        Args:
            prompt: Text description of the image to generate.
            aspect_ratio: Image aspect ratio ('1:1', '16:9', '9:16', '4:3', '3:4').
            negative_prompt: Things to avoid in the image.

        Returns:
            PNG image bytes.

        Raises:
            ValidationError: If the prompt is empty or the ratio unsupported.
            RateLimited: If Vertex AI rejects the request for quota reasons.
            ProviderError: If no image comes back.
        """
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt cannot be empty", code="empty_prompt")
        if aspect_ratio not in ASPECT_RATIOS:
            raise ValidationError(f"Invalid aspect_ratio: {aspect_ratio}", code="bad_ratio")

        request_body = {
            "instances": [
                {"prompt": prompt}
            ],
            "parameters": {
                "sampleCount": 1,
                "aspectRatio": aspect_ratio,
            },
        }
        if negative_prompt:
            request_body["parameters"]["negativePrompt"] = negative_prompt

        logger.info(f"Generating image with Imagen: {prompt[:50]}...")
        data = self._post(self._model, "predict", request_body)

        predictions = data.get("predictions", [])
        if not predictions:
            raise ProviderError("No predictions in Imagen response")

        image_data = predictions[0].get("bytesBase64Encoded")
        if not image_data:
            raise ProviderError("No image data in Imagen response")

        return base64.b64decode(image_data)

    def save_image(
        self,
        prompt: str,
        output_path: Path,
        aspect_ratio: str = "16:9",
        negative_prompt: Optional[str] = None,
    ) -> Path:
        """Generate an image and write it to ``output_path``."""
        image = self.generate(prompt, aspect_ratio=aspect_ratio, negative_prompt=negative_prompt)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "wb") as f:
            f.write(image)
        logger.info(f"Saved image to {output_path}")
        return output_path

    def generate_thumbnail(self, title: str, output_path: Path, channel_url: str = "") -> Path:
        """Render a 16:9 thumbnail for the finished video."""
        return self.save_image(thumbnail_prompt(title, channel_url), output_path, aspect_ratio="16:9")

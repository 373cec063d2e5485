"""File output for card previews."""

from __future__ import annotations

from pathlib import Path

from PIL import Image

DEFAULT_FRAME_PATH = "preview_output/card.png"


def save_frame(image: Image.Image, path: str = DEFAULT_FRAME_PATH) -> Path:
    """Write a composed card to disk as PNG and return where it went."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(output_path, format="PNG")
    return output_path


__all__ = ["DEFAULT_FRAME_PATH", "save_frame"]

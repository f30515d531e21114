"""Image decoding and texture upload."""

from pathlib import Path

import moderngl
from PIL import Image

from gltr.errors import TextureLoadError


def load_image(path: str | Path) -> Image.Image:
    """Decode an image file as RGBA."""
    try:
        with Image.open(path) as image:
            return image.convert("RGBA")
    except OSError as e:
        raise TextureLoadError(path, str(e)) from e


def create_texture(ctx: moderngl.Context, image: Image.Image) -> moderngl.Texture:
    """Upload an RGBA image with UV (0, 0) at its bottom-left corner."""
    flipped = image.convert("RGBA").transpose(Image.Transpose.FLIP_TOP_BOTTOM)
    texture = ctx.texture(flipped.size, 4, flipped.tobytes())
    texture.filter = (moderngl.LINEAR, moderngl.LINEAR)
    # Fitted coordinates outside [0, 1] clamp to the edge instead of tiling
    texture.repeat_x = False
    texture.repeat_y = False
    return texture


def load_texture(
    ctx: moderngl.Context, path: str | Path
) -> tuple[moderngl.Texture, tuple[int, int]]:
    """Load an image file into a texture.

    Returns:
        Tuple of (texture, (width, height))
    """
    image = load_image(path)
    return create_texture(ctx, image), image.size


__all__ = ["create_texture", "load_image", "load_texture"]

"""Profile image normalization with Pillow.

Every accepted upload becomes a square JPEG of a fixed size, cropped
around the centre.
"""

import io

from PIL import Image, ImageOps, UnidentifiedImageError

from account_auth.core.config import settings
from account_auth.core.errors import ProcessingFailureError

# Decompression-bomb guard: refuse anything above ~40 megapixels
Image.MAX_IMAGE_PIXELS = 40_000_000


def normalize_profile_image(
    content: bytes,
    *,
    size: int | None = None,
    quality: int | None = None,
) -> bytes:
    """Centre-crop and resize an image, re-encoding it as JPEG.

    Args:
        content: Raw uploaded bytes (already type-checked).
        size: Edge length of the square output. Defaults to
            settings.profile_image_size.
        quality: JPEG quality. Defaults to settings.profile_image_quality.

    Returns:
        Encoded JPEG bytes.

    Raises:
        ProcessingFailureError: If Pillow cannot decode or transform the
            image. The underlying error is chained, never shown.
    """
    edge = size or settings.profile_image_size
    try:
        with Image.open(io.BytesIO(content)) as img:
            img = ImageOps.exif_transpose(img)
            # GIF/PNG may carry palette or alpha; JPEG needs plain RGB
            rgb = img.convert("RGB")
            fitted = ImageOps.fit(
                rgb,
                (edge, edge),
                method=Image.Resampling.LANCZOS,
                centering=(0.5, 0.5),
            )
            out = io.BytesIO()
            fitted.save(
                out,
                format="JPEG",
                quality=quality or settings.profile_image_quality,
            )
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
    ) as exc:
        raise ProcessingFailureError() from exc
    return out.getvalue()

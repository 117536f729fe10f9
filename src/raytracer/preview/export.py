"""Image export utilities for rendered images.

Rendered images are float32 arrays of shape (H, W, 3) with values in [0, 1]
and row 0 at the top. They are written as 8-bit RGB PNG files with Pillow.

Example:
    >>> from raytracer.preview.export import find_unique_file_name, save_png_from_array
    >>> image = tracer.render()
    >>> save_png_from_array(image, find_unique_file_name())
"""

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from raytracer.core.color import color_to_rgb8

DEFAULT_FILE_NAME = "raytraced.png"

# Number of numbered candidates tried before giving up
MAX_NAME_ATTEMPTS = 1000


def apply_gamma(image: npt.NDArray[np.float32], gamma: float) -> npt.NDArray[np.float32]:
    """Apply gamma correction (``image ** (1 / gamma)``) to a [0, 1] image.

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")
    clipped = np.clip(image, 0.0, 1.0)
    if gamma == 1.0:
        return clipped.astype(np.float32)
    return np.power(clipped, 1.0 / gamma).astype(np.float32)


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a [0, 1] float image to rounded 8-bit channels.

    Args:
        image: Image array of shape (H, W, 3).
        gamma: Gamma correction value. The default 1.0 writes colors as-is.

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If the image is not (H, W, 3).
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    return color_to_rgb8(apply_gamma(image, gamma))


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str | Path,
    *,
    gamma: float = 1.0,
) -> Path:
    """Save a float image as an 8-bit RGB PNG file.

    Parent directories are not created.

    Args:
        image: Image array of shape (H, W, 3), values in [0, 1].
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value (default 1.0, no correction).

    Returns:
        The path written.
    """
    path = Path(filepath)
    pil_image = PILImage.fromarray(image_to_uint8(image, gamma=gamma), mode="RGB")
    pil_image.save(path)
    return path


def find_unique_file_name(
    default: str | Path = DEFAULT_FILE_NAME,
    max_attempts: int = MAX_NAME_ATTEMPTS,
) -> Path:
    """Find an output path that does not exist yet.

    Tries ``default`` first, then ``<stem>-1<suffix>``, ``<stem>-2<suffix>``
    and so on, resolved against the current directory.

    Args:
        default: The preferred file name.
        max_attempts: Number of numbered candidates to try.

    Returns:
        An absolute path that does not currently exist.

    Raises:
        FileExistsError: If every candidate is taken.
    """
    base = Path(default).absolute()
    candidate = base
    for i in range(1, max_attempts + 1):
        if not candidate.exists():
            return candidate
        candidate = base.with_name(f"{base.stem}-{i}{base.suffix}")
    if not candidate.exists():
        return candidate
    raise FileExistsError(
        "Could not find a unique name for the file. Consider using --out-file and try again."
    )

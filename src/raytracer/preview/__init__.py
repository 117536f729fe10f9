"""Preview module for rendered output.

Components:
    export: 8-bit conversion, gamma correction, PNG export and unique output
        file naming

Example:
    >>> from raytracer.preview import find_unique_file_name, save_png_from_array
    >>> save_png_from_array(image, find_unique_file_name())
"""

from .export import (
    DEFAULT_FILE_NAME,
    apply_gamma,
    find_unique_file_name,
    image_to_uint8,
    save_png_from_array,
)

__all__ = [
    "DEFAULT_FILE_NAME",
    "apply_gamma",
    "find_unique_file_name",
    "image_to_uint8",
    "save_png_from_array",
]

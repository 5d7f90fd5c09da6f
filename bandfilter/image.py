import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import ConfigError, LoadError, WriteError

GRAYSCALE_MODES = ("1", "L", "LA", "I", "I;16", "F")


def as_pixels(buffer, width, height, channels):
    """View a raw sample buffer as an (height, width, channels) uint8 array."""
    if channels not in (1, 3):
        raise ConfigError(f"unsupported channel count {channels}")
    if isinstance(buffer, (bytes, bytearray, memoryview)):
        samples = np.frombuffer(buffer, dtype=np.uint8)
    else:
        samples = np.asarray(buffer, dtype=np.uint8)
    expected = width * height * channels
    if samples.size != expected:
        raise ConfigError(
            f"buffer holds {samples.size} samples, expected {width}x{height}x{channels}={expected}"
        )
    return samples.reshape(height, width, channels)


def load_image(path):
    try:
        with Image.open(path) as img:
            img.load()
            if img.mode in GRAYSCALE_MODES:
                loaded = img.convert("L")
            else:
                loaded = img.convert("RGB")
    except (OSError, UnidentifiedImageError, ValueError) as exc:
        raise LoadError(f"Error loading image {path}: {exc}") from exc

    img_array = np.array(loaded, dtype=np.uint8)
    if img_array.ndim == 2:
        img_array = img_array[:, :, np.newaxis]

    height, width, channels = img_array.shape
    return img_array, width, height, channels


def save_image(path, buffer, width, height, channels):
    """Write the samples as PNG whatever the file extension says."""
    pixels = as_pixels(buffer, width, height, channels)
    if channels == 1:
        img = Image.fromarray(np.ascontiguousarray(pixels[:, :, 0]))
    else:
        img = Image.fromarray(np.ascontiguousarray(pixels))

    try:
        img.save(path, format="PNG")
    except (OSError, ValueError) as exc:
        raise WriteError(f"Error writing image {path}: {exc}") from exc

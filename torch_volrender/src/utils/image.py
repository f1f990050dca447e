"""
In-memory image buffer and image file writers.
"""

import logging
import typing

import imageio.v2 as imageio
import numpy as np
import torch

log = logging.getLogger(__name__)


class Image(object):
    """
    A buffer of RGB values in [0, 1].

    Values are clamped when they are written, never when they are read.
    Disjoint blocks of rows may be written concurrently.

    Attributes:
        width (int): Width of the image.
        height (int): Height of the image.
        data (torch.Tensor): Tensor of shape (height, width, 3).
    """

    def __init__(self, width: int, height: int, dtype: torch.dtype = torch.float32):
        if not isinstance(width, int) or not isinstance(height, int):
            raise ValueError(
                f"Expected integer image dimensions. Got {type(width)} and {type(height)}."
            )
        if width <= 0 or height <= 0:
            raise ValueError(f"Expected positive image dimensions. Got ({width}, {height}).")
        self._width = width
        self._height = height
        self._data = torch.zeros((height, width, 3), dtype=dtype)

    def set_pixel(self, x: int, y: int, r: float, g: float, b: float) -> None:
        """Sets the color of pixel (x, y). Coordinates outside the image are ignored."""
        if 0 <= x < self._width and 0 <= y < self._height:
            self._data[y, x] = torch.tensor([r, g, b], dtype=self._data.dtype).clamp(0.0, 1.0)

    def get_pixel(self, x: int, y: int) -> typing.Tuple[float, float, float]:
        """Returns the color of pixel (x, y)."""
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(
                f"Pixel ({x}, {y}) lies outside of the image "
                f"of size ({self._width}, {self._height})."
            )
        r, g, b = self._data[y, x].tolist()
        return r, g, b

    def fill(self, r: float, g: float, b: float) -> None:
        """Fills the entire image with a single color."""
        self._data[...] = torch.tensor([r, g, b], dtype=self._data.dtype).clamp(0.0, 1.0)

    def write_rows(self, start: int, end: int, rgb: torch.Tensor) -> None:
        """
        Writes a block of full rows.

        Args:
            start (int): The first row of the block.
            end (int): One past the last row of the block.
            rgb (torch.Tensor): Tensor of shape ((end - start) * width, 3) or
                (end - start, width, 3).
        """
        block = rgb.reshape(end - start, self._width, 3).to(self._data.dtype)
        self._data[start:end] = torch.clamp(block, 0.0, 1.0)

    def to_uint8(self) -> np.ndarray:
        """
        Quantizes the image to 8 bits per channel by truncation.

        Returns:
            An array of shape (height, width, 3) and type np.uint8.
        """
        scaled = torch.clamp(self._data * 255.0, max=255.0)
        return scaled.to(torch.uint8).numpy()

    @property
    def width(self) -> int:
        """Returns the width of the image."""
        return self._width

    @property
    def height(self) -> int:
        """Returns the height of the image."""
        return self._height

    @property
    def data(self) -> torch.Tensor:
        """Returns the underlying tensor of shape (height, width, 3)."""
        return self._data


def encode_ppm_binary(pixels: np.ndarray) -> bytes:
    """
    Encodes 8-bit pixels of shape (height, width, 3) as a binary PPM image.
    """
    if pixels.ndim != 3 or pixels.shape[-1] != 3 or pixels.dtype != np.uint8:
        raise ValueError(
            "Expected an array of type uint8 and shape (H, W, 3). "
            f"Got {pixels.dtype} array of shape {pixels.shape}."
        )
    height, width, _ = pixels.shape
    header = f"P6\n{width} {height}\n255\n".encode("ascii")
    return header + np.ascontiguousarray(pixels).tobytes()


def write_bytes(payload: bytes, filename: str) -> bool:
    """
    Writes an encoded image to a file.

    Returns:
        True on success, False if the file could not be written.
    """
    try:
        with open(filename, "wb") as file:
            file.write(payload)
    except OSError as error:
        log.error("Could not open file %s: %s", filename, error)
        return False
    return True


class ImageSinkBase(object):
    """
    Base class for image writers.
    """

    def encode(self, image: Image) -> bytes:
        """Serializes the image."""
        raise NotImplementedError()

    def write(self, image: Image, filename: str) -> bool:
        """
        Writes the image to a file.

        Returns:
            True on success, False if the file could not be written.
        """
        return write_bytes(self.encode(image), filename)


class PPMBinarySink(ImageSinkBase):
    """
    Writes binary PPM ('P6') images.
    """

    def encode(self, image: Image) -> bytes:
        return encode_ppm_binary(image.to_uint8())


class PPMAsciiSink(ImageSinkBase):
    """
    Writes plain PPM ('P3') images with one line of decimal triplets per image row.
    """

    def encode(self, image: Image) -> bytes:
        pixels = image.to_uint8()
        lines = [f"P3\n{image.width} {image.height}\n255\n"]
        for row in pixels:
            lines.append("".join(f"{r} {g} {b} " for r, g, b in row.tolist()) + "\n")
        return "".join(lines).encode("ascii")


class ImageioSink(ImageSinkBase):
    """
    Writes images in any format supported by imageio (PNG, JPEG, ...).

    The format is deduced from the file extension.
    """

    def write(self, image: Image, filename: str) -> bool:
        try:
            imageio.imwrite(filename, image.to_uint8())
        except (OSError, ValueError) as error:
            log.error("Could not write image %s: %s", filename, error)
            return False
        return True


SINKS = {
    "binary": PPMBinarySink,
    "ascii": PPMAsciiSink,
    "imageio": ImageioSink,
}


def get_sink(image_format: str) -> ImageSinkBase:
    """
    Returns the image writer registered under the given name.

    Args:
        image_format (str): One of 'binary', 'ascii', 'imageio'.
    """
    if not image_format in SINKS:
        raise ValueError(
            f"Unsupported image format. Expected one of {sorted(SINKS)}. Got {image_format}."
        )
    return SINKS[image_format]()


def read_ppm(filename: str) -> typing.Tuple[int, int, int, np.ndarray]:
    """
    Reads a PPM image in either the binary ('P6') or the plain ('P3') variant.

    Args:
        filename (str): Path to the image.

    Returns:
        width (int): Width of the image.
        height (int): Height of the image.
        maxval (int): The maximum color value declared in the header.
        pixels (np.ndarray): An array of shape (height, width, 3) and type np.uint8.
    """
    with open(filename, "rb") as file:
        content = file.read()

    # the header is four whitespace separated tokens: magic, width, height, maxval
    tokens = []
    offset = 0
    while len(tokens) < 4:
        while offset < len(content) and content[offset : offset + 1].isspace():
            offset += 1
        start = offset
        while offset < len(content) and not content[offset : offset + 1].isspace():
            offset += 1
        if start == offset:
            raise ValueError(f"Truncated PPM header in {filename}.")
        tokens.append(content[start:offset].decode("ascii"))
    offset += 1  # single whitespace character ending the header

    magic, width, height, maxval = tokens[0], int(tokens[1]), int(tokens[2]), int(tokens[3])
    num_values = width * height * 3

    if magic == "P6":
        raw = np.frombuffer(content, dtype=np.uint8, count=num_values, offset=offset)
    elif magic == "P3":
        raw = np.array(content[offset:].split()[:num_values], dtype=np.int64).astype(np.uint8)
        if raw.size != num_values:
            raise ValueError(f"Expected {num_values} values in {filename}. Got {raw.size}.")
    else:
        raise ValueError(f"Expected a PPM image of type 'P3' or 'P6'. Got {magic}.")

    return width, height, maxval, raw.reshape(height, width, 3)

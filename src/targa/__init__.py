"""targa - TGA (Truevision) image codec."""

from targa.codec import ImageType, TGADecoder, TGAEncoder, TGAHeader
from targa.errors import (
    InvalidImageSizeError,
    MissingHeaderError,
    TGAError,
    UnexpectedEOFError,
    UnsupportedBitdepthError,
    UnsupportedImageFormatError,
    ZeroRunLengthError,
)
from targa.image import Image, TGAInfo, get_info

__version__ = "0.1.0"

__all__ = [
    "Image",
    "ImageType",
    "InvalidImageSizeError",
    "MissingHeaderError",
    "TGADecoder",
    "TGAEncoder",
    "TGAError",
    "TGAHeader",
    "TGAInfo",
    "UnexpectedEOFError",
    "UnsupportedBitdepthError",
    "UnsupportedImageFormatError",
    "ZeroRunLengthError",
    "get_info",
]

"""TGAコーデックパッケージ

ヘッダー解析、ピクセル変換、RLE圧縮、デコーダー、エンコーダーを提供する。
"""

from targa.codec.decoder import TGADecoder
from targa.codec.encoder import FOOTER, FOOTER_SIGNATURE, TGAEncoder
from targa.codec.header import HEADER_SIZE, ImageType, TGAHeader, parse_header, serialize_header
from targa.codec.pixel import read_pixel, write_pixel
from targa.codec.rle import RLEDecoder, RLEEncoder

__all__ = [
    "FOOTER",
    "FOOTER_SIGNATURE",
    "HEADER_SIZE",
    "ImageType",
    "RLEDecoder",
    "RLEEncoder",
    "TGADecoder",
    "TGAEncoder",
    "TGAHeader",
    "parse_header",
    "read_pixel",
    "serialize_header",
    "write_pixel",
]

"""TGAエンコーダーモジュール

RGBA8の画像を24/32ビットTruecolorのTGAデータとして書き出す。
不透明な画像は24ビット、アルファを含む画像は32ビットを選択する。
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from targa.codec.header import ImageType, serialize_header
from targa.codec.pixel import PIXEL_SIZE, write_pixel
from targa.codec.rle import RLEEncoder
from targa.stream import ByteWriter

if TYPE_CHECKING:
    from targa.image import Image

logger = logging.getLogger(__name__)

FOOTER_SIGNATURE: bytes = b"TRUEVISION-XFILE.\x00"
"""TGA 2.0フッターのシグネチャ（NUL終端込み18バイト）"""

FOOTER: bytes = (
    b"\x00\x00\x00\x00"  # 拡張領域オフセット
    + b"\x00\x00\x00\x00"  # デベロッパー領域オフセット
    + FOOTER_SIGNATURE
)
"""エンコード時に出力するTGA 2.0フッター（26バイト）"""


def select_depth(image: Image) -> int:
    """出力ピクセル深度を選択する

    Returns:
        不透明な画像は24、それ以外は32
    """
    return 24 if image.is_opaque() else 32


class TGAEncoder:
    """TGA画像エンコーダー

    ファイル構造:
    - ヘッダー(18バイト): 画像タイプ、幅、高さ、深度以外は0
    - ピクセルデータ: BGR/BGRA順（RLE圧縮時はパケット列）
    - フッター(26バイト): 拡張領域・デベロッパー領域オフセット(0) + シグネチャ
    """

    def __init__(self) -> None:
        """TGAエンコーダーを初期化する"""
        self._rle = RLEEncoder()

    def encode(self, writer: ByteWriter, image: Image, compress: bool) -> None:
        """画像をTGAデータとして書き込む

        Args:
            writer: 書き込み先
            image: エンコードする画像
            compress: RLE圧縮するか

        Raises:
            ValueError: 画像サイズが65535を超える場合
            ZeroRunLengthError: RLEエンコードの内部不変条件が破れた場合
        """
        depth = select_depth(image)
        image_type = ImageType.RLE_TRUECOLOR if compress else ImageType.UNCOMPRESSED_TRUECOLOR
        bytes_per_pixel = depth // 8

        writer.write_all(serialize_header(image_type, image.width, image.height, depth))

        if compress:
            packets = self._rle.encode(writer, image.pixels, image.width, bytes_per_pixel)
            logger.debug("RLEパケット数: %d", packets)
        else:
            self._encode_uncompressed(writer, image.pixels, bytes_per_pixel)

        writer.write_all(FOOTER)
        logger.debug(
            "TGA出力: type=%s %dx%d depth=%d size=%d",
            image_type.name,
            image.width,
            image.height,
            depth,
            writer.bytes_written,
        )

    def _encode_uncompressed(
        self,
        writer: ByteWriter,
        pixels: bytes | bytearray,
        bytes_per_pixel: int,
    ) -> None:
        """非圧縮のピクセルデータを書き込む"""
        data = bytearray()
        for offset in range(0, len(pixels), PIXEL_SIZE):
            data += write_pixel(pixels, offset, bytes_per_pixel)
        writer.write_all(data)


def encode(writer: ByteWriter, image: Image, compress: bool) -> None:
    """画像をTGAデータとして書き込む

    TGAEncoder().encode()の簡易関数。
    """
    TGAEncoder().encode(writer, image, compress)

"""TGAデコーダーモジュール

TGAデータを読み取り、RGBA8の画像に変換する。
16/24/32ビットのTruecolor画像（非圧縮およびRLE圧縮）に対応する。
カラーマップ画像、白黒画像、Huffman/デルタ圧縮形式には対応しない。
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from targa.codec.header import HEADER_SIZE, ImageType, TGAHeader, parse_header
from targa.codec.pixel import PIXEL_SIZE, read_pixel
from targa.codec.rle import RLEDecoder
from targa.errors import (
    InvalidImageSizeError,
    MissingHeaderError,
    UnsupportedBitdepthError,
    UnsupportedImageFormatError,
)
from targa.stream import ByteReader

if TYPE_CHECKING:
    from targa.image import Image

logger = logging.getLogger(__name__)

SUPPORTED_DEPTHS: tuple[int, ...] = (16, 24, 32)
"""デコード可能なピクセル深度（ビット）"""


class TGADecoderProtocol(Protocol):
    """TGAデコーダーインターフェース"""

    def decode(self, reader: ByteReader) -> Image:
        """TGAデータをデコードする

        Args:
            reader: TGAデータの読み取り元

        Returns:
            デコードされた画像

        Raises:
            TGAError: 不正または未対応のTGAデータの場合
        """
        ...


class TGADecoder:
    """TGA画像デコーダー

    ヘッダーを解析・検証し、画像IDとカラーマップを読み飛ばしてから
    画像タイプに応じてピクセルデータを展開する。

    デコード手順:
    - ヘッダー(18バイト)を読み取り、ピクセル深度を検証する
    - 画像ID + カラーマップを読み飛ばす
    - 画像タイプ別にピクセルデータを読み取る（NO_DATAは0埋めのまま）
    """

    def __init__(self) -> None:
        """TGAデコーダーを初期化する"""
        self._rle = RLEDecoder()

    def read_header(self, reader: ByteReader) -> TGAHeader:
        """ヘッダーのみを読み取る

        Args:
            reader: TGAデータの読み取り元

        Returns:
            解析されたヘッダー情報

        Raises:
            MissingHeaderError: ヘッダーが18バイトに満たない場合
        """
        data = reader.read_all(HEADER_SIZE)
        if len(data) < HEADER_SIZE:
            raise MissingHeaderError(
                f"ヘッダーが不完全です: {HEADER_SIZE}バイト必要ですが{len(data)}バイトしかありません"
            )
        return parse_header(data)

    def decode(self, reader: ByteReader) -> Image:
        """TGAデータをデコードする

        Args:
            reader: TGAデータの読み取り元

        Returns:
            デコードされた画像

        Raises:
            MissingHeaderError: ヘッダーが不完全な場合
            UnsupportedBitdepthError: ピクセル深度が16/24/32以外の場合
            UnsupportedImageFormatError: 対応していない画像タイプの場合
            UnexpectedEOFError: ピクセルデータが途中で途切れた場合
            InvalidImageSizeError: ヘッダーの幅または高さが0の場合
        """
        # targa.imageがこのモジュールをインポートするため遅延インポート
        from targa.image import Image

        header = self.read_header(reader)
        logger.debug(
            "TGAヘッダー: type=%s %dx%d depth=%d descriptor=0x%02x",
            header.image_type,
            header.width,
            header.height,
            header.depth,
            header.descriptor,
        )

        if header.depth not in SUPPORTED_DEPTHS:
            raise UnsupportedBitdepthError(header.depth)

        reader.skip_bytes(header.skip_length)

        if header.width == 0 or header.height == 0:
            raise InvalidImageSizeError(header.width, header.height)

        image = Image(header.width, header.height)

        if header.image_type == ImageType.NO_DATA:
            pass
        elif header.image_type == ImageType.UNCOMPRESSED_TRUECOLOR:
            self._decode_uncompressed(reader, image.pixels, header.bytes_per_pixel)
        elif header.image_type == ImageType.RLE_TRUECOLOR:
            self._rle.decode(reader, image.pixels, header.bytes_per_pixel)
        else:
            raise UnsupportedImageFormatError(header.image_type)

        return image

    def _decode_uncompressed(
        self,
        reader: ByteReader,
        pixels: bytearray,
        bytes_per_pixel: int,
    ) -> None:
        """非圧縮のピクセルデータを読み取る

        Args:
            reader: ピクセルデータの読み取り元
            pixels: 書き込み先のRGBAバッファ
            bytes_per_pixel: ソースピクセルのバイト数
        """
        for offset in range(0, len(pixels), PIXEL_SIZE):
            read_pixel(pixels, offset, reader.read_exact(bytes_per_pixel))


def decode(reader: ByteReader) -> Image:
    """TGAデータをデコードする

    TGADecoder().decode()の簡易関数。
    """
    return TGADecoder().decode(reader)

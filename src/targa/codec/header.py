"""TGAファイルヘッダーモジュール

18バイト固定長のTGAファイルヘッダーの解析とシリアライズを行う。
マルチバイトのフィールドはすべてリトルエンディアンで、
メモリ上の構造体レイアウトに依存せずフィールドごとに明示的に読み書きする。

ヘッダー構造:
- 0: IDフィールド長(1)
- 1: カラーマップタイプ(1)
- 2: 画像タイプ(1)
- 3: カラーマップ開始位置(2) + カラーマップ長(2) + カラーマップ深度(1)
- 8: X原点(2) + Y原点(2) + 幅(2) + 高さ(2)
- 16: ピクセル深度(1) + 画像記述子(1)
"""

from dataclasses import dataclass
from enum import IntEnum

from targa.errors import MissingHeaderError

HEADER_SIZE: int = 18
"""ファイルヘッダーのサイズ（バイト）"""


class ImageType(IntEnum):
    """TGA画像タイプ

    ヘッダーの3バイト目に格納される画像データの種類。
    このコーデックが扱えるのはNO_DATA、UNCOMPRESSED_TRUECOLOR、RLE_TRUECOLORのみ。
    """

    NO_DATA = 0
    UNCOMPRESSED_COLORMAPPED = 1
    UNCOMPRESSED_TRUECOLOR = 2
    UNCOMPRESSED_BW = 3
    RLE_COLORMAPPED = 9
    RLE_TRUECOLOR = 10
    RLE_BW = 11
    # Huffman + デルタ + RLE
    COMPRESSED_COLORMAPPED = 32
    # Huffman + デルタ + RLE（4パス四分木）
    COMPRESSED_COLORMAPPED_4PASS = 33


RLE_IMAGE_TYPES: frozenset[int] = frozenset(
    {ImageType.RLE_COLORMAPPED, ImageType.RLE_TRUECOLOR, ImageType.RLE_BW}
)


@dataclass(frozen=True)
class TGAHeader:
    """TGAファイルヘッダー

    ファイル先頭18バイトから読み取った情報を保持する不変データクラス。
    画像タイプが既知の値でない場合はintのまま保持し、検証はデコーダーに任せる。

    Attributes:
        id_length: 画像IDフィールドのバイト数
        colormap_type: カラーマップの有無（0=なし、1=あり）
        image_type: 画像タイプ
        colormap_offset: カラーマップの最初のエントリ番号
        colormap_length: カラーマップのエントリ数
        colormap_depth: カラーマップ1エントリあたりのビット数
        x_origin: 画像左下のX座標
        y_origin: 画像左下のY座標
        width: 画像の幅（ピクセル）
        height: 画像の高さ（ピクセル）
        depth: 1ピクセルあたりのビット数（アルファ/属性ビットを含む）
        descriptor: 画像記述子（アルファビット数と原点位置）
    """

    id_length: int
    colormap_type: int
    image_type: ImageType | int
    colormap_offset: int
    colormap_length: int
    colormap_depth: int
    x_origin: int
    y_origin: int
    width: int
    height: int
    depth: int
    descriptor: int

    @property
    def bytes_per_pixel(self) -> int:
        """1ピクセルあたりのバイト数を返す"""
        return self.depth // 8

    @property
    def skip_length(self) -> int:
        """ピクセルデータの前に読み飛ばすバイト数を返す

        画像IDフィールドと、カラーマップがある場合はそのテーブルの合計。
        """
        return self.id_length + self.colormap_type * self.colormap_length * (
            self.colormap_depth // 8
        )

    @property
    def is_compressed(self) -> bool:
        """RLE圧縮された画像タイプかどうかを返す"""
        return self.image_type in RLE_IMAGE_TYPES

    @property
    def alpha_bits(self) -> int:
        """画像記述子に記録されたアルファチャンネルのビット数を返す"""
        return self.descriptor & 0x0F

    @property
    def top_origin(self) -> bool:
        """画像記述子のbit5（原点が上端）が立っているかを返す"""
        return bool(self.descriptor & 0x20)


def _u16(data: bytes, offset: int) -> int:
    return data[offset] | (data[offset + 1] << 8)


def parse_header(data: bytes) -> TGAHeader:
    """TGAヘッダーを解析する

    値の妥当性は検証しない（デコーダーの責務）。

    Args:
        data: ファイル先頭のバイト列（18バイト以上）

    Returns:
        解析されたヘッダー情報

    Raises:
        MissingHeaderError: データが18バイトに満たない場合
    """
    if len(data) < HEADER_SIZE:
        raise MissingHeaderError(
            f"ヘッダーが不完全です: {HEADER_SIZE}バイト必要ですが{len(data)}バイトしかありません"
        )

    raw_type = data[2]
    image_type: ImageType | int
    try:
        image_type = ImageType(raw_type)
    except ValueError:
        image_type = raw_type

    return TGAHeader(
        id_length=data[0],
        colormap_type=data[1],
        image_type=image_type,
        colormap_offset=_u16(data, 3),
        colormap_length=_u16(data, 5),
        colormap_depth=data[7],
        x_origin=_u16(data, 8),
        y_origin=_u16(data, 10),
        width=_u16(data, 12),
        height=_u16(data, 14),
        depth=data[16],
        descriptor=data[17],
    )


def serialize_header(image_type: ImageType, width: int, height: int, depth: int) -> bytes:
    """エンコード用のTGAヘッダーを生成する

    IDフィールド、カラーマップ、原点、画像記述子はすべて0で出力する。

    Args:
        image_type: 画像タイプ
        width: 画像の幅（0-65535）
        height: 画像の高さ（0-65535）
        depth: 1ピクセルあたりのビット数

    Returns:
        18バイトのヘッダー

    Raises:
        ValueError: 幅・高さ・深度がヘッダーのフィールドに収まらない場合
    """
    if not 0 <= width <= 0xFFFF or not 0 <= height <= 0xFFFF:
        raise ValueError(f"TGAで表現できない画像サイズです: {width}x{height}")
    if not 0 <= depth <= 0xFF:
        raise ValueError(f"TGAで表現できないビット深度です: {depth}")

    header = bytearray(HEADER_SIZE)
    header[2] = int(image_type)
    header[12:14] = width.to_bytes(2, "little")
    header[14:16] = height.to_bytes(2, "little")
    header[16] = depth
    return bytes(header)

"""ピクセル変換モジュール

TGAのソースピクセル（16/24/32ビット、BGR/BGRA順）と
メモリ上の正規表現であるRGBA8との相互変換を行う。
"""

PIXEL_SIZE: int = 4
"""正規表現（RGBA8）の1ピクセルあたりのバイト数"""


def read_pixel(dst: bytearray, offset: int, src: bytes) -> None:
    """ソースピクセルをRGBA8に変換してdstに書き込む

    ソースのバイト長でビット深度を判別する:
    - 2バイト: 5-5-5-1のBGR+アルファ（リトルエンディアン）
    - 3バイト: BGR（常に不透明）
    - 4バイト: BGRA

    16ビットのアルファは0x00か0x80のどちらかになり、0xFFには正規化しない。
    それ以外の長さでは何もしない。

    Args:
        dst: 書き込み先のRGBAバッファ
        offset: 書き込み先のバイトオフセット
        src: ソースピクセルのバイト列

    Raises:
        IndexError: dstにoffsetから4バイトの空きがない場合
    """
    if offset < 0 or offset + PIXEL_SIZE > len(dst):
        raise IndexError(f"ピクセルの書き込み先が範囲外です: offset={offset}")

    size = len(src)
    if size == 2:
        lo, hi = src[0], src[1]
        dst[offset] = ((hi & 0x7C) << 1) & 0xFF
        dst[offset + 1] = (((hi & 0x03) << 6) | ((lo & 0xE0) >> 2)) & 0xFF
        dst[offset + 2] = ((lo & 0x1F) << 3) & 0xFF
        dst[offset + 3] = hi & 0x80
    elif size == 3:
        dst[offset] = src[2]
        dst[offset + 1] = src[1]
        dst[offset + 2] = src[0]
        dst[offset + 3] = 0xFF
    elif size == 4:
        dst[offset] = src[2]
        dst[offset + 1] = src[1]
        dst[offset + 2] = src[0]
        dst[offset + 3] = src[3]


def write_pixel(src: bytes | bytearray, offset: int, bytes_per_pixel: int) -> bytes:
    """RGBA8ピクセルをTGAのBGR/BGRA順に変換する

    Args:
        src: RGBAバッファ
        offset: 変換するピクセルのバイトオフセット
        bytes_per_pixel: 出力バイト数（3=BGR、4=BGRA）

    Returns:
        変換後のピクセルバイト列

    Raises:
        ValueError: bytes_per_pixelが3・4以外の場合
    """
    if bytes_per_pixel == 3:
        return bytes((src[offset + 2], src[offset + 1], src[offset]))
    if bytes_per_pixel == 4:
        return bytes((src[offset + 2], src[offset + 1], src[offset], src[offset + 3]))
    raise ValueError(f"出力できないピクセルサイズです: {bytes_per_pixel}")


def is_opaque(pixels: bytes | bytearray) -> bool:
    """すべてのピクセルのアルファ値が0xFFかどうかを判定する

    空のバッファではTrueを返す。

    Args:
        pixels: RGBAバッファ

    Returns:
        完全に不透明な場合True
    """
    return all(alpha == 0xFF for alpha in pixels[3::PIXEL_SIZE])

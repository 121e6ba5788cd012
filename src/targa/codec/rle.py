"""RLE圧縮モジュール

TGAのRLEパケットの展開と生成を行う。

パケット構造:
- ヘッダー1バイト: bit7=モード（1=リピート、0=ロー）、bit0-6=ラン長-1
- リピートパケット: 1ピクセル分のデータが続き、ラン長の回数だけ複製される
- ローパケット: ラン長と同じ数のピクセルデータが続く

ランは走査線の境界で区切らず、ピクセル列全体を1本のストリームとして扱う。
そのため1つのパケットが2行にまたがることがある。
"""

from collections.abc import Iterator
from typing import Protocol

from targa.codec.pixel import PIXEL_SIZE, read_pixel, write_pixel
from targa.errors import ZeroRunLengthError
from targa.stream import ByteReader, ByteWriter

RAW_PACKET: int = 0x00
"""ローパケットのモードビット"""

RLE_PACKET: int = 0x80
"""リピートパケットのモードビット"""

MAX_RUN_LENGTH: int = 128
"""1パケットで表現できる最大ラン長"""


class RLEDecoderProtocol(Protocol):
    """RLE展開インターフェース"""

    def decode(self, reader: ByteReader, pixels: bytearray, bytes_per_pixel: int) -> None:
        """RLEパケット列を展開してpixelsを埋める

        Args:
            reader: パケット列の読み取り元
            pixels: 展開先のRGBAバッファ
            bytes_per_pixel: ソースピクセルのバイト数

        Raises:
            UnexpectedEOFError: パケットデータが途中で途切れた場合
        """
        ...


class RLEDecoder:
    """RLEパケット展開クラス

    展開先バッファがすべて埋まるまでパケットを読み続ける。
    バッファを超えるランは残りピクセル数で打ち切るが、
    ローパケットの余剰ピクセルはストリーム位置を保つため読み捨てる。
    """

    def decode(self, reader: ByteReader, pixels: bytearray, bytes_per_pixel: int) -> None:
        """RLEパケット列を展開してpixelsを埋める

        Args:
            reader: パケット列の読み取り元
            pixels: 展開先のRGBAバッファ
            bytes_per_pixel: ソースピクセルのバイト数

        Raises:
            UnexpectedEOFError: パケットデータが途中で途切れた場合
        """
        total = len(pixels)
        dst = 0
        rgba = bytearray(PIXEL_SIZE)

        while dst < total:
            packet = reader.read_byte()
            run_length = (packet & 0x7F) + 1
            remaining = (total - dst) // PIXEL_SIZE
            count = min(run_length, remaining)

            if packet & RLE_PACKET:
                read_pixel(rgba, 0, reader.read_exact(bytes_per_pixel))
                pixels[dst : dst + count * PIXEL_SIZE] = rgba * count
                dst += count * PIXEL_SIZE
            else:
                for _ in range(count):
                    read_pixel(pixels, dst, reader.read_exact(bytes_per_pixel))
                    dst += PIXEL_SIZE
                # バッファに収まらない分も読み進める
                reader.skip_bytes((run_length - count) * bytes_per_pixel)


def get_run_length(pixels: bytes | bytearray, start: int, max_run: int) -> int:
    """startから始まる同一ピクセルの連続数を返す

    Args:
        pixels: RGBAバッファ
        start: 先頭ピクセルのバイトオフセット
        max_run: 返す値の上限

    Returns:
        先頭ピクセルを含む連続数（最大max_run）。
        startから1ピクセル分のデータがない場合は0
    """
    if start + PIXEL_SIZE > len(pixels):
        return 0

    first = pixels[start : start + PIXEL_SIZE]
    end = min(len(pixels), start + max_run * PIXEL_SIZE)
    run = 1
    pos = start + PIXEL_SIZE
    while pos + PIXEL_SIZE <= end and pixels[pos : pos + PIXEL_SIZE] == first:
        run += 1
        pos += PIXEL_SIZE
    return run


class RLEEncoder:
    """RLEパケット生成クラス

    2ピクセル以上のランはリピートパケットで出力する。
    単独ピクセルごとにリピートパケットを出すのは非効率なため、
    ラン長1の位置が連続する区間はまとめて1つのローパケットにする。
    """

    def iter_packets(
        self,
        pixels: bytes | bytearray,
        width: int,
        bytes_per_pixel: int,
    ) -> Iterator[bytes]:
        """RLEパケットを順に生成する

        Args:
            pixels: RGBAバッファ
            width: 画像の幅（ラン長の上限に使う）
            bytes_per_pixel: 出力ピクセルのバイト数（3または4）

        Yields:
            パケットヘッダーとピクセルデータを連結したバイト列

        Raises:
            ZeroRunLengthError: ラン長が0になった場合（バッファ長が4の倍数でない等）
        """
        max_run = min(MAX_RUN_LENGTH, width)
        total = len(pixels)
        i = 0

        while i < total:
            run = get_run_length(pixels, i, max_run)
            if run == 0:
                raise ZeroRunLengthError(f"ラン長が0になりました: offset={i}")

            if run == 1:
                count = 1
                pos = i + PIXEL_SIZE
                while count < max_run and get_run_length(pixels, pos, max_run) == 1:
                    count += 1
                    pos += PIXEL_SIZE

                packet = bytearray((RAW_PACKET | (count - 1),))
                for offset in range(i, i + count * PIXEL_SIZE, PIXEL_SIZE):
                    packet += write_pixel(pixels, offset, bytes_per_pixel)
                yield bytes(packet)
                i += count * PIXEL_SIZE
            else:
                yield bytes((RLE_PACKET | (run - 1),)) + write_pixel(pixels, i, bytes_per_pixel)
                i += run * PIXEL_SIZE

    def encode(
        self,
        writer: ByteWriter,
        pixels: bytes | bytearray,
        width: int,
        bytes_per_pixel: int,
    ) -> int:
        """RLEパケットを書き込む

        Args:
            writer: 書き込み先
            pixels: RGBAバッファ
            width: 画像の幅
            bytes_per_pixel: 出力ピクセルのバイト数（3または4）

        Returns:
            書き込んだパケット数

        Raises:
            ZeroRunLengthError: ラン長が0になった場合
        """
        packets = 0
        for packet in self.iter_packets(pixels, width, bytes_per_pixel):
            writer.write_all(packet)
            packets += 1
        return packets

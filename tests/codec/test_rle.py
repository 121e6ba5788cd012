"""RLEパケットの展開・生成のテスト

パケット構造:
- ヘッダー1バイト: bit7=モード（1=リピート、0=ロー）、bit0-6=ラン長-1
- ランは走査線の境界で区切られない
"""

import io
import random

import pytest

from targa.codec.rle import (
    MAX_RUN_LENGTH,
    RLE_PACKET,
    RLEDecoder,
    RLEEncoder,
    get_run_length,
)
from targa.errors import UnexpectedEOFError, ZeroRunLengthError
from targa.stream import ByteReader, ByteWriter

RED = b"\xff\x00\x00\xff"
GREEN = b"\x00\xff\x00\xff"
BLUE = b"\x00\x00\xff\xff"
WHITE = b"\xff\xff\xff\xff"


def split_packets(data: bytes, bytes_per_pixel: int) -> list[tuple[bool, int]]:
    """パケット列を(リピートか, ラン長)のリストに分解する"""
    packets: list[tuple[bool, int]] = []
    pos = 0
    while pos < len(data):
        header = data[pos]
        run_length = (header & 0x7F) + 1
        is_repeat = bool(header & RLE_PACKET)
        packets.append((is_repeat, run_length))
        pos += 1 + bytes_per_pixel * (1 if is_repeat else run_length)
    assert pos == len(data)
    return packets


def rle_decode(data: bytes, pixel_count: int, bytes_per_pixel: int) -> bytearray:
    """パケット列を展開したRGBAバッファを返す"""
    pixels = bytearray(pixel_count * 4)
    RLEDecoder().decode(ByteReader(io.BytesIO(data)), pixels, bytes_per_pixel)
    return pixels


class TestRLEDecoder:
    """RLEDecoder.decode()のテスト"""

    def test_repeat_packet(self) -> None:
        """リピートパケットは1ピクセルをラン長の回数だけ複製する"""
        pixels = rle_decode(b"\x83\x01\x02\x03", 4, 3)
        assert bytes(pixels) == b"\x03\x02\x01\xff" * 4

    def test_raw_packet(self) -> None:
        """ローパケットはラン長の数だけピクセルを読む"""
        pixels = rle_decode(b"\x01\x01\x02\x03\x04\x05\x06", 2, 3)
        assert bytes(pixels) == b"\x03\x02\x01\xff\x06\x05\x04\xff"

    def test_mixed_packets_32bit(self) -> None:
        """32ビットのリピート・ローパケットを混在して展開する"""
        data = b"\x81\x01\x02\x03\x04" + b"\x00\x0a\x0b\x0c\x0d"
        pixels = rle_decode(data, 3, 4)
        assert bytes(pixels) == b"\x03\x02\x01\x04" * 2 + b"\x0c\x0b\x0a\x0d"

    def test_16bit_repeat(self) -> None:
        """16ビットのリピートパケットを展開する"""
        pixels = rle_decode(b"\x82\x00\x80", 3, 2)
        assert bytes(pixels) == b"\x00\x00\x00\x80" * 3

    def test_run_crosses_scanline(self) -> None:
        """1つのランが2行にまたがって展開される（2x2画像）"""
        data = b"\x00\x00\x00\xff" + b"\x81\x00\xff\x00" + b"\x00\xff\x00\x00"
        pixels = rle_decode(data, 4, 3)
        # 1行目: 赤, 緑 / 2行目: 緑, 青
        assert bytes(pixels) == RED + GREEN + GREEN + BLUE

    def test_max_run_length_packet(self) -> None:
        """ヘッダー0xFFは128ピクセルのリピートになる"""
        pixels = rle_decode(b"\xff\x00\x00\x00", 128, 3)
        assert bytes(pixels) == b"\x00\x00\x00\xff" * 128

    def test_repeat_overflow_is_clipped(self) -> None:
        """バッファを超えるリピートは残りピクセル数で打ち切られる"""
        stream = io.BytesIO(b"\x83\x01\x02\x03" + b"TAIL")
        reader = ByteReader(stream)
        pixels = bytearray(8)
        RLEDecoder().decode(reader, pixels, 3)
        assert bytes(pixels) == b"\x03\x02\x01\xff" * 2
        assert reader.position == 4

    def test_raw_overflow_consumes_source(self) -> None:
        """バッファを超えるローパケットも余剰ピクセル分を読み進める"""
        stream = io.BytesIO(b"\x02" + b"\x01\x02\x03" * 3 + b"TAIL")
        reader = ByteReader(stream)
        pixels = bytearray(8)
        RLEDecoder().decode(reader, pixels, 3)
        assert bytes(pixels) == b"\x03\x02\x01\xff" * 2
        assert reader.position == 10

    @pytest.mark.parametrize(
        "data",
        [
            pytest.param(b"", id="異常系: パケットなし"),
            pytest.param(b"\x83\x01\x02", id="異常系: リピートのピクセル不足"),
            pytest.param(b"\x01\x01\x02\x03", id="異常系: ローの2ピクセル目なし"),
            pytest.param(b"\x81\x01\x02\x03", id="異常系: 次のパケットなし"),
        ],
    )
    def test_truncated(self, data: bytes) -> None:
        """データが途中で途切れるとUnexpectedEOFErrorになる"""
        with pytest.raises(UnexpectedEOFError):
            rle_decode(data, 4, 3)


class TestGetRunLength:
    """get_run_length()のテスト"""

    @pytest.mark.parametrize(
        "pixels, start, max_run, expected",
        [
            pytest.param(RED * 3 + GREEN, 0, 128, 3, id="先頭から3ピクセル"),
            pytest.param(RED * 3 + GREEN, 0, 2, 2, id="上限で打ち切り"),
            pytest.param(RED * 3 + GREEN, 4, 128, 2, id="途中から"),
            pytest.param(RED * 3 + GREEN, 12, 128, 1, id="最後のピクセル"),
            pytest.param(RED * 3 + GREEN, 16, 128, 0, id="終端"),
            pytest.param(RED + GREEN + RED, 0, 128, 1, id="隣が異なる"),
            pytest.param(RED * 200, 0, 128, 128, id="128で打ち切り"),
            pytest.param(RED * 4, 0, 1, 1, id="上限1"),
            pytest.param(RED + b"\xff\x00", 0, 128, 1, id="末尾の端数は比較しない"),
            pytest.param(b"\xff\x00", 0, 128, 0, id="1ピクセルに満たない"),
        ],
    )
    def test_run_length(self, pixels: bytes, start: int, max_run: int, expected: int) -> None:
        """同一ピクセルの連続数を返す"""
        assert get_run_length(pixels, start, max_run) == expected


class TestRLEEncoderPackets:
    """RLEEncoder.iter_packets()のテスト"""

    @pytest.fixture
    def encoder(self) -> RLEEncoder:
        """RLEEncoderインスタンスを作成するフィクスチャ"""
        return RLEEncoder()

    def test_uniform_run(self, encoder: RLEEncoder) -> None:
        """同一ピクセルの連続は1つのリピートパケットになる"""
        packets = list(encoder.iter_packets(RED * 4, 4, 3))
        assert packets == [b"\x83\x00\x00\xff"]

    def test_unique_pixels_single_raw_packet(self, encoder: RLEEncoder) -> None:
        """単独ピクセルの連続は1つのローパケットにまとめられる"""
        packets = list(encoder.iter_packets(RED + GREEN + BLUE, 3, 3))
        assert packets == [b"\x02" + b"\x00\x00\xff" + b"\x00\xff\x00" + b"\xff\x00\x00"]

    def test_mixed(self, encoder: RLEEncoder) -> None:
        """ローとリピートが交互に出力される"""
        packets = list(encoder.iter_packets(RED + GREEN + GREEN + BLUE, 4, 3))
        assert packets == [
            b"\x00\x00\x00\xff",
            b"\x81\x00\xff\x00",
            b"\x00\xff\x00\x00",
        ]

    def test_alpha_is_written_for_32bit(self, encoder: RLEEncoder) -> None:
        """32ビット出力ではアルファも書き込まれる"""
        packets = list(encoder.iter_packets(b"\x01\x02\x03\x80" * 2, 2, 4))
        assert packets == [b"\x81\x03\x02\x01\x80"]

    def test_run_limited_by_width(self, encoder: RLEEncoder) -> None:
        """ラン長の上限は画像の幅になる（2x2の単色画像）"""
        packets = list(encoder.iter_packets(RED * 4, 2, 3))
        assert packets == [b"\x81\x00\x00\xff", b"\x81\x00\x00\xff"]

    def test_run_crosses_scanline(self, encoder: RLEEncoder) -> None:
        """ランは走査線の境界をまたいで生成される（2x2画像）"""
        pixels = RED + GREEN + GREEN + BLUE
        packets = list(encoder.iter_packets(pixels, 2, 3))
        assert packets[1] == b"\x81\x00\xff\x00"

    def test_long_run_split_at_128(self, encoder: RLEEncoder) -> None:
        """128を超えるランは分割される"""
        packets = list(encoder.iter_packets(WHITE * 200, 200, 3))
        assert packets == [b"\xff\xff\xff\xff", bytes((0x80 | 71,)) + b"\xff\xff\xff"]

    def test_long_raw_split_at_128(self, encoder: RLEEncoder) -> None:
        """128を超える単独ピクセルの連続は複数のローパケットになる"""
        pixels = b"".join(bytes((i % 256, i // 256, 0, 0xFF)) for i in range(130))
        packets = split_packets(b"".join(encoder.iter_packets(pixels, 130, 3)), 3)
        assert packets == [(False, 128), (False, 2)]

    def test_width_one(self, encoder: RLEEncoder) -> None:
        """幅1の画像ではすべて1ピクセルのローパケットになる"""
        packets = split_packets(b"".join(encoder.iter_packets(RED * 3, 1, 3)), 3)
        assert packets == [(False, 1)] * 3

    def test_zero_run_length(self, encoder: RLEEncoder) -> None:
        """ピクセル境界に揃わないバッファではZeroRunLengthErrorになる"""
        with pytest.raises(ZeroRunLengthError):
            list(encoder.iter_packets(RED + b"\xff\x00", 2, 3))

    @pytest.mark.parametrize(
        "width, height, colors",
        [
            pytest.param(1, 50, 2, id="幅1"),
            pytest.param(7, 5, 2, id="少ない色数"),
            pytest.param(64, 4, 256, id="多い色数"),
            pytest.param(300, 2, 3, id="幅が128超"),
        ],
    )
    def test_packet_bounds(self, encoder: RLEEncoder, width: int, height: int, colors: int) -> None:
        """すべてのパケットのラン長が1以上min(128, width)以下になる"""
        rng = random.Random(width * 1000 + height)
        palette = [bytes((rng.randrange(256), rng.randrange(256), 0, 0xFF)) for _ in range(colors)]
        pixels = b"".join(rng.choice(palette) for _ in range(width * height))

        data = b"".join(encoder.iter_packets(pixels, width, 3))
        for _, run_length in split_packets(data, 3):
            assert 1 <= run_length <= min(MAX_RUN_LENGTH, width)

    def test_encode_writes_packets(self, encoder: RLEEncoder) -> None:
        """encode()がパケットを書き込み、パケット数を返す"""
        stream = io.BytesIO()
        count = encoder.encode(ByteWriter(stream), RED + GREEN + GREEN + BLUE, 4, 3)
        assert count == 3
        assert stream.getvalue() == b"".join(
            RLEEncoder().iter_packets(RED + GREEN + GREEN + BLUE, 4, 3)
        )


class TestRLERoundTrip:
    """RLEの生成と展開の往復テスト"""

    @pytest.mark.parametrize(
        "pixels, width",
        [
            pytest.param(RED, 1, id="1ピクセル"),
            pytest.param(RED + GREEN + GREEN + BLUE, 2, id="行をまたぐラン"),
            pytest.param(RED * 3 + GREEN + BLUE * 5 + WHITE, 5, id="混在"),
            pytest.param(WHITE * 1000, 500, id="長いラン"),
            pytest.param(RED + GREEN + RED + GREEN, 4, id="交互"),
            pytest.param(RED + RED + GREEN, 3, id="末尾が単独ピクセル"),
        ],
    )
    @pytest.mark.parametrize("bytes_per_pixel", [3, 4])
    def test_round_trip(self, pixels: bytes, width: int, bytes_per_pixel: int) -> None:
        """生成したパケット列を展開すると元のピクセルに戻る"""
        data = b"".join(RLEEncoder().iter_packets(pixels, width, bytes_per_pixel))
        assert bytes(rle_decode(data, len(pixels) // 4, bytes_per_pixel)) == pixels

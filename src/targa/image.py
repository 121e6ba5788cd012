"""画像リソースモジュール

デコード結果を保持する正規表現（RGBA8、行優先）の画像クラスと、
ファイル・ストリーム・メモリ上のバイト列からの読み書きAPIを提供する。
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from PIL import Image as PILImage

from targa.codec.decoder import TGADecoder
from targa.codec.encoder import FOOTER_SIGNATURE, TGAEncoder
from targa.codec.header import ImageType
from targa.codec.pixel import PIXEL_SIZE, is_opaque
from targa.stream import ByteReader, ByteWriter

if TYPE_CHECKING:
    from targa.stream import ReadableStream, WritableStream


class Image:
    """RGBA8画像

    アルファ乗算されていない32ビットRGBAピクセルを行優先で保持する。
    ピクセルバッファは常に width * height * 4 バイトで、インスタンスが専有する。

    使用例:
        >>> img = Image.read_filepath("sprite.tga")
        >>> img.set(0, 0, b"\\xff\\x00\\x00\\xff")
        >>> img.write_filepath("sprite-out.tga", compress=True)

    Attributes:
        width: 画像の幅（ピクセル）
        height: 画像の高さ（ピクセル）
        pixels: RGBAピクセルバッファ
    """

    def __init__(self, width: int, height: int) -> None:
        """指定サイズの空画像を作成する

        ピクセルはすべて0（透明な黒）で初期化される。

        Args:
            width: 画像の幅（1以上）
            height: 画像の高さ（1以上）

        Raises:
            ValueError: 幅または高さが0以下の場合
        """
        self.width = 0
        self.height = 0
        self.pixels = bytearray()
        self.reinit(width, height)

    def reinit(self, width: int, height: int) -> None:
        """画像を指定サイズで再初期化する

        既存のピクセルデータは破棄される。

        Args:
            width: 画像の幅（1以上）
            height: 画像の高さ（1以上）

        Raises:
            ValueError: 幅または高さが0以下の場合
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"画像サイズは1以上である必要があります: {width}x{height}")
        self.pixels = bytearray(width * height * PIXEL_SIZE)
        self.width = width
        self.height = height

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Image):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self.pixels == other.pixels
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Image(width={self.width}, height={self.height})"

    def offset(self, x: int, y: int) -> int:
        """座標に対応するピクセルのバイトオフセットを返す

        Args:
            x: X座標
            y: Y座標

        Returns:
            pixels内のバイトオフセット

        Raises:
            IndexError: 座標が画像の範囲外の場合
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"座標が範囲外です: ({x}, {y}) / {self.width}x{self.height}")
        return (y * self.width + x) * PIXEL_SIZE

    def get(self, x: int, y: int) -> bytes:
        """座標のピクセル値（RGBA 4バイト）を返す"""
        index = self.offset(x, y)
        return bytes(self.pixels[index : index + PIXEL_SIZE])

    def set(self, x: int, y: int, pixel: bytes | bytearray) -> None:
        """座標のピクセル値を設定する

        Args:
            x: X座標
            y: Y座標
            pixel: RGBA値（先頭4バイトのみ使用）

        Raises:
            IndexError: 座標が画像の範囲外の場合
            ValueError: pixelが4バイト未満の場合
        """
        if len(pixel) < PIXEL_SIZE:
            raise ValueError(f"ピクセル値は{PIXEL_SIZE}バイト以上必要です: {len(pixel)}")
        index = self.offset(x, y)
        self.pixels[index : index + PIXEL_SIZE] = pixel[:PIXEL_SIZE]

    def is_opaque(self) -> bool:
        """すべてのピクセルのアルファ値が0xFFかどうかを返す"""
        return is_opaque(self.pixels)

    def flip_vertical(self) -> None:
        """行の並びを上下反転する"""
        stride = self.width * PIXEL_SIZE
        rows = [self.pixels[i : i + stride] for i in range(0, len(self.pixels), stride)]
        self.pixels = bytearray().join(reversed(rows))

    # --- 読み込み ---

    @classmethod
    def read_stream(cls, stream: ReadableStream | BinaryIO) -> Image:
        """ストリームからTGA画像を読み込む

        Args:
            stream: 読み取り元のバイナリストリーム

        Returns:
            デコードされた画像

        Raises:
            TGAError: TGAデータが不正または未対応の場合
        """
        return TGADecoder().decode(ByteReader(stream))

    @classmethod
    def read_data(cls, data: bytes) -> Image:
        """メモリ上のTGAデータから画像を読み込む"""
        return cls.read_stream(io.BytesIO(data))

    @classmethod
    def read_filepath(cls, filepath: str | Path) -> Image:
        """TGAファイルから画像を読み込む

        Args:
            filepath: TGAファイルのパス

        Returns:
            デコードされた画像

        Raises:
            FileNotFoundError: ファイルが存在しない場合
            TGAError: TGAデータが不正または未対応の場合
        """
        resolved = Path(filepath).expanduser().resolve()
        with resolved.open("rb") as f:
            return cls.read_stream(f)

    # --- 書き込み ---

    def write_stream(self, stream: WritableStream | BinaryIO, compress: bool) -> None:
        """画像をTGAデータとしてストリームに書き込む

        不透明な画像は24ビット、アルファを含む画像は32ビットで出力する。

        Args:
            stream: 書き込み先のバイナリストリーム
            compress: RLE圧縮するか
        """
        TGAEncoder().encode(ByteWriter(stream), self, compress)

    def to_bytes(self, compress: bool = False) -> bytes:
        """画像をTGAデータのバイト列に変換する"""
        buffer = io.BytesIO()
        self.write_stream(buffer, compress)
        return buffer.getvalue()

    def write_filepath(self, filepath: str | Path, compress: bool) -> None:
        """画像をTGAファイルに書き込む

        既存のファイルは上書きされる。
        エンコードはメモリ上で行い、成功した場合のみファイルを書き込む。

        Args:
            filepath: 出力先ファイルのパス
            compress: RLE圧縮するか

        Raises:
            ValueError: 画像サイズが65535を超える場合
        """
        data = self.to_bytes(compress)
        resolved = Path(filepath).expanduser().resolve()
        resolved.write_bytes(data)

    # --- Pillow連携 ---

    def to_pil(self) -> PILImage.Image:
        """PIL.Imageオブジェクト（RGBAモード）に変換する

        行はメモリ上の順序のまま渡される。
        """
        return PILImage.frombytes("RGBA", (self.width, self.height), bytes(self.pixels))

    @classmethod
    def from_pil(cls, image: PILImage.Image) -> Image:
        """PIL.Imageオブジェクトから画像を作成する

        RGBA以外のモードはRGBAに変換してから取り込む。

        Args:
            image: 変換元のPIL.Imageオブジェクト

        Returns:
            作成された画像

        Raises:
            ValueError: 画像サイズが0の場合
        """
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        result = cls(rgba.width, rgba.height)
        result.pixels[:] = rgba.tobytes()
        return result


@dataclass(frozen=True)
class TGAInfo:
    """TGA画像のメタ情報

    ピクセルデータをデコードせずにヘッダーから読み取った情報。

    Attributes:
        width: 画像の幅（ピクセル）
        height: 画像の高さ（ピクセル）
        depth: 1ピクセルあたりのビット数
        image_type: 画像タイプ
        compressed: RLE圧縮されているか
        alpha_bits: 画像記述子のアルファビット数
        id_length: 画像IDフィールドのバイト数
        top_origin: 原点が上端か（Falseなら最初の行が画像の最下行）
        has_footer: TGA 2.0フッターを持つか
    """

    width: int
    height: int
    depth: int
    image_type: ImageType | int
    compressed: bool
    alpha_bits: int
    id_length: int
    top_origin: bool
    has_footer: bool

    @property
    def supported(self) -> bool:
        """このコーデックでデコードできる形式かどうかを返す"""
        return self.depth in (16, 24, 32) and self.image_type in (
            ImageType.NO_DATA,
            ImageType.UNCOMPRESSED_TRUECOLOR,
            ImageType.RLE_TRUECOLOR,
        )


def get_info(filepath: str | Path) -> TGAInfo:
    """TGAファイルのメタ情報を取得する

    Args:
        filepath: TGAファイルのパス

    Returns:
        TGA画像のメタ情報

    Raises:
        FileNotFoundError: ファイルが存在しない場合
        MissingHeaderError: ヘッダーが不完全な場合
    """
    resolved = Path(filepath).expanduser().resolve()
    with resolved.open("rb") as f:
        header = TGADecoder().read_header(ByteReader(f))
        f.seek(0, io.SEEK_END)
        size = f.tell()
        has_footer = False
        if size >= len(FOOTER_SIGNATURE):
            f.seek(size - len(FOOTER_SIGNATURE))
            has_footer = f.read(len(FOOTER_SIGNATURE)) == FOOTER_SIGNATURE

    return TGAInfo(
        width=header.width,
        height=header.height,
        depth=header.depth,
        image_type=header.image_type,
        compressed=header.is_compressed,
        alpha_bits=header.alpha_bits,
        id_length=header.id_length,
        top_origin=header.top_origin,
        has_footer=has_footer,
    )

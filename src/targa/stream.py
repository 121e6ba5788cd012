"""バイトストリーム読み書きモジュール

コーデックが利用するバイナリストリームの薄いラッパーを提供する。
「Nバイトちょうど読む」「1バイト読む」「Nバイト読み飛ばす」「すべて書く」
の操作を、ファイル・BytesIO等の任意のバイナリストリーム上で提供する。
"""

from __future__ import annotations

from typing import BinaryIO, Protocol

from targa.errors import UnexpectedEOFError


class ReadableStream(Protocol):
    """読み取り可能なバイナリストリームのプロトコル"""

    def read(self, size: int = -1, /) -> bytes:
        """最大sizeバイトを読み取る"""
        ...


class WritableStream(Protocol):
    """書き込み可能なバイナリストリームのプロトコル"""

    def write(self, data: bytes | memoryview, /) -> int | None:
        """データを書き込む"""
        ...


class ByteReader:
    """バイナリストリームの読み取りラッパー

    短い読み取り（read()が要求より少ないバイト数を返す場合）を吸収し、
    必要なバイト数が揃うまで読み取りを繰り返す。

    Attributes:
        position: これまでに消費したバイト数
    """

    def __init__(self, stream: ReadableStream | BinaryIO) -> None:
        """ByteReaderを初期化する

        Args:
            stream: 読み取り元のバイナリストリーム
        """
        self._stream = stream
        self.position = 0

    def read_all(self, size: int) -> bytes:
        """最大sizeバイトを読み取る

        ストリーム終端に達した場合は要求より短いバイト列を返す。

        Args:
            size: 読み取るバイト数

        Returns:
            読み取ったバイト列（終端では短くなる）
        """
        chunks: list[bytes] = []
        remaining = size
        while remaining > 0:
            chunk = self._stream.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        data = b"".join(chunks)
        self.position += len(data)
        return data

    def read_exact(self, size: int) -> bytes:
        """ちょうどsizeバイトを読み取る

        Args:
            size: 読み取るバイト数

        Returns:
            読み取ったバイト列

        Raises:
            UnexpectedEOFError: sizeバイトに満たずに終端に達した場合
        """
        data = self.read_all(size)
        if len(data) < size:
            raise UnexpectedEOFError(
                f"データが不足しています: {size}バイト必要ですが{len(data)}バイトしかありません"
            )
        return data

    def read_byte(self) -> int:
        """1バイト読み取る

        Returns:
            読み取ったバイト値（0-255）

        Raises:
            UnexpectedEOFError: ストリームが終端に達している場合
        """
        return self.read_exact(1)[0]

    def skip_bytes(self, size: int) -> None:
        """sizeバイト読み飛ばす

        Args:
            size: 読み飛ばすバイト数

        Raises:
            UnexpectedEOFError: 読み飛ばし途中で終端に達した場合
        """
        if size > 0:
            self.read_exact(size)


class ByteWriter:
    """バイナリストリームの書き込みラッパー

    Attributes:
        bytes_written: これまでに書き込んだバイト数
    """

    def __init__(self, stream: WritableStream | BinaryIO) -> None:
        """ByteWriterを初期化する

        Args:
            stream: 書き込み先のバイナリストリーム
        """
        self._stream = stream
        self.bytes_written = 0

    def write_all(self, data: bytes | bytearray) -> None:
        """データをすべて書き込む

        write()が要求より少ないバイト数を返した場合は残りを書き込み直す。
        戻り値がNoneのストリームはすべて書き込んだものとみなす。

        Args:
            data: 書き込むバイト列

        Raises:
            OSError: ストリームが1バイトも書き込めなかった場合
        """
        view = memoryview(bytes(data))
        while view:
            written = self._stream.write(view)
            if written is None:
                written = len(view)
            if written <= 0:
                raise OSError("ストリームへの書き込みが進みません")
            view = view[written:]
            self.bytes_written += written

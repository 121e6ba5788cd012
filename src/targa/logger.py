"""コンソールログ出力のインターフェース定義

このモジュールは、targa CLIのメッセージ出力とログファイル出力を定義する。
VerboseLevel (詳細ログレベル)に応じた出力制御を行う。
ライブラリ側のモジュールは標準のloggingを使用し、ハンドラーは設定しない。
"""

from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Any, TextIO


class VerboseLevel(IntEnum):
    """詳細ログレベル

    ログ出力の詳細度を制御するための列挙型。
    QUIET: エラーのみ出力
    NORMAL: 結果サマリを出力
    VERBOSE: 変換ファイル一覧も出力（-vオプション）
    DEBUG: コーデック内部のログも出力（-vvオプション）
    """

    QUIET = -1
    NORMAL = 0
    VERBOSE = 1
    DEBUG = 2

    @classmethod
    def from_count(cls, count: int) -> VerboseLevel:
        """-vの指定回数からレベルを求める

        Args:
            count: -vの指定回数（負の値はQUIET）

        Returns:
            対応する詳細ログレベル
        """
        if count < 0:
            return cls.QUIET
        return cls(min(count, cls.DEBUG))


@dataclass
class LogConfig:
    """ログ設定

    Attributes:
        verbose_level: ログの詳細度レベル
        log_file: ログ出力先ファイルパス（Noneの場合はファイル出力なし）
    """

    verbose_level: VerboseLevel = VerboseLevel.NORMAL
    log_file: Path | None = None


class ConsoleLogger:
    """コンソールログ出力クラス

    VerboseLevelに応じてメッセージのフィルタリングを行う。
    DEBUGレベルでは標準loggingのtargaロガーをstderrに接続し、
    デコーダー・エンコーダーのデバッグログも表示する。

    使用例:
        >>> config = LogConfig(verbose_level=VerboseLevel.VERBOSE)
        >>> with ConsoleLogger(config) as logger:
        ...     logger.info("変換を開始します")
        ...     logger.verbose("sprite.tga を処理中")
    """

    _ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9;]*m")

    def __init__(self, config: LogConfig) -> None:
        """ロガーを初期化する

        Args:
            config: ログ設定
        """
        self._config = config
        self._log_file: TextIO | None = None
        self._handler: logging.Handler | None = None
        if config.log_file:
            # クラス自体がコンテキストマネージャとして動作し、__exit__でファイルを閉じる
            self._log_file = open(config.log_file, "w", encoding="utf-8")  # noqa: SIM115
        if config.verbose_level >= VerboseLevel.DEBUG:
            self._attach_library_handler()

    def __enter__(self) -> ConsoleLogger:
        """コンテキストマネージャのエントリポイント"""
        return self

    def __exit__(self, *args: object) -> None:
        """コンテキストマネージャの終了処理"""
        if self._handler:
            library_logger = logging.getLogger("targa")
            library_logger.removeHandler(self._handler)
            library_logger.setLevel(logging.NOTSET)
            self._handler = None
        if self._log_file:
            self._log_file.close()
            self._log_file = None

    @property
    def config(self) -> LogConfig:
        """ログ設定を取得する"""
        return self._config

    def _attach_library_handler(self) -> None:
        """targaパッケージのloggingをstderrに出力する"""
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("[%(name)s] %(message)s"))
        library_logger = logging.getLogger("targa")
        library_logger.addHandler(handler)
        library_logger.setLevel(logging.DEBUG)
        self._handler = handler

    def _print(self, message: str, file: TextIO | None = None) -> None:
        """メッセージを出力する

        Args:
            message: 出力するメッセージ
            file: 出力先（Noneの場合は標準出力）
        """
        if file is None:
            file = sys.stdout
        print(message, file=file)

    def _log_to_file(self, level: str, message: str) -> None:
        """ファイルにログ出力する

        Args:
            level: ログレベル文字列
            message: 出力するメッセージ
        """
        if self._log_file:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            clean_message = self._strip_ansi(message)
            self._log_file.write(f"[{timestamp}] {level}: {clean_message}\n")
            self._log_file.flush()

    def _strip_ansi(self, text: str) -> str:
        """ANSIエスケープシーケンスを除去する"""
        return self._ANSI_ESCAPE_PATTERN.sub("", text)

    def info(self, message: str) -> None:
        """情報メッセージを出力する（NORMAL以上）"""
        if self._config.verbose_level >= VerboseLevel.NORMAL:
            self._print(message)
        self._log_to_file("INFO", message)

    def verbose(self, message: str) -> None:
        """詳細メッセージを出力する（VERBOSE以上）"""
        if self._config.verbose_level >= VerboseLevel.VERBOSE:
            self._print(message)
        self._log_to_file("VERBOSE", message)

    def debug(self, message: str) -> None:
        """デバッグメッセージを出力する（DEBUG以上）"""
        if self._config.verbose_level >= VerboseLevel.DEBUG:
            self._print(message)
        self._log_to_file("DEBUG", message)

    def error(self, message: str) -> None:
        """エラーメッセージを出力する（常に出力）"""
        self._print(f"エラー: {message}", file=sys.stderr)
        self._log_to_file("ERROR", message)

    def log_conversion(self, source: Path, dest: Path, status: str) -> None:
        """ファイル変換をログする（VERBOSE以上）

        Args:
            source: 変換元ファイルパス
            dest: 変換先ファイルパス
            status: 変換ステータス
        """
        self.verbose(f"変換: {source.name} -> {dest.name} [{status}]")

    def log_summary(self, statistics: dict[str, Any]) -> None:
        """変換サマリを出力する（NORMAL以上）

        Args:
            statistics: 変換統計情報（output_path, output_size, width, height, depth）
        """
        self.info("✅ Done!")
        if "output_path" in statistics:
            size_kb = statistics.get("output_size", 0) / 1024
            self.info(f"   Output: {statistics['output_path']} ({size_kb:.1f} KB)")
        if "width" in statistics and "height" in statistics:
            depth = statistics.get("depth")
            depth_part = f", {depth}-bit" if depth else ""
            self.info(f"   Image: {statistics['width']}x{statistics['height']}{depth_part}")

"""Configuration module for targa."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

SUPPORTED_OUTPUT_FORMATS: tuple[str, ...] = ("png", "bmp", "webp", "tiff")


class ConfigError(Exception):
    """設定ファイル読み込みエラー"""

    pass


@dataclass(frozen=True)
class EncodeConfig:
    """TGA出力設定"""

    compress: bool = True


@dataclass(frozen=True)
class DecodeConfig:
    """TGAからの変換設定"""

    format: str = "png"


@dataclass(frozen=True)
class LogSettings:
    """ログ設定"""

    verbose: int = 0
    file: Path | None = None


@dataclass(frozen=True)
class TargaConfig:
    """ルート設定"""

    encode: EncodeConfig = field(default_factory=EncodeConfig)
    decode: DecodeConfig = field(default_factory=DecodeConfig)
    log: LogSettings = field(default_factory=LogSettings)


def load_config(path: Path) -> TargaConfig:
    """設定ファイルを読み込む

    Args:
        path: 設定ファイルパス

    Returns:
        TargaConfig: 読み込んだ設定（デフォルトとマージ済み）

    Raises:
        ConfigError: ファイル読み込みまたはパースエラー
    """
    if not path.exists():
        raise ConfigError(f"設定ファイルが見つかりません: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML解析エラー: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("設定ファイルはYAMLのマッピング形式である必要があります")

    default = get_default_config()

    return TargaConfig(
        encode=_merge_encode_config(data.get("encode", {}), default.encode),
        decode=_merge_decode_config(data.get("decode", {}), default.decode),
        log=_merge_log_settings(data.get("log", {}), default.log),
    )


def get_default_config() -> TargaConfig:
    """デフォルト設定を取得する"""
    return TargaConfig()


def _merge_encode_config(data: dict[str, Any], default: EncodeConfig) -> EncodeConfig:
    """TGA出力設定をマージする"""
    if not isinstance(data, dict):
        return default
    compress = data.get("compress", default.compress)
    if not isinstance(compress, bool):
        raise ConfigError(f"encode.compress は真偽値である必要があります: {compress!r}")
    return EncodeConfig(compress=compress)


def _merge_decode_config(data: dict[str, Any], default: DecodeConfig) -> DecodeConfig:
    """変換設定をマージする"""
    if not isinstance(data, dict):
        return default
    fmt = str(data.get("format", default.format)).lower()
    if fmt not in SUPPORTED_OUTPUT_FORMATS:
        raise ConfigError(f"対応していない出力形式です: {fmt}")
    return DecodeConfig(format=fmt)


def _merge_log_settings(data: dict[str, Any], default: LogSettings) -> LogSettings:
    """ログ設定をマージする"""
    if not isinstance(data, dict):
        return default
    verbose = data.get("verbose", default.verbose)
    if isinstance(verbose, bool) or not isinstance(verbose, int):
        raise ConfigError(f"log.verbose は整数である必要があります: {verbose!r}")
    log_file = data.get("file", default.file)
    return LogSettings(
        verbose=verbose,
        file=Path(log_file) if log_file is not None else None,
    )

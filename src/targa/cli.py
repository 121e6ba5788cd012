"""CLI entry point for targa."""

from pathlib import Path
from typing import Annotated

import typer
from PIL import Image as PILImage
from rich.console import Console
from rich.table import Table

from targa import __version__
from targa.codec.encoder import select_depth
from targa.codec.header import ImageType
from targa.config import (
    SUPPORTED_OUTPUT_FORMATS,
    ConfigError,
    TargaConfig,
    get_default_config,
    load_config,
)
from targa.errors import TGAError
from targa.image import Image, get_info
from targa.logger import ConsoleLogger, LogConfig, VerboseLevel
from targa.types import ExitCode

app = typer.Typer(help="TGA (Truevision) 画像のデコード・エンコードを行うCLIツール")
console = Console()

ConfigOption = Annotated[Path | None, typer.Option("--config", help="設定ファイル（YAML）")]
VerboseOption = Annotated[int, typer.Option("-v", "--verbose", count=True, help="詳細ログ出力")]
LogFileOption = Annotated[Path | None, typer.Option(help="ログファイル出力先")]


def _format_size(size_bytes: int) -> str:
    """バイト数を人間が読みやすい形式に変換する"""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def _load_settings(config_path: Path | None) -> TargaConfig:
    """設定ファイルを読み込む（未指定の場合はデフォルト）"""
    if config_path is None:
        return get_default_config()
    try:
        return load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT) from e


def _read_tga_top_down(path: Path) -> Image:
    """TGAファイルを読み込み、行の並びを上から下に揃える

    画像記述子の原点が下端（TGAの既定）の場合は上下反転する。
    """
    image = Image.read_filepath(path)
    if not get_info(path).top_origin:
        image.flip_vertical()
    return image


def _create_logger(settings: TargaConfig, verbose: int, log_file: Path | None) -> ConsoleLogger:
    """コマンドライン引数と設定からロガーを作成する"""
    level = VerboseLevel.from_count(max(verbose, settings.log.verbose))
    return ConsoleLogger(
        LogConfig(
            verbose_level=level,
            log_file=log_file or settings.log.file,
        )
    )


@app.command()
def info(
    input_path: Annotated[Path, typer.Argument(help="TGAファイルパス")],
) -> None:
    """TGAファイルのヘッダー情報を表示する"""
    if not input_path.is_file():
        console.print(f"[red]Error: ファイルが見つかりません: {input_path}[/red]")
        raise typer.Exit(ExitCode.ERROR)

    try:
        tga_info = get_info(input_path)
    except TGAError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT) from e

    if isinstance(tga_info.image_type, ImageType):
        type_str = f"{tga_info.image_type.name} ({int(tga_info.image_type)})"
    else:
        type_str = f"UNKNOWN ({tga_info.image_type})"

    table = Table(title="TGA Info")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("File", str(input_path))
    table.add_row("Size", _format_size(input_path.stat().st_size))
    table.add_row("Dimensions", f"{tga_info.width}x{tga_info.height}")
    table.add_row("Depth", f"{tga_info.depth}-bit")
    table.add_row("Image Type", type_str)
    table.add_row("RLE", "yes" if tga_info.compressed else "no")
    table.add_row("Alpha Bits", str(tga_info.alpha_bits))
    table.add_row("ID Length", str(tga_info.id_length))
    table.add_row("Origin", "top" if tga_info.top_origin else "bottom")
    table.add_row("TGA 2.0 Footer", "yes" if tga_info.has_footer else "no")
    table.add_row(
        "Supported",
        "[green]yes[/green]" if tga_info.supported else "[red]no[/red]",
    )

    console.print(table)
    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def decode(
    input_path: Annotated[Path, typer.Argument(help="TGAファイルパス")],
    output: Annotated[Path | None, typer.Option("-o", "--output", help="出力ファイルパス")] = None,
    output_format: Annotated[
        str | None, typer.Option("--format", help="出力形式（png/bmp/webp/tiff）")
    ] = None,
    config: ConfigOption = None,
    verbose: VerboseOption = 0,
    log_file: LogFileOption = None,
) -> None:
    """TGA画像を他の形式に変換する

    画像記述子の原点位置に従い、上の行から順に出力する。
    """
    settings = _load_settings(config)
    fmt = (output_format or settings.decode.format).lower()
    if fmt not in SUPPORTED_OUTPUT_FORMATS:
        console.print(f"[red]Error: 対応していない出力形式です: {fmt}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT)

    if output is None:
        output = input_path.with_suffix(f".{fmt}")

    with _create_logger(settings, verbose, log_file) as logger:
        try:
            image = _read_tga_top_down(input_path)
        except TGAError as e:
            logger.error(f"{input_path}: {e}")
            raise typer.Exit(ExitCode.INVALID_INPUT) from e
        except OSError as e:
            logger.error(f"{input_path}: {e}")
            raise typer.Exit(ExitCode.ERROR) from e

        pil_image = image.to_pil()
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            pil_image.save(output, fmt.upper())
        except OSError as e:
            logger.error(f"{output}: {e}")
            raise typer.Exit(ExitCode.ERROR) from e
        finally:
            pil_image.close()

        logger.log_conversion(input_path, output, "success")
        logger.log_summary(
            {
                "output_path": output,
                "output_size": output.stat().st_size,
                "width": image.width,
                "height": image.height,
            }
        )
    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def encode(
    input_path: Annotated[Path, typer.Argument(help="入力画像パス（Pillowで読める形式またはTGA）")],
    output: Annotated[Path | None, typer.Option("-o", "--output", help="出力TGAパス")] = None,
    compress: Annotated[
        bool | None, typer.Option("--compress/--no-compress", help="RLE圧縮する")
    ] = None,
    config: ConfigOption = None,
    verbose: VerboseOption = 0,
    log_file: LogFileOption = None,
) -> None:
    """画像をTGA形式で書き出す

    原点は左下（TGAの既定）として出力する。
    """
    settings = _load_settings(config)
    use_rle = settings.encode.compress if compress is None else compress

    if output is None:
        output = input_path.with_suffix(".tga")

    with _create_logger(settings, verbose, log_file) as logger:
        try:
            if input_path.suffix.lower() == ".tga":
                image = _read_tga_top_down(input_path)
            else:
                with PILImage.open(input_path) as pil_image:
                    image = Image.from_pil(pil_image)
        except (TGAError, ValueError) as e:
            logger.error(f"{input_path}: {e}")
            raise typer.Exit(ExitCode.INVALID_INPUT) from e
        except OSError as e:
            logger.error(f"{input_path}: {e}")
            raise typer.Exit(ExitCode.ERROR) from e

        logger.debug(f"RLE圧縮: {'有効' if use_rle else '無効'}")
        # 出力は原点が左下のため最下行から書き出す
        image.flip_vertical()
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            image.write_filepath(output, compress=use_rle)
        except ValueError as e:
            logger.error(f"{output}: {e}")
            raise typer.Exit(ExitCode.INVALID_INPUT) from e
        except OSError as e:
            logger.error(f"{output}: {e}")
            raise typer.Exit(ExitCode.ERROR) from e

        logger.log_conversion(input_path, output, "rle" if use_rle else "raw")
        logger.log_summary(
            {
                "output_path": output,
                "output_size": output.stat().st_size,
                "width": image.width,
                "height": image.height,
                "depth": select_depth(image),
            }
        )
    raise typer.Exit(ExitCode.SUCCESS)


def version_callback(value: bool) -> None:
    """バージョン表示コールバック"""
    if value:
        typer.echo(f"targa {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="バージョンを表示する",
        ),
    ] = False,
) -> None:
    """targa CLI - TGA画像コーデック"""
    pass

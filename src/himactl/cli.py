import logging
from pathlib import Path
from typing import Annotated, Literal

import typer
from dotenv import load_dotenv

from himactl.errors import ConfigurationError, HimaCtlError
from himactl.utils import setup_logging

load_dotenv()
app = typer.Typer(
    name="himactl",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
context = {}
log = logging.getLogger(__name__)


def init_reporter() -> None:
    if "progress" not in context:
        raise ValueError("Missing reporter, please ensure at least an `empty` reporter is registered")
    reporter = context["progress"]
    reporter.start()


def _parse_option(parser, value, param_name: str):
    if value is None:
        return None
    try:
        return parser(value)
    except ConfigurationError as e:
        raise typer.BadParameter(e.message, param_hint=param_name)


def _load_settings():
    from himactl.config import get_settings

    try:
        return get_settings()
    except ConfigurationError as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(code=2)


@app.callback()
def main(
    log_level: Annotated[str, typer.Option("--log-level", "-l", help="Set logging level")] = "INFO",
    progress: Annotated[Literal["empty", "simple", "rich"], typer.Option("--progress", "-p")] = "simple",
):
    from himactl.progress import create_reporter, registry

    reporter_cls = registry.get(progress)
    setup_logging(log_level=log_level, reporter_cls=reporter_cls)
    context["progress"] = create_reporter(reporter_name=progress)


@app.command()
def fetch(
    output_dir: Annotated[
        Path | None,
        typer.Option("--output-dir", "-o", help="Directory where images are stored"),
    ] = None,
    output_format: Annotated[
        str | None, typer.Option("--format", "-f", help="Output image format, JPEG or PNG")
    ] = None,
    level: Annotated[
        str | None, typer.Option("--level", "-L", help="Tiles per side: 4, 8, 16 or 20")
    ] = None,
    margins: Annotated[
        str | None, typer.Option("--margins", "-m", help="Margins in pixels, TOP[,RIGHT][,BOTTOM][,LEFT]")
    ] = None,
    store_latest_only: Annotated[
        bool, typer.Option("--store-latest-only", help="Always overwrite a single 'latest' file")
    ] = False,
    force: Annotated[
        bool, typer.Option("--force", help="Download again even if the image already exists")
    ] = False,
    set_wallpaper: Annotated[
        bool, typer.Option("--set-wallpaper", help="Use the image as desktop wallpaper")
    ] = False,
    num_workers: Annotated[
        int | None, typer.Option("--num-workers", "-nw", min=1, help="Parallel tile downloads")
    ] = None,
):
    """Download the latest full-disk image."""
    from himactl.fetchers import HTTPTileFetcher
    from himactl.metadata import MetadataResolver
    from himactl.model import Margins, OutputFormat, ResolutionLevel
    from himactl.pipeline import Pipeline
    from himactl.wallpaper import create_wallpaper_setter

    # invalid values are rejected before any network activity
    parsed_format = _parse_option(OutputFormat.parse, output_format, "--format")
    parsed_level = _parse_option(ResolutionLevel.parse, level, "--level")
    parsed_margins = _parse_option(Margins.parse, margins, "--margins")
    settings = _load_settings()

    wallpaper = set_wallpaper or settings.set_wallpaper
    pipeline = Pipeline(
        MetadataResolver(base_url=settings.base_url),
        HTTPTileFetcher(max_retries=settings.max_retries, timeout=settings.timeout),
        level=parsed_level or settings.level,
        margins=parsed_margins or settings.margins,
        output_dir=output_dir or settings.output_dir,
        output_format=parsed_format or settings.output_format,
        store_latest_only=store_latest_only or settings.store_latest_only,
        force=force or settings.force,
        tile_width=settings.tile_width,
        num_workers=num_workers or settings.num_workers,
        wallpaper_setter=create_wallpaper_setter() if wallpaper else None,
    )

    init_reporter()
    try:
        result = pipeline.run()
    except HimaCtlError as e:
        log.error("Download failed: %s", e)
        raise typer.Exit(code=1)
    finally:
        context["progress"].stop()

    typer.echo(str(result.target.path))


@app.command()
def latest():
    """Print the timestamp of the latest available image."""
    from himactl.metadata import MetadataResolver

    settings = _load_settings()
    try:
        timestamp = MetadataResolver(base_url=settings.base_url).resolve_latest()
    except HimaCtlError as e:
        log.error("Cannot resolve the latest image: %s", e)
        raise typer.Exit(code=1)
    typer.echo(str(timestamp))


if __name__ == "__main__":
    app()

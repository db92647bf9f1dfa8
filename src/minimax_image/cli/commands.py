"""
Click command definitions for the minimax-image CLI.

`serve` runs the MCP stdio server. The remaining commands call the same
adapter and downloader directly, for scripting and manual checks.
"""

import dataclasses
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from minimax_image import __version__
from minimax_image.cli import progress
from minimax_image.cli.handlers import run_with_error_handling
from minimax_image.core.config import Config
from minimax_image.core.downloader import AssetDownloader
from minimax_image.core.models import (
    AspectRatio,
    AsyncGenerationRequest,
    DownloadedAsset,
    GenerationRequest,
    JobStatus,
    WebhookEvent,
    validate_input,
)
from minimax_image.core.replicate import ReplicateJobAdapter
from minimax_image.logging_config import configure_logging, get_verbosity_from_env
from minimax_image.tools.registry import FALLBACK_PROMPT, ToolRegistry


def _load_config(
    api_token: str | None,
    output_dir: Path | None = None,
    debug_api: bool = False,
) -> Config:
    """Build config from env, apply CLI overrides, and validate it."""
    config = Config.from_env()
    overrides: dict[str, Any] = {}
    if api_token is not None:
        overrides["api_token"] = api_token.strip()
    if output_dir is not None:
        overrides["output_dir"] = output_dir.expanduser().resolve()
    if debug_api:
        overrides["debug_api"] = True
    if overrides:
        config = dataclasses.replace(config, **overrides)
    config.validate()
    return config


def _apply_logging(quiet: bool, verbose_count: int, timestamps: bool = False) -> None:
    # CLI flags override MINIMAX_IMAGE_VERBOSITY
    verbose_level = verbose_count if verbose_count > 0 else get_verbosity_from_env()
    configure_logging(verbose_level=verbose_level, quiet=quiet, timestamps=timestamps)


def _echo_asset_locations(assets: list[DownloadedAsset]) -> None:
    """Print one line per image to stdout: the local path, or the source if not saved."""
    for asset in assets:
        click.echo(str(asset.local_path) if asset.local_path is not None else asset.source)


def _common_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    fn = click.option(
        "--verbose",
        "-v",
        "verbose_count",
        count=True,
        help="Increase verbosity: -v also show prompts, -vv show API detail.",
    )(fn)
    fn = click.option(
        "--quiet",
        "-q",
        is_flag=True,
        help="Minimize progress messages; only print results or errors.",
    )(fn)
    fn = click.option(
        "--debug-api",
        is_flag=True,
        help="Log raw API request payloads and responses.",
    )(fn)
    fn = click.option(
        "--api-token",
        envvar="REPLICATE_API_TOKEN",
        help="Replicate API token (overrides REPLICATE_API_TOKEN environment variable).",
    )(fn)
    return fn


def _generation_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    fn = click.option(
        "--subject-reference",
        help="URL of a character reference image (human face) to use as the subject.",
    )(fn)
    fn = click.option(
        "--no-prompt-optimizer",
        is_flag=True,
        help="Disable the remote prompt optimizer.",
    )(fn)
    fn = click.option(
        "--number",
        "-n",
        "number_of_images",
        type=int,
        default=1,
        show_default=True,
        help="Number of images to generate (1-9).",
    )(fn)
    fn = click.option(
        "--aspect-ratio",
        "-a",
        type=click.Choice([ratio.value for ratio in AspectRatio]),
        default=AspectRatio.SQUARE.value,
        show_default=True,
        help="Image aspect ratio.",
    )(fn)
    fn = click.option(
        "--prompt", "-p", required=True, help="Text description of the image to generate."
    )(fn)
    return fn


def _generation_arguments(
    prompt: str,
    aspect_ratio: str,
    number_of_images: int,
    no_prompt_optimizer: bool,
    subject_reference: str | None,
) -> dict[str, Any]:
    arguments: dict[str, Any] = {
        "prompt": prompt,
        "aspect_ratio": aspect_ratio,
        "number_of_images": number_of_images,
        "prompt_optimizer": not no_prompt_optimizer,
    }
    if subject_reference:
        arguments["subject_reference"] = subject_reference
    return arguments


@click.group(
    help=f"""Generate images with minimax/image-01 on Replicate, as an MCP server or from the shell.

\b
Version: {__version__}
"""
)
@click.version_option(version=__version__, package_name="replicate-minimax-image")
@click.pass_context
def cli(ctx: click.Context) -> None:
    ctx.color = True


@cli.command()
@click.option(
    "--out-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for downloaded images (default: ./images or MINIMAX_IMAGE_OUTPUT_DIR).",
)
@_common_options
def serve(
    out_dir: Path | None,
    api_token: str | None,
    debug_api: bool,
    quiet: bool,
    verbose_count: int,
) -> None:
    """Run the MCP server over stdio."""
    from minimax_image.server import run as run_server

    _apply_logging(quiet, verbose_count, timestamps=True)

    def do_serve() -> None:
        config = _load_config(api_token, out_dir, debug_api)
        run_server(config)

    run_with_error_handling(do_serve, quiet=quiet)


@cli.command()
@_generation_options
@click.option(
    "--out-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for downloaded images (default: ./images or MINIMAX_IMAGE_OUTPUT_DIR).",
)
@_common_options
def generate(
    prompt: str,
    aspect_ratio: str,
    number_of_images: int,
    no_prompt_optimizer: bool,
    subject_reference: str | None,
    out_dir: Path | None,
    api_token: str | None,
    debug_api: bool,
    quiet: bool,
    verbose_count: int,
) -> None:
    """Generate images, wait for them, and save them locally."""
    _apply_logging(quiet, verbose_count)

    def do_generate() -> None:
        # 1. Validate input before touching config or the network
        request = validate_input(
            GenerationRequest,
            _generation_arguments(
                prompt, aspect_ratio, number_of_images, no_prompt_optimizer, subject_reference
            ),
        )
        config = _load_config(api_token, out_dir, debug_api)
        adapter = ReplicateJobAdapter(config)
        downloader = AssetDownloader(config)

        # 2. Generate
        if quiet:
            result = adapter.generate_sync(request)
        else:
            with progress.generation_progress(config.model, request.number_of_images):
                result = adapter.generate_sync(request)

        # 3. Save
        assets = downloader.materialize_all(result.images, request.prompt)
        if not quiet:
            progress.print_assets(
                assets,
                title=f"Generated {len(assets)} image(s) ({result.job_id})",
                generation_time=result.generation_time,
            )
            if not all(asset.saved for asset in assets):
                progress.print_warning(
                    "Some images could not be saved locally; their original URLs are listed."
                )
        _echo_asset_locations(assets)

    run_with_error_handling(do_generate, quiet=quiet)


@cli.command()
@_generation_options
@click.option("--webhook", help="Webhook URL to receive prediction updates.")
@click.option(
    "--webhook-event",
    "webhook_events",
    multiple=True,
    type=click.Choice([event.value for event in WebhookEvent]),
    help="Webhook event to send (repeatable; default: completed).",
)
@_common_options
def submit(
    prompt: str,
    aspect_ratio: str,
    number_of_images: int,
    no_prompt_optimizer: bool,
    subject_reference: str | None,
    webhook: str | None,
    webhook_events: tuple[str, ...],
    api_token: str | None,
    debug_api: bool,
    quiet: bool,
    verbose_count: int,
) -> None:
    """Start a prediction without waiting; prints the prediction id."""
    _apply_logging(quiet, verbose_count)

    def do_submit() -> None:
        arguments = _generation_arguments(
            prompt, aspect_ratio, number_of_images, no_prompt_optimizer, subject_reference
        )
        if webhook:
            arguments["webhook"] = webhook
        if webhook_events:
            arguments["webhook_events_filter"] = list(webhook_events)
        request = validate_input(AsyncGenerationRequest, arguments)
        config = _load_config(api_token, debug_api=debug_api)

        job = ReplicateJobAdapter(config).generate_async(request)
        if not quiet:
            progress.print_job(job)
            progress.print_success(
                f"Prediction created; check it with: minimax-image status {job.id}"
            )
        click.echo(job.id)

    run_with_error_handling(do_submit, quiet=quiet)


@cli.command()
@click.argument("prediction_id")
@click.option("--no-download", is_flag=True, help="Do not save images of a succeeded prediction.")
@click.option(
    "--out-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for downloaded images (default: ./images or MINIMAX_IMAGE_OUTPUT_DIR).",
)
@_common_options
def status(
    prediction_id: str,
    no_download: bool,
    out_dir: Path | None,
    api_token: str | None,
    debug_api: bool,
    quiet: bool,
    verbose_count: int,
) -> None:
    """Show a prediction's status and save its images once it has succeeded."""
    _apply_logging(quiet, verbose_count)

    def do_status() -> None:
        config = _load_config(api_token, out_dir, debug_api)
        job = ReplicateJobAdapter(config).get_job(prediction_id)
        if not quiet:
            progress.print_job(job)
        if job.status is JobStatus.SUCCEEDED and job.output and not no_download:
            assets = AssetDownloader(config).materialize_all(
                job.output, job.prompt or FALLBACK_PROMPT
            )
            if not quiet:
                progress.print_assets(assets, title=f"Saved images for {job.id}")
            _echo_asset_locations(assets)
        else:
            if not quiet and not job.status.is_terminal:
                progress.print_info(f"Prediction is still {job.status.value}; check again later.")
            click.echo(job.status.value)

    run_with_error_handling(do_status, quiet=quiet)


@cli.command()
@click.argument("prediction_id")
@_common_options
def cancel(
    prediction_id: str,
    api_token: str | None,
    debug_api: bool,
    quiet: bool,
    verbose_count: int,
) -> None:
    """Cancel a running prediction; prints the status Replicate reports."""
    _apply_logging(quiet, verbose_count)

    def do_cancel() -> None:
        config = _load_config(api_token, debug_api=debug_api)
        job = ReplicateJobAdapter(config).cancel_job(prediction_id)
        if not quiet:
            progress.print_job(job)
        click.echo(job.status.value)

    run_with_error_handling(do_cancel, quiet=quiet)


@cli.command()
def tools() -> None:
    """Print the MCP tool definitions (name, description, input schema) as JSON."""

    def do_tools() -> None:
        registry = ToolRegistry(Config())
        definitions = [
            {"name": spec.name, "description": spec.description, "inputSchema": spec.input_schema()}
            for spec in registry.tools()
        ]
        click.echo(json.dumps(definitions, indent=2))

    run_with_error_handling(do_tools)


def main() -> None:
    """Entry point for the minimax-image console script."""
    cli()


__all__ = ["cli", "main", "cancel", "generate", "serve", "status", "submit", "tools"]

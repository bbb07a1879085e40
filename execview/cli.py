"""
Execview CLI
=============

Click-based command-line front end: decode one executable and print its
header, segments and sections, or the equivalent JSON document.

Usage::

    execview /bin/ls
    execview /bin/ls --json
    execview firmware.elf --entry-size-policy stride --no-segments
    execview /bin/ls --config execview.toml --verbose

Exit status is 0 on success, 2 when the file cannot be decoded.

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import sys
from dataclasses import replace

import click

from shared.config import ENTRY_SIZE_STRICT, ENTRY_SIZE_STRIDE, ExecviewConfig
from shared.console import ExecviewConsole
from shared.logger import ExecviewLogger

from execview.core.errors import ExecviewError
from execview.output.console import ExecviewConsoleOutput
from execview.parsers.magic import decode_file

EXIT_DECODE_FAILURE = 2


@click.command("execview")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="TOML configuration file.  Default: ./execview.toml if present.",
)
@click.option(
    "--entry-size-policy",
    type=click.Choice([ENTRY_SIZE_STRICT, ENTRY_SIZE_STRIDE], case_sensitive=False),
    default=None,
    help="Override how mismatched table entry sizes are handled.",
)
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Print the decoded structure as JSON.",
)
@click.option("--no-segments", is_flag=True, default=False, help="Hide the segment table.")
@click.option("--no-sections", is_flag=True, default=False, help="Hide the section table.")
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Log decoder diagnostics to stderr.",
)
def execview_cli(
    path: str,
    config_path: str | None,
    entry_size_policy: str | None,
    json_output: bool,
    no_segments: bool,
    no_sections: bool,
    verbose: bool,
) -> None:
    """Decode the ELF executable at PATH and describe its structure."""
    config = ExecviewConfig.load(config_path)
    settings = config.global_settings
    if verbose:
        settings = replace(settings, log_level="DEBUG")

    decoder_config = config.decoder
    if entry_size_policy is not None:
        decoder_config = replace(decoder_config, entry_size_policy=entry_size_policy.lower())

    console = ExecviewConsole(color=settings.color)
    logger = ExecviewLogger.from_config("cli", settings, console_output=verbose)

    try:
        exe = decode_file(path, config=decoder_config, logger=logger)
        summary = exe.summary()
    except ExecviewError as exc:
        logger.warning("Decode failed", kind=exc.kind)
        console.error(f"{path}: {exc}")
        sys.exit(EXIT_DECODE_FAILURE)
    except ValueError as exc:
        logger.warning("File rejected", reason=str(exc))
        console.error(str(exc))
        sys.exit(EXIT_DECODE_FAILURE)

    if json_output:
        click.echo(summary.model_dump_json(indent=2))
        return

    ExecviewConsoleOutput(console=console).display(
        summary,
        show_segments=not no_segments,
        show_sections=not no_sections,
    )


def main() -> None:
    """Entry point for the ``execview`` console script."""
    execview_cli()


if __name__ == "__main__":
    main()

import json
import logging
from pathlib import Path

import click

from .cli_utils import reconstruct_command_line, run_hooks
from .loader import load_document
from .pipeline import (
    ConfigError,
    DocumentLoadError,
    GenerationConfig,
    GenerationError,
    IRBuildError,
    PipelineGenerator,
    load_config,
)
from .pipeline.generator import GENERATORS


@click.command()
@click.option("--spec", "-s", default=None, type=click.Path(), help="OpenAPI document (YAML or JSON)")
@click.option("--output", "-o", default=None, type=click.Path(), help="Output directory")
@click.option("--config", "-c", default=None, type=click.Path(), help="Config file (default: .openapi_to_code.yaml)")
@click.option(
    "--generator",
    "-g",
    multiple=True,
    type=click.Choice(sorted(GENERATORS)),
    help="Generator to run when the config declares no generations",
)
@click.option("--dump-ir", default=None, type=click.Path(), help="Write the resolved IR as JSON")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log debug records")
def openapi_to_code(spec, output, config, generator, dump_ir, verbose):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(config).merge_with_cli_args(spec=spec, output=output)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    if not config.input.source:
        raise click.UsageError("No input document: pass --spec or set input.source in the config file")

    if not config.generations:
        config.generations = [GenerationConfig(generator=name) for name in generator]
    if not config.enabled_generations() and not dump_ir:
        raise click.UsageError("Nothing to generate: pass --generator or declare generations in the config file")

    run_hooks(config.hooks.before_generate, "before_generate")

    try:
        document = load_document(config.input.source, config.input.format)
    except DocumentLoadError as e:
        raise click.ClickException(str(e)) from e

    codegen = PipelineGenerator(document, config, command_line=reconstruct_command_line(openapi_to_code))

    try:
        ir = codegen.ir
    except IRBuildError as e:
        click.echo(f"{len(e.errors)} error(s) in {config.input.source}:", err=True)
        for error in e.errors:
            click.echo(str(error), err=True)
        raise SystemExit(1) from e

    if dump_ir:
        Path(dump_ir).parent.mkdir(parents=True, exist_ok=True)
        with open(dump_ir, "w", encoding="utf-8") as f:
            json.dump(ir.to_dict(), f, indent=2, default=str)
        click.echo(f"Wrote IR to {dump_ir}")

    try:
        written = codegen.run()
    except GenerationError as e:
        raise click.ClickException(str(e)) from e

    for path in written:
        click.echo(f"Wrote {path}")

    run_hooks(config.hooks.after_generate, "after_generate")

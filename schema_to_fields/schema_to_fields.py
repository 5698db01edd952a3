import json
import logging
import sys

import click

from .cli_utils import reconstruct_command_line
from .pipeline import FieldModelGenerator, ResolverConfig, SchemaResolutionError


@click.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option(
    "--allow-remote",
    multiple=True,
    type=str,
    help="URL prefix of remote references that may be loaded (repeatable)",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log resolution details")
@click.argument("path", type=click.Path(exists=True, resolve_path=True))
@click.argument("output", default=None, required=False, type=click.Path(resolve_path=True))
def schema_to_fields(config, allow_remote, verbose, path, output):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    if config is not None:
        with open(config) as f:
            config = ResolverConfig.from_dict(json.load(f))
    else:
        config = ResolverConfig()

    # CLI prefixes extend the ones from the config file
    config.allowed_remote_prefixes = [*config.allowed_remote_prefixes, *allow_remote]

    try:
        generator = FieldModelGenerator.from_file(path, config)
    except SchemaResolutionError as e:
        raise click.ClickException(str(e)) from e

    result = generator.generate()

    out = result.to_dict()
    out["generated_by"] = reconstruct_command_line(schema_to_fields)
    # YAML defaults can be dates
    text = json.dumps(out, indent=2, default=str)

    if output is None:
        click.echo(text)
    else:
        with open(output, "w") as f:
            f.write(text + "\n")

    for failure in result.failures:
        click.echo(f"error: {failure.error}", err=True)

    if not result.ok:
        sys.exit(1)

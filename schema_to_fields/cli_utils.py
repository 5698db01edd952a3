"""
CLI utilities for command line reconstruction and introspection.
"""

from pathlib import Path

import click

COMMAND_NAME = "schema_to_fields"


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Reconstruct command line from current Click context using introspection.

    Args:
        click_command: Click command object for introspection

    Returns:
        Reconstructed command line string
    """
    try:
        ctx = click.get_current_context()
        cli_args = ctx.params
    except RuntimeError:
        # No active context, return basic command
        return COMMAND_NAME

    if not cli_args:
        return COMMAND_NAME

    arguments = []
    options = []

    for param in click_command.params:
        if param.name not in cli_args:
            continue

        value = cli_args[param.name]
        if not value:
            continue

        if isinstance(param, click.Argument):
            arguments.append(_format_value(value))

        elif isinstance(param, click.Option):
            if value == param.default:
                continue

            flag = param.opts[0] if param.opts else f"--{param.name}"
            if param.is_flag:
                options.append(flag)
            elif isinstance(value, (list, tuple)):
                for item in value:
                    options.extend([flag, _format_value(item)])
            else:
                options.extend([flag, _format_value(value)])

    return " ".join([COMMAND_NAME, *arguments, *options])


def _format_value(value) -> str:
    """Shorten existing file paths to their file name."""
    if isinstance(value, (str, Path)):
        path_obj = Path(str(value))
        return path_obj.name if path_obj.exists() else str(value)
    return str(value)

"""
CLI utilities for command line reconstruction and hook execution.
"""

import logging
import subprocess
from pathlib import Path

import click

logger = logging.getLogger(__name__)

COMMAND_NAME = "openapi_to_code"


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

    cmd_parts = [COMMAND_NAME]

    for param in click_command.params:
        param_name = param.name
        if param_name not in cli_args:
            continue

        value = cli_args[param_name]
        if not value or not isinstance(param, click.Option):
            continue

        # Skip if it's the default value
        if value == param.default:
            continue

        flag = param.opts[0] if param.opts else f"--{param_name}"
        if param.is_flag:
            cmd_parts.append(flag)
            continue

        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            # File paths are shown by name only
            if isinstance(item, (str, Path)):
                path_obj = Path(str(item))
                formatted_value = path_obj.name if path_obj.exists() else str(item)
            else:
                formatted_value = str(item)
            cmd_parts.extend([flag, formatted_value])

    return " ".join(cmd_parts)


def run_hooks(commands: list[str], stage: str) -> None:
    """
    Run shell hook commands in order.

    Raises:
        click.ClickException: If a command exits with a non-zero status
    """
    for command in commands:
        logger.info("Running %s hook: %s", stage, command)
        result = subprocess.run(command, shell=True)
        if result.returncode != 0:
            raise click.ClickException(f"{stage} hook failed with status {result.returncode}: {command}")

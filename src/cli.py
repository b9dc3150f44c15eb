#!/usr/bin/env python3
"""
CLI for the mailer.
"""

import logging
from pathlib import Path

import click
from importlib.metadata import version
from commands import email
from mailer import ConfigError, SMTPConfig, load_config_file

import settings


@click.group()
@click.version_option(version=version("mailer"))
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True, dir_okay=False),
              help='JSON config file (default: SMTP_* environment variables)')
@click.option('--config-dir', type=click.Path(file_okay=False),
              help='Base directory for relative templates paths')
@click.option('--verbose', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, config_file, config_dir, verbose):
    """Mailer CLI - Validate SMTP settings and send emails."""
    level = logging.DEBUG if verbose or settings.DEBUG else getattr(logging, settings.LOG_LEVEL, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if config_file:
        try:
            config = load_config_file(config_file)
        except ConfigError as e:
            raise click.ClickException(str(e)) from e
        default_dir = str(Path(config_file).resolve().parent)
    else:
        config = SMTPConfig.from_settings()
        default_dir = settings.CONFIG_DIR

    ctx.ensure_object(dict)
    ctx.obj['config'] = config
    ctx.obj['config_dir'] = config_dir or default_dir


# Register command groups
cli.add_command(email.email)


if __name__ == "__main__":
    cli()

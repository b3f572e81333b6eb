#!/usr/bin/env python3
# scripts/set_version.py
"""
Command line entry points for setting and checking the monorepo version.

    set-version 0.74.0
    set-version 0.75.0 --skip-distinguished-version
    check-versions 0.74.0
"""
import asyncio
import sys
from typing import Optional

import click

from config.config_models import SyncConfig, load_config
from utils.error_handler import describe_error
from utils.logging_config import setup_logging
from versioning.set_version import check_versions, set_version


def _load(root: Optional[str], config_path: Optional[str], log_level: Optional[str]) -> SyncConfig:
    config = load_config(config_path)
    if root:
        config.root_dir = root
    level = log_level or config.logging.level
    setup_logging(level, config.logging.dir)
    return config


def common_options(func):
    func = click.option('--log-level', default=None,
                        type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
                        help='Console log level (overrides config)')(func)
    func = click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
                        help='Configuration file (YAML or JSON)')(func)
    func = click.option('--root', type=click.Path(exists=True, file_okay=False),
                        help='Repository root (overrides config)')(func)
    func = click.option('--skip-distinguished-version', is_flag=True, default=False,
                        help="Don't update the version of the distinguished package")(func)
    return func


@click.command()
@click.argument('to_version')
@common_options
@click.option('--dry-run', is_flag=True, help='Show what would change without writing')
def main(to_version: str, skip_distinguished_version: bool, root: Optional[str],
         config_path: Optional[str], log_level: Optional[str], dry_run: bool):
    """Update all monorepo packages to TO_VERSION."""
    try:
        config = _load(root, config_path, log_level)
        result = asyncio.run(
            set_version(to_version, skip_distinguished_version, config=config, dry_run=dry_run)
        )
    except Exception as e:
        click.echo(f"Failed to set version {to_version}\n{describe_error(e)}", err=True)
        sys.exit(1)

    prefix = 'Would update' if dry_run else 'Updated'
    for path in result.platform_files:
        click.echo(f"  ✓ {path}")
    for update in result.changed:
        click.echo(f"  ✓ {update.manifest_path} ({', '.join(update.changes)})")
    click.echo(f"{prefix} {len(result.mapping)} package(s) to {to_version}")
    if result.distinguished_version and result.distinguished_version != to_version:
        click.echo(f"Distinguished package kept at {result.distinguished_version}")


@click.command()
@click.argument('to_version')
@common_options
def check_main(to_version: str, skip_distinguished_version: bool, root: Optional[str],
               config_path: Optional[str], log_level: Optional[str]):
    """Check that all monorepo packages are already at TO_VERSION."""
    try:
        config = _load(root, config_path, log_level)
        mismatches = asyncio.run(
            check_versions(to_version, skip_distinguished_version, config=config)
        )
    except Exception as e:
        click.echo(f"Failed to check version {to_version}\n{describe_error(e)}", err=True)
        sys.exit(1)

    if mismatches:
        click.echo('Version mismatches:')
        for mismatch in mismatches:
            click.echo(f" - {mismatch}")
        sys.exit(1)
    click.echo(f"All packages consistent with {to_version}")


if __name__ == '__main__':
    main()

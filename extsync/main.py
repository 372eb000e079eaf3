"""Entry point for the extsync command line."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .config import load_config
from .config.models import LOG_LEVELS
from .errors import ExtSyncError, PublishFailedError
from .gitea import GiteaClient
from .publish import ExtensionPublisher, validate_config

logger = logging.getLogger(__name__)

EXIT_FAILED = 1
EXIT_FATAL = 2


@click.group()
@click.version_option(version=__version__)
def main():
    """extsync - publish extension releases to subscribed repositories."""


@main.command()
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--tag", default=None, help="Release tag to publish (overrides GITHUB_REF_NAME)")
@click.option("--extension", "-e", "extensions", multiple=True, help="Extension directory (repeatable)")
@click.option("--dry-run/--no-dry-run", default=None, help="Discover subscribers without changing them")
@click.option("--json", "output_json", is_flag=True, default=None, help="Print the report as JSON")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level",
)
def publish(config_path, tag, extensions, dry_run, output_json, log_level):
    """Publish a release of the current repository's extensions."""
    try:
        config = load_config(config_path=config_path)
    except ExtSyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FATAL)

    if tag:
        config.release_tag = tag
    if extensions:
        config.extensions = list(extensions)
    if dry_run is not None:
        config.dry_run = dry_run
    if output_json:
        config.output_json = True
    if log_level:
        config.log_level = log_level.upper()

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        validate_config(config)
    except ExtSyncError as e:
        logger.error(str(e))
        sys.exit(EXIT_FATAL)

    with GiteaClient.from_settings(config.gitea) as client:
        publisher = ExtensionPublisher(config, client, output=click.echo)
        try:
            publisher.run()
        except PublishFailedError as e:
            logger.error(str(e))
            sys.exit(EXIT_FAILED)
        except ExtSyncError as e:
            logger.error(f"Publish aborted: {e}")
            sys.exit(EXIT_FATAL)


if __name__ == "__main__":
    main()

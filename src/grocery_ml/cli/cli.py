"""
Grocery ML CLI - Image Classifier Training Simulator
"""

from typing import Optional

import click

from grocery_ml import __version__
from grocery_ml.core.config import get_config, load_config_cascade, set_config
from grocery_ml.core.logger import set_level

from .commands import config, models, serve, storage, train
from .service_helpers import reset_factory


@click.group()
@click.version_option(version=__version__, prog_name="grocery-ml")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Configuration file (overrides the standard locations)",
)
@click.option("--verbose", "-v", count=True, help="Increase log verbosity (-v INFO, -vv DEBUG)")
def cli(config_path: Optional[str], verbose: int) -> None:
    """Grocery ML - train and manage synthetic image classifier models

    Use 'grocery-ml COMMAND --help' for more information on a command.
    """
    if config_path:
        set_config(load_config_cascade(config_path))
        reset_factory()

    if verbose >= 2:
        set_level("DEBUG")
    elif verbose == 1:
        set_level("INFO")
    else:
        try:
            set_level(get_config().get("logging", "level", "WARNING"))
        except ValueError as e:
            raise click.UsageError(f"Invalid [logging] level in configuration: {e}") from e


# Register command groups
cli.add_command(train)
cli.add_command(models)
cli.add_command(storage)
cli.add_command(config)
cli.add_command(serve)


if __name__ == "__main__":
    cli()

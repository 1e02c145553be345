# external imports
import logging

import click

from .. import __version__
from .cli_database import exec_, query
from .cli_info import version

# local imports
from .core import OrderedGroup


@click.group(cls=OrderedGroup, help="Run SQL against SQLite databases.")
@click.version_option(version=__version__, message="%(version)s")
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Print debug logs to stderr.",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    if verbose:
        from ..logging import setup_logging, scoped_logger

        handlers = setup_logging(file=False, stderr=True, level=logging.DEBUG)
        root_logger = scoped_logger("sqlite_tiny")

        def remove_handlers() -> None:
            for handler in handlers:
                root_logger.removeHandler(handler)

        ctx.call_on_close(remove_handlers)


main.add_command(exec_, section="Database")
main.add_command(query, section="Database")

main.add_command(version, section="Information")

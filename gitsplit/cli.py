#!/usr/bin/env python3

import click

from gitsplit import __version__
from gitsplit.commands.split import split_handler
from gitsplit.commands.status import status_handler


@click.group()
@click.version_option(version=__version__, prog_name="gitsplit")
def cli():
    """gitsplit - Mirror sub-directories of a repository into their own repositories.

    Reads .gitsplit.yml, splits every matching branch and tag of the project
    once per configured prefix set, and pushes the result to the targets.
    """
    pass


cli.add_command(split_handler)
cli.add_command(status_handler)


def main():
    cli()

if __name__ == "__main__":
    main()

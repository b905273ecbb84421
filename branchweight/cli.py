#!/usr/bin/env python3

import click

from branchweight.commands.analyze import analyze_handler
from branchweight.commands.config import config_cmd


@click.group()
@click.version_option(package_name="git-branch-weight")
def cli():
    """git-branch-weight - Estimate the storage weight of unmerged git branches.

    Tells apart storage unique to one branch from storage shared by
    several unmerged branches, to help decide which branches are costly
    to keep around.
    """
    pass


cli.add_command(analyze_handler, name='analyze')
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()

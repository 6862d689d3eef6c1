#!/usr/bin/env python3

import click

from transferrer.commands.transfer import transfer_handler
from transferrer.commands.check_keys import check_keys_handler
from transferrer.commands.config import config_cmd


@click.group()
@click.version_option(package_name='package-transferrer')
def cli():
    """transferrer - Keep registry package locations in step with GitHub.

    Finds packages whose repositories were renamed or moved and submits
    signed change-of-location requests to the registry.
    """
    pass


cli.add_command(transfer_handler, name='transfer')
cli.add_command(check_keys_handler, name='check-keys')
cli.add_command(config_cmd, name='config')


def main():
    cli()

if __name__ == "__main__":
    main()

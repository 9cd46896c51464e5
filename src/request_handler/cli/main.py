"""
request-handler CLI — `request-handler` command.

Commands:
  request-handler send <url>    Perform one request and print the decoded body
"""

import asyncio

try:
    import click
    from rich.console import Console
except ImportError:
    raise SystemExit("CLI requires extras: pip install request-handler[cli]")

from request_handler import __version__

console = Console()
err_console = Console(stderr=True)


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option(__version__)
def main():
    """request-handler — send HTTP requests and decode enveloped or bare JSON."""


# Register subcommands from separate modules
from request_handler.cli.send import send_cmd

main.add_command(send_cmd)


if __name__ == "__main__":
    main()

"""CLI: request-handler send URL"""

import logging
from typing import Any, Optional

import click
import httpx
from rich.logging import RichHandler

from request_handler.coding import JSONDecoder
from request_handler.errors import RequestError
from request_handler.handler import Handler
from request_handler.models.request import Request


def _consoles():
    from request_handler.cli.main import console, err_console
    return console, err_console


def _run(coro):
    from request_handler.cli.main import _run
    return _run(coro)


def _parse_header(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        raise click.BadParameter(f"expected 'Name: value', got {raw!r}", param_hint="--header")
    return name.strip(), value.strip()


@click.command("send")
@click.argument("url")
@click.option("-X", "--method", default="GET", show_default=True, help="HTTP method.")
@click.option("-H", "--header", "headers", multiple=True, help='Request header as "Name: value". Repeatable.')
@click.option("-d", "--data", "body", default=None, help="Request body, sent as is.")
@click.option("--debug", is_flag=True, help="Log the request, the response and every decode attempt.")
@click.option("--no-decode", is_flag=True, help="Only check the status code.")
@click.pass_obj
def send_cmd(obj: Optional[dict[str, Any]], url, method, headers, body, debug, no_decode):
    """Send one request and print the decoded JSON body."""
    console, err_console = _consoles()
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )

    request = Request(
        url=url,
        method=method.upper(),
        headers=dict(_parse_header(h) for h in headers),
        body=body.encode("utf-8") if body is not None else None,
    )
    # keys are printed as received
    handler = Handler(
        debug=debug,
        decoder=JSONDecoder(),
        transport=(obj or {}).get("transport"),
    )

    try:
        if no_decode:
            _run(handler.send(request))
            console.print("[green]OK[/green]")
            return
        result = _run(handler.send(request, Any))
    except RequestError as e:
        err_console.print(f"[red]{e.code}: {e}[/red]")
        raise SystemExit(1)
    except httpx.HTTPError as e:
        err_console.print(f"[red]transport_error: {e}[/red]")
        raise SystemExit(1)

    console.print_json(data=result)

"""CLI entry point for http-request-instant."""

import argparse
import json
import sys

import httpx
from rich.console import Console
from rich.markup import escape
from rich.text import Text

from core.codecs import serialize
from core.config import CONFIG_FILE, apply_env_overrides, load_config
from core.exceptions import HttpInstantError
from core.request_types import ApiResponse, BasicAuth, RequestOptions
from services.executor import build_executor

console = Console()


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = _build_parser().parse_args(argv)

    if args.config:
        console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
        return 0

    # Single positional: treat it as the URL
    if args.url is None and "://" in args.method:
        args.url, args.method = args.method, "GET"

    if not args.url:
        console.print("[red]Error:[/red] URL is required")
        return 2

    config = apply_env_overrides(load_config())
    overrides = {}
    if args.debug:
        overrides["debug"] = True
    if args.mock:
        overrides["mock_mode"] = True
    if args.timeout is not None:
        overrides["timeout"] = args.timeout
    if overrides:
        config = config.model_copy(
            update={"executor": config.executor.model_copy(update=overrides)}
        )

    try:
        options = _build_options(args)
    except HttpInstantError as e:
        console.print(f"[red]Error:[/red] {type(e).__name__}: {escape(str(e))}")
        return 1
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 2

    try:
        with build_executor(config) as executor:
            response = executor.execute(options)
    except (HttpInstantError, httpx.HTTPError) as e:
        console.print(f"[red]Error:[/red] {type(e).__name__}: {escape(str(e))}")
        return 1

    _print_response(response, show_headers=args.include)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="http-instant",
        description="Send a single HTTP request and print the response.",
    )
    parser.add_argument("method", nargs="?", default="GET", help="HTTP method (default GET)")
    parser.add_argument("url", nargs="?", help="Target URL")
    parser.add_argument(
        "-H", "--header", action="append", default=[], metavar="NAME: VALUE", help="Custom header"
    )
    body = parser.add_mutually_exclusive_group()
    body.add_argument("-d", "--data", help="Raw request body, sent verbatim")
    body.add_argument("--json", dest="json_body", help="JSON value, serialized per --content-type")
    parser.add_argument("--content-type", default="", help="Request Content-Type")
    parser.add_argument("-u", "--user", metavar="USER:PASSWORD", help="Basic auth credentials")
    parser.add_argument("--timeout", type=float, help="Timeout in seconds")
    parser.add_argument("-i", "--include", action="store_true", help="Print response headers")
    parser.add_argument("--debug", action="store_true", help="Trace request and response")
    parser.add_argument("--mock", action="store_true", help="Return the canned mock response")
    parser.add_argument("--config", action="store_true", help="Show config location")
    return parser


def _build_options(args: argparse.Namespace) -> RequestOptions:
    headers: dict[str, str] = {}
    for raw in args.header:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise ValueError(f"invalid header {raw!r}, expected 'Name: value'")
        headers[name.strip()] = value.strip()

    body = args.data
    if args.json_body is not None:
        try:
            body = json.loads(args.json_body)
        except json.JSONDecodeError as e:
            raise ValueError(f"invalid --json value: {e}") from e
        if isinstance(body, str):
            # encode_body sends strings raw; a JSON string keeps its quotes
            body = serialize(body, args.content_type)

    auth = None
    if args.user:
        username, sep, password = args.user.partition(":")
        if not sep:
            raise ValueError("--user expects USER:PASSWORD")
        auth = BasicAuth(username, password)

    return RequestOptions(
        method=args.method,
        url=args.url,
        headers=headers,
        body=body,
        content_type=args.content_type,
        basic_auth=auth,
    )


def _print_response(response: ApiResponse, *, show_headers: bool) -> None:
    style = "green" if response.status_code < 400 else "red"
    console.print(f"[bold {style}]{response.status_code}[/bold {style}]")
    if show_headers:
        for name, values in response.header_values.items():
            for value in values:
                console.print(Text(f"{name}: {value}", style="dim"))
    console.print(Text(response.text))


if __name__ == "__main__":
    sys.exit(main())

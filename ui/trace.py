"""Debug trace sinks for request/response exchanges."""

import logging
from pathlib import Path

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import TraceSettings
from core.protocols import TraceSink
from ui.log_utils import LOG_ROOT, body_text, redact_headers, write_request_log, write_response_log

logger = logging.getLogger("http_instant.trace")


class ConsoleTraceSink:
    """Print each exchange as rich panels (stderr by default)."""

    def __init__(self, console: Console | None = None, *, redact: bool = True) -> None:
        self.console = console or Console(stderr=True)
        self.redact = redact

    def log_request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
    ) -> None:
        summary = Table.grid(padding=(0, 1))
        summary.add_column()
        summary.add_column()
        summary.add_row("[bold]URL:[/bold]", Text(url))
        summary.add_row("[bold]Method:[/bold]", Text(method))
        parts = [summary, self._headers_table(headers)]
        if body is not None:
            parts.append(Text(f"Body: {body_text(body)}"))
        self.console.print(
            Panel(Group(*parts), title="[cyan]HTTP Request[/cyan]", border_style="cyan")
        )

    def log_response(
        self,
        status_code: int,
        headers: dict[str, str],
        body: bytes,
    ) -> None:
        style = "green" if status_code < 400 else "red"
        summary = Text()
        summary.append("Status Code: ", style="bold")
        summary.append(str(status_code), style=style)
        parts = [summary, self._headers_table(headers), Text(f"Body: {body_text(body)}")]
        self.console.print(
            Panel(Group(*parts), title=f"[{style}]HTTP Response[/{style}]", border_style=style)
        )

    def _headers_table(self, headers: dict[str, str]) -> Table:
        shown = redact_headers(headers) if self.redact else headers
        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column(style="dim")
        table.add_column()
        for key, value in shown.items():
            table.add_row(Text(key), Text(value))
        return table


class LoggingTraceSink:
    """Emit each exchange through the standard ``logging`` module at DEBUG."""

    def __init__(self, log: logging.Logger | None = None, *, redact: bool = True) -> None:
        self.log = log or logger
        self.redact = redact

    def log_request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
    ) -> None:
        self.log.debug(
            "HTTP request %s %s headers=%s body=%s",
            method,
            url,
            self._headers(headers),
            body_text(body),
        )

    def log_response(
        self,
        status_code: int,
        headers: dict[str, str],
        body: bytes,
    ) -> None:
        self.log.debug(
            "HTTP response %d headers=%s body=%s",
            status_code,
            self._headers(headers),
            body_text(body),
        )

    def _headers(self, headers: dict[str, str]) -> dict[str, str]:
        return redact_headers(headers) if self.redact else headers


class FileTraceSink:
    """Write each exchange as a JSON file under ``log_root``."""

    def __init__(self, log_root: Path = LOG_ROOT, *, redact: bool = True) -> None:
        self.log_root = log_root
        self.redact = redact

    def log_request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
    ) -> None:
        write_request_log(method, url, headers, body, redact=self.redact, log_root=self.log_root)

    def log_response(
        self,
        status_code: int,
        headers: dict[str, str],
        body: bytes,
    ) -> None:
        write_response_log(status_code, headers, body, redact=self.redact, log_root=self.log_root)


def build_trace_sink(settings: TraceSettings) -> TraceSink:
    """Create the sink named in the trace settings."""
    if settings.sink == "logging":
        return LoggingTraceSink(redact=settings.redact_headers)
    if settings.sink == "file":
        return FileTraceSink(settings.log_dir, redact=settings.redact_headers)
    return ConsoleTraceSink(redact=settings.redact_headers)

"""api-call command-line interface implemented with Typer."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer

from packages.api_call import (
    CallExecutor,
    EnvelopeDecodeError,
    RequestConfigurationError,
    ResponseEnvelope,
)
from packages.api_call.config import ApiCallSettings, load_settings
from packages.api_call.logging import configure_logging

SUCCESS_EXIT_CODE = 0
NOT_OK_EXIT_CODE = 3
CALL_ERROR_EXIT_CODE = 4


@dataclass(frozen=True)
class CliConfig:
    """Global CLI runtime options shared by commands."""

    settings: ApiCallSettings
    as_json: bool


def _new_executor() -> CallExecutor:
    """Return the executor used for one CLI invocation."""
    return CallExecutor()


def _parse_headers(values: list[str]) -> dict[str, str]:
    """Parse repeated ``Name: value`` options into a header mapping."""
    headers: dict[str, str] = {}
    for raw in values:
        name, separator, value = raw.partition(":")
        if not separator or not name.strip():
            raise typer.BadParameter(
                f"header must look like 'Name: value', got {raw!r}"
            )
        headers[name.strip()] = value.strip()
    return headers


def _cli_params(
    *,
    base_url: str | None,
    timeout: float | None,
    headers: dict[str, str],
    user: str | None,
    password: str | None,
    log_level: str | None,
) -> dict[str, Any]:
    """Return only the CLI values that were actually given."""
    http: dict[str, Any] = {}
    if base_url is not None:
        http["base_url"] = base_url
    if timeout is not None:
        http["timeout_seconds"] = timeout
    if headers:
        http["headers"] = headers
    if user is not None:
        http["username"] = user
    if password is not None:
        http["password"] = password

    params: dict[str, Any] = {}
    if http:
        params["http"] = http
    if log_level is not None:
        params["logging"] = {"level": log_level}
    return params


def _render_human(envelope: ResponseEnvelope) -> str:
    """Render the envelope summary for human scanning."""
    audit = envelope.audit
    lines = [
        f"Status: {audit.status_code if audit.transport_completed else '-'}",
        f"Ok: {'yes' if envelope.ok else 'no'}",
        f"Operation: {audit.operation_id}",
        f"Duration: {audit.duration * 1000:.1f}ms",
    ]
    sections = (
        ("Errors", audit.errors),
        ("Info", audit.info),
        ("Warning", audit.warning),
    )
    for label, messages in sections:
        if messages:
            lines.append(f"{label}: {messages}")
    if envelope.items is not None:
        lines.append("Items:")
        lines.append(json.dumps(json.loads(envelope.items), indent=2, sort_keys=True))
    return "\n".join(lines)


def _emit_output(envelope: ResponseEnvelope, as_json: bool) -> None:
    """Render one envelope in the requested format."""
    if as_json:
        wire = envelope.to_wire()
        typer.echo(
            json.dumps(wire, sort_keys=True, separators=(",", ":"), default=str)
        )
        return
    typer.echo(_render_human(envelope))


def _emit_error(message: str, as_json: bool) -> None:
    """Render one failure to stderr."""
    if as_json:
        typer.echo(json.dumps({"error": message}), err=True)
        return
    typer.echo(f"error: {message}", err=True)


def _require_config(ctx: typer.Context) -> CliConfig:
    """Return required CLI config from Typer context."""
    config = ctx.obj
    if not isinstance(config, CliConfig):
        raise RuntimeError("CLI configuration not initialized")
    return config


app = typer.Typer(
    no_args_is_help=True, help="Issue one HTTP call and report its envelope"
)


@app.callback()
def main(
    ctx: typer.Context,
    base_url: str | None = typer.Option(
        None, help="Prefix concatenated before every URL"
    ),
    timeout: float | None = typer.Option(
        None, min=0, help="Call deadline in seconds (0 = none)"
    ),
    header: list[str] = typer.Option(
        [], "--header", "-H", help="Extra header 'Name: value'"
    ),
    user: str | None = typer.Option(None, help="Basic authentication username"),
    password: str | None = typer.Option(None, help="Basic authentication password"),
    log_level: str | None = typer.Option(None, help="Logging level"),
    config_path: Path | None = typer.Option(None, "--config", help="YAML config file"),
    as_json: bool = typer.Option(False, "--json", help="Emit the envelope as JSON"),
) -> None:
    """Resolve settings and logging for all commands."""
    params = _cli_params(
        base_url=base_url,
        timeout=timeout,
        headers=_parse_headers(header),
        user=user,
        password=password,
        log_level=log_level,
    )
    try:
        settings = load_settings(cli_params=params, config_path=config_path)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    configure_logging(
        level=settings.logging.level,
        json_output=settings.logging.json_output,
        service=settings.logging.service,
        environment=settings.logging.environment,
    )
    ctx.obj = CliConfig(settings=settings, as_json=as_json)


@app.command("send")
def send_command(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Path or URL appended to the base URL"),
    method: str = typer.Option("GET", "--method", "-X", help="HTTP method"),
    body: str | None = typer.Option(None, "--body", "-d", help="Raw request body"),
) -> None:
    """Send one request and print its envelope."""
    cfg = _require_config(ctx)
    call = cfg.settings.http.to_call_config(url, method=method, body=body)

    try:
        with _new_executor() as executor:
            envelope = executor.send(call)
    except (RequestConfigurationError, EnvelopeDecodeError) as exc:
        _emit_error(str(exc), cfg.as_json)
        raise typer.Exit(code=CALL_ERROR_EXIT_CODE) from exc

    _emit_output(envelope, cfg.as_json)
    if not envelope.ok:
        _emit_error(f"Got errors {envelope.errors}", cfg.as_json)
        raise typer.Exit(code=NOT_OK_EXIT_CODE)
    raise typer.Exit(code=SUCCESS_EXIT_CODE)


if __name__ == "__main__":
    app()

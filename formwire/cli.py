"""Command-line multipart uploader."""

from __future__ import annotations

import logging
import mimetypes
import sys
from pathlib import Path

import click

from .errors import FormwireError
from .network import HttpNetwork
from .parts import FilePart, FormPart
from .request import MultipartRequest
from .retry import RetryPolicy


def _parse_field(value: str) -> FormPart:
    name, sep, field_value = value.partition("=")
    if not sep or not name:
        raise click.BadParameter(f"expected name=value, got {value!r}")
    return FormPart(name, field_value)


def _parse_file(value: str) -> FilePart:
    # name=@path[;type=mime]
    name, sep, target = value.partition("=")
    if not sep or not name or not target.startswith("@"):
        raise click.BadParameter(f"expected name=@path[;type=mime], got {value!r}")
    path_str, _, options = target[1:].partition(";type=")
    path = Path(path_str)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise click.BadParameter(f"cannot read {path_str!r}: {exc}") from exc
    mime_type = options or mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return FilePart(name, mime_type, path.name, data)


def _parse_header(value: str) -> tuple[str, str]:
    name, sep, header_value = value.partition(":")
    if not sep or not name.strip():
        raise click.BadParameter(f"expected 'Name: value', got {value!r}")
    return name.strip(), header_value.strip()


@click.command()
@click.argument("url")
@click.option("-X", "--method", default="POST", show_default=True, help="HTTP method.")
@click.option("-H", "--header", "headers", multiple=True, help="Extra header, 'Name: value'.")
@click.option("-F", "--field", "fields", multiple=True, help="Form field, name=value.")
@click.option("-f", "--file", "files", multiple=True, help="File part, name=@path[;type=mime].")
@click.option("--timeout", default=10.0, show_default=True, help="Socket timeout in seconds.")
@click.option("--retries", default=1, show_default=True, help="Retries on transient failures.")
@click.option("--insecure", is_flag=True, help="Do not verify TLS certificates.")
@click.option("--dump", is_flag=True, help="Print the request body instead of sending it.")
@click.option("-v", "--verbose", is_flag=True, help="Log request details to stderr.")
def main(url, method, headers, fields, files, timeout, retries, insecure, dump, verbose):
    """Send a multipart/form-data request to URL."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    request = MultipartRequest(
        url,
        headers=dict(_parse_header(h) for h in headers) or None,
        method=method,
        retry_policy=RetryPolicy(max_retries=retries),
    )
    for field in fields:
        request.add_part(_parse_field(field))
    for file_spec in files:
        request.add_part(_parse_file(file_spec))

    try:
        if dump:
            click.echo(f"Content-Type: {request.get_body_content_type()}")
            click.echo()
            sys.stdout.flush()
            click.get_binary_stream("stdout").write(request.get_body())
            return
        with HttpNetwork(timeout=timeout, verify=not insecure) as network:
            response = network.perform_request(request)
            result = request.parse_network_response(response)
    except (FormwireError, TimeoutError) as exc:
        click.secho(f"Error: {exc}", fg="red", err=True)
        sys.exit(1)

    if not result.is_success:
        click.secho(f"Error: {result.error}", fg="red", err=True)
        sys.exit(1)
    click.secho(f"HTTP/{response.http_version} {response.status_code} {response.reason}", fg="green", err=True)
    click.echo(response.text)


if __name__ == "__main__":
    main()

import click

from formwire import FilePart, FormPart, MultipartRequest, RequestQueue


def main() -> None:
    def on_response(response) -> None:
        click.secho(f"Upload status: {response.status_code}", fg="green")

    def on_error(error: Exception) -> None:
        click.secho(f"Upload failed: {error}", fg="red")

    request = MultipartRequest(
        "https://httpbin.org/post",
        headers={"X-Client": "formwire-example"},
        listener=on_response,
        error_listener=on_error,
    )
    request.add_part(FormPart("foo", "bar"))
    request.add_part(FilePart("file", "text/plain", "hello.txt", b"hello multipart"))

    with RequestQueue() as queue:
        future = queue.add(request)
        # Outcome was already handed to one of the listeners.
        future.exception()


if __name__ == "__main__":
    main()

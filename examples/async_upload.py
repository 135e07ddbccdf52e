import asyncio

import click

from formwire import FilePart, FormPart, MultipartRequest, RequestQueue


async def main() -> None:
    with RequestQueue(workers=2) as queue:
        requests = []
        for name in ("a", "b"):
            request = MultipartRequest("https://httpbin.org/post")
            request.add_part(FormPart("name", name))
            request.add_part(FilePart("f", "text/plain", f"{name}.txt", name.encode()))
            requests.append(request)

        responses = await asyncio.gather(*(queue.asend(r) for r in requests))
        for response in responses:
            click.secho(f"Async upload status: {response.status_code}", fg="green")


if __name__ == "__main__":
    asyncio.run(main())

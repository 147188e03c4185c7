"""
Test doubles and builders shared by the CoreTable tests.
"""

import asyncio
from typing import Any, Callable, Optional

DATA_URL = "http://grid.test/rows"
COLUMNS_URL = "http://grid.test/columns"


class FakeTransport:
    """
    Transport double.

    With a responder, every request is answered immediately (the responder
    may return a body or an exception to raise). Without one, each request
    parks on a future in ``pending`` so a test can resolve requests in any
    order.
    """

    def __init__(self, responder: Optional[Callable[[str, str, dict], Any]] = None):
        self.responder = responder
        self.calls: list[tuple[str, str, dict]] = []
        self.pending: list[asyncio.Future] = []

    async def request(self, method: str, url: str, params: dict) -> Any:
        self.calls.append((method, url, dict(params)))
        if self.responder is not None:
            result = self.responder(method, url, dict(params))
            if isinstance(result, Exception):
                raise result
            return result

        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future

    def data_calls(self) -> list[dict]:
        return [params for _, url, params in self.calls if url == DATA_URL]


def make_rows(count: int, offset: int = 0) -> list[dict]:
    return [
        {"id": offset + i + 1, "name": f"Row {offset + i + 1}", "email": f"r{offset + i + 1}@example.org"}
        for i in range(count)
    ]


def make_body(rows: list[dict], filtered: int, total: Optional[int] = None, token: Any = None) -> dict:
    body = {
        "totalRecords": filtered if total is None else total,
        "filteredRecords": filtered,
        "rows": rows,
    }
    if token is not None:
        body["token"] = token
    return body


def paged_responder(total: int) -> Callable[[str, str, dict], dict]:
    """Answer data requests from a virtual table of ``total`` rows."""
    def respond(method: str, url: str, params: dict) -> dict:
        offset = int(params["offset"])
        limit = int(params["limit"])
        count = max(min(limit, total - offset), 0)
        return make_body(make_rows(count, offset), filtered=total, token=params["token"])
    return respond


async def settle(rounds: int = 5) -> None:
    """Let woken tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


def body_texts(container) -> list[list[str]]:
    """Cell texts of every body row."""
    tbody = container.find_one("tbody")
    return [[td.text for td in tr.children] for tr in tbody.children]

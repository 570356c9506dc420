import re

import httpx
import pytest

from appmate import Database

HOST = "db.example.com:8000"
API_ROOT = f"http://{HOST}/api/"


class FakeServer:
    """Answers requests from canned responses keyed by method and path."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, status=200, json=None, content=b"", headers=None):
        self.routes[(method, path)] = (status, json, content, headers)

    def __call__(self, request):
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"detail": "Not found."})
        status, json, content, headers = route
        if json is not None:
            return httpx.Response(status, json=json)
        return httpx.Response(status, content=content, headers=headers)

    @property
    def last(self):
        return self.requests[-1]


def form_parts(request):
    """Split a multipart/form-data request body into part dicts."""
    content_type = request.headers["content-type"]
    assert content_type.startswith("multipart/form-data")
    boundary = content_type.split("boundary=", 1)[1].encode()

    parts = []
    for chunk in request.content.split(b"--" + boundary)[1:-1]:
        head, _, body = chunk[2:-2].partition(b"\r\n\r\n")
        head = head.decode()
        name = re.search(r'name="([^"]*)"', head).group(1)
        filename = re.search(r'filename="([^"]*)"', head)
        part_type = re.search(r"Content-Type: (\S+)", head)
        parts.append(
            {
                "name": name,
                "filename": filename.group(1) if filename else None,
                "content_type": part_type.group(1) if part_type else None,
                "body": body,
            }
        )
    return parts


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def client(server):
    with httpx.Client(transport=httpx.MockTransport(server)) as client:
        yield client


@pytest.fixture
def db(client):
    return Database(HOST, "user", "secret", client=client)


@pytest.fixture
def table(db):
    return db.table("book")

import json as jsonlib
from http.client import HTTPMessage
from types import SimpleNamespace
from urllib.parse import parse_qs, urlparse

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.cookies import extract_cookies_to_jar
from requests.structures import CaseInsensitiveDict

from qbit.client import QbitClient
from qbit.schemas import Credential


BASE_URL = "http://qbit.test:8080"


class StubAdapter(BaseAdapter):
    """Transport adapter that records prepared requests and replays canned responses."""

    def __init__(self):
        super().__init__()
        self.routes = {}
        self.requests = []

    def add(self, method, endpoint, status=200, body="", json=None, headers=None):
        """Register a canned response; ``headers`` is a dict or a list of (name, value) pairs."""
        if json is not None:
            body = jsonlib.dumps(json)
        if isinstance(headers, dict):
            headers = list(headers.items())
        self.routes[(method, "/api/v2/" + endpoint)] = (status, body, headers or [])

    def fail(self, method, endpoint, exc):
        self.routes[(method, "/api/v2/" + endpoint)] = exc

    def send(self, request, **kwargs):
        self.requests.append(request)
        route = self.routes.get((request.method, urlparse(request.url).path))
        if isinstance(route, Exception):
            raise route
        status, body, headers = route or (404, "Not Found", [])

        # Repeated headers are folded like urllib3 does; the raw message keeps them apart
        message = HTTPMessage()
        folded = CaseInsensitiveDict()
        for name, value in headers:
            message[name] = value
            folded[name] = f"{folded[name]}, {value}" if name in folded else value

        response = requests.Response()
        response.status_code = status
        response.reason = "Stub"
        response.headers = folded
        response.raw = SimpleNamespace(_original_response=SimpleNamespace(msg=message))
        response._content = body.encode() if isinstance(body, str) else body
        response._content_consumed = True
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        extract_cookies_to_jar(response.cookies, request, response.raw)
        return response

    def close(self):
        pass

    @property
    def last(self):
        return self.requests[-1]

    @staticmethod
    def query(request):
        return {k: v[0] for k, v in parse_qs(urlparse(request.url).query).items()}

    @staticmethod
    def form(request):
        body = request.body or ""
        if isinstance(body, bytes):
            body = body.decode()
        return {k: v[0] for k, v in parse_qs(body, keep_blank_values=True).items()}


@pytest.fixture
def stub():
    return StubAdapter()


@pytest.fixture
def session(stub):
    session = requests.Session()
    session.mount("http://", stub)
    return session


@pytest.fixture
def client(session):
    return QbitClient(
        BASE_URL,
        Credential(username="admin", password="adminadmin"),
        session=session,
    )


@pytest.fixture
def logged_in(client, stub):
    stub.add("POST", "auth/login", body="Ok.", headers={"Set-Cookie": "SID=abc; HttpOnly; path=/"})
    client.login()
    return client

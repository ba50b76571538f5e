import json

import pytest

import api_client
from schemas import BriefListItem, Domain, SheetListItem
from workbench.session import init_state


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        if text is None:
            text = "" if payload is None else json.dumps(payload)
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        return json.loads(self.text)


@pytest.fixture(autouse=True)
def no_network(monkeypatch):
    def refuse(method, url, **kwargs):
        raise AssertionError(f"unexpected HTTP call: {method} {url}")

    monkeypatch.setattr(api_client.requests, "request", refuse)


@pytest.fixture
def state():
    s = {}
    init_state(s)
    return s


def brief(id, title, version, status="draft", created_at="2025-01-01T00:00:00Z"):
    return BriefListItem(id=id, title=title, version=version, status=status, created_at=created_at)


def sheet(id, name, theme="Daten"):
    return SheetListItem(id=id, name=name, theme=theme, version=1)


def domain(id, name):
    return Domain(id=id, name=name)

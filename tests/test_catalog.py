# tests/test_catalog.py
from __future__ import annotations

import httpx
import pytest

from sipgateio_cli.catalog import CatalogClient, ProjectDescriptor, with_tab_offsets
from sipgateio_cli.errors import CatalogFetchError


def make_client(handler) -> CatalogClient:
    return CatalogClient(httpx.Client(transport=httpx.MockTransport(handler)), org="sipgate-io")


def test_fetch_catalog_filters_sorts_and_aligns():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/orgs/sipgate-io/repos"
        assert request.url.params["per_page"] == "100"
        return httpx.Response(200, json=[
            {"name": "sipgateio-sendsms-node", "description": "Send an SMS"},
            {"name": "website", "description": "not an example"},
            {"name": "sipgateio-incomingcall-python", "description": None},
        ])

    projects = make_client(handler).fetch_catalog()

    assert projects == [
        ProjectDescriptor("sipgateio-incomingcall-python", "", 1),
        ProjectDescriptor("sipgateio-sendsms-node", "Send an SMS", 1),
    ]


def test_fetch_catalog_follows_pages():
    pages = {
        "1": [{"name": f"sipgateio-example-{i:03d}", "description": ""} for i in range(100)],
        "2": [{"name": "sipgateio-last", "description": "final"}],
    }
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        page = request.url.params["page"]
        requested.append(page)
        return httpx.Response(200, json=pages[page])

    projects = make_client(handler).fetch_catalog()

    assert requested == ["1", "2"]
    assert len(projects) == 101
    assert projects[-1].repository == "sipgateio-last"


def test_fetch_catalog_non_200_raises():
    client = make_client(lambda request: httpx.Response(403, text="rate limited"))

    with pytest.raises(CatalogFetchError, match="403"):
        client.fetch_catalog()


def test_fetch_catalog_transport_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    with pytest.raises(CatalogFetchError, match="offline"):
        make_client(handler).fetch_catalog()


def test_fetch_catalog_bad_json_raises():
    client = make_client(lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(CatalogFetchError, match="parse"):
        client.fetch_catalog()


def test_fetch_template():
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == (
            "https://raw.githubusercontent.com/sipgate-io/sipgateio-sendsms-node/HEAD/.env.example"
        )
        return httpx.Response(200, text="TOKEN_ID=\n")

    assert make_client(handler).fetch_template("sipgateio-sendsms-node") == "TOKEN_ID=\n"


def test_org_from_environment(monkeypatch):
    monkeypatch.setenv("SIPGATEIO_GITHUB_ORG", "my-fork")
    client = CatalogClient(httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200))))

    assert client.clone_url("sipgateio-x") == "https://github.com/my-fork/sipgateio-x.git"


def test_with_tab_offsets_recomputes():
    projects = [ProjectDescriptor("abc", tab_offset=7), ProjectDescriptor("a" * 20)]

    assert [p.tab_offset for p in with_tab_offsets(projects)] == [3, 1]

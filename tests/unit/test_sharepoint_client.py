"""
Unit Tests for the SharePoint list client
HTTP is served by httpx.MockTransport.
"""

import json

import httpx
import pytest

from app.infrastructure.sharepoint.client import (
    SharePointListClient,
    SharePointRequestError,
    read_error_message,
)

SITE = "https://contoso.sharepoint.com/sites/ops"


def make_client(handler, token="secret-token"):
    return SharePointListClient(
        site_url=SITE + "/",
        access_token=token,
        transport=httpx.MockTransport(handler),
    )


def test_site_url_is_required():
    with pytest.raises(ValueError):
        SharePointListClient(site_url="")


@pytest.mark.asyncio
async def test_find_by_key_queries_idempotency_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["filter"] = request.url.params.get("$filter")
        seen["top"] = request.url.params.get("$top")
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={"value": [{"Id": 7, "IdempotencyKey": "USER001#2024-11"}]})

    client = make_client(handler)
    item = await client.find_by_key("MonthlyRecord_Summary", "USER001#2024-11")

    assert item == {"Id": 7, "IdempotencyKey": "USER001#2024-11"}
    assert seen["method"] == "GET"
    assert seen["path"].startswith("/sites/ops/_api/web/lists/GetByTitle(")
    assert "MonthlyRecord_Summary" in seen["path"]
    assert seen["path"].endswith("/items")
    assert seen["filter"] == "IdempotencyKey eq 'USER001#2024-11'"
    assert seen["top"] == "1"
    assert seen["auth"] == "Bearer secret-token"


@pytest.mark.asyncio
async def test_find_by_key_returns_none_when_empty():
    client = make_client(lambda request: httpx.Response(200, json={"value": []}))

    assert await client.find_by_key("MonthlyRecord_Summary", "USER404#2024-11") is None


@pytest.mark.asyncio
async def test_create_posts_fields():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"Id": 12, **seen["body"]})

    client = make_client(handler)
    created = await client.create("MonthlyRecord_Summary", {"IdempotencyKey": "USER001#2024-11"})

    assert seen["method"] == "POST"
    assert seen["body"] == {"IdempotencyKey": "USER001#2024-11"}
    assert created["Id"] == 12


@pytest.mark.asyncio
async def test_update_uses_merge_and_handles_no_content():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["x_method"] = request.headers.get("X-HTTP-Method")
        seen["if_match"] = request.headers.get("IF-MATCH")
        return httpx.Response(204)

    client = make_client(handler)
    updated = await client.update("MonthlyRecord_Summary", 12, {"CompletionRate": 70.0})

    assert seen["method"] == "POST"
    assert seen["path"].endswith("/items(12)")
    assert seen["x_method"] == "MERGE"
    assert seen["if_match"] == "*"
    assert updated == {"CompletionRate": 70.0, "Id": 12}


@pytest.mark.asyncio
async def test_error_response_raises_with_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            403,
            json={"error": {"code": "-2147024891", "message": {"value": "Access denied."}}},
        )

    client = make_client(handler)

    with pytest.raises(SharePointRequestError) as exc_info:
        await client.create("MonthlyRecord_Summary", {})

    assert exc_info.value.status_code == 403
    assert exc_info.value.message == "Access denied."
    assert "(403)" in str(exc_info.value)


@pytest.mark.asyncio
async def test_no_authorization_header_without_token():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={"value": []})

    client = make_client(handler, token="  ")
    await client.find_by_key("MonthlyRecord_Summary", "k")

    assert seen["auth"] is None


@pytest.mark.asyncio
async def test_list_items_follows_next_link():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if "$skiptoken" in request.url.params:
            return httpx.Response(200, json={"value": [{"Id": 3}]})
        next_link = (
            f"{SITE}/_api/web/lists/GetByTitle('SupportRecord_Daily')/items"
            "?%24skiptoken=Paged%3DTRUE%26p_ID%3D2"
        )
        return httpx.Response(
            200,
            json={"value": [{"Id": 1}, {"Id": 2}], "odata.nextLink": next_link},
        )

    client = make_client(handler)
    items = await client.list_items(
        "SupportRecord_Daily",
        filter_query="(RecordDate ge datetime'2024-11-01T00:00:00.000Z')",
        select=("Id", "UserLookup/UserCode"),
        expand=("UserLookup",),
        top=2,
    )

    assert [item["Id"] for item in items] == [1, 2, 3]
    assert len(requests) == 2
    first = requests[0].url.params
    assert first["$top"] == "2"
    assert first["$filter"] == "(RecordDate ge datetime'2024-11-01T00:00:00.000Z')"
    assert first["$select"] == "Id,UserLookup/UserCode"
    assert first["$expand"] == "UserLookup"
    assert "$filter" not in requests[1].url.params


class TestReadErrorMessage:

    def test_odata_verbose_error(self):
        response = httpx.Response(400, json={"odata.error": {"message": {"value": "Bad column"}}})
        assert read_error_message(response) == "Bad column"

    def test_plain_text_is_truncated(self):
        response = httpx.Response(500, text="x" * 1000)
        assert read_error_message(response) == "x" * 400

    def test_unexpected_json_falls_back_to_text(self):
        response = httpx.Response(500, json=["nope"])
        assert read_error_message(response) == '["nope"]'

    def test_empty_body(self):
        assert read_error_message(httpx.Response(502)) == ""

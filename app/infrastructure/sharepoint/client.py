"""
SharePoint List Client (REST API)
Async list access via httpx using a bearer access token.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

_JSON_HEADERS = {
    "Accept": "application/json;odata=nometadata",
    "Content-Type": "application/json;odata=nometadata",
}


class SharePointRequestError(RuntimeError):
    """Non-2xx response from the SharePoint REST API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"SharePoint request failed ({status_code}): {message}")
        self.status_code = status_code
        self.message = message


def read_error_message(response: httpx.Response) -> str:
    text = response.text or ""
    if not text:
        return ""
    try:
        data = response.json()
    except ValueError:
        return text[:400]
    if not isinstance(data, dict):
        return text[:400]

    for container in (data.get("error"), data.get("odata.error"), data):
        if not isinstance(container, dict):
            continue
        message = container.get("message")
        if isinstance(message, dict) and message.get("value"):
            return message["value"]
    return text[:400]


class SharePointListClient:
    """
    Minimal SharePoint list client.

    Implements the summary store capabilities (find_by_key / create / update)
    and paged item listing for the daily record source.
    """

    def __init__(
        self,
        site_url: str,
        access_token: Optional[str] = None,
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not site_url:
            raise ValueError("SharePoint site URL is required")
        self.site_url = site_url.rstrip("/")
        self.access_token = (access_token or "").strip() or None
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = dict(_JSON_HEADERS)
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        if extra:
            headers.update(extra)
        return headers

    def _items_url(self, list_name: str) -> str:
        return f"{self.site_url}/_api/web/lists/GetByTitle('{quote(list_name)}')/items"

    async def _request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            response = await client.request(
                method, url, params=params, json=json, headers=self._headers(headers)
            )
        if response.status_code >= 400:
            message = read_error_message(response)
            logger.debug(f"SharePoint API {response.status_code}: {message}")
            raise SharePointRequestError(response.status_code, message)
        return response

    # ------------------------------------------------------------------
    # SUMMARY STORE CAPABILITIES
    # ------------------------------------------------------------------

    async def find_by_key(self, list_name: str, key: str) -> Optional[Dict[str, Any]]:
        params = {
            "$filter": f"IdempotencyKey eq '{key}'",
            "$top": "1",
        }
        response = await self._request("GET", self._items_url(list_name), params=params)
        items = response.json().get("value") or []
        return items[0] if items else None

    async def create(self, list_name: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._request("POST", self._items_url(list_name), json=fields)
        return response.json()

    async def update(self, list_name: str, item_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self._items_url(list_name)}({item_id})"
        response = await self._request(
            "POST",
            url,
            json=fields,
            headers={"X-HTTP-Method": "MERGE", "IF-MATCH": "*"},
        )
        # MERGE answers 204 No Content
        if response.status_code == 204 or not response.content:
            return {**fields, "Id": item_id}
        return response.json()

    # ------------------------------------------------------------------
    # LISTING
    # ------------------------------------------------------------------

    async def list_items(
        self,
        list_name: str,
        filter_query: str = "",
        select: Sequence[str] = (),
        expand: Sequence[str] = (),
        top: int = 500,
    ) -> List[Dict[str, Any]]:
        """
        Fetch all items matching a filter, following server-side paging.
        """
        params: Optional[Dict[str, Any]] = {"$top": str(top)}
        if filter_query:
            params["$filter"] = filter_query
        if select:
            params["$select"] = ",".join(select)
        if expand:
            params["$expand"] = ",".join(expand)

        url: Optional[str] = self._items_url(list_name)
        items: List[Dict[str, Any]] = []
        while url:
            response = await self._request("GET", url, params=params)
            payload = response.json()
            items.extend(payload.get("value") or [])
            url = payload.get("odata.nextLink") or payload.get("@odata.nextLink")
            # nextLink already carries the query
            params = None

        logger.debug("Fetched %s items from %s", len(items), list_name)
        return items

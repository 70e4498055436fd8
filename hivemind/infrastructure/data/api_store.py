"""
Remote store backed by a json-server style REST API.

Collections map to resources (``GET /projects``, ``PUT /projects/{id}`` ...).
The session singleton lives in the ``currentUser`` resource, whose first entry
carries the pointer record.
"""

from __future__ import annotations

import json
from typing import Any

import requests

from hivemind.domains.errors import StorageError
from hivemind.domains.models import new_id
from hivemind.infrastructure.data.store import SESSION, DataStore, check_collection
from hivemind.utils.config import api_timeout, api_url
from hivemind.utils.logger import get_logger

logger = get_logger()

# Singleton name -> REST resource holding it.
SINGLETON_RESOURCES: dict[str, str] = {SESSION: "currentUser"}


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ApiStore(DataStore):
    """
    json-server client. Any transport failure, non-2xx status (other than a 404
    on a single-document read or delete) or unparseable body raises StorageError.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: int | None = None,
    ) -> None:
        self._base_url = (base_url or api_url()).rstrip("/")
        self._timeout = timeout if timeout is not None else api_timeout()

    @property
    def base_url(self) -> str:
        return self._base_url

    def _request(
        self,
        method: str,
        path: str,
        *,
        payload: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        allow_404: bool = False,
    ) -> Any:
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            r = requests.request(
                method,
                url,
                json=payload,
                params=params,
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            )
        except requests.RequestException as e:
            logger.exception("API %s %s failed: %s", method, url, e)
            raise StorageError(f"{method} {url} failed: {e}", original=e) from e

        status = getattr(r, "status_code", None)
        if allow_404 and status == 404:
            return None
        try:
            r.raise_for_status()
        except requests.HTTPError as e:
            logger.warning("API %s %s returned %s", method, url, status)
            raise StorageError(f"{method} {url} returned {status}", original=e) from e
        if method == "DELETE":
            return True
        try:
            return r.json()
        except (json.JSONDecodeError, ValueError) as e:
            logger.exception("API %s %s returned invalid JSON: %s", method, url, e)
            raise StorageError(f"{method} {url} returned invalid JSON", original=e) from e

    def list_all(self, collection: str) -> list[dict[str, Any]]:
        check_collection(collection)
        data = self._request("GET", collection)
        return data if isinstance(data, list) else []

    def find_by(self, collection: str, **criteria: Any) -> list[dict[str, Any]]:
        check_collection(collection)
        params = {k: _query_value(v) for k, v in criteria.items()}
        data = self._request("GET", collection, params=params)
        docs = data if isinstance(data, list) else []
        # json-server compares query values as strings; re-check with real types.
        return [d for d in docs if all(d.get(k) == v for k, v in criteria.items())]

    def get_by_id(self, collection: str, entity_id: str) -> dict[str, Any] | None:
        check_collection(collection)
        return self._request("GET", f"{collection}/{entity_id}", allow_404=True)

    def upsert(self, collection: str, doc: dict[str, Any]) -> dict[str, Any]:
        check_collection(collection)
        body = dict(doc)
        if not body.get("id"):
            body["id"] = new_id()
            return self._request("POST", collection, payload=body)
        body["id"] = str(body["id"])
        updated = self._request("PUT", f"{collection}/{body['id']}", payload=body, allow_404=True)
        if updated is None:
            return self._request("POST", collection, payload=body)
        return updated

    def delete(self, collection: str, entity_id: str) -> bool:
        check_collection(collection)
        return bool(self._request("DELETE", f"{collection}/{entity_id}", allow_404=True))

    def _singleton_entry(self, resource: str) -> dict[str, Any] | None:
        data = self._request("GET", resource, allow_404=True)
        if isinstance(data, list) and data:
            return data[0]
        return None

    def get_singleton(self, name: str) -> dict[str, Any] | None:
        entry = self._singleton_entry(SINGLETON_RESOURCES.get(name, name))
        if entry is None:
            return None
        out = dict(entry)
        out.pop("id", None)
        return out

    def set_singleton(self, name: str, value: dict[str, Any]) -> dict[str, Any]:
        resource = SINGLETON_RESOURCES.get(name, name)
        existing = self._singleton_entry(resource)
        if existing is not None:
            body = {**existing, **value}
            self._request("PUT", f"{resource}/{existing['id']}", payload=body)
        else:
            self._request("POST", resource, payload={"id": new_id(), **value})
        return dict(value)

    def clear_singleton(self, name: str) -> None:
        resource = SINGLETON_RESOURCES.get(name, name)
        existing = self._singleton_entry(resource)
        if existing is not None:
            self._request("DELETE", f"{resource}/{existing['id']}", allow_404=True)

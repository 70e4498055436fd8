"""
Tests for ApiStore: json-server requests, 404 handling, singleton record, errors.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from hivemind.domains.errors import StorageError
from hivemind.infrastructure.data.api_store import ApiStore
from hivemind.infrastructure.data.store import PROJECTS, SESSION, USERS

REQUEST = "hivemind.infrastructure.data.api_store.requests.request"


def _response(status: int = 200, body=None) -> MagicMock:
    r = MagicMock()
    r.status_code = status
    r.json.return_value = body
    if status >= 400:
        r.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    else:
        r.raise_for_status = MagicMock()
    return r


@pytest.fixture
def store() -> ApiStore:
    return ApiStore(base_url="http://api.test/", timeout=3)


def test_list_all(store: ApiStore) -> None:
    """GET /users returns the list as-is."""
    docs = [{"id": "1", "name": "Demo"}]
    with patch(REQUEST, return_value=_response(body=docs)) as mock_req:
        assert store.list_all(USERS) == docs
    args, kwargs = mock_req.call_args
    assert args == ("GET", "http://api.test/users")
    assert kwargs["timeout"] == 3


def test_get_by_id_404_is_none(store: ApiStore) -> None:
    with patch(REQUEST, return_value=_response(404)):
        assert store.get_by_id(PROJECTS, "missing") is None


def test_upsert_new_document_posts_with_id(store: ApiStore) -> None:
    """A document without id gets one and is POSTed."""
    with patch(REQUEST, side_effect=lambda m, u, **kw: _response(201, kw["json"])) as mock_req:
        saved = store.upsert(PROJECTS, {"name": "Hive"})
    assert saved["id"]
    assert saved["name"] == "Hive"
    assert mock_req.call_args[0] == ("POST", "http://api.test/projects")


def test_upsert_put_falls_back_to_post(store: ApiStore) -> None:
    """PUT on an unknown id returns 404, so the document is created instead."""
    doc = {"id": "p9", "name": "Hive"}
    responses = [_response(404), _response(201, doc)]
    with patch(REQUEST, side_effect=responses) as mock_req:
        saved = store.upsert(PROJECTS, doc)
    assert saved == doc
    methods = [c[0][0] for c in mock_req.call_args_list]
    urls = [c[0][1] for c in mock_req.call_args_list]
    assert methods == ["PUT", "POST"]
    assert urls == ["http://api.test/projects/p9", "http://api.test/projects"]


def test_find_by_sends_params_and_refilters(store: ApiStore) -> None:
    """Query params are strings; results are re-checked against the real values."""
    docs = [{"id": "a", "isPublic": True}, {"id": "b", "isPublic": "true"}]
    with patch(REQUEST, return_value=_response(body=docs)) as mock_req:
        out = store.find_by(PROJECTS, isPublic=True)
    assert [d["id"] for d in out] == ["a"]
    assert mock_req.call_args[1]["params"] == {"isPublic": "true"}


def test_delete(store: ApiStore) -> None:
    with patch(REQUEST, return_value=_response(200, {})):
        assert store.delete(PROJECTS, "p1") is True
    with patch(REQUEST, return_value=_response(404)):
        assert store.delete(PROJECTS, "p1") is False


def test_session_singleton_uses_current_user_resource(store: ApiStore) -> None:
    """The pointer lives in the first entry of /currentUser; its id is not exposed."""
    with patch(REQUEST, return_value=_response(body=[{"id": "s1", "userId": "1"}])):
        assert store.get_singleton(SESSION) == {"userId": "1"}

    with patch(REQUEST, return_value=_response(body=[])):
        assert store.get_singleton(SESSION) is None

    responses = [_response(body=[{"id": "s1", "userId": "1"}]), _response(body={})]
    with patch(REQUEST, side_effect=responses) as mock_req:
        store.set_singleton(SESSION, {"userId": "2"})
    put = mock_req.call_args_list[1]
    assert put[0] == ("PUT", "http://api.test/currentUser/s1")
    assert put[1]["json"] == {"id": "s1", "userId": "2"}


def test_set_singleton_creates_entry(store: ApiStore) -> None:
    responses = [_response(body=[]), _response(201, {})]
    with patch(REQUEST, side_effect=responses) as mock_req:
        store.set_singleton(SESSION, {"userId": "1"})
    post = mock_req.call_args_list[1]
    assert post[0] == ("POST", "http://api.test/currentUser")
    assert post[1]["json"]["userId"] == "1"
    assert post[1]["json"]["id"]


def test_clear_singleton(store: ApiStore) -> None:
    responses = [_response(body=[{"id": "s1", "userId": "1"}]), _response(200, {})]
    with patch(REQUEST, side_effect=responses) as mock_req:
        store.clear_singleton(SESSION)
    assert mock_req.call_args_list[1][0] == ("DELETE", "http://api.test/currentUser/s1")


def test_transport_error_is_storage_error(store: ApiStore) -> None:
    with patch(REQUEST, side_effect=requests.ConnectionError("refused")):
        with pytest.raises(StorageError) as exc:
            store.list_all(USERS)
    assert isinstance(exc.value.original, requests.ConnectionError)


def test_server_error_is_storage_error(store: ApiStore) -> None:
    with patch(REQUEST, return_value=_response(500)):
        with pytest.raises(StorageError):
            store.get_by_id(USERS, "1")


def test_invalid_json_is_storage_error(store: ApiStore) -> None:
    r = _response(200)
    r.json.side_effect = ValueError("not json")
    with patch(REQUEST, return_value=r):
        with pytest.raises(StorageError):
            store.list_all(USERS)


def test_unknown_collection_rejected(store: ApiStore) -> None:
    with pytest.raises(ValueError):
        store.list_all("widgets")

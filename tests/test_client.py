from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import pytest
import requests

SCRIPT_DIR = Path(__file__).resolve().parents[1] / "scripts"
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from brandeck.client import DeckClient  # noqa: E402
from brandeck.errors import InvalidFilename, ServiceError  # noqa: E402


def _response(status: int, body: Any = None, content: bytes = b"") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = json.dumps(body).encode("utf-8") if body is not None else content
    resp.encoding = "utf-8"
    return resp


class FakeSession:
    def __init__(self, *responses: requests.Response):
        self.responses = list(responses)
        self.calls: list[tuple[str, str, dict]] = []

    def request(self, method: str, url: str, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.responses.pop(0)


def test_generate_posts_request_body() -> None:
    session = FakeSession(_response(200, {"success": True, "filename": "a.pptx", "slideCount": 1}))
    client = DeckClient("http://decks.local/", session=session)

    result = client.generate({"type": "corporate", "slides": []})

    assert result["filename"] == "a.pptx"
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", "http://decks.local/api/presentations/generate")
    assert kwargs["json"] == {"type": "corporate", "slides": []}
    assert kwargs["timeout"] == 30


def test_error_envelope_becomes_service_error() -> None:
    body = {"success": False, "error": "Invalid request", "details": ["slides is required and must be a list"]}
    client = DeckClient(session=FakeSession(_response(400, body)))

    with pytest.raises(ServiceError) as exc:
        client.generate({"type": "corporate"})

    assert exc.value.status_code == 400
    assert "HTTP 400: Invalid request" in str(exc.value)
    assert "- slides is required and must be a list" in str(exc.value)


def test_unreachable_service() -> None:
    class DownSession:
        def request(self, method: str, url: str, **kwargs):
            raise requests.ConnectionError("refused")

    with pytest.raises(ServiceError) as exc:
        DeckClient("http://nowhere:1", session=DownSession()).health()
    assert "Could not reach http://nowhere:1" in str(exc.value)
    assert exc.value.status_code is None


def test_cleanup_and_recipe_payloads() -> None:
    session = FakeSession(_response(200, {"deletedCount": 2}), _response(200, {"slideCount": 6}))
    client = DeckClient(session=session)

    assert client.cleanup(3)["deletedCount"] == 2
    client.recipe("quarterly_review", presentation_type="investment", values={"quarter": "Q1"})

    assert session.calls[0][2]["json"] == {"maxAgeDays": 3}
    assert session.calls[1][1].endswith("/api/presentations/recipes/quarterly_review")
    assert session.calls[1][2]["json"] == {"values": {"quarter": "Q1"}, "type": "investment"}


def test_download_writes_file(tmp_path: Path) -> None:
    client = DeckClient(session=FakeSession(_response(200, content=b"PK\x03\x04deck")))
    target = client.download("deck.pptx", tmp_path / "out")
    assert target == tmp_path / "out" / "deck.pptx"
    assert target.read_bytes() == b"PK\x03\x04deck"


@pytest.mark.parametrize("name", ["../escape.pptx", "nested/deck.pptx", "notes.txt"])
def test_download_rejects_unsafe_filenames(tmp_path: Path, name: str) -> None:
    session = FakeSession(_response(200, content=b"PK"))
    with pytest.raises(InvalidFilename):
        DeckClient(session=session).download(name, tmp_path / "out")
    assert session.calls == []
    assert not (tmp_path / "escape.pptx").exists()

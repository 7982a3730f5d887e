import uvicorn

import rooms_service.__main__ as rooms_service_entry
import rooms_web.__main__ as rooms_web_entry


def capture_run(monkeypatch):
    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    return calls


def test_rooms_service_entry_serves_api(monkeypatch):
    calls = capture_run(monkeypatch)
    monkeypatch.delenv("ROOMS_SERVICE_HOST", raising=False)
    monkeypatch.setenv("ROOMS_SERVICE_PORT", "9001")

    rooms_service_entry.main()

    assert calls == [("rooms_service.main:app", {"host": "0.0.0.0", "port": 9001})]


def test_rooms_web_entry_serves_pages(monkeypatch):
    calls = capture_run(monkeypatch)
    monkeypatch.delenv("ROOMS_WEB_PORT", raising=False)
    monkeypatch.setenv("ROOMS_WEB_HOST", "127.0.0.1")

    rooms_web_entry.main()

    assert calls == [("rooms_web.main:app", {"host": "127.0.0.1", "port": 8000})]

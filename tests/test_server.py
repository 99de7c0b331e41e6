"""Tests for the local development server entrypoint."""

import uvicorn

from nutrilens.api import server


def test_main_serves_asgi_app(monkeypatch) -> None:
    calls: list[tuple[tuple[object, ...], dict[str, object]]] = []
    monkeypatch.setattr(uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))
    monkeypatch.setenv("PORT", "9001")
    monkeypatch.delenv("HOST", raising=False)

    server.main()

    assert calls == [
        (
            ("nutrilens.api.asgi:app",),
            {"host": "127.0.0.1", "port": 9001, "reload": False},
        )
    ]

"""App entrypoint tests."""

import importlib

from src.config import get_settings


def test_import_does_not_touch_filesystem(monkeypatch, tmp_path):
    asset_dir = tmp_path / "assets"
    monkeypatch.setenv("ASSET_DIR", str(asset_dir))
    get_settings.cache_clear()
    try:
        import src.main

        importlib.reload(src.main)
        assert not asset_dir.exists()
        assert any(getattr(route, "path", None) == "/assets" for route in src.main.app.routes)
    finally:
        get_settings.cache_clear()

import sys
from pathlib import Path

import pytest


# Ensure `backend/` is on sys.path so tests can import local modules
# like `sources.*`, `composer.*`, and `main`.
BACKEND_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_ROOT))

from district.registry import clear_district_cache  # noqa: E402
from engine.plugins import reset_rtl_text_plugin  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    # Never reach the real basemap provider from tests.
    monkeypatch.setenv("DISTRICT_MAP_OFFLINE_STYLE", "1")
    for name in (
        "DISTRICT_MAP_CONFIG",
        "DISTRICT_MAP_DATA_BASE_URL",
        "DISTRICT_MAP_STYLE_KEY",
        "DISTRICT_MAP_FETCH_TIMEOUT_S",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_district_cache()
    reset_rtl_text_plugin()
    yield
    clear_district_cache()
    reset_rtl_text_plugin()

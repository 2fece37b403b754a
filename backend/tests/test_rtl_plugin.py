import pytest

from engine.plugins import rtl_text_plugin_status, rtl_text_plugin_url, set_rtl_text_plugin
from errors import RTLPluginError

PLUGIN_URL = "https://cdn.example/mapbox-gl-rtl-text.js"


def test_registration_is_one_time():
    results = []
    assert rtl_text_plugin_status() == "unavailable"

    set_rtl_text_plugin(PLUGIN_URL, results.append)
    assert results == [None]
    assert rtl_text_plugin_status() == "loaded"
    assert rtl_text_plugin_url() == PLUGIN_URL

    with pytest.raises(RTLPluginError, match="multiple times"):
        set_rtl_text_plugin(PLUGIN_URL, results.append)
    assert results == [None]


def test_lazy_registration_is_deferred():
    set_rtl_text_plugin(PLUGIN_URL, lazy=True)
    assert rtl_text_plugin_status() == "deferred"


def test_invalid_url_reports_error_to_callback():
    results = []
    with pytest.raises(RTLPluginError):
        set_rtl_text_plugin("ftp://cdn.example/plugin.js", results.append)
    assert len(results) == 1
    assert isinstance(results[0], RTLPluginError)
    assert rtl_text_plugin_status() == "unavailable"

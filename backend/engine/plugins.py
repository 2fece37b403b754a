from __future__ import annotations

import logging
from typing import Callable, Literal

import httpx

from errors import RTLPluginError

logger = logging.getLogger(__name__)

PluginStatus = Literal["unavailable", "deferred", "loaded"]

_STATUS: PluginStatus = "unavailable"
_URL: str | None = None


def set_rtl_text_plugin(
    url: str,
    callback: Callable[[Exception | None], None] | None = None,
    *,
    lazy: bool = False,
) -> None:
    """
    Register the right-to-left text shaping plugin for the whole process.

    Must be called once, from the application entry point, before any map is
    shown. `callback` receives `None` once registered, or the error.
    """
    global _STATUS, _URL
    if _STATUS != "unavailable":
        raise RTLPluginError("setRTLTextPlugin cannot be called multiple times")

    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        err = RTLPluginError(f"Invalid RTL text plugin url: {url!r}")
        if callback is not None:
            callback(err)
        raise err from e
    if parsed.scheme not in {"http", "https"}:
        err = RTLPluginError(f"RTL text plugin url must be http(s): {url!r}")
        if callback is not None:
            callback(err)
        raise err

    _URL = url
    _STATUS = "deferred" if lazy else "loaded"
    logger.info("RTL text plugin registered (%s): %s", _STATUS, url)
    if callback is not None:
        callback(None)


def rtl_text_plugin_status() -> PluginStatus:
    return _STATUS


def rtl_text_plugin_url() -> str | None:
    return _URL


def reset_rtl_text_plugin() -> None:
    global _STATUS, _URL
    _STATUS = "unavailable"
    _URL = None

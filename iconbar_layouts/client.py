"""HTTP client for the remote icon bar page."""

from __future__ import annotations

import logging
import urllib.request
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import urlencode, urljoin

from .errors import RemoteCallError
from .models import Icon

LOG = logging.getLogger("iconbar.client")

Transport = Callable[[str], str]

DEFAULT_USER_AGENT = "iconbar-layouts/0.1 Python-urllib"


def urllib_transport(timeout: float = 30.0, cookie: str = "", user_agent: str = DEFAULT_USER_AGENT) -> Transport:
    """Build a blocking GET transport that returns the decoded response body."""

    headers = {"User-Agent": user_agent, "Accept": "text/html,*/*"}
    if cookie:
        headers["Cookie"] = cookie

    def fetch(url: str) -> str:
        req = urllib.request.Request(url, headers=headers, method="GET")
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            charset = resp.headers.get_content_charset() or "utf-8"
            return resp.read().decode(charset)

    return fetch


class IconbarClient:
    """Issues icon bar operations and returns the page markup each one produces.

    Every call blocks until the transport answers. Nothing is retried; a
    transport failure surfaces as ``RemoteCallError``.
    """

    def __init__(self, base_url: str, page: str = "iconbar.php", transport: Optional[Transport] = None) -> None:
        self.endpoint = urljoin(base_url.rstrip("/") + "/", page.lstrip("/"))
        self.transport = transport or urllib_transport()

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any], transport: Optional[Transport] = None) -> "IconbarClient":
        remote = cfg.get("remote") or {}
        if transport is None:
            transport = urllib_transport(
                timeout=float(remote.get("timeout_sec", 30)),
                cookie=str(remote.get("cookie") or ""),
                user_agent=str(remote.get("user_agent") or DEFAULT_USER_AGENT),
            )
        return cls(str(remote.get("base_url", "")), str(remote.get("page", "iconbar.php")), transport)

    # -- operations -------------------------------------------------------

    def state(self) -> str:
        return self._call("state", {})

    def reset(self) -> str:
        return self._call("reset", {})

    def create(self, icon: Icon) -> str:
        return self._call("create", _icon_params(icon))

    def update(self, icon: Icon, column: int, row_key: int) -> str:
        params = _icon_params(icon)
        params.update({"col": column, "row": row_key})
        return self._call("update", params)

    def move(self, from_column: int, from_row_key: int, to_column: int, to_row_key: int) -> str:
        return self._call(
            "move",
            {"fromcol": from_column, "fromrow": from_row_key, "tocol": to_column, "torow": to_row_key},
        )

    def delete(self, column: int, row_key: int) -> str:
        return self._call("delete", {"col": column, "row": row_key})

    # -- plumbing ---------------------------------------------------------

    def url_for(self, operation: str, params: Mapping[str, Any]) -> str:
        query: Dict[str, Any] = {} if operation == "state" else {"action": operation}
        query.update(params)
        return f"{self.endpoint}?{urlencode(query)}" if query else self.endpoint

    def _call(self, operation: str, params: Mapping[str, Any]) -> str:
        url = self.url_for(operation, params)
        LOG.debug("%s -> %s", operation, url)
        try:
            body = self.transport(url)
        except RemoteCallError:
            raise
        except Exception as exc:
            raise RemoteCallError(operation, url, str(exc) or type(exc).__name__) from exc
        if not body or not body.strip():
            raise RemoteCallError(operation, url, "empty response")
        return body


def _icon_params(icon: Icon) -> Dict[str, Any]:
    params: Dict[str, Any] = {"icon": icon.icon, "kind": icon.action_kind.value}
    if icon.value is not None:
        params["value"] = icon.value
    if icon.label is not None:
        params["label"] = icon.label
    return params

"""Telegraph API helpers."""

from __future__ import annotations

import json
from typing import Any, Mapping, Sequence

import requests

from telegraph_uploader.errors import (
    AccountCreationError,
    PageCreationError,
    PageEditError,
    UploaderError,
)
from telegraph_uploader.platforms.base import DocumentClient


class TelegraphApiClient(DocumentClient):
    """Minimal client for the Telegraph publishing API."""

    def __init__(self, api_url: str = "https://api.telegra.ph", *, timeout: float = 30.0) -> None:
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout

    def create_account(self, short_name: str, author_name: str) -> str:
        """Create an account and return its access token."""
        result = self._call(
            "createAccount",
            {"short_name": short_name, "author_name": author_name},
            error_cls=AccountCreationError,
            action="Account creation failed",
        )
        token = result.get("access_token")
        if not token:
            raise AccountCreationError(
                "Account creation returned no access_token", details={"result": result}
            )
        return str(token)

    def create_page(
        self,
        access_token: str,
        title: str,
        content: Sequence[Mapping[str, Any]],
        *,
        return_content: bool = False,
    ) -> str:
        """Create a page and return its public URL."""
        result = self._call(
            "createPage",
            {
                "access_token": access_token,
                "title": title,
                "content": _serialize_content(content),
                "return_content": _flag(return_content),
            },
            error_cls=PageCreationError,
            action="Page creation failed",
        )
        return _page_url(result, PageCreationError)

    def edit_page(
        self,
        access_token: str,
        path: str,
        title: str,
        content: Sequence[Mapping[str, Any]],
        *,
        author_name: str,
        author_url: str,
    ) -> str:
        """Rewrite the page at ``path`` and return its public URL."""
        result = self._call(
            f"editPage/{path}",
            {
                "access_token": access_token,
                "title": title,
                "content": _serialize_content(content),
                "author_name": author_name,
                "author_url": author_url,
            },
            error_cls=PageEditError,
            action="Page edit failed",
        )
        return _page_url(result, PageEditError)

    def _call(
        self,
        method: str,
        form: Mapping[str, str],
        *,
        error_cls: type[UploaderError],
        action: str,
    ) -> dict[str, Any]:
        url = f"{self._api_url}/{method}"
        try:
            response = requests.post(url, data=dict(form), timeout=self._timeout)
        except requests.RequestException as exc:
            raise error_cls(action, details={"method": method, "reason": str(exc)}) from exc

        parse_error: ValueError | None = None
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            data = None
            parse_error = exc

        try:
            response.raise_for_status()
        except requests.RequestException as exc:
            details: dict[str, Any] = {"method": method, "reason": str(exc)}
            if isinstance(data, dict) and data.get("error"):
                details["error"] = data["error"]
            raise error_cls(action, details=details) from exc

        if parse_error is not None:
            raise error_cls(
                f"{action}: could not parse response",
                details={"method": method, "response": response.text[:200]},
            ) from parse_error

        if not isinstance(data, dict) or not data.get("ok"):
            error = data.get("error") if isinstance(data, dict) else None
            raise error_cls(action, details={"method": method, "error": error or "unknown"})

        result = data.get("result")
        if not isinstance(result, dict):
            raise error_cls(
                f"{action}: response has no result", details={"method": method, "response": data}
            )
        return result


def _serialize_content(content: Sequence[Mapping[str, Any]]) -> str:
    return json.dumps(list(content), ensure_ascii=False)


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _page_url(result: Mapping[str, Any], error_cls: type[UploaderError]) -> str:
    url = result.get("url")
    if not url:
        raise error_cls("Telegraph response has no page url", details={"result": dict(result)})
    return str(url)

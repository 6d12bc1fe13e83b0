"""Two-phase assembly of the Telegraph article."""

from __future__ import annotations

from datetime import date
from typing import Callable, Sequence
from urllib.parse import urlparse

from ..errors import PageCreationError
from ..platforms.base import DocumentClient, PublishedDocument, UploadOutcome
from ..settings import TelegraphSettings
from ..utils.logging import get_logger
from .content import ContentBuilder

LOGGER = get_logger(__name__)


def page_path_from_url(url: str) -> str:
    """Return the last path segment of a Telegraph page URL."""

    path = urlparse(url).path if "://" in url else url
    return path.rstrip("/").rsplit("/", 1)[-1]


class DocumentAssembly:
    """Creates a page with a provisional title, then rewrites it in place.

    Telegraph assigns the page address from the title given at creation, so
    the page is created as ``<page_id>-<year>`` and then edited to carry the
    configured title, the content tree and the author metadata.
    """

    def __init__(
        self,
        client: DocumentClient,
        settings: TelegraphSettings,
        *,
        page_id: str,
        title: str,
        content_builder: ContentBuilder | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._client = client
        self._settings = settings
        self._page_id = page_id
        self._title = title
        self._content_builder = content_builder or ContentBuilder()
        self._today = today

    def provisional_title(self) -> str:
        return f"{self._page_id}-{self._today().year}"

    def assemble(self, outcomes: Sequence[UploadOutcome]) -> PublishedDocument | None:
        successes = tuple(outcome for outcome in outcomes if outcome.succeeded)
        if not successes:
            LOGGER.warning(
                "No successful uploads; skipping page assembly",
                extra={"event": "assembly.skip"},
            )
            return None

        access_token = self._client.create_account(
            self._settings.short_name, self._settings.author_name
        )
        LOGGER.info("Telegraph account created", extra={"event": "assembly.account"})

        draft_url = self._client.create_page(
            access_token,
            self.provisional_title(),
            self._content_builder.build(successes),
        )
        path = page_path_from_url(draft_url)
        if not path:
            raise PageCreationError("Created page has no path", details={"url": draft_url})
        LOGGER.info(
            "Telegraph page created",
            extra={"event": "assembly.create", "url": draft_url, "path": path},
        )

        content = self._content_builder.build(successes)
        final_url = self._client.edit_page(
            access_token,
            path,
            self._title,
            content,
            author_name=self._settings.author_name,
            author_url=self._settings.author_url,
        )
        LOGGER.info(
            "Telegraph page title updated",
            extra={"event": "assembly.edit", "url": final_url},
        )

        return PublishedDocument(
            access_token=access_token,
            path=path,
            url=final_url,
            title=self._title,
            content=tuple(content),
        )


__all__ = ["DocumentAssembly", "page_path_from_url"]

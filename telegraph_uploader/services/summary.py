"""Markdown summary of an upload run."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

try:
    from markdown import markdown
except ModuleNotFoundError as exc:
    raise RuntimeError(
        "The markdown package is missing; run 'pip install markdown' or install the project."
    ) from exc

from ..platforms.base import UploadOutcome
from ..utils.file_helper import write_text


class SummaryRenderer:
    """Renders the human-readable summary of a published batch."""

    def __init__(self, title: str, author: str) -> None:
        self._title = title
        self._author = author

    def render(self, outcomes: Sequence[UploadOutcome], access_token: str, url: str) -> str:
        items = [outcome for outcome in outcomes if outcome.succeeded]
        lines = [
            f"# {self._title}\n",
            f"**上传者**: {self._author}",
            f"**accessToken**: {access_token}",
            f"**url**: {url}",
            f"**图片数量**: {len(items)}\n\n",
            *(f"![{item.filename}]({item.url})" for item in items),
            "\n\n> 本文件由自动上传脚本生成",
        ]
        return "\n".join(lines)

    def render_html(self, markdown_text: str) -> str:
        return markdown(markdown_text, extensions=["extra"])

    def write(
        self,
        path: Path,
        outcomes: Sequence[UploadOutcome],
        access_token: str,
        url: str,
        *,
        html: bool = False,
    ) -> Path:
        """Write the Markdown summary to ``path`` and optionally an HTML twin."""
        text = self.render(outcomes, access_token, url)
        write_text(path, text)
        if html:
            write_text(path.with_suffix(".html"), self.render_html(text))
        return path


__all__ = ["SummaryRenderer"]

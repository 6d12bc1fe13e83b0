"""Builds the Telegraph node tree for an uploaded batch."""

from __future__ import annotations

from typing import Any, Sequence

from ..platforms.base import UploadOutcome

Node = dict[str, Any]


class ContentBuilder:
    """Turns successful outcomes into Telegraph content nodes."""

    def build(self, outcomes: Sequence[UploadOutcome]) -> list[Node]:
        """
        Build the page content for the given outcomes.

        The tree starts with one summary paragraph, followed by one ``figure``
        per successful outcome holding an ``img`` and a ``figcaption``. Failed
        outcomes are skipped; order follows ``outcomes``.
        """
        successes = [outcome for outcome in outcomes if outcome.succeeded]
        nodes: list[Node] = [self._summary_paragraph(len(successes))]
        nodes.extend(self._figure(outcome) for outcome in successes)
        return nodes

    def _summary_paragraph(self, count: int) -> Node:
        return {"tag": "p", "children": [f"共上传 {count} 张图片"]}

    def _figure(self, outcome: UploadOutcome) -> Node:
        return {
            "tag": "figure",
            "children": [
                {"tag": "img", "attrs": {"src": outcome.url}},
                {"tag": "figcaption", "children": [outcome.filename]},
            ],
        }


__all__ = ["ContentBuilder", "Node"]

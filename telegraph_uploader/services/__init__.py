"""Publishing services."""

from .assembly import DocumentAssembly, page_path_from_url
from .content import ContentBuilder
from .summary import SummaryRenderer

__all__ = ["ContentBuilder", "DocumentAssembly", "SummaryRenderer", "page_path_from_url"]

"""
Fact Sources

The boundary to the extraction collaborator: whatever reads pages,
frames, styles and text out of the live document. This layer treats it
as a black box returning structured records or failing.

Failures surface as ExtractionError carrying the collaborator's message
verbatim. Nothing here retries; the caller decides.

Sources:
- FactSource: abstract interface
- StaticSource: in-memory facts and metrics (tests, scripted runs)
- JsonFileSource: JSON files written by an extraction script
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..errors import ExtractionError
from ..layout.facts import DocumentFacts
from ..layout.metrics import LayoutMetrics

logger = logging.getLogger(__name__)

CURRENT_PAGE = -1


class FactSource(ABC):
    """Interface to the document fact extraction collaborator."""

    @abstractmethod
    def fetch_document_facts(self) -> DocumentFacts:
        """
        Fetch pages, frames and document flags.

        Raises:
            ExtractionError: If the collaborator fails
        """

    @abstractmethod
    def fetch_layout_metrics(self, page_selector: int = CURRENT_PAGE) -> LayoutMetrics:
        """
        Fetch a layout snapshot.

        Args:
            page_selector: 1-based page number, or -1 for the current page

        Raises:
            ExtractionError: If the collaborator fails
        """


class StaticSource(FactSource):
    """
    Source backed by objects already in memory.

    Metrics may be a single snapshot (returned for every selector) or a
    mapping of page number to snapshot.
    """

    def __init__(
        self,
        facts: Optional[DocumentFacts] = None,
        metrics: Union[LayoutMetrics, Mapping[int, LayoutMetrics], None] = None,
    ):
        self.facts = facts
        self.metrics = metrics

    def fetch_document_facts(self) -> DocumentFacts:
        if self.facts is None:
            raise ExtractionError("No document facts available")
        return self.facts

    def fetch_layout_metrics(self, page_selector: int = CURRENT_PAGE) -> LayoutMetrics:
        if self.metrics is None:
            raise ExtractionError("No layout metrics available")
        if isinstance(self.metrics, LayoutMetrics):
            return self.metrics
        if page_selector == CURRENT_PAGE and self.metrics:
            page_selector = min(self.metrics)
        try:
            return self.metrics[page_selector]
        except KeyError:
            raise ExtractionError(f"No layout metrics for page {page_selector}")


class JsonFileSource(FactSource):
    """
    Source reading the JSON written by an extraction script.

    The facts file holds one DocumentFacts object. The metrics file holds
    either one LayoutMetrics object, or a ``pages`` mapping of page
    number to snapshot with an optional ``currentPage``.

    Usage:
        source = JsonFileSource('facts.json', 'metrics.json')
        facts = source.fetch_document_facts()
    """

    def __init__(
        self,
        facts_path: Union[str, Path, None] = None,
        metrics_path: Union[str, Path, None] = None,
    ):
        self.facts_path = Path(facts_path) if facts_path else None
        self.metrics_path = Path(metrics_path) if metrics_path else None

    def fetch_document_facts(self) -> DocumentFacts:
        data = self._load(self.facts_path, 'document facts')
        try:
            facts = DocumentFacts.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ExtractionError(f"Invalid document facts in {self.facts_path}: {e}", e)

        logger.debug(
            f"Loaded facts: {len(facts.pages)} pages, {len(facts.text_frames)} frames"
        )
        return facts

    def fetch_layout_metrics(self, page_selector: int = CURRENT_PAGE) -> LayoutMetrics:
        data = self._load(self.metrics_path, 'layout metrics')
        snapshot = self._select_page(data, page_selector)
        try:
            return LayoutMetrics.from_dict(snapshot)
        except (KeyError, TypeError, ValueError) as e:
            raise ExtractionError(f"Invalid layout metrics in {self.metrics_path}: {e}", e)

    def _select_page(self, data: Dict[str, Any], page_selector: int) -> Dict[str, Any]:
        pages = data.get('pages')
        if not isinstance(pages, Mapping):
            return data

        if page_selector == CURRENT_PAGE:
            page_selector = data.get('currentPage', 1)
        snapshot = pages.get(str(page_selector))
        if snapshot is None:
            raise ExtractionError(
                f"No layout metrics for page {page_selector} in {self.metrics_path}"
            )
        return snapshot

    @staticmethod
    def _load(path: Optional[Path], what: str) -> Dict[str, Any]:
        if path is None:
            raise ExtractionError(f"No file configured for {what}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except OSError as e:
            raise ExtractionError(f"Failed to read {what} from {path}: {e}", e)
        except json.JSONDecodeError as e:
            raise ExtractionError(f"Invalid JSON in {path}: {e}", e)

        if not isinstance(data, dict):
            raise ExtractionError(f"Expected a JSON object in {path}")
        return data

"""
Raw Document Facts

Structured records returned by the extraction collaborator: pages, text
frames and document-level flags. These are the inputs from which a
DocumentState is derived.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .box import Bounds, page_rectangle
from .metrics import Margins
from ..utils import read_key


@dataclass(frozen=True)
class PageInfo:
    """
    A document page.

    Attributes:
        number: 1-based page number
        name: Page name as shown by the host
        master_page: Applied master page, if any
        text_frames: Number of text frames reported by the host
        all_items: Number of page items reported by the host
        width, height: Page size in points, when known
        margins: Page margins, when known
    """
    number: int
    name: str = ''
    master_page: Optional[str] = None
    text_frames: int = 0
    all_items: int = 0
    width: Optional[float] = None
    height: Optional[float] = None
    margins: Optional[Margins] = None

    @property
    def has_dimensions(self) -> bool:
        return bool(self.width) and bool(self.height)

    @property
    def area(self) -> float:
        if not self.has_dimensions:
            return 0.0
        return self.width * self.height

    def bounds(self) -> Optional[Bounds]:
        """Page rectangle, or None when dimensions are unknown."""
        if not self.has_dimensions:
            return None
        return page_rectangle(self.width, self.height)

    def live_area(self) -> Optional[Bounds]:
        """Page rectangle inside the margins."""
        page = self.bounds()
        if page is None or self.margins is None:
            return page
        m = self.margins
        return page.inset(top=m.top, left=m.left, bottom=m.bottom, right=m.right)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'number': self.number,
            'name': self.name,
            'masterPage': self.master_page,
            'textFrames': self.text_frames,
            'allItems': self.all_items,
            'width': self.width,
            'height': self.height,
            'margins': self.margins.to_dict() if self.margins else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'PageInfo':
        margins = data.get('margins')
        width = data.get('width')
        height = data.get('height')
        return cls(
            number=int(data['number']),
            name=str(data.get('name', '') or ''),
            master_page=read_key(data, 'masterPage'),
            text_frames=int(read_key(data, 'textFrames', 0) or 0),
            all_items=int(read_key(data, 'allItems', 0) or 0),
            width=float(width) if width is not None else None,
            height=float(height) if height is not None else None,
            margins=Margins.from_dict(margins) if margins else None,
        )


@dataclass(frozen=True)
class TextFrameInfo:
    """
    A text frame as reported by the host.

    ``next_frame`` and ``previous_frame`` carry explicit threading links
    (frame indices). Older extractors only report the ``has_next`` /
    ``has_previous`` flags; the spatial analyzer then assumes the
    successor is the following index.
    """
    index: int
    page_number: int
    bounds: Bounds
    content_length: int = 0
    overflows: bool = False
    has_next: bool = False
    has_previous: bool = False
    next_frame: Optional[int] = None
    previous_frame: Optional[int] = None
    layer_name: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.content_length == 0

    def successor_index(self) -> Optional[int]:
        """Index of the threaded successor, or None when not threaded."""
        if self.next_frame is not None:
            return self.next_frame
        if self.has_next:
            return self.index + 1
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'index': self.index,
            'pageNumber': self.page_number,
            'bounds': self.bounds.to_list(),
            'contentLength': self.content_length,
            'overflows': self.overflows,
            'hasNext': self.has_next,
            'hasPrevious': self.has_previous,
            'nextFrame': self.next_frame,
            'previousFrame': self.previous_frame,
            'layerName': self.layer_name,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'TextFrameInfo':
        bounds = data['bounds']
        if isinstance(bounds, Mapping):
            bounds = Bounds(
                top=float(bounds['top']),
                left=float(bounds['left']),
                bottom=float(bounds['bottom']),
                right=float(bounds['right']),
            )
        else:
            bounds = Bounds.from_sequence(bounds)

        next_frame = read_key(data, 'nextFrame')
        previous_frame = read_key(data, 'previousFrame')
        return cls(
            index=int(data['index']),
            page_number=int(read_key(data, 'pageNumber')),
            bounds=bounds,
            content_length=int(read_key(data, 'contentLength', 0) or 0),
            overflows=bool(data.get('overflows', False)),
            has_next=bool(read_key(data, 'hasNext', False)) or next_frame is not None,
            has_previous=bool(read_key(data, 'hasPrevious', False)) or previous_frame is not None,
            next_frame=int(next_frame) if next_frame is not None else None,
            previous_frame=int(previous_frame) if previous_frame is not None else None,
            layer_name=read_key(data, 'layerName'),
        )


@dataclass(frozen=True)
class DocumentFacts:
    """
    Everything the extraction collaborator reports about a document.

    ``threading_integrity`` is optional: when the host does not report
    it, it is derived from the threading map.
    """
    document_open: bool = False
    pages: Tuple[PageInfo, ...] = ()
    text_frames: Tuple[TextFrameInfo, ...] = ()
    text_content: str = ''
    has_overset_text: bool = False
    threading_integrity: Optional[bool] = None
    document_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'documentOpen': self.document_open,
            'documentName': self.document_name,
            'pages': [p.to_dict() for p in self.pages],
            'textFrames': [f.to_dict() for f in self.text_frames],
            'textContent': self.text_content,
            'hasOversetText': self.has_overset_text,
            'threadingIntegrity': self.threading_integrity,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'DocumentFacts':
        frames = tuple(TextFrameInfo.from_dict(f) for f in read_key(data, 'textFrames', []) or [])
        overset = read_key(data, 'hasOversetText')
        if overset is None:
            overset = any(f.overflows for f in frames)
        integrity = read_key(data, 'threadingIntegrity')
        return cls(
            document_open=bool(read_key(data, 'documentOpen', True)),
            pages=tuple(PageInfo.from_dict(p) for p in _page_entries(data)),
            text_frames=frames,
            text_content=str(read_key(data, 'textContent', '') or ''),
            has_overset_text=bool(overset),
            threading_integrity=bool(integrity) if integrity is not None else None,
            document_name=read_key(data, 'documentName'),
        )


def _page_entries(data: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    # Serialized document states name the page list 'pageInfo'
    pages = data.get('pages')
    if pages is None:
        pages = read_key(data, 'pageInfo')
    return list(pages or [])

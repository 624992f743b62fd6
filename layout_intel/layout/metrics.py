"""
Layout Metric Model

Passive snapshot types describing a layout at one instant: frames,
margins, columns, styles and per-segment visual attributes.

Snapshots are produced by the extraction collaborator (or written by
hand as a reference layout) and are immutable once built. Frame indices
are stable within one snapshot and are the join key used when comparing
two snapshots.

Wire format:
    The JSON shape uses camelCase keys (``frameIndex``, ``fontSize``,
    ``visualAttributes``). ``from_dict`` also accepts snake_case keys so
    hand-written Python fixtures read naturally.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from ..utils import as_number, read_key


class TextAlignment(Enum):
    """Paragraph alignment of a formatted text segment."""
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"

    @classmethod
    def parse(cls, value: Any) -> 'TextAlignment':
        """
        Parse an alignment value.

        Host values such as ``LEFT_ALIGN`` or ``CENTER_JUSTIFIED`` are
        reduced to their base alignment.

        Raises:
            ValueError: If the value is not a known alignment
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if text == member.value:
                return member
        if text.startswith('left'):
            return cls.LEFT
        if text.startswith('center'):
            return cls.CENTER
        if text.startswith('right'):
            return cls.RIGHT
        if 'justif' in text:
            return cls.JUSTIFY
        raise ValueError(f"Unknown alignment: {value!r}")


@dataclass(frozen=True)
class Frame:
    """
    A rectangular frame in a layout snapshot.

    Attributes:
        x, y: Top-left position in points
        width, height: Frame size in points
        has_text: Whether the frame holds text
        content_length: Character count of the frame's text
        overflows: Whether the frame has overset text
    """
    x: float
    y: float
    width: float
    height: float
    has_text: bool = False
    content_length: int = 0
    overflows: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height,
            'hasText': self.has_text,
            'contentLength': self.content_length,
            'overflows': self.overflows,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Frame':
        return cls(
            x=as_number(read_key(data, 'x'), 'x'),
            y=as_number(read_key(data, 'y'), 'y'),
            width=as_number(read_key(data, 'width'), 'width'),
            height=as_number(read_key(data, 'height'), 'height'),
            has_text=bool(read_key(data, 'hasText', False)),
            content_length=int(read_key(data, 'contentLength', 0) or 0),
            overflows=bool(read_key(data, 'overflows', False)),
        )


@dataclass(frozen=True)
class Margins:
    """Page margins in points."""
    top: float = 0.0
    left: float = 0.0
    bottom: float = 0.0
    right: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            'top': self.top,
            'left': self.left,
            'bottom': self.bottom,
            'right': self.right,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Margins':
        return cls(
            top=as_number(data.get('top', 0), 'margins.top'),
            left=as_number(data.get('left', 0), 'margins.left'),
            bottom=as_number(data.get('bottom', 0), 'margins.bottom'),
            right=as_number(data.get('right', 0), 'margins.right'),
        )


@dataclass(frozen=True)
class Style:
    """A paragraph style used in the layout."""
    name: str
    font_size: float
    font_family: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'fontSize': self.font_size,
            'fontFamily': self.font_family,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Style':
        return cls(
            name=str(data['name']),
            font_size=as_number(read_key(data, 'fontSize', 0), 'fontSize'),
            font_family=str(read_key(data, 'fontFamily', '') or ''),
        )


@dataclass(frozen=True)
class VisualAttributes:
    """Formatting of one text segment."""
    font_family: str
    font_style: str
    font_size: float
    leading: float
    alignment: TextAlignment
    first_line_indent: float = 0.0
    left_indent: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'fontFamily': self.font_family,
            'fontStyle': self.font_style,
            'fontSize': self.font_size,
            'leading': self.leading,
            'alignment': self.alignment.value,
            'firstLineIndent': self.first_line_indent,
            'leftIndent': self.left_indent,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'VisualAttributes':
        return cls(
            font_family=str(read_key(data, 'fontFamily', '') or ''),
            font_style=str(read_key(data, 'fontStyle', '') or ''),
            font_size=as_number(read_key(data, 'fontSize', 0), 'fontSize'),
            leading=as_number(read_key(data, 'leading', 0), 'leading'),
            alignment=TextAlignment.parse(read_key(data, 'alignment', 'left')),
            first_line_indent=as_number(read_key(data, 'firstLineIndent', 0), 'firstLineIndent'),
            left_indent=as_number(read_key(data, 'leftIndent', 0), 'leftIndent'),
        )


@dataclass(frozen=True)
class TextSegment:
    """A run of uniformly formatted text inside a frame."""
    text_snippet: str
    visual_attributes: VisualAttributes
    description: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'textSnippet': self.text_snippet,
            'visualAttributes': self.visual_attributes.to_dict(),
            'description': self.description,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'TextSegment':
        return cls(
            text_snippet=str(read_key(data, 'textSnippet', '') or ''),
            visual_attributes=VisualAttributes.from_dict(read_key(data, 'visualAttributes', {})),
            description=str(data.get('description', '') or ''),
        )


@dataclass(frozen=True)
class TextRegion:
    """Formatted segments of one frame, keyed by frame index."""
    frame_index: int
    regions: Tuple[TextSegment, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'frameIndex': self.frame_index,
            'regions': [r.to_dict() for r in self.regions],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'TextRegion':
        return cls(
            frame_index=int(read_key(data, 'frameIndex')),
            regions=tuple(TextSegment.from_dict(r) for r in data.get('regions', [])),
        )


@dataclass(frozen=True)
class LayoutMetrics:
    """
    Snapshot of a layout at one instant.

    ``frames``, ``styles`` and ``text_regions`` are optional: ``None``
    means the category was not captured, which the comparison engine
    treats as "no comparable data" rather than as an empty layout.
    """
    frames: Optional[Tuple[Frame, ...]] = None
    margins: Optional[Margins] = None
    columns: int = 1
    styles: Optional[Tuple[Style, ...]] = None
    text_regions: Optional[Tuple[TextRegion, ...]] = None

    @property
    def frame_count(self) -> int:
        return len(self.frames or ())

    def style_map(self) -> Dict[str, Style]:
        """Lookup from style name to style record."""
        return {s.name: s for s in (self.styles or ())}

    def region_for_frame(self, frame_index: int) -> Optional[TextRegion]:
        """Text region for a frame index, if captured."""
        for region in self.text_regions or ():
            if region.frame_index == frame_index:
                return region
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON-shaped snapshot."""
        result: Dict[str, Any] = {
            'margins': self.margins.to_dict() if self.margins else None,
            'columns': self.columns,
        }
        if self.frames is not None:
            result['frames'] = [f.to_dict() for f in self.frames]
        if self.styles is not None:
            result['styles'] = [s.to_dict() for s in self.styles]
        if self.text_regions is not None:
            result['textRegions'] = [r.to_dict() for r in self.text_regions]
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'LayoutMetrics':
        """
        Build a snapshot from its JSON shape.

        Raises:
            ValueError: If a field has the wrong type
        """
        frames = data.get('frames')
        margins = data.get('margins')
        styles = data.get('styles')
        regions = read_key(data, 'textRegions')
        return cls(
            frames=tuple(Frame.from_dict(f) for f in frames) if frames is not None else None,
            margins=Margins.from_dict(margins) if margins is not None else None,
            columns=int(data.get('columns', 1)),
            styles=tuple(Style.from_dict(s) for s in styles) if styles is not None else None,
            text_regions=(
                tuple(TextRegion.from_dict(r) for r in regions)
                if regions is not None else None
            ),
        )


def metrics_from_frames(frames: Iterable[Frame], **kwargs: Any) -> LayoutMetrics:
    """Convenience constructor used by tests and scripted references."""
    return LayoutMetrics(frames=tuple(frames), **kwargs)

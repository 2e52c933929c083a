"""
Data models for page content and region classification.

Page content (glyphs, vector paths, images) mirrors what the PDF parser
exposes; FeatureVector and LabeledExample are what the model consumes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple, Union

import numpy as np

from .exceptions import UnknownCategoryError


class Category(Enum):
    """Region categories. Codes are the model's label space."""

    TITLE = 0
    TEXT = 1
    LIST = 2
    TABLE = 3
    IMAGE = 4

    @classmethod
    def from_code(cls, code) -> "Category":
        if isinstance(code, cls):
            return code
        try:
            value = float(code)
            if value.is_integer():
                return cls(int(value))
        except (TypeError, ValueError) as e:
            raise UnknownCategoryError(f"Unknown category code: {code!r}") from e
        raise UnknownCategoryError(f"Unknown category code: {code!r}")

    @classmethod
    def from_name(cls, name: str) -> "Category":
        try:
            return cls[name.strip().upper()]
        except (AttributeError, KeyError) as e:
            raise UnknownCategoryError(f"Unknown category name: {name!r}") from e

    @property
    def label(self) -> str:
        return self.name.lower()


CATEGORY_CODES = [category.value for category in Category]


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle in page coordinates."""

    left: float
    bottom: float
    right: float
    top: float

    def __post_init__(self):
        if self.left > self.right or self.bottom > self.top:
            raise ValueError(
                f"Invalid bounding box: left={self.left}, bottom={self.bottom}, "
                f"right={self.right}, top={self.top}"
            )

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.top - self.bottom

    @property
    def area(self) -> float:
        return self.width * self.height

    def contains(self, other: "BoundingBox") -> bool:
        """True when *other* lies fully inside (sides may coincide)."""
        return (
            other.left >= self.left
            and other.right <= self.right
            and other.bottom >= self.bottom
            and other.top <= self.top
        )

    @classmethod
    def from_points(cls, points) -> "BoundingBox":
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(min(xs), min(ys), max(xs), max(ys))

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.left, self.bottom, self.right, self.top)


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Glyph:
    """A single rendered character (or ligature) with its box."""

    bbox: BoundingBox
    text: str

    @property
    def height(self) -> float:
        return self.bbox.height


# ---------------------------------------------------------------------------
# Path segments: closed set of kinds, dispatched on ``kind``
# ---------------------------------------------------------------------------


class SegmentKind(Enum):
    LINE = "line"
    CURVE = "curve"


class Orientation(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    OBLIQUE = "oblique"


@dataclass(frozen=True)
class LineSegment:
    start: Point
    end: Point
    kind: SegmentKind = field(default=SegmentKind.LINE, init=False)

    @property
    def points(self) -> Tuple[Point, ...]:
        return (self.start, self.end)

    @property
    def orientation(self) -> Orientation:
        # Exact comparison; equal X wins for zero-length segments.
        if self.start.x == self.end.x:
            return Orientation.VERTICAL
        if self.start.y == self.end.y:
            return Orientation.HORIZONTAL
        return Orientation.OBLIQUE


@dataclass(frozen=True)
class CurveSegment:
    """Cubic Bézier segment."""

    start: Point
    control1: Point
    control2: Point
    end: Point
    kind: SegmentKind = field(default=SegmentKind.CURVE, init=False)

    @property
    def points(self) -> Tuple[Point, ...]:
        return (self.start, self.control1, self.control2, self.end)


Segment = Union[LineSegment, CurveSegment]


@dataclass(frozen=True)
class PdfPath:
    """A vector path made of line and curve segments."""

    segments: Tuple[Segment, ...] = ()

    def bounding_box(self) -> Optional[BoundingBox]:
        points = [p for segment in self.segments for p in segment.points]
        if not points:
            return None
        return BoundingBox.from_points(points)


@dataclass(frozen=True)
class PageImage:
    bbox: BoundingBox


@dataclass
class Page:
    """Content of one PDF page as seen by the classifier."""

    number: int
    width: float
    height: float
    glyphs: List[Glyph] = field(default_factory=list)
    paths: List[PdfPath] = field(default_factory=list)
    images: List[PageImage] = field(default_factory=list)

    @property
    def avg_glyph_height(self) -> float:
        if not self.glyphs:
            return 0.0
        return float(np.mean([g.height for g in self.glyphs]))


@dataclass(frozen=True)
class TextBlock:
    """A region candidate from the page segmentation."""

    bbox: BoundingBox
    text: str


# ---------------------------------------------------------------------------
# Model inputs
# ---------------------------------------------------------------------------


class FeatureVector(NamedTuple):
    """Fixed-order numeric summary of a region."""

    char_count: float
    pct_numeric: float
    pct_alphabetic: float
    pct_symbolic: float
    pct_bullet: float
    height_ratio: float
    path_count: float
    pct_bezier: float
    pct_horizontal: float
    pct_vertical: float
    pct_oblique: float
    image_count: float
    avg_image_area_ratio: float


FEATURE_NAMES = list(FeatureVector._fields)
FEATURE_COUNT = len(FEATURE_NAMES)


@dataclass(frozen=True)
class LabeledExample:
    features: FeatureVector
    category: Category

"""
Feature extraction for a single page region.

Turns the glyphs, vector paths and images inside a region into the fixed
13-value FeatureVector. Degenerate inputs (no glyphs, no paths, no images,
zero page height or region area) resolve to sentinel values, so this never
raises.
"""

import unicodedata
from collections import Counter
from typing import Iterable, Sequence

import numpy as np

from ..config import Config
from ..models import (
    BoundingBox,
    FeatureVector,
    Glyph,
    Orientation,
    Page,
    PageImage,
    PdfPath,
    Segment,
    SegmentKind,
)
from .region_filter import RegionFilter

BULLETS = frozenset([
    '•', 'o', '▪', '❖', '➢', '►', '✓', '➔', '⇨', '➪',
    '➨', '➫', '➬', '➭', '➮', '➯', '➱', '➲', '‣',
    '⁃', '⁌', '⁍',
])

NO_HEIGHT_RATIO = -1.0


def _ratio(count: float, total: float) -> float:
    if not total:
        return 0.0
    return round(count / total, Config.FEATURE_PRECISION)


def _is_numeric(char: str) -> bool:
    return unicodedata.category(char).startswith('N')


def _glyph_features(page_avg_glyph_height: float, glyphs: Sequence[Glyph]):
    if not glyphs:
        return 0.0, 0.0, 0.0, 0.0, 0.0, NO_HEIGHT_RATIO

    chars = ''.join(g.text for g in glyphs)
    total = len(chars)

    numeric = sum(1 for c in chars if _is_numeric(c))
    alphabetic = sum(1 for c in chars if c.isalpha())
    symbolic = total - numeric - alphabetic
    bullets = sum(1 for c in chars if c in BULLETS)

    if page_avg_glyph_height:
        avg_height = float(np.mean([g.height for g in glyphs]))
        height_ratio = round(avg_height / page_avg_glyph_height, Config.FEATURE_PRECISION)
    else:
        height_ratio = NO_HEIGHT_RATIO

    return (
        float(total),
        _ratio(numeric, total),
        _ratio(alphabetic, total),
        _ratio(symbolic, total),
        _ratio(bullets, total),
        height_ratio,
    )


def classify_segment(segment: Segment) -> str:
    """Return 'bezier', or the orientation name of a straight segment"""
    if segment.kind is SegmentKind.CURVE:
        return 'bezier'
    if segment.kind is SegmentKind.LINE:
        return segment.orientation.value
    raise TypeError(f"Unhandled segment kind: {segment.kind!r}")


def _path_features(paths: Iterable[PdfPath]):
    counts = Counter(
        classify_segment(segment) for path in paths for segment in path.segments
    )
    total = sum(counts.values())

    return (
        float(total),
        _ratio(counts['bezier'], total),
        _ratio(counts[Orientation.HORIZONTAL.value], total),
        _ratio(counts[Orientation.VERTICAL.value], total),
        _ratio(counts[Orientation.OBLIQUE.value], total),
    )


def _image_features(bbox: BoundingBox, images: Sequence[PageImage]):
    if not images:
        return 0.0, 0.0

    avg_area = float(np.mean([i.bbox.area for i in images]))
    return float(len(images)), _ratio(avg_area, bbox.area)


def extract_features(
    page_avg_glyph_height: float,
    bbox: BoundingBox,
    glyphs: Sequence[Glyph],
    paths: Sequence[PdfPath],
    images: Sequence[PageImage],
) -> FeatureVector:
    """
    Compute the feature vector of one region.

    Args:
        page_avg_glyph_height: Mean glyph height over the whole page.
        bbox:   The region.
        glyphs: Glyphs inside the region.
        paths:  Vector paths inside the region.
        images: Images inside the region.

    Returns:
        FeatureVector with ratios rounded to 5 decimals. ``height_ratio``
        is -1 when there is no glyph or the page average is zero.
    """
    glyphs = list(glyphs or [])
    images = list(images or [])

    return FeatureVector(
        *_glyph_features(page_avg_glyph_height, glyphs),
        *_path_features(paths or []),
        *_image_features(bbox, images),
    )


def features_for_region(page: Page, bbox: BoundingBox) -> FeatureVector:
    """Filter the page content to *bbox* and extract its features"""
    return extract_features(
        page.avg_glyph_height,
        bbox,
        RegionFilter.glyphs_inside(bbox, page.glyphs),
        RegionFilter.paths_inside(bbox, page.paths),
        RegionFilter.images_inside(bbox, page.images),
    )

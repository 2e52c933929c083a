# region_filter.py
from typing import Iterable, List

from ..models import BoundingBox, Glyph, PageImage, PdfPath


class RegionFilter:
    """Selects page content lying fully inside a region"""

    @staticmethod
    def glyphs_inside(bbox: BoundingBox, glyphs: Iterable[Glyph]) -> List[Glyph]:
        return [g for g in glyphs if bbox.contains(g.bbox)]

    @staticmethod
    def images_inside(bbox: BoundingBox, images: Iterable[PageImage]) -> List[PageImage]:
        return [i for i in images if bbox.contains(i.bbox)]

    @staticmethod
    def paths_inside(bbox: BoundingBox, paths: Iterable[PdfPath]) -> List[PdfPath]:
        """Paths without a bounding box (no segments) are dropped"""
        inside = []
        for path in paths:
            path_bbox = path.bounding_box()
            if path_bbox is not None and bbox.contains(path_bbox):
                inside.append(path)
        return inside


glyphs_inside = RegionFilter.glyphs_inside
images_inside = RegionFilter.images_inside
paths_inside = RegionFilter.paths_inside

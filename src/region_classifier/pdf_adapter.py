"""
PyMuPDF adapter: builds the page content model used by feature extraction.

Boxes are taken as PyMuPDF reports them, (x0, y0, x1, y1) mapped onto
(left, bottom, right, top). Only the ordering matters for containment, so
the y-down page space is used as is.
"""

import logging
from typing import Iterator, List, Tuple

import fitz

from .exceptions import PdfReadError
from .models import (
    BoundingBox,
    CurveSegment,
    Glyph,
    LineSegment,
    Page,
    PageImage,
    PdfPath,
    Point,
    TextBlock,
)

logger = logging.getLogger(__name__)


def open_pdf(pdf_path: str) -> fitz.Document:
    """
    Open a PDF document.

    Raises:
        PdfReadError: If fitz cannot open the file.
    """
    try:
        doc = fitz.open(pdf_path)
    except Exception as e:
        raise PdfReadError(f"Failed to open PDF '{pdf_path}': {e}") from e
    return doc


def _bbox(coords) -> BoundingBox:
    x0, y0, x1, y1 = (float(c) for c in tuple(coords)[:4])
    return BoundingBox(min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1))


def _point(p) -> Point:
    return Point(float(p.x), float(p.y))


def _polygon(corners: List[Point]) -> List[LineSegment]:
    return [
        LineSegment(corners[i], corners[(i + 1) % len(corners)])
        for i in range(len(corners))
    ]


def _segments(item: Tuple) -> List:
    """Translate one get_drawings() item into segments"""
    op = item[0]
    if op == "l":
        return [LineSegment(_point(item[1]), _point(item[2]))]
    if op == "c":
        return [CurveSegment(*(_point(p) for p in item[1:5]))]
    if op == "re":
        r = item[1]
        return _polygon([
            Point(r.x0, r.y0), Point(r.x1, r.y0),
            Point(r.x1, r.y1), Point(r.x0, r.y1),
        ])
    if op == "qu":
        q = item[1]
        return _polygon([_point(q.ul), _point(q.ur), _point(q.lr), _point(q.ll)])

    logger.debug(f"Ignoring drawing item '{op}'")
    return []


def extract_glyphs(fitz_page: fitz.Page) -> List[Glyph]:
    glyphs = []
    for block in fitz_page.get_text("rawdict")["blocks"]:
        if block.get("type", 0) != 0:  # Skip non-text
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                for char in span.get("chars", []):
                    glyphs.append(Glyph(_bbox(char["bbox"]), char["c"]))
    return glyphs


def extract_paths(fitz_page: fitz.Page) -> List[PdfPath]:
    paths = []
    for drawing in fitz_page.get_drawings():
        segments = []
        for item in drawing.get("items", []):
            segments.extend(_segments(item))
        paths.append(PdfPath(tuple(segments)))
    return paths


def extract_images(fitz_page: fitz.Page) -> List[PageImage]:
    return [PageImage(_bbox(info["bbox"])) for info in fitz_page.get_image_info()]


def page_from_fitz(fitz_page: fitz.Page, number: int = None) -> Page:
    """Build a Page (glyphs, paths, images) from a PyMuPDF page"""
    rect = fitz_page.rect
    return Page(
        number=fitz_page.number if number is None else number,
        width=rect.width,
        height=rect.height,
        glyphs=extract_glyphs(fitz_page),
        paths=extract_paths(fitz_page),
        images=extract_images(fitz_page),
    )


def text_blocks(fitz_page: fitz.Page) -> List[TextBlock]:
    """Region candidates: PyMuPDF's text blocks with their box"""
    blocks = []
    for x0, y0, x1, y1, text, _block_no, block_type in fitz_page.get_text("blocks"):
        if block_type != 0:
            continue
        blocks.append(TextBlock(_bbox((x0, y0, x1, y1)), text.strip()))
    return blocks


def iter_pages(pdf_path: str) -> Iterator[Tuple[fitz.Page, Page]]:
    """Yield (fitz page, Page) for every page; the document is always closed"""
    doc = open_pdf(pdf_path)
    try:
        for idx in range(doc.page_count):
            fitz_page = doc.load_page(idx)
            yield fitz_page, page_from_fitz(fitz_page, idx)
    finally:
        doc.close()

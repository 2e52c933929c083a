import logging
from typing import Dict, List, Sequence

from ..feature_engine import features_for_region
from ..models import BoundingBox, Category, Page
from ..pdf_adapter import iter_pages, text_blocks
from ..utils import measure_time
from .model_store import load_model

logger = logging.getLogger(__name__)


def classify_regions(model, page: Page, regions: Sequence[BoundingBox]) -> List[Category]:
    """One category per region, features computed exactly as for training"""
    return [model.decide(features_for_region(page, bbox)) for bbox in regions]


class RegionClassifier:
    """Handles classification of page regions with a persisted SVM model"""

    def __init__(self, model):
        self.model = model

    @classmethod
    def from_file(cls, model_path) -> "RegionClassifier":
        return cls(load_model(model_path))

    def classify(self, page: Page, regions: Sequence[BoundingBox]) -> List[Category]:
        return classify_regions(self.model, page, regions)

    @measure_time
    def classify_pdf(self, pdf_path: str) -> Dict[int, List[Dict]]:
        """Classify the text blocks of every page of a PDF"""
        result = {}
        for fitz_page, page in iter_pages(pdf_path):
            blocks = text_blocks(fitz_page)
            if not blocks:
                result[page.number] = []
                continue

            categories = self.classify(page, [b.bbox for b in blocks])
            result[page.number] = [
                {
                    'bbox': block.bbox.as_tuple(),
                    'text': block.text,
                    'category': category.label,
                }
                for block, category in zip(blocks, categories)
            ]
            logger.debug(f"Page {page.number}: classified {len(blocks)} blocks")

        return result

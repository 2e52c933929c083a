# dataset_builder.py
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import Config
from ..exceptions import DataError
from ..feature_engine import features_for_region
from ..models import BoundingBox, Category, LabeledExample, Page
from ..pdf_adapter import open_pdf, page_from_fitz
from .dataset_io import write_examples
from .sampling import sample_indices

logger = logging.getLogger(__name__)

LabeledRegion = Tuple[BoundingBox, Category]


def examples_for_page(page: Page, regions: Sequence[LabeledRegion]) -> List[LabeledExample]:
    """Feature rows for the annotated regions of one page"""
    return [
        LabeledExample(features_for_region(page, bbox), category)
        for bbox, category in regions
    ]


def read_annotations(annotation_path) -> Dict[int, List[LabeledRegion]]:
    """
    Read region annotations of one document.

    Format::

        {"pages": {"0": [{"bbox": [left, bottom, right, top], "category": "title"}]}}
    """
    with open(annotation_path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    try:
        pages = data['pages']
        if not isinstance(pages, dict):
            raise DataError(
                f"Malformed annotations in {annotation_path}: 'pages' must map page numbers to regions"
            )
        annotations = {}
        for page_key, regions in pages.items():
            annotations[int(page_key)] = [
                (BoundingBox(*(float(v) for v in region['bbox'])),
                 Category.from_name(region['category']))
                for region in regions
            ]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise DataError(f"Malformed annotations in {annotation_path}: {e}") from e

    return annotations


class DatasetBuilder:
    """Builds the training CSV from PDFs and their region annotations"""

    def __init__(self, config=Config):
        self.config = config

    def select_documents(self, pdf_paths: Sequence[Path], count: Optional[int]) -> List[Path]:
        if count is None or count >= len(pdf_paths):
            count = len(pdf_paths)
        if count == 0:
            return []
        indexes = sample_indices(self.config.SAMPLING_SEED, count, 0, len(pdf_paths))
        return [pdf_paths[i] for i in indexes]

    def build(self, folder, document_count: Optional[int] = None, output=None) -> Path:
        """
        Generate the features CSV for the PDFs of *folder*.

        Each ``name.pdf`` needs a ``name.json`` annotation file next to it.
        Documents without annotations are skipped; a document that cannot
        be read or whose annotations are malformed is skipped as a whole.
        """
        folder = Path(folder)
        output = Path(output) if output else folder / self.config.FEATURES_FILENAME

        pdf_paths = sorted(folder.glob('*.pdf'))
        selected = self.select_documents(pdf_paths, document_count)
        logger.info(f"Selected {len(selected)} of {len(pdf_paths)} documents in {folder}")

        examples = []
        for done, pdf_path in enumerate(selected, start=1):
            annotation_path = pdf_path.with_suffix('.json')
            if not annotation_path.exists():
                logger.warning(f"No annotation file found for document '{pdf_path.name}'")
                continue

            try:
                examples.extend(self.examples_for_document(pdf_path, annotation_path))
            except (DataError, OSError, json.JSONDecodeError) as e:
                logger.error(f"Error for document '{pdf_path.name}': {e}")
                continue
            logger.debug(f"{done}/{len(selected)} documents processed")

        if not examples:
            raise DataError(f"No labelled regions could be extracted from {folder}")

        return write_examples(output, examples)

    def examples_for_document(self, pdf_path, annotation_path) -> List[LabeledExample]:
        pdf_path = Path(pdf_path)
        annotations = read_annotations(annotation_path)
        examples = []
        region_id = 0

        doc = open_pdf(str(pdf_path))
        try:
            for page_index, regions in sorted(annotations.items()):
                if not 0 <= page_index < doc.page_count:
                    raise DataError(
                        f"Page {page_index} out of range (document has {doc.page_count} pages)"
                    )
                page = page_from_fitz(doc.load_page(page_index), page_index)
                for example in examples_for_page(page, regions):
                    logger.debug(
                        f"{pdf_path.name} region {region_id}: {example.category.label}"
                    )
                    region_id += 1
                    examples.append(example)
        finally:
            doc.close()

        return examples

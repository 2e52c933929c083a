"""
Model evaluation: accuracy, confusion matrix and per-category metrics.

The confusion matrix is indexed ``matrix[predicted][gold]``: row sums are
the number of rows predicted as a category (precision denominator), column
sums the number of rows labelled with it (recall denominator).
"""
import logging
import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np
from sklearn.metrics import confusion_matrix

from ..exceptions import DataError, ModelError
from ..models import CATEGORY_CODES, Category
from ..utils import measure_time
from .dataset_io import validate_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassMetrics:
    """Precision, recall and F1 of one category; nan when undefined"""

    category: Category
    precision: float
    recall: float
    f1: float

    @property
    def defined(self) -> bool:
        return not any(math.isnan(v) for v in (self.precision, self.recall, self.f1))


@dataclass(frozen=True)
class EvaluationReport:
    accuracy: float
    confusion_matrix: np.ndarray
    per_class: Tuple[ClassMetrics, ...]

    @property
    def total(self) -> int:
        return int(self.confusion_matrix.sum())

    def metrics_for(self, category: Category) -> ClassMetrics:
        return self.per_class[category.value]


def _safe_divide(numerator: float, denominator: float) -> float:
    if denominator == 0 or math.isnan(denominator):
        return math.nan
    return numerator / denominator


def build_confusion_matrix(predicted: Sequence[int], gold: Sequence[int]) -> np.ndarray:
    """5x5 read-only count matrix, matrix[predicted][gold]"""
    # sklearn indexes [gold][predicted]
    matrix = confusion_matrix(gold, predicted, labels=CATEGORY_CODES).T.copy()
    matrix.setflags(write=False)
    return matrix


def report_from_matrix(matrix) -> EvaluationReport:
    """Accuracy and per-category metrics from a [predicted][gold] matrix"""
    matrix = np.array(matrix, dtype=int)
    if matrix.shape != (len(CATEGORY_CODES), len(CATEGORY_CODES)):
        raise DataError(f"Confusion matrix must be 5x5, got {matrix.shape}")
    matrix.setflags(write=False)

    total = matrix.sum()
    if total == 0:
        raise DataError("Cannot evaluate an empty set of predictions")

    per_class = []
    for category in Category:
        i = category.value
        true_positive = float(matrix[i, i])
        precision = _safe_divide(true_positive, matrix[i, :].sum())
        recall = _safe_divide(true_positive, matrix[:, i].sum())
        f1 = _safe_divide(2 * precision * recall, precision + recall)
        per_class.append(ClassMetrics(category, precision, recall, f1))

    return EvaluationReport(
        accuracy=float(np.trace(matrix)) / float(total),
        confusion_matrix=matrix,
        per_class=tuple(per_class),
    )


@measure_time
def evaluate(model, inputs, labels) -> EvaluationReport:
    """
    Run *model* over a labelled dataset.

    Args:
        model:  Fitted classifier exposing ``predict``.
        inputs: Feature rows.
        labels: Gold category codes.

    Returns:
        EvaluationReport (accuracy, confusion matrix, per-class metrics).
    """
    if len(labels) == 0:
        raise DataError("Cannot evaluate an empty dataset")

    X, y = validate_rows(inputs, labels)
    predicted = np.asarray(model.predict(X), dtype=int)
    unknown = sorted(set(predicted.tolist()) - set(CATEGORY_CODES))
    if unknown:
        raise ModelError(f"Model predicted codes outside the category set: {unknown}")

    report = report_from_matrix(build_confusion_matrix(predicted, y))
    logger.info(f"Model accuracy = {report.accuracy * 100:.3f}% on {report.total} rows")
    for metrics in report.per_class:
        if not metrics.defined:
            logger.warning(
                f"Metrics for '{metrics.category.label}' are undefined "
                f"(zero denominator)"
            )
    return report

# dataset_io.py
import logging
import math
from pathlib import Path
from typing import Iterable, Tuple

import numpy as np
import pandas as pd

from ..exceptions import DataError, MalformedRowError, UnknownCategoryError
from ..models import (
    FEATURE_COUNT,
    FEATURE_NAMES,
    Category,
    FeatureVector,
    LabeledExample,
)

logger = logging.getLogger(__name__)

LABEL_COLUMN = 'category'
COLUMNS = FEATURE_NAMES + [LABEL_COLUMN]


def validate_rows(inputs, labels) -> Tuple[np.ndarray, np.ndarray]:
    """Coerce to (n, 13) float and (n,) int arrays, raising DataError subtypes"""
    try:
        X = np.asarray(inputs, dtype=float)
    except (TypeError, ValueError) as e:
        raise MalformedRowError(f"Feature rows are not uniform numeric vectors: {e}") from e

    if X.ndim != 2 or X.shape[1] != FEATURE_COUNT:
        raise MalformedRowError(
            f"Expected rows of {FEATURE_COUNT} features, got array of shape {X.shape}"
        )
    if not np.isfinite(X).all():
        bad_row = int(np.where(~np.isfinite(X).all(axis=1))[0][0])
        raise MalformedRowError(f"Row {bad_row} contains non-finite values")

    labels = list(labels)
    if len(labels) != X.shape[0]:
        raise MalformedRowError(f"{X.shape[0]} feature rows but {len(labels)} labels")

    y = np.empty(len(labels), dtype=int)
    for i, label in enumerate(labels):
        try:
            y[i] = Category.from_code(label).value
        except UnknownCategoryError as e:
            raise UnknownCategoryError(f"Row {i}: {e}") from e

    return X, y


def read_dataset(csv_path, limit: int = 0) -> Tuple[np.ndarray, np.ndarray]:
    """
    Read a features CSV (13 features + label per line, no header).

    Args:
        csv_path: Path to the CSV file.
        limit:    Keep only the first *limit* rows when > 0.

    Returns:
        (inputs, labels) as numpy arrays.
    """
    csv_path = Path(csv_path)
    try:
        df = pd.read_csv(csv_path, header=None)
    except FileNotFoundError as e:
        raise DataError(f"Dataset not found: {csv_path}") from e
    except pd.errors.EmptyDataError as e:
        raise DataError(f"Dataset is empty: {csv_path}") from e
    except pd.errors.ParserError as e:
        raise MalformedRowError(f"Cannot parse {csv_path}: {e}") from e

    if df.shape[1] != len(COLUMNS):
        raise MalformedRowError(
            f"{csv_path}: expected {len(COLUMNS)} columns, found {df.shape[1]}"
        )

    df = df.apply(pd.to_numeric, errors='coerce')
    incomplete = df.isnull().any(axis=1)
    if incomplete.any():
        bad_row = int(np.flatnonzero(incomplete.to_numpy())[0])
        raise MalformedRowError(f"{csv_path}: row {bad_row} is missing or non-numeric")

    if limit and limit > 0 and len(df) > limit:
        df = df.head(limit)

    X, y = validate_rows(df.iloc[:, :-1].to_numpy(), df.iloc[:, -1].to_numpy())
    logger.info(f"Read {len(y)} rows from {csv_path}")
    return X, y


def write_dataset(csv_path, inputs, labels) -> Path:
    """Write feature rows and labels as a header-less CSV"""
    X, y = validate_rows(inputs, labels)
    csv_path = Path(csv_path)

    df = pd.DataFrame(X, columns=FEATURE_NAMES)
    df[LABEL_COLUMN] = y
    with open(csv_path, 'w', encoding='utf-8', newline='') as f:
        df.to_csv(f, header=False, index=False)

    logger.info(f"Wrote {len(y)} rows to {csv_path}")
    return csv_path


def write_examples(csv_path, examples: Iterable[LabeledExample]) -> Path:
    examples = list(examples)
    return write_dataset(
        csv_path,
        np.array([e.features for e in examples], dtype=float).reshape(-1, FEATURE_COUNT),
        [e.category for e in examples],
    )


def read_examples(csv_path, limit: int = 0):
    X, y = read_dataset(csv_path, limit)
    return [
        LabeledExample(FeatureVector(*row), Category(code))
        for row, code in zip(X.tolist(), y.tolist())
    ]


def _fmt(value: float) -> str:
    return 'undefined' if math.isnan(value) else f"{value:.3f}"


def format_report(report) -> str:
    """Render an EvaluationReport as text"""
    names = [c.label for c in Category]
    matrix = pd.DataFrame(
        report.confusion_matrix,
        index=pd.Index(names, name='predicted'),
        columns=pd.Index(names, name='gold'),
    )
    metrics = pd.DataFrame(
        [
            {
                'category': m.category.label,
                'precision': _fmt(m.precision),
                'recall': _fmt(m.recall),
                'f1': _fmt(m.f1),
            }
            for m in report.per_class
        ]
    )

    return "\n".join([
        f"Model accuracy = {report.accuracy * 100:.3f}% ({report.total} rows)",
        "",
        "Confusion matrix (rows = predicted, columns = gold):",
        matrix.to_string(),
        "",
        metrics.to_string(index=False),
        "",
    ])


def write_report(report_path, report) -> Path:
    report_path = Path(report_path)
    with open(report_path, 'w', encoding='utf-8') as f:
        f.write(format_report(report))
    logger.info(f"Wrote evaluation report to {report_path}")
    return report_path

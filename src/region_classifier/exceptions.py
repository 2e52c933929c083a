"""Exception taxonomy for the region classifier.

Feature extraction never raises: degenerate geometry resolves to sentinel
values. Everything above the feature layer fails with one of these.
"""


class RegionClassifierError(Exception):
    """Base class for region classifier errors."""

    pass


class DataError(RegionClassifierError):
    """Malformed or missing dataset content.

    Aborts the current file or row, never coerced.
    """

    pass


class MalformedRowError(DataError):
    """A row is not exactly 13 numeric features plus a label."""

    pass


class UnknownCategoryError(DataError):
    """A label is not one of the five category codes."""

    pass


class PdfReadError(DataError):
    """A PDF document could not be opened or read."""

    pass


class ModelError(RegionClassifierError):
    """Missing or corrupt model file, or a label space mismatch."""

    pass


class TrainingError(RegionClassifierError):
    """Training cannot produce a model (degenerate folds, failed trials)."""

    pass


class InsufficientDataError(TrainingError):
    """Fewer than two distinct labels to learn from."""

    pass

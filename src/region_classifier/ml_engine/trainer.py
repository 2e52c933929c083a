"""
SVM training with grid-search cross-validation over the Gaussian kernel width.
"""
import logging
import warnings
from dataclasses import asdict, dataclass
from typing import Dict, Optional, Sequence

import numpy as np
from sklearn.exceptions import FitFailedWarning
from sklearn.model_selection import GridSearchCV, KFold

from ..config import Config
from ..exceptions import InsufficientDataError, TrainingError
from ..utils import measure_time
from .dataset_io import validate_rows
from .gaussian_svm import GaussianSVM
from .model_store import save_model

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CrossValidationMetrics:
    best_error: float
    training_error_mean: float
    training_error_variance: float
    validation_error_mean: float
    validation_error_variance: float
    sigma_errors: Dict[float, float]


@dataclass(frozen=True)
class TrainingResult:
    model: GaussianSVM
    sigma: float
    metrics: Optional[CrossValidationMetrics] = None


def default_sigma_grid(config=Config) -> np.ndarray:
    return np.arange(config.SIGMA_MIN, config.SIGMA_MAX, config.SIGMA_STEP)


class ModelTrainer:
    """Handles hyperparameter search, final fit and persistence of the SVM"""

    def __init__(self, config=Config, sigma_grid: Optional[Sequence[float]] = None,
                 n_jobs: Optional[int] = None):
        self.config = config
        self.sigma_grid = (
            [float(s) for s in sigma_grid] if sigma_grid is not None
            else default_sigma_grid(config).tolist()
        )
        self.n_jobs = config.N_JOBS if n_jobs is None else n_jobs

        if not self.sigma_grid or any(s <= 0 for s in self.sigma_grid):
            raise ValueError(f"Sigma grid must hold positive values: {self.sigma_grid}")

    @measure_time
    def grid_search_train(self, inputs, labels, model_path=None) -> TrainingResult:
        """
        Select sigma by k-fold cross-validation, then fit the final model.

        Args:
            inputs:     Feature rows (13 values each).
            labels:     Category codes, one per row.
            model_path: Where to persist the final model (skipped if None).

        Returns:
            TrainingResult with the fitted model, the selected sigma and the
            cross-validation metrics.
        """
        X, y = validate_rows(inputs, labels)
        X_cv, y_cv = self._cap(X, y, self.config.MAX_CROSS_VALIDATE_ROWS)
        X_fit, y_fit = self._cap(X, y, self.config.MAX_TRAINING_ROWS)

        logger.info(
            f"Grid search over {len(self.sigma_grid)} sigma values, "
            f"{self.config.CV_FOLDS} folds, {len(y_cv)} rows"
        )
        metrics, best_sigma = self._cross_validate(X_cv, y_cv)
        logger.info(
            f"Grid search done: sigma={best_sigma}, "
            f"validation error={metrics.validation_error_mean:.4f} "
            f"(var {metrics.validation_error_variance:.6f}), "
            f"training error={metrics.training_error_mean:.4f}"
        )

        model = self._fit(X_fit, y_fit, best_sigma)
        if model_path is not None:
            save_model(model, model_path, metrics=asdict(metrics))

        return TrainingResult(model=model, sigma=best_sigma, metrics=metrics)

    @measure_time
    def fixed_sigma_train(self, inputs, labels, sigma: float, model_path=None) -> TrainingResult:
        """Fit directly with a caller-supplied sigma (no grid search)"""
        if sigma <= 0:
            raise ValueError(f"sigma must be positive, got {sigma}")

        X, y = validate_rows(inputs, labels)
        X_fit, y_fit = self._cap(X, y, self.config.MAX_TRAINING_ROWS)

        model = self._fit(X_fit, y_fit, float(sigma))
        if model_path is not None:
            save_model(model, model_path)

        return TrainingResult(model=model, sigma=float(sigma))

    def _cap(self, X: np.ndarray, y: np.ndarray, max_rows: int):
        """First *max_rows* rows; needs at least two distinct labels"""
        X, y = X[:max_rows], y[:max_rows]
        distinct = np.unique(y)
        if len(distinct) < 2:
            raise InsufficientDataError(
                f"Need at least 2 distinct categories to train, found {distinct.tolist()}"
            )
        return X, y

    def _cross_validate(self, X: np.ndarray, y: np.ndarray):
        folds = self.config.CV_FOLDS
        if len(y) < folds:
            raise TrainingError(f"{len(y)} rows cannot be split into {folds} folds")

        search = GridSearchCV(
            estimator=GaussianSVM(C=self.config.SVM_C),
            param_grid={'sigma': self.sigma_grid},
            scoring='accuracy',
            cv=KFold(n_splits=folds, shuffle=True, random_state=self.config.RANDOM_SEED),
            n_jobs=self.n_jobs,
            refit=False,
            return_train_score=True,
            error_score=np.nan,
        )

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always', FitFailedWarning)
            try:
                search.fit(X, y)
            except ValueError as e:
                # Raised by sklearn when every single fit failed
                raise TrainingError(f"Grid search failed: {e}") from e
        for warning in caught:
            if issubclass(warning.category, FitFailedWarning):
                logger.warning(f"Some grid search trials failed: {warning.message}")
            else:
                logger.warning(f"{warning.category.__name__}: {warning.message}")

        return self._summarize(search.cv_results_, folds)

    def _summarize(self, cv_results: Dict, folds: int):
        validation_errors = 1.0 - np.array(
            [cv_results[f'split{k}_test_score'] for k in range(folds)], dtype=float
        ).T
        training_errors = 1.0 - np.array(
            [cv_results[f'split{k}_train_score'] for k in range(folds)], dtype=float
        ).T
        sigmas = [float(s) for s in cv_results['param_sigma']]

        # A failed fold poisons its own sigma only
        mean_errors = validation_errors.mean(axis=1)
        if np.all(np.isnan(mean_errors)):
            raise TrainingError("Every sigma trial failed during cross-validation")

        best = int(np.nanargmin(mean_errors))
        metrics = CrossValidationMetrics(
            best_error=float(mean_errors[best]),
            training_error_mean=float(training_errors[best].mean()),
            training_error_variance=float(training_errors[best].var(ddof=1)),
            validation_error_mean=float(validation_errors[best].mean()),
            validation_error_variance=float(validation_errors[best].var(ddof=1)),
            sigma_errors=dict(zip(sigmas, (float(e) for e in mean_errors))),
        )
        return metrics, sigmas[best]

    def _fit(self, X: np.ndarray, y: np.ndarray, sigma: float) -> GaussianSVM:
        logger.info(f"Training final model with sigma={sigma} on {len(y)} rows")
        model = GaussianSVM(sigma=sigma, C=self.config.SVM_C)
        try:
            model.fit(X, y)
        except ValueError as e:
            raise TrainingError(f"Final fit failed with sigma={sigma}: {e}") from e
        logger.info(f"Model has {model.n_support_vectors} support vectors")
        return model

"""
One-vs-one multiclass SVM with a Gaussian kernel parameterised by its width.

The Gaussian kernel k(x, y) = exp(-||x - y||^2 / (2 sigma^2)) is sklearn's
RBF kernel with gamma = 1 / (2 sigma^2). Keeping sigma as the estimator
parameter lets GridSearchCV search it directly.
"""

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.svm import SVC
from sklearn.utils.validation import check_is_fitted

from ..exceptions import ModelError, UnknownCategoryError
from ..models import Category


def sigma_to_gamma(sigma: float) -> float:
    return 1.0 / (2.0 * sigma ** 2)


class GaussianSVM(ClassifierMixin, BaseEstimator):
    """Multiclass kernel SVM (SVC is one-vs-one internally)"""

    def __init__(self, sigma=1.0, C=1.0, cache_size=200):
        self.sigma = sigma
        self.C = C
        self.cache_size = cache_size

    def fit(self, X, y):
        if not self.sigma > 0 or self.sigma ** 2 == 0.0:
            raise ValueError(f"sigma is too small for a Gaussian kernel: {self.sigma}")
        self.svc_ = SVC(
            kernel='rbf',
            gamma=sigma_to_gamma(self.sigma),
            C=self.C,
            cache_size=self.cache_size,
            decision_function_shape='ovr',
        )
        self.svc_.fit(X, y)
        self.classes_ = self.svc_.classes_
        self.n_features_in_ = self.svc_.n_features_in_
        return self

    def predict(self, X):
        check_is_fitted(self, 'svc_')
        return self.svc_.predict(X)

    def decision_function(self, X):
        """Per-class scores aggregated from the pairwise classifiers"""
        check_is_fitted(self, 'svc_')
        return self.svc_.decision_function(X)

    def decide(self, features) -> Category:
        """Category of a single feature vector"""
        row = np.asarray(features, dtype=float).reshape(1, -1)
        code = self.predict(row)[0]
        try:
            return Category.from_code(code)
        except UnknownCategoryError as e:
            raise ModelError(f"Model predicted an unknown category code: {code!r}") from e

    def decision_score(self, features) -> float:
        """Score of the winning category for a single feature vector"""
        row = np.asarray(features, dtype=float).reshape(1, -1)
        scores = self.decision_function(row)
        if scores.ndim == 1:
            # Two classes: signed distance to the single separating surface
            return float(abs(scores[0]))
        return float(scores[0].max())

    @property
    def n_support_vectors(self) -> int:
        check_is_fitted(self, 'svc_')
        return int(self.svc_.support_vectors_.shape[0])

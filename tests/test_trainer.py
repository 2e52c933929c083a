# tests/test_trainer.py
import math
import tempfile
import unittest
from pathlib import Path

import joblib
import numpy as np

from region_classifier.exceptions import (
    InsufficientDataError,
    MalformedRowError,
    ModelError,
    TrainingError,
    UnknownCategoryError,
)
from region_classifier.ml_engine.gaussian_svm import GaussianSVM, sigma_to_gamma
from region_classifier.ml_engine.model_store import load_model, load_payload
from region_classifier.ml_engine.trainer import ModelTrainer, default_sigma_grid
from region_classifier.models import FEATURE_NAMES, Category

from helpers import FastConfig, center, clustered_dataset

GRID = [0.5, 1.0, 2.0]


class TestGridSearchTrain(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.model_path = Path(self._tmp.name) / "model.gz"
        self.trainer = ModelTrainer(FastConfig, sigma_grid=GRID, n_jobs=1)

    def tearDown(self):
        self._tmp.cleanup()

    def test_selects_sigma_and_persists(self):
        inputs, labels = clustered_dataset()
        result = self.trainer.grid_search_train(inputs, labels, self.model_path)

        self.assertIn(result.sigma, GRID)
        self.assertEqual(result.model.sigma, result.sigma)
        self.assertEqual(sorted(result.metrics.sigma_errors), GRID)
        self.assertLessEqual(result.metrics.validation_error_mean, 0.1)
        self.assertEqual(result.metrics.best_error, result.metrics.validation_error_mean)
        self.assertGreaterEqual(result.metrics.validation_error_variance, 0.0)
        self.assertGreaterEqual(result.metrics.training_error_variance, 0.0)

        self.assertTrue(self.model_path.exists())
        payload = load_payload(self.model_path)
        self.assertEqual(payload['sigma'], result.sigma)
        self.assertEqual(payload['categories'], [0, 1, 2])

    def test_loaded_model_decides_like_trained_model(self):
        inputs, labels = clustered_dataset()
        result = self.trainer.grid_search_train(inputs, labels, self.model_path)
        loaded = load_model(self.model_path)

        for code in (0, 1, 2):
            self.assertEqual(result.model.decide(center(code)), Category(code))
            self.assertEqual(loaded.decide(center(code)), Category(code))
            self.assertIsInstance(loaded.decision_score(center(code)), float)

    def test_failed_sigma_trial_is_skipped(self):
        # 1e-200 squared underflows to zero, so every fit with it fails
        trainer = ModelTrainer(FastConfig, sigma_grid=[1e-200, 0.5, 1.0], n_jobs=1)
        inputs, labels = clustered_dataset()

        with self.assertLogs("region_classifier.ml_engine.trainer", level="WARNING"):
            result = trainer.grid_search_train(inputs, labels)

        self.assertIn(result.sigma, [0.5, 1.0])
        self.assertTrue(math.isnan(result.metrics.sigma_errors[1e-200]))
        self.assertFalse(math.isnan(result.metrics.best_error))
        self.assertEqual(result.model.decide(center(1)), Category.TEXT)

    def test_single_label_fails_without_model_file(self):
        inputs, _ = clustered_dataset()
        labels = np.ones(len(inputs), dtype=int)

        with self.assertRaises(InsufficientDataError):
            self.trainer.grid_search_train(inputs, labels, self.model_path)
        self.assertFalse(self.model_path.exists())

    def test_wrong_feature_length(self):
        inputs, labels = clustered_dataset()
        with self.assertRaises(MalformedRowError):
            self.trainer.grid_search_train(inputs[:, :12], labels)

    def test_ragged_rows(self):
        rows = [[0.0] * 13, [1.0] * 12]
        with self.assertRaises(MalformedRowError):
            self.trainer.grid_search_train(rows, [0, 1])

    def test_unknown_label(self):
        inputs, labels = clustered_dataset()
        labels = labels.copy()
        labels[3] = 9
        with self.assertRaises(UnknownCategoryError):
            self.trainer.grid_search_train(inputs, labels)

    def test_too_few_rows_for_folds(self):
        inputs, labels = clustered_dataset(per_class=2, classes=(0, 1))
        with self.assertRaises(TrainingError):
            self.trainer.grid_search_train(inputs, labels, self.model_path)
        self.assertFalse(self.model_path.exists())

    def test_default_grid(self):
        grid = default_sigma_grid(FastConfig)
        self.assertAlmostEqual(grid[0], 1e-8)
        self.assertLess(grid[-1], FastConfig.SIGMA_MAX)
        self.assertEqual(ModelTrainer(FastConfig).sigma_grid, grid.tolist())


class TestFixedSigmaTrain(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.model_path = Path(self._tmp.name) / "model.gz"

    def tearDown(self):
        self._tmp.cleanup()

    def test_fits_with_given_sigma(self):
        inputs, labels = clustered_dataset()
        result = ModelTrainer(FastConfig).fixed_sigma_train(inputs, labels, 1.5, self.model_path)

        self.assertEqual(result.sigma, 1.5)
        self.assertIsNone(result.metrics)
        self.assertEqual(load_model(self.model_path).decide(center(2)), Category.LIST)

    def test_training_rows_are_capped(self):
        class CappedConfig(FastConfig):
            MAX_TRAINING_ROWS = 30

        inputs, labels = clustered_dataset()
        result = ModelTrainer(CappedConfig).fixed_sigma_train(inputs, labels, 1.0)
        self.assertLessEqual(result.model.n_support_vectors, 30)

    def test_cap_leaving_one_label_fails(self):
        class CappedConfig(FastConfig):
            MAX_TRAINING_ROWS = 10

        inputs, labels = clustered_dataset()
        order = np.argsort(labels, kind="stable")
        with self.assertRaises(InsufficientDataError):
            ModelTrainer(CappedConfig).fixed_sigma_train(inputs[order], labels[order], 1.0)

    def test_sigma_must_be_positive(self):
        inputs, labels = clustered_dataset()
        with self.assertRaises(ValueError):
            ModelTrainer(FastConfig).fixed_sigma_train(inputs, labels, 0.0)


class TestGaussianSVM(unittest.TestCase):

    def test_gamma_conversion(self):
        self.assertEqual(sigma_to_gamma(1.0), 0.5)
        self.assertEqual(sigma_to_gamma(0.5), 2.0)

    def test_two_class_score(self):
        inputs, labels = clustered_dataset(classes=(0, 4))
        model = GaussianSVM(sigma=1.0).fit(inputs, labels)

        self.assertEqual(model.decide(center(4)), Category.IMAGE)
        self.assertGreater(model.decision_score(center(4)), 0.0)

    def test_decide_outside_category_set(self):
        inputs, labels = clustered_dataset(classes=(0, 1))
        model = GaussianSVM(sigma=1.0).fit(inputs, labels + 5)
        with self.assertRaises(ModelError):
            model.decide(center(0))


class TestModelStore(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_file(self):
        with self.assertRaises(ModelError):
            load_model(self.tmp / "model.gz")

    def test_corrupt_file(self):
        path = self.tmp / "model.gz"
        path.write_bytes(b"definitely not a model")
        with self.assertRaises(ModelError):
            load_model(path)

    def test_foreign_payload(self):
        path = self.tmp / "model.gz"
        joblib.dump({'something': 'else'}, path)
        with self.assertRaises(ModelError):
            load_model(path)

    def test_label_space_mismatch(self):
        inputs, labels = clustered_dataset(classes=(0, 1))
        model = GaussianSVM(sigma=1.0).fit(inputs, labels + 5)
        path = self.tmp / "model.gz"
        joblib.dump({'model': model, 'sigma': 1.0,
                     'feature_names': list(FEATURE_NAMES), 'categories': [5, 6]}, path)
        with self.assertRaises(ModelError):
            load_model(path)


if __name__ == "__main__":
    unittest.main()

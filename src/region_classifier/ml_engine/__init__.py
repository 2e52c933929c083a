"""
Model pipeline: dataset I/O, training, evaluation and inference.
"""

from .classifier import RegionClassifier, classify_regions
from .dataset_builder import DatasetBuilder
from .dataset_io import read_dataset, write_dataset, write_report
from .evaluator import EvaluationReport, evaluate
from .gaussian_svm import GaussianSVM
from .model_store import load_model, save_model
from .trainer import ModelTrainer, TrainingResult

__all__ = [
    'RegionClassifier',
    'classify_regions',
    'DatasetBuilder',
    'read_dataset',
    'write_dataset',
    'write_report',
    'EvaluationReport',
    'evaluate',
    'GaussianSVM',
    'load_model',
    'save_model',
    'ModelTrainer',
    'TrainingResult',
]

# model_store.py
import logging
from pathlib import Path
from typing import Dict, Optional

import joblib

from ..config import Config
from ..exceptions import ModelError
from ..models import CATEGORY_CODES, FEATURE_NAMES
from .gaussian_svm import GaussianSVM

logger = logging.getLogger(__name__)

PAYLOAD_KEYS = ('model', 'sigma', 'feature_names', 'categories')


def save_model(model: GaussianSVM, model_path, metrics: Optional[Dict] = None) -> Path:
    """Persist a fitted model as a gzip-compressed joblib payload"""
    model_path = Path(model_path)
    model_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {
        'model': model,
        'sigma': float(model.sigma),
        'feature_names': list(FEATURE_NAMES),
        'categories': [int(c) for c in model.classes_],
        'metrics': metrics,
    }
    joblib.dump(payload, model_path, compress=Config.MODEL_COMPRESSION)

    logger.info(f"Saved model (sigma={model.sigma}) to {model_path}")
    return model_path


def load_payload(model_path) -> Dict:
    model_path = Path(model_path)
    if not model_path.is_file():
        raise ModelError(f"Model file not found: {model_path}")

    try:
        payload = joblib.load(model_path)
    except Exception as e:
        raise ModelError(f"Cannot read model file {model_path}: {e}") from e

    if not isinstance(payload, dict) or any(k not in payload for k in PAYLOAD_KEYS):
        raise ModelError(f"{model_path} does not contain a region classifier model")
    if not isinstance(payload['model'], GaussianSVM):
        raise ModelError(f"{model_path}: unexpected model type {type(payload['model']).__name__}")
    if list(payload['feature_names']) != FEATURE_NAMES:
        raise ModelError(f"{model_path}: model was trained on a different feature layout")

    unknown = set(int(c) for c in payload['model'].classes_) - set(CATEGORY_CODES)
    if unknown:
        raise ModelError(f"{model_path}: model predicts unknown categories {sorted(unknown)}")

    return payload


def load_model(model_path) -> GaussianSVM:
    """Load a persisted model, raising ModelError if it is missing or unusable"""
    payload = load_payload(model_path)
    logger.info(f"Loaded model (sigma={payload['sigma']}) from {model_path}")
    return payload['model']

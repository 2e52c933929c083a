"""
Region feature extraction shared by dataset generation and inference.
"""

from .feature_extractor import BULLETS, extract_features, features_for_region
from .region_filter import RegionFilter, glyphs_inside, images_inside, paths_inside

__all__ = [
    'BULLETS',
    'extract_features',
    'features_for_region',
    'RegionFilter',
    'glyphs_inside',
    'images_inside',
    'paths_inside',
]

"""
Document page region classification (title, text, list, table, image)
with a Gaussian-kernel SVM over geometric and typographic features.
"""

from .models import BoundingBox, Category, FeatureVector, Page

__version__ = '0.1.0'

__all__ = ['BoundingBox', 'Category', 'FeatureVector', 'Page']

"""
Grocery ML - Image Classifier Training Simulator
================================================

Validates labeled image datasets, runs a synthetic training loop over them,
and persists downloadable model bundles in a TensorFlow.js-style layout.

Version: 0.3.0
"""

__version__ = "0.3.0"

__all__ = [
    "__version__",
]

"""License classifiers turning URLs into license determinations.

This module provides classifiers for license pages named by SPDX id and for
GitHub repositories, plus a waterfall that chains them.
"""

from package_licenses.classifiers.base import BaseClassifier, ClassificationError
from package_licenses.classifiers.github import GitHubClassifier
from package_licenses.classifiers.http import HttpClassifier
from package_licenses.classifiers.spdx import SPDXClassifier
from package_licenses.classifiers.waterfall import WaterfallClassifier

__all__ = [
    "BaseClassifier",
    "ClassificationError",
    "GitHubClassifier",
    "HttpClassifier",
    "SPDXClassifier",
    "WaterfallClassifier",
]

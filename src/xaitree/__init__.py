"""xaitree: Explainable decision trees for mixed numeric and categorical tabular data."""

from loguru import logger

from xaitree.logging import PACKAGE_NAME, enable_logging
from xaitree.tree import (
    DecisionNode,
    LeafNode,
    Prediction,
    Split,
    TreeBuildConfig,
    TreeNode,
    build,
    build_decision_tree_result,
    feature_importance,
    path_for,
    path_from,
    predict,
)

logger.disable(PACKAGE_NAME)  # noqa: RUF067 - Disable logging for the xaitree package by default

__all__ = [
    "DecisionNode",
    "LeafNode",
    "Prediction",
    "Split",
    "TreeBuildConfig",
    "TreeNode",
    "build",
    "build_decision_tree_result",
    "enable_logging",
    "feature_importance",
    "path_for",
    "path_from",
    "predict",
]

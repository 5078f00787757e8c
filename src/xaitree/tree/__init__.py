"""Decision tree sub-package: models, building, inference, importance, and summaries."""

from __future__ import annotations

from xaitree.tree.builder import SplitCandidate, build, find_best_split
from xaitree.tree.importance import feature_importance
from xaitree.tree.inference import iter_nodes, leaf_count, leaves, path_for, path_from, predict, traverse, tree_depth
from xaitree.tree.models import (
    ClassificationRule,
    DecisionNode,
    DecisionTreeResult,
    FeatureImportance,
    LeafNode,
    Predicate,
    Prediction,
    Record,
    Split,
    SplitKind,
    TreeBuildConfig,
    TreeNode,
)
from xaitree.tree.serialization import tree_from_dict, tree_from_json, tree_to_dict, tree_to_json
from xaitree.tree.summary import build_decision_tree_result, compute_metrics, extract_rules

__all__ = [
    "ClassificationRule",
    "DecisionNode",
    "DecisionTreeResult",
    "FeatureImportance",
    "LeafNode",
    "Predicate",
    "Prediction",
    "Record",
    "Split",
    "SplitCandidate",
    "SplitKind",
    "TreeBuildConfig",
    "TreeNode",
    "build",
    "build_decision_tree_result",
    "compute_metrics",
    "extract_rules",
    "feature_importance",
    "find_best_split",
    "iter_nodes",
    "leaf_count",
    "leaves",
    "path_for",
    "path_from",
    "predict",
    "traverse",
    "tree_depth",
    "tree_from_dict",
    "tree_from_json",
    "tree_to_dict",
    "tree_to_json",
]

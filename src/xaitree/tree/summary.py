"""Rule extraction, metrics computation, and result assembly for built trees."""

from __future__ import annotations

from collections.abc import Sequence

import polars as pl
from loguru import logger
from sklearn.metrics import accuracy_score

from xaitree.exceptions import MissingTargetColumnError
from xaitree.tree.builder import build
from xaitree.tree.importance import feature_importance
from xaitree.tree.inference import leaf_count, predict, tree_depth
from xaitree.tree.models import (
    DEFAULT_MAX_DEPTH,
    ClassificationRule,
    DecisionNode,
    DecisionTreeResult,
    Predicate,
    Record,
    TreeBuildConfig,
    TreeNode,
)

_CONFIDENCE_DECIMAL_PLACES: int = 4

# ---------------------------------------------------------------------------
# Public interface -- Rule extraction
# ---------------------------------------------------------------------------


def extract_rules(tree: TreeNode) -> list[ClassificationRule]:
    """Extract one human-readable rule per leaf, from left to right.

    Each rule lists the predicates along the path from the root to its leaf:
    `<=` / `>` for numeric splits and `==` / `!=` for categorical splits.

    Args:
        tree (TreeNode): Root of a built tree.

    Returns:
        list[ClassificationRule]: One rule per leaf node.
    """
    rules: list[ClassificationRule] = []
    _walk_tree(tree, path_predicates=[], rules=rules)
    return rules


# ---------------------------------------------------------------------------
# Public interface -- Metrics
# ---------------------------------------------------------------------------


def compute_metrics(tree: TreeNode, records: Sequence[Record], target_column: str) -> dict[str, float]:
    """Compute classification metrics of `tree` over labelled records.

    Args:
        tree (TreeNode): Root of a built tree.
        records (Sequence[Record]): Labelled records providing every feature
            the tree can query.
        target_column (str): Name of the class label column.

    Returns:
        dict[str, float]: `{"accuracy": <float>}`.

    Raises:
        ValueError: If `records` is empty.
        MissingTargetColumnError: If a record lacks `target_column`.
        IncompleteFeatureSetError: If a record lacks a feature the tree queries.
    """
    if not records:
        raise ValueError("Cannot compute metrics over an empty record set.")
    expected: list[str] = []
    predicted: list[str] = []
    for index, record in enumerate(records):
        if target_column not in record:
            raise MissingTargetColumnError(target=target_column, available_columns=list(record), record_index=index)
        expected.append(str(record[target_column]))
        predicted.append(predict(tree, record).label)
    return {"accuracy": float(accuracy_score(expected, predicted))}


# ---------------------------------------------------------------------------
# Public interface -- Pipeline orchestration
# ---------------------------------------------------------------------------


def build_decision_tree_result(
    records: Sequence[Record] | pl.DataFrame,
    target_column: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
    *,
    config: TreeBuildConfig | None = None,
) -> DecisionTreeResult | None:
    """Build a tree and assemble everything needed to explain it.

    Args:
        records (Sequence[Record] | pl.DataFrame): Input records.
        target_column (str): Name of the class label column.
        max_depth (int): Maximum number of split levels.
        config (TreeBuildConfig | None): Stopping rules and search resolution.

    Returns:
        DecisionTreeResult | None: The assembled result, or `None` when there
            is not enough data to build a tree.

    Raises:
        ValueError: If `max_depth` is negative.
        MissingTargetColumnError: If any record lacks `target_column`.
    """
    rows = records.to_dicts() if isinstance(records, pl.DataFrame) else list(records)
    tree = build(rows, target_column, max_depth, config=config)
    if tree is None:
        return None

    ranked_importance = feature_importance(tree)
    result = DecisionTreeResult(
        target=target_column,
        tree=tree,
        features_used=[item.feature for item in ranked_importance],
        rules=extract_rules(tree),
        feature_importance=ranked_importance,
        metrics=compute_metrics(tree, rows, target_column),
        sample_count=len(rows),
        depth=tree_depth(tree),
        leaf_count=leaf_count(tree),
    )
    logger.info(
        "Decision tree result assembled",
        target=target_column,
        depth=result.depth,
        leaf_count=result.leaf_count,
        accuracy=result.metrics["accuracy"],
    )
    return result


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _walk_tree(
    node: TreeNode,
    *,
    path_predicates: list[Predicate],
    rules: list[ClassificationRule],
) -> None:
    """Recursively walk a node and accumulate leaf rules.

    Args:
        node (TreeNode): The current node.
        path_predicates (list[Predicate]): Predicates from the root to `node`.
        rules (list[ClassificationRule]): Accumulator; leaf rules are appended in-place.
    """
    if isinstance(node, DecisionNode):
        left_predicate, right_predicate = node.split.predicates()
        _walk_tree(node.left, path_predicates=[*path_predicates, left_predicate], rules=rules)
        _walk_tree(node.right, path_predicates=[*path_predicates, right_predicate], rules=rules)
        return

    rules.append(
        ClassificationRule(
            predicates=path_predicates,
            prediction=node.label,
            samples=node.samples,
            confidence=round(node.confidence, _CONFIDENCE_DECIMAL_PLACES),
        )
    )

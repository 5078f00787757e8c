"""Global feature importance aggregated over a tree's decision nodes."""

from __future__ import annotations

import math
from typing import Final

from xaitree.tree.inference import iter_nodes
from xaitree.tree.models import DecisionNode, FeatureImportance, TreeNode

_SAMPLES_SCALE: Final[float] = 100.0
_DEPTH_DECAY: Final[float] = 0.9  # Multiplier applied once per level below the root.


def feature_importance(tree: TreeNode | None) -> list[FeatureImportance]:
    """Rank features by their aggregate contribution to the tree's splits.

    Each decision node at depth `d` (root at 0) contributes
    `(samples / 100) * 0.9 ** d * gain` to its split feature. Totals are
    normalized by the grand total and sorted in descending order; ties keep
    the order in which features were first encountered depth-first.

    Args:
        tree (TreeNode | None): Root of a built tree, or `None`.

    Returns:
        list[FeatureImportance]: Ranked weights summing to 1.0, or an empty
            list when the tree is `None` or a single leaf.

    Examples:
        >>> from xaitree.tree.models import LeafNode
        >>> feature_importance(LeafNode(label="a", confidence=1.0, samples=3, distribution={"a": 3}))
        []
    """
    if tree is None:
        return []

    totals: dict[str, float] = {}
    for node, depth in iter_nodes(tree):
        if isinstance(node, DecisionNode):
            contribution = (node.samples / _SAMPLES_SCALE) * _DEPTH_DECAY**depth * node.gain
            totals[node.split.feature] = totals.get(node.split.feature, 0.0) + contribution

    grand_total = math.fsum(totals.values())
    if grand_total <= 0.0:
        return []

    # sorted() is stable, so equal weights keep first-encountered order.
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [FeatureImportance(feature=feature, importance=total / grand_total) for feature, total in ranked]

"""Tree traversal: prediction, decision paths, and structural queries.

Every root-to-leaf or node-to-leaf walk goes through `traverse`, so the
predicted label and the displayed decision path can never disagree.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from loguru import logger

from xaitree.exceptions import IncompleteFeatureSetError
from xaitree.tree.models import DecisionNode, FeatureValue, LeafNode, Prediction, TreeNode


def traverse(node: TreeNode, inputs: Mapping[str, FeatureValue]) -> list[TreeNode]:
    """Walk from `node` to a leaf, recording every node visited.

    Args:
        node (TreeNode): Starting node; the tree root or any pinned internal node.
        inputs (Mapping[str, FeatureValue]): Feature values for one input.

    Returns:
        list[TreeNode]: Visited nodes, `node` first and the reached leaf last.

    Raises:
        IncompleteFeatureSetError: If a decision node on the way queries a
            feature that is absent from `inputs` or set to `None`.
        FeatureValueError: If a numeric split receives a non-numeric value.
    """
    path: list[TreeNode] = [node]
    current = node
    while isinstance(current, DecisionNode):
        feature = current.split.feature
        value = inputs.get(feature)
        if value is None:
            logger.warning("Input is missing a feature required by the tree", feature=feature, depth=len(path) - 1)
            raise IncompleteFeatureSetError(feature=feature, path=path)
        current = current.left if current.split.goes_left(value) else current.right
        path.append(current)
    return path


def predict(tree: TreeNode, inputs: Mapping[str, FeatureValue]) -> Prediction:
    """Classify one input.

    Args:
        tree (TreeNode): Root of a built tree.
        inputs (Mapping[str, FeatureValue]): Feature values for one input.

    Returns:
        Prediction: Label and confidence of the reached leaf.

    Raises:
        IncompleteFeatureSetError: If a required feature is absent from `inputs`.
    """
    leaf = traverse(tree, inputs)[-1]
    if not isinstance(leaf, LeafNode):  # pragma: no cover - traverse only stops at leaves
        raise TypeError(f"Traversal ended at a {leaf.node_type} node")
    return Prediction(label=leaf.label, confidence=leaf.confidence)


def path_for(tree: TreeNode, inputs: Mapping[str, FeatureValue]) -> list[TreeNode]:
    """Return the decision path for one input, root first and leaf last."""
    return traverse(tree, inputs)


def path_from(node: TreeNode, inputs: Mapping[str, FeatureValue]) -> list[TreeNode]:
    """Return the remaining path from a pinned node down to a leaf.

    The result equals the suffix of the full root-to-leaf path that starts at
    `node`, whenever the full path passes through `node`.
    """
    return traverse(node, inputs)


def iter_nodes(tree: TreeNode) -> Iterator[tuple[TreeNode, int]]:
    """Yield `(node, depth)` pairs depth-first in pre-order, left before right.

    Args:
        tree (TreeNode): Root of the tree; its depth is 0.

    Yields:
        tuple[TreeNode, int]: Each node with its depth below `tree`.
    """
    stack: list[tuple[TreeNode, int]] = [(tree, 0)]
    while stack:
        node, depth = stack.pop()
        yield node, depth
        if isinstance(node, DecisionNode):
            stack.append((node.right, depth + 1))
            stack.append((node.left, depth + 1))


def tree_depth(tree: TreeNode) -> int:
    """Return the number of split levels; a single leaf has depth 0."""
    return max(depth for _, depth in iter_nodes(tree))


def leaf_count(tree: TreeNode) -> int:
    """Return the number of leaves in the tree."""
    return len(leaves(tree))


def leaves(tree: TreeNode) -> list[LeafNode]:
    """Return the leaves of the tree from left to right."""
    return [node for node, _ in iter_nodes(tree) if isinstance(node, LeafNode)]

"""Greedy information-gain tree induction over mixed numeric and categorical records."""

from __future__ import annotations

import math
import numbers
from collections.abc import Mapping, Sequence
from typing import NamedTuple

import numpy as np
import polars as pl
from loguru import logger

from xaitree.exceptions import MissingTargetColumnError
from xaitree.logging import BUILD_LEVEL
from xaitree.tree.models import (
    DEFAULT_MAX_DEPTH,
    DecisionNode,
    FeatureValue,
    LeafNode,
    Record,
    Split,
    TreeBuildConfig,
    TreeNode,
)

# ---------------------------------------------------------------------------
# Public interface -- Tree building
# ---------------------------------------------------------------------------


class SplitCandidate(NamedTuple):
    """The best split found at a node, with the gain that justifies it.

    Attributes:
        split (Split): The chosen split.
        gain (float): Information gain achieved by `split`.
    """

    split: Split
    gain: float


def build(
    records: Sequence[Record] | pl.DataFrame,
    target_column: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
    *,
    config: TreeBuildConfig | None = None,
) -> TreeNode | None:
    """Build a binary decision tree that predicts `target_column`.

    At each node the split with the strictly greatest information gain is
    chosen across all candidate features; ties keep the first candidate found
    (features in column order, numeric thresholds low to high, categories in
    first-seen order), so the result is deterministic for a fixed input order.

    A node becomes a leaf when `max_depth` is exhausted, when it holds fewer
    than `config.min_samples_split` records, or when no candidate split both
    keeps `config.min_samples_leaf` records on each side and beats
    `config.min_gain`.

    Args:
        records (Sequence[Record] | pl.DataFrame): Input records; a DataFrame is
            converted row by row. Records are never mutated.
        target_column (str): Name of the class label column.
        max_depth (int): Maximum number of split levels. `0` yields a single leaf.
        config (TreeBuildConfig | None): Stopping rules and search resolution.
            Defaults to `TreeBuildConfig()`.

    Returns:
        TreeNode | None: The root of the new tree, or `None` when there are
            fewer than `config.min_samples_split` records (insufficient data).

    Raises:
        ValueError: If `max_depth` is negative.
        MissingTargetColumnError: If any record lacks `target_column`.

    Examples:
        >>> records = [{"x": x, "y": "a" if x < 5 else "b"} for x in range(12)]
        >>> tree = build(records, "y", max_depth=2)
        >>> tree.split.feature
        'x'
    """
    if max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}.")
    config = config or TreeBuildConfig()
    rows = records.to_dicts() if isinstance(records, pl.DataFrame) else list(records)
    _validate_target_column(rows, target_column)

    logger.log(BUILD_LEVEL, "Building decision tree", target=target_column, rows=len(rows), max_depth=max_depth)
    if len(rows) < config.min_samples_split:
        logger.info("Insufficient data to build a tree", rows=len(rows), required=config.min_samples_split)
        return None

    features = [name for name in rows[0] if name != target_column and name not in config.excluded_columns]
    tree = _grow(rows, target_column, features, max_depth, config)
    logger.info("Decision tree built", target=target_column, rows=len(rows), root_type=tree.node_type)
    return tree


def find_best_split(
    records: Sequence[Record],
    target_column: str,
    features: Sequence[str],
    *,
    config: TreeBuildConfig,
) -> SplitCandidate | None:
    """Search every feature for the split with the greatest information gain.

    Args:
        records (Sequence[Record]): Records at the current node.
        target_column (str): Name of the class label column.
        features (Sequence[str]): Candidate feature names, in search order.
        config (TreeBuildConfig): Supplies `min_samples_leaf` and
            `max_threshold_steps`.

    Returns:
        SplitCandidate | None: The best candidate, or `None` when every
            candidate leaves a side below `min_samples_leaf`.
    """
    parent_distribution = label_distribution(records, target_column)
    best: SplitCandidate | None = None

    for feature in features:
        values = [record[feature] for record in records]
        for split in _candidate_splits(feature, values, config.max_threshold_steps):
            left, right = partition_records(records, split)
            if len(left) < config.min_samples_leaf or len(right) < config.min_samples_leaf:
                continue
            gain = information_gain(
                parent_distribution,
                label_distribution(left, target_column),
                label_distribution(right, target_column),
            )
            if best is None or gain > best.gain:
                best = SplitCandidate(split=split, gain=gain)

    return best


# ---------------------------------------------------------------------------
# Public interface -- Split primitives
# ---------------------------------------------------------------------------


def candidate_thresholds(values: Sequence[float], max_steps: int) -> list[float]:
    """Return evenly spaced interior thresholds between the min and max of `values`.

    With `r = max - min`, the step is `r / min(max_steps, r)`; ranges narrower
    than `max_steps` therefore use unit steps, so an integer range of `r`
    yields `r - 1` thresholds and ranges of 0 or 1 yield none.

    Args:
        values (Sequence[float]): Numeric values observed at the node.
        max_steps (int): Upper bound on the number of intervals.

    Returns:
        list[float]: Thresholds in increasing order, strictly between min and max.

    Examples:
        >>> candidate_thresholds([1, 2, 8, 9, 10], max_steps=20)
        [2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0]
        >>> candidate_thresholds([3, 4], max_steps=20)
        []
    """
    low, high = float(min(values)), float(max(values))
    value_range = high - low
    if value_range <= 0:
        return []
    steps = min(max_steps, value_range)
    step = value_range / steps
    thresholds = low + step * np.arange(1, math.ceil(steps))
    return [float(threshold) for threshold in thresholds if threshold < high]


def partition_records(records: Sequence[Record], split: Split) -> tuple[list[Record], list[Record]]:
    """Partition records into the left and right branches of `split`.

    Args:
        records (Sequence[Record]): Records to partition; order is preserved.
        split (Split): The split to apply.

    Returns:
        tuple[list[Record], list[Record]]: `(left, right)` record lists.
    """
    left: list[Record] = []
    right: list[Record] = []
    for record in records:
        (left if split.goes_left(record[split.feature]) else right).append(record)
    return left, right


def label_distribution(records: Sequence[Record], target_column: str) -> dict[str, int]:
    """Count records per class label, with labels in first-seen order.

    Args:
        records (Sequence[Record]): Records to count.
        target_column (str): Name of the class label column.

    Returns:
        dict[str, int]: Mapping of stringified label to count.
    """
    distribution: dict[str, int] = {}
    for record in records:
        label = str(record[target_column])
        distribution[label] = distribution.get(label, 0) + 1
    return distribution


def entropy(distribution: Mapping[str, int]) -> float:
    """Compute the base-2 Shannon entropy of a class distribution.

    Classes with zero count contribute nothing.

    Args:
        distribution (Mapping[str, int]): Per-class counts.

    Returns:
        float: Entropy in bits; `0.0` for an empty or pure distribution.

    Examples:
        >>> entropy({"a": 5, "b": 5})
        1.0
    """
    counts = np.fromiter(distribution.values(), dtype=np.float64, count=len(distribution))
    counts = counts[counts > 0]
    if counts.size == 0:
        return 0.0
    probabilities = counts / counts.sum()
    return float(-np.sum(probabilities * np.log2(probabilities)) + 0.0)


def information_gain(
    parent: Mapping[str, int],
    left: Mapping[str, int],
    right: Mapping[str, int],
) -> float:
    """Compute the entropy reduction achieved by splitting `parent` into `left` and `right`.

    Args:
        parent (Mapping[str, int]): Class counts before the split.
        left (Mapping[str, int]): Class counts in the left branch.
        right (Mapping[str, int]): Class counts in the right branch.

    Returns:
        float: `entropy(parent)` minus the size-weighted child entropy.
    """
    n_left = sum(left.values())
    n_right = sum(right.values())
    n_total = n_left + n_right
    if n_total == 0:
        return 0.0
    weighted = (n_left / n_total) * entropy(left) + (n_right / n_total) * entropy(right)
    return entropy(parent) - weighted


def is_numeric_value(value: object) -> bool:
    """Return whether a record value takes part in numeric threshold splits.

    Booleans are labels, not numbers.

    Args:
        value (object): A record value.

    Returns:
        bool: `True` for real numbers other than `bool`.
    """
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _grow(
    records: list[Record],
    target_column: str,
    features: list[str],
    depth_remaining: int,
    config: TreeBuildConfig,
) -> TreeNode:
    """Recursively grow the subtree for `records`.

    Args:
        records (list[Record]): Records at this node.
        target_column (str): Name of the class label column.
        features (list[str]): Candidate feature names.
        depth_remaining (int): Split levels still allowed below this node.
        config (TreeBuildConfig): Stopping rules and search resolution.

    Returns:
        TreeNode: A decision node, or a leaf when any stopping rule applies.
    """
    distribution = label_distribution(records, target_column)
    if depth_remaining == 0 or len(records) < config.min_samples_split:
        return _make_leaf(distribution)

    best = find_best_split(records, target_column, features, config=config)
    if best is None or best.gain <= config.min_gain:
        return _make_leaf(distribution)

    left_records, right_records = partition_records(records, best.split)
    logger.debug(
        "Split chosen",
        feature=best.split.feature,
        threshold=best.split.threshold,
        gain=round(best.gain, 4),
        left=len(left_records),
        right=len(right_records),
    )
    return DecisionNode(
        split=best.split,
        left=_grow(left_records, target_column, features, depth_remaining - 1, config),
        right=_grow(right_records, target_column, features, depth_remaining - 1, config),
        samples=len(records),
        gain=best.gain,
        distribution=distribution,
    )


def _make_leaf(distribution: dict[str, int]) -> LeafNode:
    """Construct a majority-class leaf from a class distribution.

    Ties go to the class seen first.

    Args:
        distribution (dict[str, int]): Per-class counts at the node.

    Returns:
        LeafNode: The leaf node.
    """
    total = sum(distribution.values())
    label = max(distribution, key=distribution.__getitem__)
    logger.debug("Leaf created", label=label, samples=total)
    return LeafNode(
        label=label,
        confidence=distribution[label] / total,
        samples=total,
        distribution=distribution,
    )


def _candidate_splits(feature: str, values: list[FeatureValue], max_steps: int) -> list[Split]:
    """Enumerate candidate splits for one feature at one node.

    The feature is numeric at this node when every value is a real number;
    otherwise each distinct category (as a string) is tried as the left branch.

    Args:
        feature (str): Feature name.
        values (list[FeatureValue]): The feature's values at the node.
        max_steps (int): Upper bound on numeric threshold intervals.

    Returns:
        list[Split]: Candidate splits in search order.
    """
    if all(is_numeric_value(value) for value in values):
        return [
            Split(feature=feature, threshold=threshold, kind="numeric")
            for threshold in candidate_thresholds(values, max_steps)  # type: ignore[arg-type]
        ]
    categories = dict.fromkeys(str(value) for value in values)
    return [Split(feature=feature, threshold=category, kind="categorical") for category in categories]


def _validate_target_column(records: Sequence[Record], target_column: str) -> None:
    """Raise `MissingTargetColumnError` if any record lacks the target column.

    Args:
        records (Sequence[Record]): Records to check.
        target_column (str): The target column name.

    Raises:
        MissingTargetColumnError: On the first record without `target_column`.
    """
    for index, record in enumerate(records):
        if target_column not in record:
            raise MissingTargetColumnError(target=target_column, available_columns=list(record), record_index=index)

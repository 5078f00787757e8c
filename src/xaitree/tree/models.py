"""Pydantic models for decision trees: splits, nodes, predictions, rules, and results."""

from __future__ import annotations

import math
import operator
from collections import Counter
from collections.abc import Callable, Mapping
from typing import Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from xaitree.exceptions import FeatureValueError

# ---------------------------------------------------------------------------
# Public type aliases
# ---------------------------------------------------------------------------

type FeatureValue = float | int | str

type Record = Mapping[str, FeatureValue]

type SplitKind = Literal["numeric", "categorical"]

type PredicateOp = Literal["<=", ">", "==", "!="]

# ---------------------------------------------------------------------------
# Build configuration
# ---------------------------------------------------------------------------

DEFAULT_MAX_DEPTH: Final[int] = 4
DEFAULT_MIN_SAMPLES_SPLIT: Final[int] = 5
DEFAULT_MIN_SAMPLES_LEAF: Final[int] = 5
DEFAULT_MIN_GAIN: Final[float] = 0.01
DEFAULT_MAX_THRESHOLD_STEPS: Final[int] = 20
DEFAULT_EXCLUDED_COLUMNS: Final[tuple[str, ...]] = ("id", "loan_id")


class TreeBuildConfig(BaseModel):
    """Stopping rules and search resolution for the tree builder.

    Attributes:
        min_samples_split (int): Nodes with fewer records become leaves. A
            top-level dataset below this size yields no tree at all.
        min_samples_leaf (int): Candidate splits leaving either side with
            fewer records are skipped.
        min_gain (float): The best split must have information gain strictly
            greater than this value, otherwise the node becomes a leaf.
        max_threshold_steps (int): Upper bound on the number of evenly spaced
            intervals used to place numeric thresholds.
        excluded_columns (tuple[str, ...]): Identifier columns never used as
            features.

    Examples:
        >>> config = TreeBuildConfig(min_samples_leaf=2)
        >>> config.min_samples_split
        5
    """

    model_config = ConfigDict(frozen=True)

    min_samples_split: int = Field(
        default=DEFAULT_MIN_SAMPLES_SPLIT,
        ge=1,
        description="Minimum number of records a node needs before a split is attempted.",
    )
    min_samples_leaf: int = Field(
        default=DEFAULT_MIN_SAMPLES_LEAF,
        ge=1,
        description="Minimum number of records on each side of a split.",
    )
    min_gain: float = Field(
        default=DEFAULT_MIN_GAIN,
        ge=0.0,
        description="Information gain the best split must exceed.",
    )
    max_threshold_steps: int = Field(
        default=DEFAULT_MAX_THRESHOLD_STEPS,
        ge=1,
        description="Maximum number of intervals used to place numeric thresholds.",
    )
    excluded_columns: tuple[str, ...] = Field(
        default=DEFAULT_EXCLUDED_COLUMNS,
        description="Identifier columns that are never considered as split features.",
    )


# ---------------------------------------------------------------------------
# Splits and predicates
# ---------------------------------------------------------------------------


class Predicate(BaseModel):
    """A single boolean condition on one feature variable.

    Attributes:
        variable (str): Feature name the condition applies to.
        operator (PredicateOp): One of `"<="`, `">"`, `"=="`, `"!="`.
        value (float | str): Numeric threshold or category literal.

    Examples:
        >>> p = Predicate(variable="age", operator="<=", value=37.5)
        >>> str(p)
        'age <= 37.5'
        >>> p.eval(30)
        True
    """

    model_config = ConfigDict(frozen=True)

    variable: str = Field(description="Feature name the condition applies to, e.g. 'age'.")
    operator: PredicateOp = Field(description="Comparison operator.")
    value: float | str = Field(description="Numeric threshold or category literal.")

    def __str__(self) -> str:
        """Return a human-readable representation of this predicate.

        Returns:
            str: The predicate as `"<variable> <operator> <value>"`.
        """
        return f"{self.variable} {self.operator} {self.value}"

    def eval(self, x: FeatureValue) -> bool:
        """Evaluate this predicate against a feature value.

        Numeric predicates coerce `x` to float; categorical predicates compare
        `x` as a string, matching the branching rule of `Split.goes_left`.

        Args:
            x (FeatureValue): The feature value to test.

        Returns:
            bool: `True` if the predicate holds for `x`.
        """
        if isinstance(self.value, str):
            return _SCALAR_OPS[self.operator](str(x), self.value)
        return _SCALAR_OPS[self.operator](_coerce_numeric(self.variable, x), self.value)


class Split(BaseModel):
    """A binary decision on one feature.

    Numeric splits send a record left iff `value <= threshold`. Categorical
    splits send a record left iff `str(value) == threshold`; every other
    category goes right.

    Attributes:
        feature (str): Feature (column) name the split reads.
        threshold (float | str): Real-valued threshold for numeric splits, or
            the single category literal routed left for categorical splits.
        kind (SplitKind): `"numeric"` or `"categorical"`.

    Examples:
        >>> split = Split(feature="x", threshold=2.0, kind="numeric")
        >>> split.goes_left(1)
        True
        >>> split.condition
        '<= 2.0'
    """

    model_config = ConfigDict(frozen=True)

    feature: str = Field(description="Feature (column) name the split reads.")
    threshold: float | str = Field(
        description="Numeric threshold, or the category literal routed to the left branch.",
    )
    kind: SplitKind = Field(description='Either "numeric" or "categorical".')

    @model_validator(mode="after")
    def _validate_threshold_matches_kind(self) -> Split:
        """Validate that the threshold type agrees with the split kind.

        Returns:
            Split: The validated model instance.

        Raises:
            ValueError: If a numeric split carries a string threshold or a
                categorical split carries a non-string threshold.
        """
        if self.kind == "numeric" and isinstance(self.threshold, str):
            raise ValueError(f"Numeric split on '{self.feature}' requires a numeric threshold")
        if self.kind == "categorical" and not isinstance(self.threshold, str):
            raise ValueError(f"Categorical split on '{self.feature}' requires a string threshold")
        return self

    def goes_left(self, value: FeatureValue) -> bool:
        """Return whether `value` is routed to the left branch.

        This is the only branching rule in the package; partitioning during
        build and every inference traversal go through it.

        Args:
            value (FeatureValue): The record's value for `feature`.

        Returns:
            bool: `True` for the left branch, `False` for the right branch.

        Raises:
            FeatureValueError: If a numeric split receives a value that cannot
                be coerced to float.
        """
        if self.kind == "numeric":
            return _coerce_numeric(self.feature, value) <= self.threshold  # type: ignore[operator]
        return str(value) == self.threshold

    def predicates(self) -> tuple[Predicate, Predicate]:
        """Build the left and right branch predicates for this split.

        Returns:
            tuple[Predicate, Predicate]: `(left_predicate, right_predicate)`.
        """
        left_op, right_op = ("<=", ">") if self.kind == "numeric" else ("==", "!=")
        return (
            Predicate(variable=self.feature, operator=left_op, value=self.threshold),
            Predicate(variable=self.feature, operator=right_op, value=self.threshold),
        )

    @property
    def condition(self) -> str:
        """Short display string for the left branch, e.g. `'<= 2.0'` or `'= "a"'`."""
        if self.kind == "numeric":
            return f"<= {float(self.threshold):.1f}"
        return f'= "{self.threshold}"'


# ---------------------------------------------------------------------------
# Tree nodes
# ---------------------------------------------------------------------------


class LeafNode(BaseModel):
    """Terminal tree node carrying the majority-class prediction.

    Attributes:
        node_type (Literal["leaf"]): Discriminator field; always `"leaf"`.
        label (str): Majority class among the node's records.
        confidence (float): Fraction of the node's records in the majority class.
        samples (int): Number of training records that reached this leaf.
        distribution (dict[str, int]): Per-class record counts, in first-seen order.
    """

    model_config = ConfigDict(frozen=True)

    node_type: Literal["leaf"] = Field(default="leaf", description='Discriminator field. Always "leaf".')
    label: str = Field(description="Predicted class label.")
    confidence: float = Field(ge=0.0, le=1.0, description="Majority-class fraction at this leaf.")
    samples: int = Field(ge=1, description="Number of training records at this leaf.")
    distribution: dict[str, int] = Field(description="Per-class record counts at this leaf.")

    @model_validator(mode="after")
    def _validate_distribution(self) -> LeafNode:
        """Validate that the distribution matches `samples` and contains `label`.

        Returns:
            LeafNode: The validated model instance.

        Raises:
            ValueError: If the counts do not sum to `samples` or `label` is not
                one of the observed classes.
        """
        _check_distribution_total(self.distribution, self.samples)
        if self.label not in self.distribution:
            raise ValueError(f"Leaf label '{self.label}' is not present in its distribution")
        return self


class DecisionNode(BaseModel):
    """Internal tree node carrying a split and exactly two children.

    Attributes:
        node_type (Literal["decision"]): Discriminator field; always `"decision"`.
        split (Split): The decision applied at this node.
        left (DecisionNode | LeafNode): Subtree for records where the split holds.
        right (DecisionNode | LeafNode): Subtree for all other records.
        samples (int): Number of training records that reached this node.
        gain (float): Information gain achieved by `split`.
        distribution (dict[str, int]): Per-class record counts at this node.
    """

    model_config = ConfigDict(frozen=True)

    node_type: Literal["decision"] = Field(default="decision", description='Discriminator field. Always "decision".')
    split: Split = Field(description="The decision applied at this node.")
    left: DecisionNode | LeafNode = Field(discriminator="node_type", description="Subtree where the split holds.")
    right: DecisionNode | LeafNode = Field(discriminator="node_type", description="Subtree for all other records.")
    samples: int = Field(ge=1, description="Number of training records at this node.")
    gain: float = Field(ge=0.0, description="Information gain achieved by the split.")
    distribution: dict[str, int] = Field(description="Per-class record counts at this node.")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def confidence(self) -> float:
        """Split-quality score shown for decision nodes; equal to `gain`."""
        return self.gain

    @model_validator(mode="after")
    def _validate_children_partition_parent(self) -> DecisionNode:
        """Validate that the children exactly partition this node's records.

        Returns:
            DecisionNode: The validated model instance.

        Raises:
            ValueError: If sample counts or class distributions of the two
                children do not add up to this node's.
        """
        _check_distribution_total(self.distribution, self.samples)
        if self.left.samples + self.right.samples != self.samples:
            raise ValueError(
                f"Children samples ({self.left.samples} + {self.right.samples}) "
                f"must equal node samples ({self.samples})"
            )
        combined = Counter(self.left.distribution) + Counter(self.right.distribution)
        if combined != Counter(self.distribution):
            raise ValueError("Children distributions must sum to the node distribution")
        return self


type TreeNode = DecisionNode | LeafNode

# ---------------------------------------------------------------------------
# Inference outputs
# ---------------------------------------------------------------------------


class Prediction(BaseModel):
    """Outcome of classifying one input.

    Attributes:
        label (str): Predicted class label.
        confidence (float): Majority-class fraction at the reached leaf.
    """

    model_config = ConfigDict(frozen=True)

    label: str = Field(description="Predicted class label.")
    confidence: float = Field(ge=0.0, le=1.0, description="Majority-class fraction at the reached leaf.")


class FeatureImportance(BaseModel):
    """Normalized aggregate influence of one feature across the tree."""

    model_config = ConfigDict(frozen=True)

    feature: str = Field(description="Feature name.")
    importance: float = Field(ge=0.0, le=1.0, description="Normalized importance weight.")


class ClassificationRule(BaseModel):
    """A decision rule read off one leaf of the tree.

    Attributes:
        predicates (list[Predicate]): Conditions along the path from the root
            to this leaf. Empty when the tree is a single leaf.
        prediction (str): Predicted class label at the leaf.
        samples (int): Number of training records at the leaf.
        confidence (float): Majority-class fraction at the leaf.

    Examples:
        >>> rule = ClassificationRule(
        ...     predicates=[Predicate(variable="age", operator="<=", value=37.5)],
        ...     prediction="<=50K",
        ...     samples=210,
        ...     confidence=0.87,
        ... )
        >>> str(rule)
        'IF age <= 37.5 THEN <=50K (confidence 0.87, samples 210)'
    """

    predicates: list[Predicate] = Field(description="Predicates along the root-to-leaf path.")
    prediction: str = Field(description="Predicted class label at the leaf.")
    samples: int = Field(ge=1, description="Number of training records at the leaf.")
    confidence: float = Field(ge=0.0, le=1.0, description="Majority-class fraction at the leaf.")

    def __str__(self) -> str:
        """Return the rule as an IF/THEN sentence.

        Returns:
            str: e.g. `"IF age <= 37.5 AND sex == Male THEN >50K (confidence 0.8, samples 40)"`.
        """
        condition = " AND ".join(str(predicate) for predicate in self.predicates) or "TRUE"
        return f"IF {condition} THEN {self.prediction} (confidence {self.confidence}, samples {self.samples})"


class DecisionTreeResult(BaseModel):
    """Everything a presentation layer needs to show a built tree.

    Attributes:
        target (str): Target column name.
        tree (DecisionNode | LeafNode): The built tree.
        features_used (list[str]): Features that appear in at least one split,
            in importance order.
        rules (list[ClassificationRule]): One rule per leaf, left to right.
        feature_importance (list[FeatureImportance]): Ranked importance weights.
        metrics (dict[str, float]): Training-set metrics, e.g. `{"accuracy": 0.83}`.
        sample_count (int): Number of records used to build the tree.
        depth (int): Number of split levels in the tree.
        leaf_count (int): Number of leaves in the tree.
    """

    target: str = Field(description="Target column name.")
    tree: DecisionNode | LeafNode = Field(discriminator="node_type", description="The built tree.")
    features_used: list[str] = Field(description="Features used by at least one split.")
    rules: list[ClassificationRule] = Field(description="One rule per leaf node.")
    feature_importance: list[FeatureImportance] = Field(description="Ranked feature importance weights.")
    metrics: dict[str, float] = Field(description='Training-set metrics, e.g. {"accuracy": 0.83}.')
    sample_count: int = Field(ge=1, description="Number of records used to build the tree.")
    depth: int = Field(ge=0, description="Number of split levels in the tree.")
    leaf_count: int = Field(ge=1, description="Number of leaf nodes in the tree.")

    @field_validator("feature_importance", mode="after")
    @classmethod
    def _validate_feature_importance_sums_to_one(cls, value: list[FeatureImportance]) -> list[FeatureImportance]:
        """Validate that importance weights sum to 1.0 unless the list is empty.

        Args:
            value (list[FeatureImportance]): The ranked importance list.

        Returns:
            list[FeatureImportance]: The validated list, unchanged.

        Raises:
            ValueError: If a non-empty list does not sum to 1.0 within 1e-6.
        """
        if not value:
            return value
        total = math.fsum(item.importance for item in value)
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError(f"feature_importance weights must sum to 1.0, got {total:.8f}")
        return value

    @model_validator(mode="after")
    def _validate_rules_count_matches_leaf_count(self) -> DecisionTreeResult:
        """Validate that the number of rules equals the number of leaves.

        Returns:
            DecisionTreeResult: The validated model instance.

        Raises:
            ValueError: If `len(rules)` does not equal `leaf_count`.
        """
        if len(self.rules) != self.leaf_count:
            raise ValueError(f"rules length ({len(self.rules)}) must equal leaf_count ({self.leaf_count})")
        return self

    @model_validator(mode="after")
    def _validate_features_used_match_importance(self) -> DecisionTreeResult:
        """Validate that `features_used` lists exactly the ranked features.

        Returns:
            DecisionTreeResult: The validated model instance.

        Raises:
            ValueError: If the two lists differ.
        """
        ranked = [item.feature for item in self.feature_importance]
        if ranked != self.features_used:
            raise ValueError(f"features_used {self.features_used} must match feature_importance order {ranked}")
        return self


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

_SCALAR_OPS: dict[str, Callable[[Any, Any], bool]] = {
    "<=": operator.le,
    ">": operator.gt,
    "==": operator.eq,
    "!=": operator.ne,
}


def _coerce_numeric(feature: str, value: FeatureValue) -> float:
    """Coerce an input value to float for a numeric comparison.

    Args:
        feature (str): Feature name, used in error messages.
        value (FeatureValue): The value to coerce.

    Returns:
        float: The coerced value.

    Raises:
        FeatureValueError: If `value` cannot be converted to float.
    """
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise FeatureValueError(feature, value) from exc


def _check_distribution_total(distribution: dict[str, int], samples: int) -> None:
    """Raise `ValueError` if a class distribution does not sum to `samples`.

    Args:
        distribution (dict[str, int]): Per-class record counts.
        samples (int): Expected total.

    Raises:
        ValueError: If any count is negative or the counts do not sum to `samples`.
    """
    if any(count < 0 for count in distribution.values()):
        raise ValueError("Distribution counts must be non-negative")
    total = sum(distribution.values())
    if total != samples:
        raise ValueError(f"Distribution total ({total}) must equal samples ({samples})")

"""Custom exceptions for xaitree.

Build-time exceptions (subclass ValueError):
- MissingTargetColumnError: Raised when the target column is absent from a record.
- EmptyDatasetError: Raised when a dataset file yields no usable rows.

Inference-time exceptions:
- IncompleteFeatureSetError (subclass KeyError): Raised when a traversal reaches a
  decision node whose split feature is absent from the input.
- FeatureValueError (subclass ValueError): Raised when an input value cannot be
  coerced for a numeric split.

Insufficient data is not an exception: `build` returns `None` when there are too
few records to model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from xaitree.tree.models import TreeNode


class MissingTargetColumnError(ValueError):
    """Raised when the target column is missing from one or more records.

    Attributes:
        target (str): The requested target column name.
        available_columns (list[str]): Column names present in the offending record.
        record_index (int): Index of the first record missing the target.

    Examples:
        >>> err = MissingTargetColumnError(target="income", available_columns=["age", "sex"], record_index=0)
        >>> err.target
        'income'
    """

    target: str
    available_columns: list[str]
    record_index: int

    def __init__(self, target: str, available_columns: list[str], record_index: int = 0) -> None:
        """Initialize MissingTargetColumnError.

        Args:
            target (str): The requested target column name.
            available_columns (list[str]): Column names present in the offending record.
            record_index (int): Index of the first record missing the target.
        """
        super().__init__(
            f"Target column '{target}' not found in record {record_index}. Available columns: {available_columns}"
        )
        self.target = target
        self.available_columns = available_columns
        self.record_index = record_index


class EmptyDatasetError(ValueError):
    """Raised when a dataset contains no usable rows.

    Attributes:
        source (str): Description of where the dataset came from, e.g. a file path.
    """

    source: str

    def __init__(self, source: str) -> None:
        """Initialize EmptyDatasetError.

        Args:
            source (str): Description of where the dataset came from.
        """
        super().__init__(f"Dataset is empty: {source}")
        self.source = source


class IncompleteFeatureSetError(KeyError):
    """Raised when a traversal needs a feature the input does not provide.

    The traversal stops at the decision node that queried the missing feature
    rather than guessing a branch.

    Attributes:
        feature (str): The split feature that was absent from the input.
        path (list[TreeNode]): Nodes visited before the traversal stopped; the
            last element is the decision node that needed `feature`.

    Examples:
        >>> err = IncompleteFeatureSetError(feature="age", path=[])
        >>> err.feature
        'age'
    """

    feature: str
    path: list[TreeNode]

    def __init__(self, feature: str, path: list[TreeNode]) -> None:
        """Initialize IncompleteFeatureSetError.

        Args:
            feature (str): The split feature that was absent from the input.
            path (list[TreeNode]): Nodes visited before the traversal stopped.
        """
        super().__init__(feature)
        self.feature = feature
        self.path = path

    def __str__(self) -> str:
        """Return a readable message instead of KeyError's quoted repr.

        Returns:
            str: Description of the missing feature and the traversal depth.
        """
        return f"Input is missing feature '{self.feature}' required at depth {max(len(self.path) - 1, 0)}"


class FeatureValueError(ValueError):
    """Raised when an input value cannot be compared against a numeric threshold.

    Attributes:
        feature (str): The split feature being evaluated.
        value (Any): The offending input value.
    """

    feature: str
    value: Any

    def __init__(self, feature: str, value: Any) -> None:
        """Initialize FeatureValueError.

        Args:
            feature (str): The split feature being evaluated.
            value (Any): The offending input value.
        """
        super().__init__(f"Feature '{feature}' requires a numeric value, got {value!r}")
        self.feature = feature
        self.value = value

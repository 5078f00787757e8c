"""Tests for custom exceptions.

This module tests the exception classes raised while building and querying
trees, ensuring proper inheritance, attribute storage, and readable messages.
"""

from __future__ import annotations

import pytest
from pytest_check import check

from xaitree.exceptions import (
    EmptyDatasetError,
    FeatureValueError,
    IncompleteFeatureSetError,
    MissingTargetColumnError,
)
from xaitree.tree.models import LeafNode


class TestMissingTargetColumnError:
    """Tests for MissingTargetColumnError."""

    def test_is_value_error_with_attributes(self) -> None:
        """The error should be a ValueError carrying the target and the columns seen."""
        error = MissingTargetColumnError(target="churned", available_columns=["tenure", "plan"], record_index=3)

        with check:
            assert isinstance(error, ValueError)
        with check:
            assert error.target == "churned"
        with check:
            assert error.available_columns == ["tenure", "plan"]
        with check:
            assert error.record_index == 3

    def test_message_names_target_and_record(self) -> None:
        """The message should mention the target, the record index, and available columns."""
        message = str(MissingTargetColumnError(target="churned", available_columns=["tenure"], record_index=7))

        with check:
            assert "'churned'" in message
        with check:
            assert "record 7" in message
        with check:
            assert "tenure" in message

    def test_record_index_defaults_to_zero(self) -> None:
        """Omitting the index should point at the first record."""
        assert MissingTargetColumnError(target="y", available_columns=[]).record_index == 0


class TestEmptyDatasetError:
    """Tests for EmptyDatasetError."""

    def test_is_value_error_with_source(self) -> None:
        """The error should be a ValueError that remembers where the data came from."""
        error = EmptyDatasetError("data/heart.csv")

        with check:
            assert isinstance(error, ValueError)
        with check:
            assert error.source == "data/heart.csv"
        with check:
            assert str(error) == "Dataset is empty: data/heart.csv"


class TestIncompleteFeatureSetError:
    """Tests for IncompleteFeatureSetError."""

    def test_is_catchable_as_key_error(self) -> None:
        """Callers that already handle KeyError should catch it."""
        with pytest.raises(KeyError):
            raise IncompleteFeatureSetError(feature="plan", path=[])

    def test_stores_feature_and_path(self) -> None:
        """The feature and the partial path should be available to callers."""
        leaf = LeafNode(label="yes", confidence=1.0, samples=5, distribution={"yes": 5})
        error = IncompleteFeatureSetError(feature="plan", path=[leaf])

        with check:
            assert error.feature == "plan"
        with check:
            assert error.path == [leaf]

    @pytest.mark.parametrize(
        ("path_length", "expected_depth"),
        [(0, 0), (1, 0), (3, 2)],
    )
    def test_message_reports_depth(self, path_length: int, expected_depth: int) -> None:
        """The message should report the depth of the node that needed the feature.

        Args:
            path_length (int): Number of visited nodes.
            expected_depth (int): Depth shown in the message.
        """
        leaf = LeafNode(label="yes", confidence=1.0, samples=5, distribution={"yes": 5})
        error = IncompleteFeatureSetError(feature="plan", path=[leaf] * path_length)

        assert str(error) == f"Input is missing feature 'plan' required at depth {expected_depth}"


class TestFeatureValueError:
    """Tests for FeatureValueError."""

    def test_is_value_error_with_feature_and_value(self) -> None:
        """The error should be a ValueError naming the feature and the offending value."""
        error = FeatureValueError("tenure", "unknown")

        with check:
            assert isinstance(error, ValueError)
        with check:
            assert error.feature == "tenure"
        with check:
            assert error.value == "unknown"
        with check:
            assert str(error) == "Feature 'tenure' requires a numeric value, got 'unknown'"

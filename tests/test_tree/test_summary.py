"""Tests for rule extraction, training metrics, and result assembly."""

from __future__ import annotations

import polars as pl
import pytest
from pytest_check import check

from xaitree.exceptions import MissingTargetColumnError
from xaitree.tree.models import DecisionNode, LeafNode, Predicate
from xaitree.tree.summary import build_decision_tree_result, compute_metrics, extract_rules


class TestExtractRules:
    """Tests for `extract_rules`."""

    def test_one_rule_per_leaf_left_to_right(self, income_tree: DecisionNode) -> None:
        """Rules should follow leaf order and list every predicate on the path."""
        # Arrange
        threshold = income_tree.split.threshold

        # Act
        rules = extract_rules(income_tree)

        # Assert
        with check:
            assert [rule.predicates for rule in rules] == [
                [Predicate(variable="age", operator="<=", value=threshold)],
                [
                    Predicate(variable="age", operator=">", value=threshold),
                    Predicate(variable="sector", operator="==", value="public"),
                ],
                [
                    Predicate(variable="age", operator=">", value=threshold),
                    Predicate(variable="sector", operator="!=", value="public"),
                ],
            ]
        with check:
            assert [rule.prediction for rule in rules] == ["<=50K", "<=50K", ">50K"]
        with check:
            assert [rule.samples for rule in rules] == [20, 10, 10]

    def test_rules_agree_with_predictions(self, income_records: list[dict[str, int | str]]) -> None:
        """Every record should satisfy exactly one rule, and that rule should match its label.

        Args:
            income_records (list[dict[str, int | str]]): Fixture records.
        """
        # Arrange
        result = build_decision_tree_result(income_records, "income")
        assert result is not None

        # Act & Assert
        for record in income_records:
            matching = [
                rule for rule in result.rules if all(p.eval(record[p.variable]) for p in rule.predicates)
            ]
            with check:
                assert len(matching) == 1
            with check:
                assert matching[0].prediction == record["income"]

    def test_single_leaf_yields_unconditional_rule(self) -> None:
        """A leaf-only tree should produce one rule with no predicates."""
        # Arrange
        leaf = LeafNode(label="b", confidence=0.6, samples=5, distribution={"a": 2, "b": 3})

        # Act
        rules = extract_rules(leaf)

        # Assert
        with check:
            assert len(rules) == 1
        with check:
            assert str(rules[0]) == "IF TRUE THEN b (confidence 0.6, samples 5)"

    def test_confidence_is_rounded(self) -> None:
        """Rule confidence should be rounded to four decimal places."""
        leaf = LeafNode(label="a", confidence=2 / 3, samples=6, distribution={"a": 4, "b": 2})
        assert extract_rules(leaf)[0].confidence == 0.6667


class TestComputeMetrics:
    """Tests for `compute_metrics`."""

    def test_perfect_fit_accuracy(
        self,
        income_tree: DecisionNode,
        income_records: list[dict[str, int | str]],
    ) -> None:
        """The depth-2 income tree should classify its training data perfectly."""
        assert compute_metrics(income_tree, income_records, "income") == {"accuracy": 1.0}

    def test_single_leaf_accuracy_is_majority_share(self) -> None:
        """A majority leaf should score the share of its majority class."""
        # Arrange
        leaf = LeafNode(label="b", confidence=0.6, samples=5, distribution={"a": 2, "b": 3})
        records = [{"y": label} for label in ["a", "a", "b", "b", "b"]]

        # Act
        metrics = compute_metrics(leaf, records, "y")

        # Assert
        assert metrics["accuracy"] == pytest.approx(0.6)

    def test_empty_records_raise(self, income_tree: DecisionNode) -> None:
        """Metrics over no records are undefined."""
        with pytest.raises(ValueError, match="empty"):
            compute_metrics(income_tree, [], "income")

    def test_missing_target_raises(self, income_tree: DecisionNode) -> None:
        """Records without the target column cannot be scored."""
        with pytest.raises(MissingTargetColumnError) as exc_info:
            compute_metrics(income_tree, [{"age": 30, "sector": "public"}], "income")
        assert exc_info.value.record_index == 0


class TestBuildDecisionTreeResult:
    """Tests for `build_decision_tree_result`."""

    def test_income_result(self, income_records: list[dict[str, int | str]]) -> None:
        """The assembled result should summarize the income tree consistently."""
        # Act
        result = build_decision_tree_result(income_records, "income")

        # Assert
        assert result is not None
        with check:
            assert result.target == "income"
        with check:
            assert result.features_used == ["sector", "age"]
        with check:
            assert result.depth == 2
        with check:
            assert result.leaf_count == 3
        with check:
            assert len(result.rules) == 3
        with check:
            assert result.sample_count == 40
        with check:
            assert result.metrics == {"accuracy": 1.0}

    def test_depth_limit_lowers_accuracy(self, income_records: list[dict[str, int | str]]) -> None:
        """With one split level the older half becomes a tied leaf and half of it is misclassified.

        Args:
            income_records (list[dict[str, int | str]]): Fixture records.
        """
        # Act
        result = build_decision_tree_result(income_records, "income", max_depth=1)

        # Assert
        assert result is not None
        with check:
            assert result.metrics["accuracy"] == pytest.approx(0.75)
        with check:
            assert result.features_used == ["age"]
        with check:
            assert result.leaf_count == 2

    def test_dataframe_input(self, income_records: list[dict[str, int | str]]) -> None:
        """A polars DataFrame should produce the same result as its records.

        Args:
            income_records (list[dict[str, int | str]]): Fixture records.
        """
        from_frame = build_decision_tree_result(pl.DataFrame(income_records), "income")
        from_records = build_decision_tree_result(income_records, "income")
        assert from_frame == from_records

    def test_constant_target_result_has_no_features(self) -> None:
        """A single-leaf tree should yield empty importance and one unconditional rule."""
        # Arrange
        records = [{"x": x, "y": "same"} for x in range(8)]

        # Act
        result = build_decision_tree_result(records, "y")

        # Assert
        assert result is not None
        with check:
            assert result.features_used == []
        with check:
            assert result.feature_importance == []
        with check:
            assert result.depth == 0
        with check:
            assert [rule.predicates for rule in result.rules] == [[]]

    def test_insufficient_data_returns_none(self) -> None:
        """Fewer than five records should produce no result."""
        records = [{"x": 1, "y": "a"}, {"x": 2, "y": "b"}, {"x": 3, "y": "a"}]
        assert build_decision_tree_result(records, "y") is None

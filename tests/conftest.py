"""Shared record fixtures for the xaitree test suite."""

from __future__ import annotations

import pytest

from xaitree.tree.builder import build
from xaitree.tree.models import DecisionNode, TreeNode


@pytest.fixture
def income_records() -> list[dict[str, int | str]]:
    """Forty salary records where income depends on both age and sector.

    Ages run 20..59; sector alternates public/private starting with public.
    Income is `">50K"` only for private-sector records aged 40 or older, so the
    best root split is `age <= 39.5` and the right child splits on sector.

    Returns:
        list[dict[str, int | str]]: Records with columns id, age, sector, income.
    """
    return [
        {
            "id": i,
            "age": 20 + i,
            "sector": "public" if i % 2 == 0 else "private",
            "income": ">50K" if (20 + i) >= 40 and i % 2 == 1 else "<=50K",
        }
        for i in range(40)
    ]


@pytest.fixture
def income_tree(income_records: list[dict[str, int | str]]) -> DecisionNode:
    """Depth-2 tree built from `income_records` with default settings.

    Args:
        income_records (list[dict[str, int | str]]): Fixture records.

    Returns:
        DecisionNode: Root of the built tree.
    """
    tree: TreeNode | None = build(income_records, "income", max_depth=4)
    assert isinstance(tree, DecisionNode)
    return tree


@pytest.fixture
def cluster_records() -> list[dict[str, int | str]]:
    """Five records forming two well-separated clusters on `x`.

    Returns:
        list[dict[str, int | str]]: Records with columns x and y.
    """
    return [
        {"x": 1, "y": "a"},
        {"x": 2, "y": "a"},
        {"x": 8, "y": "b"},
        {"x": 9, "y": "b"},
        {"x": 10, "y": "b"},
    ]

"""Conversion between trees and plain nested structures."""

from __future__ import annotations

from typing import Annotated, Any, Final

from pydantic import Field, TypeAdapter

from xaitree.tree.models import DecisionNode, LeafNode, TreeNode

_TREE_ADAPTER: Final[TypeAdapter[DecisionNode | LeafNode]] = TypeAdapter(
    Annotated[DecisionNode | LeafNode, Field(discriminator="node_type")]
)


def tree_to_dict(tree: TreeNode) -> dict[str, Any]:
    """Dump a tree to nested dicts, lists, strings and numbers.

    Decision nodes include their computed `confidence` alongside `gain`.

    Args:
        tree (TreeNode): Root of the tree.

    Returns:
        dict[str, Any]: JSON-compatible nested structure.
    """
    return tree.model_dump(mode="json")


def tree_from_dict(data: dict[str, Any]) -> TreeNode:
    """Rebuild a tree from the output of `tree_to_dict`.

    Args:
        data (dict[str, Any]): Nested structure with a `node_type` discriminator
            on every node.

    Returns:
        TreeNode: The reconstructed tree, equal to the one that was dumped.

    Raises:
        pydantic.ValidationError: If the structure is malformed or violates a
            node invariant (e.g. children that do not partition the parent).
    """
    return _TREE_ADAPTER.validate_python(data)


def tree_to_json(tree: TreeNode, *, indent: int | None = 2) -> str:
    """Serialize a tree to a JSON string."""
    return tree.model_dump_json(indent=indent)


def tree_from_json(payload: str | bytes) -> TreeNode:
    """Rebuild a tree from the output of `tree_to_json`."""
    return _TREE_ADAPTER.validate_json(payload)

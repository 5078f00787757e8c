"""Loading delimited datasets into records and summarizing feature inputs with polars."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import polars as pl
from loguru import logger
from pydantic import BaseModel, Field

from xaitree.exceptions import EmptyDatasetError
from xaitree.tree.models import DEFAULT_EXCLUDED_COLUMNS, FeatureValue, SplitKind


class FeatureInput(BaseModel):
    """Default value and value domain of one feature, for building prediction inputs.

    Attributes:
        name (str): Column name.
        kind (SplitKind): `"numeric"` or `"categorical"`.
        default (float | str): Rounded mean for numeric features, first
            observed category for categorical features.
        minimum (float | None): Smallest observed value; numeric features only.
        maximum (float | None): Largest observed value; numeric features only.
        options (list[str] | None): Distinct categories in first-seen order;
            categorical features only.
    """

    name: str = Field(description="Column name.")
    kind: SplitKind = Field(description='Either "numeric" or "categorical".')
    default: float | str = Field(description="Value offered before the user changes anything.")
    minimum: float | None = Field(default=None, description="Smallest observed value (numeric only).")
    maximum: float | None = Field(default=None, description="Largest observed value (numeric only).")
    options: list[str] | None = Field(default=None, description="Distinct categories (categorical only).")


def records_from_frame(df: pl.DataFrame) -> list[dict[str, FeatureValue]]:
    """Convert a DataFrame into one record per row, keeping column order."""
    return df.to_dicts()


def load_frame(path: str | Path, *, drop_nulls: bool = True) -> pl.DataFrame:
    """Read a CSV file with a header row into a DataFrame.

    Column types are inferred by polars, so numeric columns arrive as numbers
    and everything else as strings.

    Args:
        path (str | Path): Location of the CSV file.
        drop_nulls (bool): Drop rows containing any null value. Defaults to True.

    Returns:
        pl.DataFrame: The loaded rows.

    Raises:
        EmptyDatasetError: If the file is blank or no rows remain after loading.
    """
    try:
        df = pl.read_csv(path)
    except pl.exceptions.NoDataError as exc:
        raise EmptyDatasetError(str(path)) from exc
    if drop_nulls:
        df = df.drop_nulls()
    if df.is_empty():
        raise EmptyDatasetError(str(path))
    logger.info("Dataset loaded", path=str(path), rows=df.height, columns=df.width)
    return df


def load_records(path: str | Path, *, drop_nulls: bool = True) -> list[dict[str, FeatureValue]]:
    """Read a CSV file into records ready for `build`.

    Args:
        path (str | Path): Location of the CSV file.
        drop_nulls (bool): Drop rows containing any null value. Defaults to True.

    Returns:
        list[dict[str, FeatureValue]]: One record per row.

    Raises:
        EmptyDatasetError: If no rows remain after loading.
    """
    return records_from_frame(load_frame(path, drop_nulls=drop_nulls))


def extract_feature_inputs(
    df: pl.DataFrame,
    target_column: str,
    excluded_columns: Sequence[str] = DEFAULT_EXCLUDED_COLUMNS,
) -> list[FeatureInput]:
    """Describe every feature column so a caller can offer default prediction inputs.

    Args:
        df (pl.DataFrame): The dataset.
        target_column (str): Class label column; skipped.
        excluded_columns (Sequence[str]): Identifier columns to skip.

    Returns:
        list[FeatureInput]: One entry per remaining column, in column order.

    Raises:
        EmptyDatasetError: If `df` has no rows, or a feature column holds only nulls.
    """
    if df.is_empty():
        raise EmptyDatasetError("DataFrame")

    inputs: list[FeatureInput] = []
    for name in df.columns:
        if name == target_column or name in excluded_columns:
            continue
        inputs.append(_describe_column(df[name]))
    return inputs


def _describe_column(series: pl.Series) -> FeatureInput:
    """Summarize one column as a numeric or categorical feature input.

    Nulls are ignored; a column with no other values cannot be described.

    Args:
        series (pl.Series): The column to summarize.

    Returns:
        FeatureInput: The column's default value and domain.

    Raises:
        EmptyDatasetError: If every value in `series` is null.
    """
    values = series.drop_nulls()
    if values.is_empty():
        raise EmptyDatasetError(f"column '{series.name}'")
    if values.dtype.is_numeric():
        return FeatureInput(
            name=series.name,
            kind="numeric",
            default=round(float(values.mean())),  # type: ignore[arg-type]
            minimum=float(values.min()),  # type: ignore[arg-type]
            maximum=float(values.max()),  # type: ignore[arg-type]
        )
    # str() of the Python values matches how the builder compares categories.
    options = [str(value) for value in values.unique(maintain_order=True).to_list()]
    return FeatureInput(name=series.name, kind="categorical", default=options[0], options=options)

"""Vector validation helpers."""

from collections.abc import Sequence

from contextmem.utils.exceptions import DimensionError


def ensure_dimension(vector: Sequence[float], dimension: int) -> list[float]:
    """
    Check that a vector has exactly the expected length.

    Args:
        vector: Vector to check
        dimension: Expected length

    Returns:
        The vector as a list

    Raises:
        DimensionError: If the length differs
    """
    if len(vector) != dimension:
        raise DimensionError(expected=dimension, actual=len(vector))
    return list(vector)


def zero_vector(dimension: int) -> list[float]:
    """All-zero vector of the given dimension."""
    return [0.0] * dimension

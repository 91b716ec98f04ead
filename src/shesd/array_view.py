from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from typing import Self

import numpy as np

from shesd.data_types import FloatArray1D

type ValuePredicate = Callable[[float], bool]


@dataclass(frozen=True, eq=False)
class ArrayView:
    """
    Window `[start, stop)` over a mutable 1D float buffer.

    The view does not own a copy of the data: several views can share the same
    buffer, and partitioning a view rearranges the values of the shared buffer
    inside the window only.

    :param buffer: Backing storage, mutated in place by `partition_in_place`.
    :param start: First buffer index covered by the window.
    :param stop: One past the last buffer index covered by the window.
    """

    buffer: FloatArray1D
    start: int
    stop: int

    def __post_init__(self) -> None:
        if not 0 <= self.start <= self.stop <= len(self.buffer):
            raise ValueError(
                f"Invalid window [{self.start}, {self.stop}) for a buffer of length {len(self.buffer)}"
            )

    @classmethod
    def over(cls, buffer: FloatArray1D) -> Self:
        """Build a view covering the whole buffer."""
        return cls(buffer, 0, len(buffer))

    def __len__(self) -> int:
        return self.stop - self.start

    def __getitem__(self, index: int) -> float:
        if not 0 <= index < len(self):
            raise IndexError(f"Index {index} out of range for a window of size {len(self)}")
        return float(self.buffer[self.start + index])

    @property
    def is_empty(self) -> bool:
        return len(self) <= 0

    def values(self) -> FloatArray1D:
        """Return the window as a numpy view on the backing buffer."""
        return self.buffer[self.start : self.stop]

    def partition_in_place(self, predicate: ValuePredicate) -> tuple[Self, Self]:
        """
        Rearrange the window so all values matching `predicate` come first.

        A two-pointer scan swaps misplaced values pairwise; no values outside the
        window are read or written and no temporary buffer is allocated.

        :param predicate: Test deciding to which side a value belongs.
        :returns: Views over the matching values and over the remaining values.
            Both lie inside the bounds of this view.
        """
        buffer = self.buffer
        lower, upper = self.start, self.stop - 1
        while True:
            while lower <= upper and predicate(buffer[lower]):
                lower += 1
            while lower <= upper and not predicate(buffer[upper]):
                upper -= 1
            if lower >= upper:
                break
            buffer[lower], buffer[upper] = buffer[upper], buffer[lower]
            lower += 1
            upper -= 1
        return replace(self, stop=lower), replace(self, start=lower)


def as_buffer(values: Iterable[float] | FloatArray1D) -> FloatArray1D:
    """Copy `values` into a fresh float64 buffer that views can mutate safely."""
    if not isinstance(values, np.ndarray):
        values = list(values)
    return np.array(values, dtype=np.float64).ravel()

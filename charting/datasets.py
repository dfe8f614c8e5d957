"""CRUD over the ordered dataset collection of a ChartModel.

Structural operations return True when the collection changed so the caller
knows to regenerate and re-bind the dataset controls.
"""

from __future__ import annotations

import random

from .model import ChartModel, new_dataset
from .palettes import GLOBAL_PALETTE, LINE_WIDTH_RANGE, clamp

SAMPLE_VALUE_CEILING = 100


def add_dataset(model: ChartModel, *, rng: random.Random | None = None) -> int:
    """Append a new dataset seeded from the current last dataset.

    The new series has as many points as the last dataset, with freshly sampled
    values so it is visually distinct. Its color is the next palette entry by
    position (`count mod palette size`).

    Args:
        model: Model to mutate.
        rng: Optional random source (tests pass a seeded instance).

    Returns:
        Index of the new dataset.
    """

    source = rng or random
    count = len(model.datasets)
    length = len(model.datasets[-1].data) if model.datasets else len(model.labels)
    color = GLOBAL_PALETTE[count % len(GLOBAL_PALETTE)]
    model.datasets.append(
        new_dataset(
            label=f"Dataset {count + 1}",
            data=[float(source.randrange(SAMPLE_VALUE_CEILING)) for _ in range(length)],
            color=color,
        )
    )
    return count


def remove_dataset(model: ChartModel, index: int) -> bool:
    """Remove the dataset at `index` unless it is the only one left.

    Args:
        model: Model to mutate.
        index: Position of the dataset to remove.

    Returns:
        True when a dataset was removed, False when the call was a no-op.

    Raises:
        IndexError: When `index` does not address an existing dataset.
    """

    if len(model.datasets) <= 1:
        return False
    if not 0 <= index < len(model.datasets):
        raise IndexError(f"No dataset at index {index}.")
    del model.datasets[index]
    return True


def set_line_width_for_all(model: ChartModel, width: int) -> bool:
    """Apply one line width to every dataset (layout border-width slider)."""

    width = clamp(int(width), LINE_WIDTH_RANGE)
    for dataset in model.datasets:
        dataset.line_width = width
    return True

"""Tests for dataset add/remove operations."""

from __future__ import annotations

import copy

import pytest

from charting.colors import fill_from_line
from charting.datasets import add_dataset, remove_dataset, set_line_width_for_all
from charting.palettes import GLOBAL_PALETTE

pytestmark = pytest.mark.unit


def test_add_dataset_uses_next_palette_color(model, rng) -> None:
    """Each new dataset takes the palette entry at its position."""

    assert add_dataset(model, rng=rng) == 1
    assert add_dataset(model, rng=rng) == 2

    second, third = model.datasets[1], model.datasets[2]
    assert second.label == "Dataset 2"
    assert third.label == "Dataset 3"
    assert second.line_color == GLOBAL_PALETTE[1]
    assert third.line_color == GLOBAL_PALETTE[2]
    assert second.fill_color == fill_from_line(GLOBAL_PALETTE[1])


def test_add_dataset_matches_last_dataset_length(model, rng) -> None:
    """New series have as many points as the last dataset."""

    model.datasets[0].data = [1.0, 2.0, 3.0]
    add_dataset(model, rng=rng)

    values = model.datasets[1].data
    assert len(values) == 3
    assert all(0 <= value < 100 for value in values)


def test_add_dataset_wraps_palette(model, rng) -> None:
    """Colors cycle through the palette by position."""

    for _ in range(len(GLOBAL_PALETTE)):
        add_dataset(model, rng=rng)

    assert model.datasets[len(GLOBAL_PALETTE)].line_color == GLOBAL_PALETTE[0]


def test_remove_dataset_shifts_remaining(model, rng) -> None:
    """Removing index 0 shifts later datasets down."""

    add_dataset(model, rng=rng)
    add_dataset(model, rng=rng)

    assert remove_dataset(model, 0) is True
    assert [dataset.label for dataset in model.datasets] == ["Dataset 2", "Dataset 3"]


def test_add_dataset_leaves_existing_datasets_untouched(model, rng) -> None:
    """Appending only ever adds; earlier datasets keep every field."""

    model.datasets[0].label = "Revenue"
    model.datasets[0].line_width = 5
    model.datasets[0].dash_pattern = "dotted"
    add_dataset(model, rng=rng)
    before = copy.deepcopy(model.datasets)

    add_dataset(model, rng=rng)

    assert model.datasets[: len(before)] == before


def test_remove_first_after_two_adds_keeps_shifted_colors(model, rng) -> None:
    """The dataset that moves to index 0 keeps the color it was created with."""

    add_dataset(model, rng=rng)
    add_dataset(model, rng=rng)

    remove_dataset(model, 0)

    assert len(model.datasets) == 2
    assert model.datasets[0].line_color == GLOBAL_PALETTE[1]
    assert model.datasets[0].fill_color == fill_from_line(GLOBAL_PALETTE[1])
    assert model.datasets[1].line_color == GLOBAL_PALETTE[2]


def test_mixed_add_remove_sequence_never_empties(model, rng) -> None:
    """However adds and removes interleave, at least one dataset remains."""

    for step in range(60):
        if rng.random() < 0.4:
            add_dataset(model, rng=rng)
        else:
            remove_dataset(model, rng.randrange(len(model.datasets)))
        assert len(model.datasets) >= 1, f"emptied at step {step}"

    while remove_dataset(model, 0):
        pass
    assert len(model.datasets) == 1


def test_remove_last_dataset_is_noop(model) -> None:
    """The final dataset cannot be removed."""

    assert remove_dataset(model, 0) is False
    assert len(model.datasets) == 1


def test_remove_dataset_rejects_unknown_index(model, rng) -> None:
    """Indexes outside the collection raise IndexError."""

    add_dataset(model, rng=rng)
    with pytest.raises(IndexError):
        remove_dataset(model, 5)
    assert len(model.datasets) == 2


def test_set_line_width_for_all(model, rng) -> None:
    """Border width applies to every dataset."""

    add_dataset(model, rng=rng)
    set_line_width_for_all(model, 6)
    assert [dataset.line_width for dataset in model.datasets] == [6, 6]

    set_line_width_for_all(model, 25)
    assert [dataset.line_width for dataset in model.datasets] == [10, 10]


def test_palette_color_in_use(model) -> None:
    """Line colors are matched case-insensitively."""

    from charting.model import palette_color_in_use

    assert palette_color_in_use(model, "#4DC9F6") is True
    assert palette_color_in_use(model, "#f67019") is False

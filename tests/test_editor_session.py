"""Tests for the editor session lifecycle."""

from __future__ import annotations

import json

import pytest

from charting.exchange import export_model
from charting.model import default_model
from editor.bindings import dataset_control

pytestmark = pytest.mark.unit


def _post_data(session, **overrides) -> dict[str, str]:
    """Build form data equivalent to submitting the editor unchanged."""

    data: dict[str, str] = {
        "dataset-TOTAL_FORMS": str(len(session.model.datasets)),
        "dataset-INITIAL_FORMS": str(len(session.model.datasets)),
    }
    for key, value in session.forms.initial.items():
        if isinstance(value, bool):
            if value:
                data[key] = "on"
        else:
            data[key] = str(value)
    for key, value in overrides.items():
        data[key.replace("__", "-")] = value
    return data


def test_mount_new_instance_opens_editor(make_session, recording_library) -> None:
    """A new instance shows the editor on the data tab with a live preview."""

    session = make_session()

    assert session.view_state.editor_visible is True
    assert session.view_state.active_tab == "data"
    assert session.bridge.handle is recording_library.created[-1]
    assert session.bridge.handle.target == "chart-preview"


def test_restore_applies_model_then_widgets(make_session, recording_library) -> None:
    """Saved fields are restored before render; widget values after."""

    first = make_session()
    first.apply_chart_type("stepped")
    first.set_border_width(5)
    first.add_dataset()
    first.hide_editor()
    assert first.save() is True

    second = make_session(mount=False)
    seen: list[bool] = []
    second.schedule_after_render(lambda: seen.append(second.forms is not None))
    second.mount()

    assert seen == [True]
    assert second.model == first.model
    assert second.widgets == {"chart_type": "stepped", "border_width": 5}
    assert second.forms.initial["chart_type"] == "stepped"
    assert second.forms.layout.initial["border_width"] == 5
    assert second.view_state.editor_visible is False
    assert recording_library.created[-1].target == "chart-display"


def test_add_and_remove_dataset_regenerate_controls(make_session) -> None:
    """Structural changes rebuild bindings and the dataset formset."""

    session = make_session()
    session.add_dataset()

    assert dataset_control(1, "label") in session.registry
    assert len(session.forms.datasets.forms) == 2

    assert session.remove_dataset(0) is True
    assert dataset_control(1, "label") not in session.registry
    assert session.remove_dataset(0) is False


def test_commit_border_width_is_live(make_session) -> None:
    """The border width slider applies to every dataset on each tick."""

    session = make_session()
    session.add_dataset()

    assert session.commit("border_width", "9", event="change").applied is False
    result = session.commit("border_width", "7", event="input")

    assert result.applied is True
    assert result.readout == "7"
    assert [dataset.line_width for dataset in session.model.datasets] == [7, 7]

    result = session.commit("border_width", "40", event="input")
    assert result.readout == "10"
    assert session.widgets["border_width"] == 10
    assert [dataset.line_width for dataset in session.model.datasets] == [10, 10]


def test_commit_chart_type_and_unknown_controls(make_session) -> None:
    """Chart type commits run the transform; unknown controls raise."""

    session = make_session()

    assert session.commit("chart_type", "filled", event="change").applied is True
    assert session.model.datasets[0].fill_mode == "origin"
    assert session.commit("chart_type", "radar", event="change").applied is False
    with pytest.raises(KeyError):
        session.commit("no_such_control", "x", event="change")


def test_submit_commits_changed_fields(make_session) -> None:
    """Submitting the editor writes changed values through the bindings."""

    session = make_session()
    data = _post_data(session, chart_title="Quarterly", **{"dataset__0__data": "1, 2, 3"})

    assert session.submit(data) == []
    assert session.model.chart_title == "Quarterly"
    assert session.model.datasets[0].data == [1.0, 2.0, 3.0]
    assert session.model.datasets[0].fill_color == "rgba(77, 201, 246, 0.2)"


def test_submit_reports_invalid_fields(make_session) -> None:
    """Invalid values are reported and leave the model untouched."""

    session = make_session()
    errors = session.submit(_post_data(session, **{"dataset__0__line_width": "50"}))

    assert any(error.startswith("Dataset 1 line_width") for error in errors)
    assert session.model.datasets[0].line_width == 2


def test_attribute_changes(make_session) -> None:
    """Host attribute changes retitle, transform and reload the instance."""

    session = make_session()
    handle = session.bridge.handle

    session.attribute_changed("chart-title", "Your Chart Title", "Sales")
    assert session.model.chart_title == "Sales"
    assert handle.version == 1
    assert session.forms.initial["chart_title"] == "Sales"

    session.attribute_changed("chart-title", "Sales", "Sales")
    assert handle.version == 1

    session.add_dataset()
    session.attribute_changed("chart-type", None, "multi-axis")
    assert "secondary_axis_title" in session.registry
    assert "secondary_axis_title" in session.forms.options.fields

    session.save()
    session.attribute_changed("instance-id", "chart-1", "chart-2")
    assert session.instance_id == "chart-2"
    assert session.model == default_model()


def test_import_document_rerenders(make_session) -> None:
    """Imports replace the chart, re-render it and push an update."""

    source = make_session("source")
    source.add_dataset()
    source.set_title("Imported")
    document = export_model(source.model, chart_type="points")

    target = make_session("target")
    assert target.import_document(document) is True

    assert target.model == source.model
    assert target.widgets["chart_type"] == "points"
    assert target.bridge.handle.version == 1
    assert target.forms.initial["chart_title"] == "Imported"


def test_import_rejects_unusable_documents(make_session) -> None:
    """A bad document leaves the session unchanged."""

    session = make_session()

    assert session.import_document(None) is False
    assert session.import_document({"datasets": []}) is False
    assert session.model == default_model()


def test_export_and_update_chart(make_session) -> None:
    """Export returns a download; update chart redraws on the preview tab."""

    session = make_session("sales")
    filename, text = session.export()

    assert filename == "chart-settings-sales.json"
    assert json.loads(text)["chartTitle"] == "Your Chart Title"

    previous = session.bridge.handle
    session.update_chart()
    assert previous.disposed is True
    assert session.view_state.active_tab == "preview"


def test_unmount_releases_chart(make_session) -> None:
    """Unmounting disposes the live chart."""

    session = make_session()
    handle = session.bridge.handle
    session.unmount()

    assert handle.disposed is True
    assert session.bridge.handle is None
    assert session.mounted is False


def test_imported_values_resubmit_cleanly(make_session) -> None:
    """Values clamped on import pass the editor forms unchanged."""

    session = make_session()
    document = {
        "chartType": "bogus",
        "options": {"font": {"titleSize": 40, "axisSize": 30}},
        "datasets": [{"data": [1, 2], "lineWidth": 25, "pointRadius": 50}],
    }

    assert session.import_document(document) is True
    assert session.widgets["chart_type"] == "basic"
    assert session.submit(_post_data(session)) == []
    assert session.model.options.font.title_size == 32
    assert session.model.datasets[0].line_width == 10


def test_mounted_forms_require_mount(make_session) -> None:
    """The editor forms exist only once the session is mounted."""

    session = make_session(mount=False)
    with pytest.raises(RuntimeError, match="has not been mounted"):
        session.mounted_forms()

    session.mount()
    assert session.mounted_forms() is session.forms

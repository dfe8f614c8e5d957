"""Views for the chart editor.

Every page load mounts a fresh `EditorSession` for the instance in the URL,
which restores its persisted settings. POST actions mutate the session, save it
and redirect back (POST/redirect/GET); single-control commits from the page
script go through the JSON `commit` endpoint instead.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from django.conf import settings
from django.contrib import messages
from django.http import HttpRequest, HttpResponse, JsonResponse, QueryDict
from django.shortcuts import redirect, render
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from charting.chartjs import build_chartjs_config
from charting.exchange import parse_document
from charting.model import palette_color_in_use
from charting.palettes import PALETTES, TAB_CHOICES

from .forms import ImportSettingsForm
from .instance import clean_instance_id, derive_instance_id
from .persistence import store_for_request
from .rendering import LibraryLoadError, load_library
from .session import EditorSession
from .view_state import panel_classes, primary_surface

logger = logging.getLogger(__name__)

DEFAULT_CHARTJS_URL = "https://cdn.jsdelivr.net/npm/chart.js"
DEFAULT_COMMIT_DELAY_MS = 150
_COMMIT_EVENTS = frozenset({"input", "change"})
# Controls whose commit changes the dataset controls themselves.
_STRUCTURAL_CONTROLS = frozenset({"chart_type"})
# Host attributes an embedding page may set, applied in this order.
HOST_ATTRIBUTES = ("instance-id", "chart-type", "chart-title")


def _parse_int(value: object) -> int | None:
    """Parse an integer from POST/query input.

    Args:
        value: Raw value.

    Returns:
        Parsed integer, or None when missing or malformed.
    """

    if value is None or value == "":
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _load_error(request: HttpRequest, instance_id: str, exc: LibraryLoadError) -> HttpResponse:
    return render(
        request,
        "editor/load_error.html",
        {"instance_id": instance_id, "error": str(exc)},
        status=503,
    )


def _mount(request: HttpRequest, instance_id: str) -> EditorSession:
    return EditorSession(
        instance_id=instance_id,
        store=store_for_request(request),
        library=load_library(),
    ).mount()


@require_GET
def index(request: HttpRequest) -> HttpResponse:
    """Derive an instance id for a new editor and redirect to it.

    `?instance=<id>` pins an explicit id; otherwise the id is derived from the
    page path, the optional `?position=` and the current time.
    """

    instance_id = derive_instance_id(
        request.GET.get("instance"),
        position=_parse_int(request.GET.get("position")) or 0,
        parent=request.path,
        created_at=timezone.now(),
    )
    return redirect("editor:editor", instance_id=instance_id)


@require_http_methods(["GET", "POST"])
def chart_editor(request: HttpRequest, instance_id: str) -> HttpResponse:
    """Render the editor for one instance, or apply a POSTed action.

    Host attributes passed as query parameters (`?chart-title=...`,
    `?chart-type=...`, `?instance-id=...`) are applied and saved, then the page
    redirects to the clean URL of the resulting instance.
    """

    try:
        session = _mount(request, instance_id)
    except LibraryLoadError as exc:
        return _load_error(request, instance_id, exc)

    if request.method == "POST":
        _dispatch(request, session)
        session.save()
        return redirect("editor:editor", instance_id=session.instance_id)

    if any(name in request.GET for name in HOST_ATTRIBUTES):
        _apply_host_attributes(request, session, request.GET)
        session.save()
        return redirect("editor:editor", instance_id=session.instance_id)

    return render(request, "editor/editor.html", _editor_context(session))


def _editor_context(session: EditorSession) -> dict[str, Any]:
    forms = session.mounted_forms()
    active = panel_classes(session.view_state)
    return {
        "session": session,
        "instance_id": session.instance_id,
        "forms": forms,
        "dataset_rows": list(zip(forms.datasets.forms, session.model.datasets)),
        "view_state": session.view_state,
        "tabs": [(value, label, active[value]) for value, label in TAB_CHOICES],
        "palettes": PALETTES,
        "colors_in_use": {
            color for palette in PALETTES for color in palette.colors if palette_color_in_use(session.model, color)
        },
        "widgets": session.widgets,
        "surface": primary_surface(session.view_state),
        "chart_config": build_chartjs_config(session.model),
        "import_form": ImportSettingsForm(),
        "chartjs_url": getattr(settings, "CHART_BUILDER_CHARTJS_URL", DEFAULT_CHARTJS_URL),
        "commit_delay_ms": max(0, int(getattr(settings, "CHART_BUILDER_COMMIT_DELAY_MS", DEFAULT_COMMIT_DELAY_MS))),
    }


def _submit_editor_fields(request: HttpRequest, session: EditorSession) -> None:
    """Commit the editor form fields carried along with an action, if any."""

    if "dataset-TOTAL_FORMS" not in request.POST:
        return
    for error in session.submit(request.POST):
        messages.error(request, error)


def _dispatch(request: HttpRequest, session: EditorSession) -> None:
    """Apply one POSTed editor action to `session`."""

    action = (request.POST.get("action") or "submit").strip()

    if action == "submit":
        _submit_editor_fields(request, session)
        messages.success(request, "Chart settings applied.")
    elif action == "add_dataset":
        _submit_editor_fields(request, session)
        index = session.add_dataset()
        messages.success(request, f"Dataset {index + 1} added.")
    elif action == "remove_dataset":
        index = _parse_int(request.POST.get("index"))
        if index is None:
            messages.error(request, "Choose a dataset to remove.")
            return
        try:
            removed = session.remove_dataset(index)
        except IndexError:
            messages.error(request, "That dataset no longer exists.")
            return
        if removed:
            messages.success(request, f"Dataset {index + 1} removed.")
        else:
            messages.warning(request, "A chart needs at least one dataset.")
    elif action == "chart_type":
        try:
            session.apply_chart_type(request.POST.get("chart_type") or "")
        except ValueError:
            messages.error(request, "Unknown chart type.")
    elif action == "palette":
        color = request.POST.get("color") or ""
        index = session.apply_palette_color(color, selected_index=_parse_int(request.POST.get("dataset")))
        messages.success(request, f"Palette color applied to dataset {index + 1}.")
    elif action == "border_width":
        width = _parse_int(request.POST.get("border_width"))
        if width is None:
            messages.error(request, "Border width must be a whole number.")
            return
        session.set_border_width(width)
    elif action == "tab":
        try:
            session.switch_tab(request.POST.get("tab") or "")
        except ValueError:
            messages.error(request, "Unknown editor tab.")
    elif action == "show_editor":
        session.show_editor()
    elif action == "hide_editor":
        session.hide_editor()
    elif action == "update_chart":
        _submit_editor_fields(request, session)
        session.update_chart()
    elif action == "import":
        _import_settings(request, session)
    elif action == "attributes":
        _apply_host_attributes(request, session, request.POST)
    else:
        logger.warning("Ignoring unknown editor action %r for %s", action, session.instance_id)
        messages.error(request, "Unknown editor action.")


def _import_settings(request: HttpRequest, session: EditorSession) -> None:
    form = ImportSettingsForm(request.POST, request.FILES)
    if not form.is_valid():
        for errors in form.errors.values():
            for error in errors:
                messages.error(request, error)
        return
    document = parse_document(form.cleaned_data["settings_file"])
    if session.import_document(document):
        messages.success(request, "Chart settings imported.")
    else:
        messages.error(request, "Could not import chart settings: the file is not a valid settings document.")


def _current_attribute(session: EditorSession, name: str) -> str | None:
    if name == "instance-id":
        return session.instance_id
    if name == "chart-type":
        return session.widgets.get("chart_type")
    return session.model.chart_title


def _apply_host_attributes(request: HttpRequest, session: EditorSession, values: QueryDict) -> None:
    """Forward host attribute values to the session.

    `instance-id` is applied first so the other attributes land on the
    instance the host asked for.
    """

    for name in HOST_ATTRIBUTES:
        if name not in values:
            continue
        new = values.get(name)
        if name == "instance-id" and new is not None:
            new = clean_instance_id(new)
        try:
            session.attribute_changed(name, _current_attribute(session, name), new)
        except ValueError:
            messages.error(request, f"Unknown chart type {new!r}.")


@require_POST
def commit_control(request: HttpRequest, instance_id: str) -> JsonResponse:
    """Commit one control value sent by the page script.

    The body is `{"control", "value", "event"}`; the response reports whether
    the value was applied, the live read-out (range controls) and the updated
    Chart.js configuration.

    Each commit loads, changes and saves the whole snapshot, so two commits
    racing for one instance are last-writer-wins. The page script debounces
    live ticks and sends commits one at a time to keep a single page ordered.
    """

    try:
        payload = json.loads(request.body or b"{}")
    except ValueError:
        return JsonResponse({"error": "Request body must be JSON."}, status=400)
    if not isinstance(payload, dict):
        return JsonResponse({"error": "Request body must be a JSON object."}, status=400)

    control = str(payload.get("control") or "")
    event = str(payload.get("event") or "change")
    if event not in _COMMIT_EVENTS:
        return JsonResponse({"error": f"Unknown event {event!r}."}, status=400)

    try:
        session = _mount(request, instance_id)
    except LibraryLoadError as exc:
        return JsonResponse({"error": str(exc)}, status=503)

    try:
        result = session.commit(control, payload.get("value"), event=event)  # type: ignore[arg-type]
    except KeyError:
        return JsonResponse({"error": f"Unknown control {control!r}."}, status=400)

    if result.applied:
        session.bridge.update()
        session.save()
    return JsonResponse(
        {
            "control": result.control,
            "applied": result.applied,
            "readout": result.readout,
            "reload": result.applied and control in _STRUCTURAL_CONTROLS,
            "chart": build_chartjs_config(session.model),
        }
    )


@require_GET
def export_settings(request: HttpRequest, instance_id: str) -> HttpResponse:
    """Download the instance's settings as a JSON document."""

    try:
        session = _mount(request, instance_id)
    except LibraryLoadError as exc:
        return _load_error(request, instance_id, exc)

    filename, text = session.export()
    response = HttpResponse(text, content_type="application/json; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response

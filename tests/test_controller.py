"""Tests for the annotation UI controller state machine."""

import threading
import uuid

import pytest

from pointcloud_annotator.errors import RequestError
from pointcloud_annotator.models.annotation import Coordinates
from pointcloud_annotator.ui.adapter import ViewerAdapter
from pointcloud_annotator.ui.controller import (
    AnnotationController,
    ControllerState,
    marker_title,
)


class FakeClient:
    """In-memory stand-in for AnnotationClient."""

    def __init__(self, rows=None):
        self.rows = {row["annotationId"]: dict(row) for row in rows or []}
        self.fail_create = False
        self.fail_list = False
        self.fail_delete_ids = set()
        self.deleted = []
        self.created = []
        self._lock = threading.Lock()

    def list(self):
        if self.fail_list:
            raise RequestError(None, "Failed to fetch annotations: refused")
        return [dict(row) for row in self.rows.values()]

    def create(self, draft):
        if self.fail_create:
            raise RequestError(None, "Failed to create annotation: network down")
        row = {
            "annotationId": str(uuid.uuid4()),
            "x": float(draft["x"]),
            "y": float(draft["y"]),
            "z": float(draft["z"]),
            "text": draft["text"].strip(),
            "createdAt": "2024-01-01T00:00:00.000Z",
        }
        self.rows[row["annotationId"]] = row
        self.created.append(row)
        return dict(row)

    def delete(self, annotation_id):
        if annotation_id in self.fail_delete_ids:
            raise RequestError(500, "Failed to delete annotation: boom")
        with self._lock:
            self.deleted.append(annotation_id)
            self.rows.pop(annotation_id, None)


class FakeViewer(ViewerAdapter):

    def __init__(self, hit=Coordinates(1.0, 2.0, 3.0)):
        self.hit = hit
        self.markers = {}
        self._next = 0

    def translate_click_to_3d(self, ray_origin, ray_direction):
        return self.hit

    def place_marker(self, annotation_id, position, label):
        self._next += 1
        handle = f"m{self._next}"
        self.markers[handle] = (annotation_id, position, label)
        return handle

    def remove_marker(self, handle):
        del self.markers[handle]

    def remove_all_markers(self):
        self.markers.clear()

    def marker_ids(self):
        return sorted(annotation_id for annotation_id, _, _ in self.markers.values())


class RecordingNotifier:

    def __init__(self):
        self.messages = []

    def notify(self, title, body, **kwargs):
        self.messages.append((title, body, kwargs.get("kind")))

    @property
    def titles(self):
        return [title for title, _, _ in self.messages]


def _row(annotation_id, text="note", x=0.0, y=0.0, z=0.0):
    return {
        "annotationId": annotation_id,
        "x": x,
        "y": y,
        "z": z,
        "text": text,
        "createdAt": "2024-01-01T00:00:00.000Z",
    }


@pytest.fixture
def client():
    return FakeClient([_row("a", "first", 1, 2, 3), _row("b", "second", 4, 5, 6)])


@pytest.fixture
def viewer():
    return FakeViewer()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def answers():
    """Answers returned by the confirmation prompt, in order."""
    return []


@pytest.fixture
def controller(client, viewer, notifier, answers):
    def confirm(_message):
        return answers.pop(0) if answers else True

    ctrl = AnnotationController(client, viewer, notifier, confirm=confirm)
    ctrl.load()
    return ctrl


def _ids(controller):
    return sorted(a["annotationId"] for a in controller.annotations)


class TestLoad:

    def test_loads_list_and_markers(self, controller, viewer):
        assert _ids(controller) == ["a", "b"]
        assert viewer.marker_ids() == ["a", "b"]

    def test_reload_does_not_leak_markers(self, controller, viewer, client):
        client.rows.pop("a")
        assert controller.load()
        assert viewer.marker_ids() == ["b"]
        assert controller.marker_ids == {"b"}

    def test_failure_keeps_state_and_notifies(self, controller, client, notifier):
        client.fail_list = True
        assert controller.load() is False
        assert _ids(controller) == ["a", "b"]
        assert notifier.messages[-1][0] == "Error"
        assert notifier.messages[-1][2] == "error"


class TestCreationCycle:

    def test_click_opens_pending_form(self, controller):
        position = controller.handle_click((0, 0, 10), (0, 0, -1))
        assert position == Coordinates(1.0, 2.0, 3.0)
        assert controller.state is ControllerState.PENDING
        assert controller.pending.position == position

    def test_click_that_misses_cloud_is_ignored(self, controller, viewer):
        viewer.hit = None
        assert controller.handle_click((0, 0, 10), (0, 0, -1)) is None
        assert controller.state is ControllerState.IDLE

    def test_successful_save_appends_and_returns_to_idle(self, controller, viewer, notifier):
        controller.begin_annotation(Coordinates(1.5, -2.25, 0.0))
        controller.update_text("  corner crack ")
        annotation = controller.save()

        assert annotation["text"] == "corner crack"
        assert controller.state is ControllerState.IDLE
        assert controller.pending is None
        assert annotation in controller.annotations
        assert annotation["annotationId"] in viewer.marker_ids()
        assert notifier.titles[-1] == "Annotation Created"

    def test_failed_save_keeps_form_open_with_text(self, controller, client, viewer, notifier):
        client.fail_create = True
        controller.begin_annotation(Coordinates(1, 2, 3))
        controller.update_text("crack near window")

        assert controller.save() is None
        assert controller.state is ControllerState.PENDING
        assert controller.pending.text == "crack near window"
        assert _ids(controller) == ["a", "b"]
        assert [item.title for item in controller.items()] == ["first", "second"]
        assert viewer.marker_ids() == ["a", "b"]
        assert notifier.titles[-1] == "Save Failed"

        client.fail_create = False
        assert controller.save() is not None
        assert controller.state is ControllerState.IDLE

    def test_empty_text_is_rejected_locally(self, controller, client, notifier):
        controller.begin_annotation(Coordinates(1, 2, 3))
        controller.update_text("   ")

        assert controller.save() is None
        assert client.created == []
        assert controller.state is ControllerState.PENDING
        assert notifier.titles[-1] == "Validation Error"

    def test_text_over_limit_is_rejected_locally(self, controller, client):
        controller.begin_annotation(Coordinates(1, 2, 3))
        gauge = controller.update_text("a" * 257)

        assert gauge.level == "error"
        assert controller.save() is None
        assert client.created == []

    def test_cancel_discards_pending(self, controller, client):
        controller.begin_annotation(Coordinates(1, 2, 3))
        controller.update_text("never sent")

        assert controller.cancel()
        assert controller.state is ControllerState.IDLE
        assert controller.pending is None
        assert client.created == []

    def test_escape_cancels(self, controller):
        controller.begin_annotation(Coordinates(1, 2, 3))
        assert controller.handle_key("Escape")
        assert controller.state is ControllerState.IDLE
        assert controller.handle_key("Escape") is False

    def test_save_without_pending_does_nothing(self, controller, client):
        assert controller.save() is None
        assert client.created == []

    def test_click_during_save_is_ignored(self, controller, client):
        seen = {}

        def create(draft):
            seen["state"] = controller.state
            seen["accepted"] = controller.begin_annotation(Coordinates(9, 9, 9))
            seen["cancelled"] = controller.cancel()
            return FakeClient.create(client, draft)

        client.create = create
        controller.begin_annotation(Coordinates(1, 2, 3))
        controller.update_text("slow save")
        annotation = controller.save()

        assert seen == {"state": ControllerState.SAVING, "accepted": False, "cancelled": False}
        assert (annotation["x"], annotation["y"], annotation["z"]) == (1.0, 2.0, 3.0)


class TestTextGauge:

    @pytest.mark.parametrize(
        "text, count, level",
        [("", 0, "ok"), ("a" * 200, 200, "ok"), ("a" * 201, 201, "warning"),
         ("é" * 128, 256, "warning"), ("é" * 129, 258, "error")],
    )
    def test_levels(self, controller, text, count, level):
        gauge = controller.update_text(text)
        assert (gauge.byte_count, gauge.level) == (count, level)


class TestDelete:

    def test_confirmed_delete_removes_locally(self, controller, viewer, notifier):
        controller.select("a")
        assert controller.delete("a")

        assert _ids(controller) == ["b"]
        assert viewer.marker_ids() == ["b"]
        assert controller.selected_id is None
        assert notifier.titles[-1] == "Annotation Deleted"

    def test_declined_confirmation_makes_no_call(self, controller, client, answers):
        answers.append(False)
        assert controller.delete("a") is False
        assert client.deleted == []
        assert _ids(controller) == ["a", "b"]

    def test_failed_delete_leaves_local_state(self, controller, client, viewer, notifier):
        client.fail_delete_ids.add("a")
        assert controller.delete("a") is False

        assert _ids(controller) == ["a", "b"]
        assert viewer.marker_ids() == ["a", "b"]
        assert notifier.titles[-1] == "Delete Failed"

    def test_unknown_id_is_ignored(self, controller, client):
        assert controller.delete("zzz") is False
        assert client.deleted == []

    def test_second_delete_refused_while_first_in_flight(self, controller, client):
        results = {}

        def delete(annotation_id):
            results["busy"] = controller.is_busy("delete:a")
            results["nested"] = controller.delete("a")
            FakeClient.delete(client, annotation_id)

        client.delete = delete
        assert controller.delete("a")
        assert results == {"busy": True, "nested": False}
        assert not controller.is_busy("delete:a")


class TestClearAll:

    def test_clears_everything_when_all_deletes_succeed(self, controller, client, viewer):
        assert controller.clear_all()

        assert controller.annotations == []
        assert viewer.markers == {}
        assert sorted(client.deleted) == ["a", "b"]

    def test_any_failure_keeps_local_state(self, controller, client, viewer, notifier):
        client.fail_delete_ids.add("b")
        assert controller.clear_all() is False

        assert _ids(controller) == ["a", "b"]
        assert viewer.marker_ids() == ["a", "b"]
        assert client.deleted == ["a"]
        assert notifier.titles[-1] == "Clear Failed"

    def test_declined_confirmation(self, controller, client, answers):
        answers.append(False)
        assert controller.clear_all() is False
        assert client.deleted == []

    def test_deletes_run_concurrently(self, viewer, notifier):
        rows = [_row(f"id{i}") for i in range(4)]
        client = FakeClient(rows)
        barrier = threading.Barrier(4, timeout=5)
        original = client.delete

        def delete(annotation_id):
            barrier.wait()
            original(annotation_id)

        client.delete = delete
        controller = AnnotationController(client, viewer, notifier, confirm=lambda _m: True)
        controller.load()

        assert controller.clear_all()
        assert controller.annotations == []


class TestRenderModel:

    def test_items_format_coordinates_and_selection(self, controller):
        controller.select("b")
        items = controller.items()

        assert [(i.annotation_id, i.x, i.y, i.z, i.selected) for i in items] == [
            ("a", "1.00", "2.00", "3.00", False),
            ("b", "4.00", "5.00", "6.00", True),
        ]

    def test_item_titles_truncate_long_text(self, controller):
        controller.annotations[0]["text"] = "x" * 60
        titles = [item.title for item in controller.items()]

        assert titles[0] == "x" * 50 + "..."
        assert titles[1] == controller.annotations[1]["text"]

    def test_select_unknown_is_ignored(self, controller):
        controller.select("a")
        controller.select("nope")
        assert controller.selected_id == "a"

    def test_marker_title_truncates_long_text(self):
        assert marker_title("short") == "short"
        assert marker_title("x" * 60) == "x" * 50 + "..."

    def test_listeners_run_on_changes(self, controller):
        calls = []
        controller.add_listener(lambda: calls.append(controller.state))
        controller.begin_annotation(Coordinates(0, 0, 0))
        controller.cancel()
        assert calls == [ControllerState.PENDING, ControllerState.IDLE]

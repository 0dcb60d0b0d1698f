"""Viser GUI panel wired to the annotation controller."""

import logging
import threading
from typing import Optional

import viser

from ..core.validation import MAX_TEXT_BYTES
from .controller import AnnotationController, ControllerState

log = logging.getLogger(__name__)

CONFIRM_TIMEOUT_SECONDS = 120.0
NO_SELECTION = "(none)"


class AnnotationPanel:
    """
    Sidebar for creating, listing and deleting annotations.

    Viser runs callbacks on worker threads, so a confirmation dialog can
    block its callback until the user answers the modal.
    """

    def __init__(self, server: viser.ViserServer, controller: AnnotationController) -> None:
        self.server = server
        self.controller = controller
        self._local = threading.local()
        self._option_ids: dict[str, Optional[str]] = {}
        self._refreshing = False

        controller.confirm = self.confirm
        self._build()
        controller.add_listener(self.refresh)

        @server.on_client_connect
        def _(client: viser.ClientHandle) -> None:
            self._register_click(client)

    def _build(self) -> None:
        gui = self.server.gui
        with gui.add_folder("📍 Annotations", expand_by_default=True):
            self.status = gui.add_markdown("*Click on the point cloud to add an annotation*")
            self.text_input = gui.add_text("Text", initial_value="")
            self.byte_counter = gui.add_markdown(f"0 / {MAX_TEXT_BYTES} bytes")
            self.save_btn = gui.add_button("Save", color="green", icon=viser.Icon.CHECK)
            self.cancel_btn = gui.add_button("Cancel", icon=viser.Icon.X)

            self.list_md = gui.add_markdown("")
            self.dropdown = gui.add_dropdown(
                "Selected", options=[NO_SELECTION], initial_value=NO_SELECTION
            )
            self.delete_btn = gui.add_button("Delete Selected", color="red", icon=viser.Icon.TRASH)
            self.clear_btn = gui.add_button("Clear All", color="red", icon=viser.Icon.TRASH_X)
            self.reload_btn = gui.add_button("Reload", icon=viser.Icon.REFRESH)

        @self.text_input.on_update
        def _(_event) -> None:
            gauge = self.controller.update_text(self.text_input.value)
            marker = {"ok": "", "warning": " ⚠️", "error": " ❌"}[gauge.level]
            self.byte_counter.content = f"{gauge.byte_count} / {MAX_TEXT_BYTES} bytes{marker}"

        @self.save_btn.on_click
        def _(event: viser.GuiEvent) -> None:
            self._with_client(event, self.controller.save)

        @self.cancel_btn.on_click
        def _(_event) -> None:
            self.controller.cancel()

        @self.dropdown.on_update
        def _(_event) -> None:
            if self._refreshing:
                return
            self.controller.select(self._option_ids.get(self.dropdown.value))

        @self.delete_btn.on_click
        def _(event: viser.GuiEvent) -> None:
            annotation_id = self.controller.selected_id
            if annotation_id is not None:
                self._with_client(event, lambda: self.controller.delete(annotation_id))

        @self.clear_btn.on_click
        def _(event: viser.GuiEvent) -> None:
            self._with_client(event, self.controller.clear_all)

        @self.reload_btn.on_click
        def _(_event) -> None:
            self.controller.load()

        self.refresh()

    def _register_click(self, client: viser.ClientHandle) -> None:
        @client.scene.on_pointer_event(event_type="click")
        def _on_click(event: viser.ScenePointerEvent) -> None:
            position = self.controller.handle_click(event.ray_origin, event.ray_direction)
            if position is not None:
                self.text_input.value = ""

    def _with_client(self, event: viser.GuiEvent, action) -> None:
        self._local.client = event.client
        try:
            action()
        finally:
            self._local.client = None

    def confirm(self, message: str) -> bool:
        """Ask the client that triggered the action; False on dismissal or timeout."""
        client = getattr(self._local, "client", None)
        if client is None:
            log.warning("No client to confirm with: %s", message)
            return False

        answered = threading.Event()
        result = {"ok": False}

        with client.gui.add_modal("Confirm") as modal:
            client.gui.add_markdown(message)
            yes_btn = client.gui.add_button("Delete", color="red")
            no_btn = client.gui.add_button("Cancel")

            @yes_btn.on_click
            def _(_event) -> None:
                result["ok"] = True
                answered.set()

            @no_btn.on_click
            def _(_event) -> None:
                answered.set()

        answered.wait(CONFIRM_TIMEOUT_SECONDS)
        modal.close()
        return result["ok"]

    def refresh(self) -> None:
        """Sync control states and the annotation list with the controller."""
        controller = self.controller
        state = controller.state

        if state is ControllerState.IDLE:
            self.status.content = "*Click on the point cloud to add an annotation*"
            if self.text_input.value:
                self.text_input.value = ""
        else:
            p = controller.pending.position if controller.pending else None
            coords = f"X: {p.x:.2f}  Y: {p.y:.2f}  Z: {p.z:.2f}" if p else ""
            verb = "Saving" if state is ControllerState.SAVING else "New annotation at"
            self.status.content = f"**{verb}** {coords}"

        self.text_input.disabled = state is not ControllerState.PENDING
        self.save_btn.disabled = state is not ControllerState.PENDING
        self.cancel_btn.disabled = state is not ControllerState.PENDING

        items = controller.items()
        if items:
            lines = [
                f"- {'**' if item.selected else ''}{item.title}{'**' if item.selected else ''}"
                f" `({item.x}, {item.y}, {item.z})`"
                for item in items
            ]
            self.list_md.content = "\n".join(lines)
        else:
            self.list_md.content = (
                "No annotations yet\n\n*Click on the point cloud to add an annotation*"
            )

        self._option_ids = {NO_SELECTION: None}
        for item in items:
            label = f"{item.title[:30]} ({item.annotation_id[:8]})"
            self._option_ids[label] = item.annotation_id

        selected_label = NO_SELECTION
        for label, annotation_id in self._option_ids.items():
            if annotation_id is not None and annotation_id == controller.selected_id:
                selected_label = label

        self._refreshing = True
        try:
            self.dropdown.options = list(self._option_ids)
            self.dropdown.value = selected_label
        finally:
            self._refreshing = False

        selected = controller.selected_id
        self.delete_btn.disabled = selected is None or controller.is_busy(f"delete:{selected}")
        self.clear_btn.disabled = not items or controller.is_busy("clear")

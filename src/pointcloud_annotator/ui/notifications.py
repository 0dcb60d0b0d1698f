"""
Toast notifications shown in every connected viewer tab.

The controller reports outcomes by kind ("success", "error" or "info");
the manager turns that into a dismissible viser notification.
"""

import logging
from typing import Any

import viser

log = logging.getLogger(__name__)

KIND_COLORS = {"success": "green", "error": "red", "info": "blue"}


class NotificationManager:
    """
    Sends annotation toasts to viser clients.

    Args:
        server: Viser server whose clients receive the toasts
        auto_close_seconds: Time before a toast closes by itself
    """

    def __init__(self, server: viser.ViserServer, *, auto_close_seconds: float = 5.0) -> None:
        self.server = server
        self.auto_close_seconds = auto_close_seconds

    def notify(
        self,
        title: str,
        body: str,
        *,
        kind: str = "info",
        client: viser.ClientHandle | None = None,
    ) -> int:
        """
        Show a toast on one client, or on all of them.

        Returns:
            Number of clients the toast reached
        """
        if kind == "error":
            log.warning("%s: %s", title, body)

        targets = [client] if client is not None else list(self.server.get_clients().values())
        if not targets:
            log.info("No viewer connected for notification %r: %s", title, body)
            return 0

        options: dict[str, Any] = {
            "color": KIND_COLORS.get(kind, KIND_COLORS["info"]),
            "with_close_button": True,
            "auto_close_seconds": self.auto_close_seconds,
        }
        sent = 0
        for target in targets:
            try:
                target.add_notification(title=title, body=body, **options)
            except Exception as e:  # noqa: BLE001
                # A client can disconnect between listing and sending.
                log.warning(
                    "Failed to notify client %s: %s", getattr(target, "client_id", "?"), e
                )
                continue
            sent += 1
        return sent

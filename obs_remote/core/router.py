"""
core/router.py — Server push notifications → application event names.

Unknown update types are ignored so newer servers can add events freely.
"""

from __future__ import annotations

import logging
from typing import Any

from .events import EventBus

log = logging.getLogger(__name__)

UPDATE_EVENTS: dict[str, str] = {
    "StreamStatus": "stream.status",
    "StreamStarting": "stream.start",
    "StreamStopping": "stream.stop",
    "SwitchScenes": "scenes.switch",
    "ScenesChanged": "scenes.change",
    "SourceOrderChanged": "sources.order",
    "SourceChanged": "source.change",
    "RepopulateSources": "source.repopulate",
    "VolumeChanged": "volume.change",
}


class EventRouter:
    def __init__(self, bus: EventBus):
        self._bus = bus

    def route(self, update_type: str, message: dict[str, Any]) -> bool:
        """Publish ``message`` under its application event name. Returns False if unmapped."""
        event = UPDATE_EVENTS.get(update_type) if isinstance(update_type, str) else None
        if event is None:
            log.debug(f"Unhandled update type: {update_type}")
            return False
        self._bus.publish(event, message)
        return True

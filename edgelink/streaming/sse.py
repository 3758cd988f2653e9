"""Line-fed server-sent-events parser."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SSEEvent:
    """One complete event frame."""
    data: str
    event: str | None = None
    id: str | None = None
    retry: int | None = None


class SSEEventParser:
    """Receive input line by line and emit complete events."""

    def __init__(self) -> None:
        self._reset_buffer()
        self.last_event_id: str | None = None

    def _reset_buffer(self) -> None:
        self._event: str | None = None
        self._data: list[str] = []
        self._id: str | None = None
        self._retry: int | None = None

    def _finalize_event(self) -> SSEEvent | None:
        # Named events may arrive without data (e.g. a bare close signal)
        if not self._data and self._event is None:
            self._reset_buffer()
            return None
        event = SSEEvent(
            data="\n".join(self._data),
            event=self._event,
            id=self._id,
            retry=self._retry,
        )
        if self._id is not None:
            self.last_event_id = self._id
        self._reset_buffer()
        return event

    def feed_line(self, line: str | None) -> list[SSEEvent]:
        """Process one line of SSE text and return every completed event."""
        normalized = (line or "").rstrip("\r\n")
        events: list[SSEEvent] = []

        # Blank line terminates the current event
        if normalized == "":
            event = self._finalize_event()
            if event:
                events.append(event)
            return events

        # Comment / keep-alive
        if normalized.startswith(":"):
            return events

        field, sep, value = normalized.partition(":")
        if not sep:
            field, value = normalized, ""
        elif value.startswith(" "):
            value = value[1:]

        if field == "data":
            self._data.append(value)
        elif field == "event":
            self._event = value.strip() or None
        elif field == "id":
            self._id = value.strip() or None
        elif field == "retry":
            try:
                self._retry = int(value.strip())
            except ValueError:
                # Non-integer retry values are ignored
                self._retry = None
        return events

    def flush(self) -> list[SSEEvent]:
        """Call at end of stream to emit any unterminated event."""
        event = self._finalize_event()
        return [event] if event else []

"""Custom exceptions for webhook event handling."""


class EventDecodeError(Exception):
    """Raised when a webhook payload is not valid JSON or does not match the expected schema."""

    def __init__(self, event_type: str, message: str) -> None:
        """Initialize the exception with the event type label and the decoding failure."""
        super().__init__(f"failed to decode {event_type} event: {message}")
        self.event_type = event_type

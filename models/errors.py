"""Exceptions shared by the matching, labeling and session layers."""


class ValidationError(ValueError):
    """Raised when an uploaded image is not an accepted type or is empty."""


class LabelFormatError(Exception):
    """Raised by the label detector when an image cannot be decoded or is unsupported."""


class LabelRequestError(Exception):
    """Raised by the label detector when the labeling request itself fails."""


class InvalidTransition(Exception):
    """Raised when a session event is not allowed in the current phase."""

    def __init__(self, phase, event) -> None:
        super().__init__(f"Event {event.value!r} is not allowed while {phase.value!r}")
        self.phase = phase
        self.event = event

"""
Custom exception types for the G-code pipeline.
Keep this focused and non-redundant; prefer built-ins where appropriate.
"""


class GcodeError(RuntimeError):
    """A structurally valid command that cannot be realized."""

    def __init__(self, message: str, line_number: int | None = None):
        self.original_message = message
        self.line_number = line_number
        super().__init__(str(self))

    def __str__(self):
        if self.line_number is None:
            return self.original_message
        return f"Line {self.line_number}: {self.original_message}"


class CannedCycleError(GcodeError):
    """Canned cycle invoked without its required parameters."""


class ArcGeometryError(GcodeError):
    """Arc endpoints, centre and radius do not describe a circle."""

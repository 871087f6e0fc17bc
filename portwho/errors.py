class ToolError(RuntimeError):
    """A process-listing facility could not be run or gave an error."""


class NoProcessFound(ToolError):
    """An owner listing held no usable data row."""

    def __init__(self, message: str = "no process found"):
        super().__init__(message)

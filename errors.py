"""Error taxonomy for the reply tree engine."""


class ReplyTreeError(Exception):
    """Base class for engine errors."""


class ConfigurationError(ReplyTreeError):
    """The lookup tree violates its schema (bad row or missing branch)."""


class ResourceLoadError(ReplyTreeError):
    """A startup resource could not be read or parsed."""


class NotReadyError(ReplyTreeError):
    """A query arrived before startup finished."""


class DegradedProcessingWarning(UserWarning):
    """A preprocessing stage failed and passed its input through unchanged."""

    def __init__(self, stage: str, reason: object = None):
        self.stage = stage
        self.reason = reason
        message = f"{stage} stage degraded to pass-through"
        if reason is not None:
            message += f": {reason}"
        super().__init__(message)

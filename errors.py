"""
Error taxonomy for the prediction pipeline.

Every pipeline failure derives from ``PipelineError`` and carries a
``recoverable`` flag.  ``status_for_error`` turns any exception raised by
a pipeline stage into a ``StageStatus`` the UI can display, so that no
stage failure takes the app down.
"""

from dataclasses import dataclass


class PipelineError(Exception):
    """Base class for all pipeline failures."""

    recoverable = True
    default_message = "The pipeline stage failed."

    def __init__(self, message: str = ""):
        super().__init__(message or self.default_message)


class DataLoadError(PipelineError):
    """The data source is unreachable or is not tabular text with a header."""

    default_message = "Error loading data. Please check the CSV file."


class InsufficientDataError(PipelineError):
    """No valid observations remain after cleaning."""

    default_message = "No valid data available for training."


class ModelNotReadyError(PipelineError):
    """Prediction was requested before a model was trained or loaded."""

    default_message = "Model not ready yet."


class TrainingInProgressError(PipelineError):
    """A training run is already in flight on this model instance."""

    default_message = "Training is already in progress; keeping the current model."


class TrainingCancelledError(PipelineError):
    """A training run was abandoned before completing."""

    default_message = "Training was cancelled; keeping the current model."


class IncompatibleModelError(PipelineError):
    """A cached model does not match the expected architecture."""

    default_message = "Cached model is incompatible with the current schema."


class ModelNotFoundError(PipelineError):
    """No cached model exists under the requested key."""

    default_message = "No cached model found."


@dataclass(frozen=True)
class StageStatus:
    """Human-readable outcome of a pipeline stage."""

    message: str
    ok: bool = True
    recoverable: bool = True


def status_for_error(exc: Exception) -> StageStatus:
    """Map an exception raised by a pipeline stage to a ``StageStatus``.

    Unknown exceptions are reported as non-recoverable so the UI can
    suggest reloading instead of retrying the same action.
    """
    if isinstance(exc, PipelineError):
        return StageStatus(message=str(exc), ok=False, recoverable=exc.recoverable)
    return StageStatus(
        message=f"Unexpected error: {exc}",
        ok=False,
        recoverable=False,
    )

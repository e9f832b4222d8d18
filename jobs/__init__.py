"""Background evaluation jobs."""
from .dispatcher import NO_RECORDING_MESSAGE, JobDispatcher
from .job import EvaluationJob

__all__ = ["EvaluationJob", "JobDispatcher", "NO_RECORDING_MESSAGE"]

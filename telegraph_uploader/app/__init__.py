"""Application layer: checkpointing, the upload pipeline and the CLI."""

from .checkpoint import CheckpointStore
from .job import JobReport, run_job
from .pipeline import UploadPipeline

__all__ = ["CheckpointStore", "JobReport", "UploadPipeline", "run_job"]

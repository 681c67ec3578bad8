"""
Delivery of capture artifacts and job status to external services.
"""

from .artifact_pipeline import ArtifactPipeline, encode_data_uri, validate_artifact
from .status_reporter import StatusReporter

__all__ = ["ArtifactPipeline", "StatusReporter", "encode_data_uri", "validate_artifact"]

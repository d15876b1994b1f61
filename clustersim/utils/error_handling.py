"""
Error Handling Module

Provides the exception hierarchy for the simulator.

The clustering algorithms themselves do not raise for ordinary input; these
exceptions cover the outer layers (configuration, dataset selection,
algorithm lookup).
"""

import time
from typing import Any, Optional


# =============================================================================
# Custom Exception Hierarchy
# =============================================================================


class ClusterSimError(Exception):
    """Base exception for all simulator errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.timestamp = time.time()

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/CLI output."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp,
        }


# Configuration Errors
class ConfigurationError(ClusterSimError):
    """Error in simulator configuration."""
    pass


# Clustering Errors
class ClusteringError(ClusterSimError):
    """Base class for clustering algorithm errors."""
    pass


class InvalidAlgorithmError(ClusteringError):
    """Unknown or unsupported clustering algorithm."""
    pass


class InvalidParameterError(ClusteringError):
    """Algorithm parameter has the wrong type."""
    pass


# Dataset Errors
class DatasetError(ClusterSimError):
    """Base class for dataset errors."""
    pass


class UnknownDatasetError(DatasetError):
    """Unknown synthetic dataset name."""
    pass

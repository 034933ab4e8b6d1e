"""
Observability for model-vault: structured logging shared by the streaming
pipeline, the file store and the HTTP API.
"""

from .logging import (
    get_api_logger,
    # Layer-specific logger factories
    get_infrastructure_logger,
    # Base logger factory
    get_logger,
    get_processing_logger,
    get_storage_logger,
    # Setup
    setup_logging,
)

__all__ = [
    # Setup
    "setup_logging",
    # Base
    "get_logger",
    # Layer-specific
    "get_infrastructure_logger",
    "get_processing_logger",
    "get_storage_logger",
    "get_api_logger",
]

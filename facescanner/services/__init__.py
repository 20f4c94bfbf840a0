"""High-level services for the facescanner layer.

This package contains the orchestrator that serializes enrollment,
recognition and deletion on the native engine.
"""

from facescanner.services.orchestrator import FaceOrchestrator

__all__ = [
    "FaceOrchestrator",
]

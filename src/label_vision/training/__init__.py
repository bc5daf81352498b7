"""
Training package: storage backends, image hashing, the TrainingStore of
user corrections and the annotation session workflow.
"""

from .storage import KeyValueStore, InMemoryKeyValueStore, FileKeyValueStore
from .hashing import generate_image_hash
from .training_store import TrainingStore, export_filename
from .session import AnnotationSession, rect_from_drag

__all__ = [
    'KeyValueStore',
    'InMemoryKeyValueStore',
    'FileKeyValueStore',
    'generate_image_hash',
    'TrainingStore',
    'export_filename',
    'AnnotationSession',
    'rect_from_drag',
]

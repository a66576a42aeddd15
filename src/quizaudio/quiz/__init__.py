"""Quiz persistence, creation and manifest resolution."""

from .builder import QuizBuilder
from .manifest import ManifestResolver
from .models import Manifest, ManifestItem, Quiz
from .repository import QuizRepository

__all__ = [
    "Manifest",
    "ManifestItem",
    "ManifestResolver",
    "Quiz",
    "QuizBuilder",
    "QuizRepository",
]

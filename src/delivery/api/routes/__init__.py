"""Route group exports."""

from . import assignments, health

__all__ = ["assignments", "health"]

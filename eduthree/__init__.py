"""EduThree maintenance toolkit: location normalization and orphaned-data cleanup."""

__version__ = "0.1.0"

# Scheduling Engines Package
from .fsrs_engine import FsrsEngine

__all__ = ["FsrsEngine"]

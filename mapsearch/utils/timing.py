"""Timing utilities for performance monitoring."""
import time
from mapsearch.utils.logging import log_structured


class Timer:
    """Context manager for timing code blocks."""
    
    def __init__(self, operation: str, **fields):
        """
        Initialize timer.
        
        Args:
            operation: Name of the operation being timed
            **fields: Extra structured fields logged with the timing
        """
        self.operation = operation
        self.fields = fields
        self.start = None
        self.elapsed = None
    
    def __enter__(self):
        self.start = time.monotonic()
        return self
    
    def __exit__(self, exc_type, exc, tb):
        self.elapsed = time.monotonic() - self.start
        log_structured(
            "debug",
            f"Operation {self.operation} completed",
            operation=self.operation,
            elapsed_seconds=round(self.elapsed, 4),
            failed=exc_type is not None,
            **self.fields
        )

"""Static HTML structure and semantics grader."""

__version__ = "0.3.0"

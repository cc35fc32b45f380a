"""
CCCP Command-Line Interface
===========================

- **cccp**: compile, build and run a CCCP program

Implemented as a Click application.
"""

__all__ = ["cccp"]

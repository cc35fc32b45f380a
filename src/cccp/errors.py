"""
CCCP Error Hierarchy
====================

This module defines the exception hierarchy shared by every part of the
CCCP toolchain. All exceptions inherit from CCCPError, allowing callers
to catch everything the package raises with a single except clause.

Exception Hierarchy
-------------------
CCCPError (base)
├── LangError (compiler pipeline, see cccp.lang.errors)
└── ToolchainError - C compiler missing or not runnable

Design Philosophy
-----------------
Compiler errors capture source location information (filename, line,
column) so that messages point straight at the offending text:

    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class CCCPError(Exception):
    """
    Base exception for all CCCP errors.

        try:
            compiler.compile_file("program.cccp")
        except CCCPError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Tokens, AST nodes and diagnostics all carry one of these. The frozen
    design ensures locations cannot be accidentally modified.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Toolchain Exceptions
# =============================================================================

class ToolchainError(CCCPError):
    """
    The external C toolchain could not be used at all.

    Raised when the configured C compiler executable does not exist or
    cannot be started. An ordinary compile failure of the generated C
    is not an exception: it is reported through BuildResult.

    Attributes:
        command: The command line that was attempted
    """

    def __init__(self, message: str, command: Optional[list[str]] = None):
        self.command = command or []
        super().__init__(message)

"""
CCCP - A Small Language Compiled Through C
==========================================

This package compiles a small imperative language into C99, then builds
and runs the result with the platform C compiler.

Main Components
---------------
- **lang**: the compiler (lexer, parser, AST, code generator)
- **toolchain**: builds and runs the generated C
- **cli**: the cccp command

Quick Start
-----------
    >>> from cccp import compile_cccp, CToolchain
    >>> c_source = compile_cccp('func add(a, b) { return a + b; } print(add(2, 3));')
    >>> result = CToolchain().compile_and_run(c_source)
    >>> result.stdout
    '5\\n'

Or from the command line:
    $ cccp program.cccp
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from cccp.errors import CCCPError, SourceLocation, ToolchainError
from cccp.lang import (
    CCCPCompiler,
    CompilerOptions,
    CompilerResult,
    compile_cccp,
    LangError,
    CompilationError,
)
from cccp.toolchain import (
    CToolchain,
    ToolchainConfig,
    BuildResult,
    RunResult,
    ExecutionResult,
)

__all__ = [
    # Version info
    "__version__",
    # Compiler
    "CCCPCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_cccp",
    # Toolchain
    "CToolchain",
    "ToolchainConfig",
    "BuildResult",
    "RunResult",
    "ExecutionResult",
    # Exception hierarchy
    "CCCPError",
    "SourceLocation",
    "LangError",
    "CompilationError",
    "ToolchainError",
]

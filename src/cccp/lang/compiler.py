"""
CCCP Compiler Main Module
=========================

This module provides the main compiler interface for CCCP. It
orchestrates the compilation pipeline:

    Source → Lex → Parse → Generate → C source

Usage
-----
Command line:
    $ cccp hello.cccp --emit-c

Programmatic:
    >>> from cccp.lang import compile_cccp
    >>> c_source = compile_cccp('print("hi");')

Error Handling
--------------
The parser collects every syntax error in the file. If there are any,
code generation is not attempted and a CompilationError carrying all of
them is raised. A semantic error found during generation is reported the
same way, so callers only need to handle CompilationError.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from cccp.lang.lexer import Lexer
from cccp.lang.parser import Parser
from cccp.lang.codegen import CodeGenerator
from cccp.lang.ast import Program
from cccp.lang.errors import (
    LangError,
    CompilationError,
    ErrorCollector,
)

logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        filename: Name used in diagnostics for string input
        emit_comments: Include the banner, section and auto-print
            comments in the generated C
    """
    filename: str = "<input>"
    emit_comments: bool = True


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        success: True if compilation succeeded
        c_source: Generated C code (if successful)
        ast: Abstract syntax tree (if parsing succeeded)
        function_names: Names in the generated function table, in order
        errors: Diagnostics collected during compilation
    """
    filename: str = ""
    success: bool = False
    c_source: str = ""
    ast: Optional[Program] = None
    function_names: list[str] = field(default_factory=list)
    errors: list[LangError] = field(default_factory=list)


class CCCPCompiler:
    """
    Compiler from CCCP source to C.

    Example:
        compiler = CCCPCompiler()
        result = compiler.compile_file("hello.cccp")
        print(result.c_source)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()
        self._errors = ErrorCollector()

    def compile_source(self, source: str, filename: Optional[str] = None) -> CompilerResult:
        """
        Compile CCCP source code to C.

        Args:
            source: CCCP source code string
            filename: Source filename for error messages (defaults to
                options.filename)

        Returns:
            CompilerResult containing the C source

        Raises:
            CompilationError: If the source has syntax or semantic errors
        """
        filename = filename or self.options.filename
        self._errors.clear()
        result = CompilerResult(filename=filename)
        source_lines = source.splitlines()

        logger.debug(f"Compiling {filename} ({len(source_lines)} lines)")

        program = self._parse(source, filename, source_lines)
        result.ast = program

        if not self._errors.has_errors():
            try:
                generator = CodeGenerator(
                    emit_comments=self.options.emit_comments,
                    source_lines=source_lines,
                )
                result.c_source = generator.generate(program)
                result.function_names = list(generator.functions)
                result.success = True
            except LangError as e:
                self._errors.add(e)

        result.errors = list(self._errors.errors)

        if self._errors.has_errors():
            logger.debug(f"Compilation of {filename} failed with {self._errors.error_count()} errors")
            raise CompilationError(self._errors.report(), self._errors.errors)

        logger.debug(f"Generated {len(result.c_source.splitlines())} lines of C")
        return result

    def compile_file(self, filepath: str) -> CompilerResult:
        """
        Compile a CCCP source file to C.

        Raises:
            CompilationError: If compilation fails
            FileNotFoundError: If source file not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.compile_source(source, str(filepath))

    def _parse(self, source: str, filename: str, source_lines: list[str]) -> Program:
        """Lex and parse, moving any syntax errors into the collector."""
        parser = Parser(Lexer(source, filename), source_lines)
        program, _ = parser.parse_program()
        for diagnostic in parser.diagnostics:
            self._errors.add(diagnostic)
        return program


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_cccp(source: str, filename: str = "<input>") -> str:
    """
    Compile CCCP source code to C.

    Args:
        source: CCCP source code
        filename: Source filename for error messages

    Returns:
        Generated C source code

    Raises:
        CompilationError: If compilation fails

    Example:
        >>> c_source = compile_cccp('var x = 5; print(x);')
        >>> "int x = 5;" in c_source
        True
    """
    compiler = CCCPCompiler(CompilerOptions(filename=filename))
    return compiler.compile_source(source).c_source


def compile_file(filepath: str, output_path: Optional[str] = None) -> str:
    """
    Compile a CCCP source file to C.

    Args:
        filepath: Path to the source file
        output_path: Optional path to write the C output

    Returns:
        Generated C source code
    """
    compiler = CCCPCompiler()
    result = compiler.compile_file(filepath)

    if output_path:
        Path(output_path).write_text(result.c_source, encoding="utf-8")

    return result.c_source

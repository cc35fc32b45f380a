"""
CCCP Compiler Error Hierarchy
=============================

This module defines the exception hierarchy for the compiler pipeline.
All exceptions inherit from LangError, which itself inherits from the
package-wide CCCPError.

Exception Hierarchy
-------------------
LangError (base for all compiler errors)
├── CompilationError - aggregate report of collected diagnostics
├── LangSyntaxError - parser diagnostics (recorded, never raised)
│   ├── UnexpectedTokenError - "expected X, got Y"
│   ├── NoPrefixRuleError - token cannot start an expression
│   ├── InvalidIntegerError - integer literal out of range
│   └── UnbalancedBraceError - stray '}' or unterminated block
├── LangSemanticError - raised by the code generator
│   ├── UndeclaredIdentifierError - reference to an unknown variable
│   ├── DuplicateDeclarationError - name declared twice in one scope
│   ├── LangTypeError - int/string mismatch
│   ├── ArgumentCountError - wrong number of call arguments
│   └── InvalidStringLiteralError - literal with no valid C spelling
└── CodeGenError - emission cannot proceed
    ├── UnsupportedFeatureError - construct valid to parse, not to emit
    └── UnknownNodeError - AST node of unrecognised shape

Error Message Format
--------------------
    hello.cccp:3:7: error: undeclared identifier 'nmae'
        print(nmae);
              ^
    hint: did you mean 'name'?
"""

from typing import Optional, List

from cccp.errors import CCCPError, SourceLocation


# =============================================================================
# Base Compiler Exception
# =============================================================================

class LangError(CCCPError):
    """
    Base exception for all compiler errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The actual source text at the error location
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

            hello.cccp:5:12: error: undeclared identifier 'nmae'
                print(nmae);
                      ^
            hint: did you mean 'name'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class CompilationError(LangError):
    """
    Aggregate error raised when parsing produced diagnostics.

    The message is the pre-formatted report from ErrorCollector, so no
    further prefix is added. The individual diagnostics stay available
    for programmatic inspection.
    """

    def __init__(self, report: str, diagnostics: Optional[List[LangError]] = None):
        self.diagnostics = list(diagnostics or [])
        super().__init__(report)

    def _format_message(self) -> str:
        return self.message


# =============================================================================
# Syntax Diagnostics (Parser)
# =============================================================================

class LangSyntaxError(LangError):
    """
    Syntax error in source code.

    The parser never raises these. Each one is recorded in the parser's
    ErrorCollector so that every independent error in a file is reported
    in a single pass.
    """
    pass


class UnexpectedTokenError(LangSyntaxError):
    """
    The parser required one token kind and found another.

    Example:
        var = 5;    // expected IDENT, got '='
    """

    def __init__(
        self,
        expected: str,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        self.found = found
        super().__init__(
            f"expected {expected}, got {found}",
            location=location,
            source_line=source_line,
        )


class NoPrefixRuleError(LangSyntaxError):
    """A token that cannot begin an expression appeared where one was required."""

    def __init__(
        self,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        super().__init__(
            f"no prefix parse rule for {found}",
            location=location,
            hint="expected an identifier, literal, '(' or 'func'",
            source_line=source_line,
        )


class InvalidIntegerError(LangSyntaxError):
    """Integer literal that does not fit in a signed 64-bit value."""

    def __init__(
        self,
        text: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.text = text
        super().__init__(
            f'could not parse "{text}" as integer',
            location=location,
            source_line=source_line,
        )


class UnbalancedBraceError(LangSyntaxError):
    """A '}' with no open block, or end of input inside a block."""
    pass


# =============================================================================
# Semantic Errors (Code Generation)
# =============================================================================

class LangSemanticError(LangError):
    """
    Semantic error found while generating C.

    The program parsed, but cannot be turned into consistent C. The
    generator raises these and emits nothing.
    """
    pass


class UndeclaredIdentifierError(LangSemanticError):
    """
    Reference to a variable that is not visible in the current scope.

    Typical cause: a variable declared inside an 'if' block used after
    the block has closed.
    """

    def __init__(
        self,
        identifier: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_identifiers: Optional[List[str]] = None,
    ):
        self.identifier = identifier
        self.similar_identifiers = similar_identifiers or []

        hint = None
        if self.similar_identifiers:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_identifiers[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undeclared identifier '{identifier}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class DuplicateDeclarationError(LangSemanticError):
    """Name declared more than once in the same scope."""

    def __init__(
        self,
        identifier: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        reason: Optional[str] = None,
    ):
        self.identifier = identifier
        self.original_location = original_location

        hint = reason
        if hint is None and original_location:
            hint = f"'{identifier}' was first declared at {original_location}"

        super().__init__(
            f"redeclaration of '{identifier}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class LangTypeError(LangSemanticError):
    """
    Type mismatch between int and string values.

    Raised when:
        - a string is combined arithmetically with anything but a
          literal/variable concatenation
        - a variable is assigned a value of the other type
        - a function returns a string
    """

    def __init__(
        self,
        message: str,
        expected_type: Optional[str] = None,
        actual_type: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.expected_type = expected_type
        self.actual_type = actual_type

        if hint is None and expected_type and actual_type:
            hint = f"expected '{expected_type}', got '{actual_type}'"

        super().__init__(
            message,
            location=location,
            hint=hint,
            source_line=source_line,
        )


class ArgumentCountError(LangSemanticError):
    """Call to a program function with the wrong number of arguments."""

    def __init__(
        self,
        function_name: str,
        expected: int,
        actual: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.function_name = function_name
        self.expected = expected
        self.actual = actual

        word = "argument" if expected == 1 else "arguments"
        super().__init__(
            f"'{function_name}' expects {expected} {word}, got {actual}",
            location=location,
            source_line=source_line,
        )


class InvalidStringLiteralError(LangSemanticError):
    """
    String literal that cannot be copied into C as written.

    Example:
        print("C:\\");    // the backslash would escape the closing quote
    """

    def __init__(
        self,
        text: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.text = text
        super().__init__(
            "string literal ends with a backslash",
            location=location,
            hint="backslashes are copied into C unchanged; write '\\\\' for a literal backslash",
            source_line=source_line,
        )


# =============================================================================
# Code Generation Errors
# =============================================================================

class CodeGenError(LangError):
    """The code generator reached something it cannot emit."""
    pass


class UnsupportedFeatureError(CodeGenError):
    """
    Construct that parses but has no C rendering.

    Examples:
        - a function literal used as a value
        - a named function declared inside another function
    """

    def __init__(
        self,
        feature: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        alternative: Optional[str] = None,
    ):
        self.feature = feature
        super().__init__(
            f"unsupported feature: {feature}",
            location=location,
            hint=alternative,
            source_line=source_line,
        )


class UnknownNodeError(CodeGenError):
    """An AST node the generator has no rule for. Always a compiler bug."""

    def __init__(self, node: object, location: Optional[SourceLocation] = None):
        self.node = node
        super().__init__(
            f"internal error: cannot generate code for {type(node).__name__}",
            location=location,
        )


# =============================================================================
# Error Collection (for multi-error reporting)
# =============================================================================

class ErrorCollector:
    """
    Collects diagnostics for batch reporting.

    The parser records every syntax error here and keeps going, so a
    single run reports all of the problems in a file.

    Example:
        collector = ErrorCollector()
        collector.add(UnexpectedTokenError("IDENT", "'='"))
        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self, max_errors: int = 100):
        self.errors: List[LangError] = []
        self.max_errors = max_errors

    def add(self, error: LangError) -> None:
        """Add an error to the collection."""
        self.errors.append(error)

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def should_stop(self) -> bool:
        """Return True if max_errors has been reached."""
        return len(self.errors) >= self.max_errors

    def error_count(self) -> int:
        return len(self.errors)

    def messages(self) -> List[str]:
        """Plain diagnostic messages, without location or context."""
        return [error.message for error in self.errors]

    def report(self) -> str:
        """Format all errors for display."""
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        error_word = "error" if len(self.errors) == 1 else "errors"
        lines.append(f"{len(self.errors)} {error_word}")

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors."""
        self.errors.clear()

    def raise_if_errors(self) -> None:
        """Raise a CompilationError if any errors were collected."""
        if self.has_errors():
            raise CompilationError(self.report(), self.errors)

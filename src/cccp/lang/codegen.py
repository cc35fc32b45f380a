"""
C Code Generator for CCCP
=========================

This module generates C99 source code from the CCCP AST.

Code Generation Strategy
------------------------
Generation runs in two passes over the top-level statements:

1. Extraction: named function declarations and top-level anonymous
   function literals are moved into a function table (anonymous ones
   are named func_0, func_1, ...). Everything else is kept, in order,
   as the body of main().
2. Emission: fixed includes, the concat_strings helper, a forward
   declaration for every function, every function definition, and
   finally main().

Type Inference
--------------
Every binding is either int or string (char*). The type of a value is
inferred from the expression that produces it:

| Expression                                   | Type   |
|----------------------------------------------|--------|
| "literal"                                    | string |
| identifier                                   | its recorded type |
| literal + literal, literal + strvar,         | string |
| strvar + literal                             |        |
| anything else                                | int    |

Scoping
-------
Each function body, if-block and bare block pushes a frame on a scope
chain and pops it on exit, so names declared inside a block are not
visible after it. A function body starts a fresh chain holding only its
parameters; main's variables are not visible inside functions.
A declaration that shadows a visible variable, or that shares a name with a
function, is emitted under a numbered C name (x_1, x_2, ...).

Example output:
    #include <stdio.h>
    ...
    int add(int a, int b);

    int add(int a, int b) {
        return a + b;
    }

    int main(void) {
        printf("%d\\n", add(2, 3));
        return 0;
    }
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from cccp.errors import SourceLocation
from cccp.lang.ast import (
    Program,
    Statement,
    LetStatement,
    AssignStatement,
    PrintStatement,
    IfStatement,
    BlockStatement,
    ExternStatement,
    ReturnStatement,
    FunctionDeclaration,
    ExpressionStatement,
    Expression,
    Identifier,
    IntegerLiteral,
    StringLiteral,
    InfixExpression,
    CallExpression,
    FunctionLiteral,
)
from cccp.lang.types import ValueType, FUNCTION_VALUE_TYPE
from cccp.lang.errors import (
    UndeclaredIdentifierError,
    DuplicateDeclarationError,
    LangTypeError,
    ArgumentCountError,
    UnsupportedFeatureError,
    UnknownNodeError,
    InvalidStringLiteralError,
)

logger = logging.getLogger(__name__)

# Name of the runtime helper emitted into every program
CONCAT_HELPER = "concat_strings"

# Names the generated C already gives a meaning to: C99 keywords, the
# entry point, the helper and the library names the helper and printing use
C_RESERVED_NAMES = frozenset({
    "auto", "break", "case", "char", "const", "continue", "default", "do",
    "double", "else", "enum", "extern", "float", "for", "goto", "if",
    "inline", "int", "long", "register", "restrict", "return", "short",
    "signed", "sizeof", "static", "struct", "switch", "typedef", "union",
    "unsigned", "void", "volatile", "while", "_Bool", "_Complex", "_Imaginary",
    "main", CONCAT_HELPER, "printf", "strlen", "strcpy", "strcat", "strcmp",
    "malloc", "NULL",
})

INCLUDES = ("stdio.h", "string.h", "stdlib.h")

CONCAT_HELPER_SOURCE = (
    f"char* {CONCAT_HELPER}(const char* a, const char* b) {{",
    "    char* result = malloc(strlen(a) + strlen(b) + 1);",
    "    strcpy(result, a);",
    "    strcat(result, b);",
    "    return result;",
    "}",
)

INDENT = "    "


# =============================================================================
# Symbol Table for Code Generation
# =============================================================================

@dataclass
class SymbolInfo:
    """
    A variable or parameter visible during generation.

    Attributes:
        name: Symbol name
        value_type: Inferred type of the variable
        location: Where it was declared
        is_parameter: True for function parameters
        c_name: Name used in the generated C (differs from name when the
            symbol shadows an outer one or would clash with a function)
    """
    name: str
    value_type: ValueType
    location: Optional[SourceLocation] = None
    is_parameter: bool = False
    c_name: str = ""

    def __post_init__(self):
        if not self.c_name:
            self.c_name = self.name


@dataclass
class FunctionInfo:
    """
    An entry in the function table.

    Attributes:
        name: C function name (generated for anonymous functions)
        parameters: Parameter identifiers, in order
        body: The function body
        location: Where the function was written
    """
    name: str
    parameters: tuple[Identifier, ...]
    body: BlockStatement
    location: Optional[SourceLocation] = None

    @property
    def param_count(self) -> int:
        return len(self.parameters)


class ScopeChain:
    """
    Stack of name -> SymbolInfo frames.

    Lookup searches from the innermost frame outwards. Declarations
    always go into the innermost frame, so popping a frame forgets
    everything declared since the matching push.
    """

    def __init__(self):
        self._frames: list[dict[str, SymbolInfo]] = [{}]

    @property
    def depth(self) -> int:
        return len(self._frames)

    def push(self) -> None:
        self._frames.append({})

    def pop(self) -> None:
        if len(self._frames) == 1:
            raise RuntimeError("cannot pop the outermost scope")
        self._frames.pop()

    def declare(self, symbol: SymbolInfo) -> None:
        self._frames[-1][symbol.name] = symbol

    def lookup(self, name: str) -> Optional[SymbolInfo]:
        """Find the innermost visible symbol with this name."""
        for frame in reversed(self._frames):
            if name in frame:
                return frame[name]
        return None

    def lookup_current(self, name: str) -> Optional[SymbolInfo]:
        """Find a symbol declared in the innermost frame only."""
        return self._frames[-1].get(name)

    def visible_names(self) -> list[str]:
        names: list[str] = []
        for frame in reversed(self._frames):
            names.extend(n for n in frame if n not in names)
        return names

    def visible_c_names(self) -> set[str]:
        return {symbol.c_name for frame in self._frames for symbol in frame.values()}


@dataclass
class GenerationState:
    """
    Mutable state of one generate() call.

    A fresh instance is created at the start of every call, so nothing
    carries over between compilations.
    """
    output: list[str] = field(default_factory=list)
    functions: dict[str, FunctionInfo] = field(default_factory=dict)
    scopes: ScopeChain = field(default_factory=ScopeChain)
    current_function: Optional[FunctionInfo] = None
    anonymous_counter: int = 0
    indent_level: int = 0


# =============================================================================
# Code Generator Class
# =============================================================================

class CodeGenerator:
    """
    Generates C source from a CCCP Program.

    Semantic problems (undeclared identifiers, redeclarations, type
    mismatches, wrong argument counts) raise a LangSemanticError and
    nothing is returned; there is no partial output.

    Usage:
        generator = CodeGenerator()
        c_source = generator.generate(program)
    """

    def __init__(
        self,
        emit_comments: bool = True,
        source_lines: Optional[list[str]] = None,
    ):
        """
        Initialize the code generator.

        Args:
            emit_comments: Include the banner, section and auto-print
                comments in the output
            source_lines: Original source lines for error context
        """
        self.emit_comments = emit_comments
        self.source_lines = source_lines or []
        self._state = GenerationState()

    def generate(self, program: Program) -> str:
        """
        Generate C source code from the AST.

        Args:
            program: The root AST node

        Returns:
            Complete C source text

        Raises:
            LangSemanticError: If the program is not semantically valid
            CodeGenError: If the program contains a construct with no
                C rendering
        """
        self._state = GenerationState()

        main_statements = self._extract_functions(program.statements)
        logger.debug(
            f"Extracted {len(self._state.functions)} functions, "
            f"{len(main_statements)} statements for main"
        )

        self._emit_header(program)
        self._emit_function_declarations()
        self._emit_function_definitions()
        self._emit_main(main_statements)

        return "\n".join(self._state.output) + "\n"

    @property
    def functions(self) -> dict[str, FunctionInfo]:
        """The function table built by the last generate() call."""
        return dict(self._state.functions)

    # =========================================================================
    # Output Methods
    # =========================================================================

    def _emit(self, line: str = "") -> None:
        """Emit a line at the current indentation."""
        if line:
            self._state.output.append(f"{INDENT * self._state.indent_level}{line}")
        else:
            self._state.output.append("")

    def _emit_comment(self, comment: str) -> None:
        if self.emit_comments:
            self._emit(f"// {comment}")

    def _get_source_line(self, location: Optional[SourceLocation]) -> Optional[str]:
        """Get source line for error reporting."""
        if location is not None and 0 < location.line <= len(self.source_lines):
            return self.source_lines[location.line - 1]
        return None

    # =========================================================================
    # Pass 1: Function Extraction
    # =========================================================================

    def _extract_functions(self, statements: tuple[Statement, ...]) -> list[Statement]:
        """
        Move top-level functions into the function table.

        Returns:
            The remaining statements, in source order, for main()
        """
        main_statements: list[Statement] = []

        for stmt in statements:
            if isinstance(stmt, FunctionDeclaration):
                self._register_function(FunctionInfo(
                    name=stmt.name,
                    parameters=stmt.parameters,
                    body=stmt.body,
                    location=stmt.location,
                ))
            elif (isinstance(stmt, ExpressionStatement)
                    and isinstance(stmt.expression, FunctionLiteral)):
                literal = stmt.expression
                name = f"func_{self._state.anonymous_counter}"
                self._state.anonymous_counter += 1
                self._register_function(FunctionInfo(
                    name=name,
                    parameters=literal.parameters,
                    body=literal.body,
                    location=literal.location,
                ))
            else:
                main_statements.append(stmt)

        return main_statements

    def _register_function(self, info: FunctionInfo) -> None:
        self._check_reserved(info.name, info.location)
        for param in info.parameters:
            self._check_reserved(param.name, param.location)

        existing = self._state.functions.get(info.name)
        if existing is not None:
            raise DuplicateDeclarationError(
                info.name,
                location=info.location,
                original_location=existing.location,
                source_line=self._get_source_line(info.location),
            )

        self._state.functions[info.name] = info

    def _check_reserved(self, name: str, location: Optional[SourceLocation]) -> None:
        """Reject names the generated C already uses."""
        if name in C_RESERVED_NAMES:
            raise DuplicateDeclarationError(
                name,
                location=location,
                source_line=self._get_source_line(location),
                reason=f"'{name}' is reserved by the generated C program",
            )

    def _c_name_for(self, name: str, taken: set[str]) -> str:
        """
        Choose the C name for a new variable or parameter.

        The source name is kept unless a visible C variable or a function
        already uses it; then a numbered suffix is added. In C a variable
        is in scope inside its own initializer, so a shadowing declaration
        such as var x = x + 1 must not reuse the outer C name.
        """
        taken = taken | set(self._state.functions)
        if name not in taken:
            return name
        suffix = 1
        while f"{name}_{suffix}" in taken:
            suffix += 1
        return f"{name}_{suffix}"

    def _parameter_c_names(self, info: FunctionInfo) -> list[str]:
        taken: set[str] = set()
        names = []
        for param in info.parameters:
            c_name = self._c_name_for(param.name, taken)
            taken.add(c_name)
            names.append(c_name)
        return names

    # =========================================================================
    # Pass 2: Emission
    # =========================================================================

    def _emit_header(self, program: Program) -> None:
        """Emit the banner, includes and runtime helper."""
        if program.location is not None:
            self._emit_comment(f"Generated by cccp from {program.location.filename}")
        else:
            self._emit_comment("Generated by cccp")
        for header in INCLUDES:
            self._emit(f"#include <{header}>")
        self._emit()

        self._emit_comment("String concatenation helper; the caller owns the result")
        for line in CONCAT_HELPER_SOURCE:
            self._emit(line)
        self._emit()

    def _signature(self, info: FunctionInfo) -> str:
        c_type = FUNCTION_VALUE_TYPE.c_type
        if info.parameters:
            params = ", ".join(f"{c_type} {n}" for n in self._parameter_c_names(info))
        else:
            params = "void"
        return f"{c_type} {info.name}({params})"

    def _emit_function_declarations(self) -> None:
        if not self._state.functions:
            return

        self._emit_comment("Function declarations")
        for info in self._state.functions.values():
            self._emit(f"{self._signature(info)};")
        self._emit()

    def _emit_function_definitions(self) -> None:
        if not self._state.functions:
            return

        self._emit_comment("Function definitions")
        for info in self._state.functions.values():
            self._generate_function(info)
            self._emit()

    def _generate_function(self, info: FunctionInfo) -> None:
        """Generate one function definition."""
        logger.debug(f"Generating function {info.name}({info.param_count} params)")

        state = self._state
        saved_scopes = state.scopes
        saved_function = state.current_function

        state.scopes = ScopeChain()
        state.current_function = info
        for param, c_name in zip(info.parameters, self._parameter_c_names(info)):
            if state.scopes.lookup_current(param.name) is not None:
                raise DuplicateDeclarationError(
                    param.name,
                    location=param.location,
                    source_line=self._get_source_line(param.location),
                    reason=f"parameter '{param.name}' appears twice in '{info.name}'",
                )
            state.scopes.declare(SymbolInfo(
                param.name, FUNCTION_VALUE_TYPE, param.location,
                is_parameter=True, c_name=c_name,
            ))

        self._emit(f"{self._signature(info)} {{")
        state.indent_level += 1
        for stmt in info.body.statements:
            self._generate_statement(stmt)
        if not info.body.statements or not isinstance(info.body.statements[-1], ReturnStatement):
            self._emit("return 0;")
        state.indent_level -= 1
        self._emit("}")

        state.scopes = saved_scopes
        state.current_function = saved_function

    def _emit_main(self, statements: list[Statement]) -> None:
        self._state.scopes = ScopeChain()
        self._state.current_function = None

        self._emit("int main(void) {")
        self._state.indent_level += 1
        for stmt in statements:
            self._generate_statement(stmt)
        self._emit("return 0;")
        self._state.indent_level -= 1
        self._emit("}")

    # =========================================================================
    # Statement Generation
    # =========================================================================

    def _generate_statement(self, stmt: Statement) -> None:
        """Generate code for any statement."""
        if isinstance(stmt, LetStatement):
            self._generate_let(stmt)
        elif isinstance(stmt, AssignStatement):
            self._generate_assign(stmt)
        elif isinstance(stmt, PrintStatement):
            self._generate_print(stmt)
        elif isinstance(stmt, IfStatement):
            self._generate_if(stmt)
        elif isinstance(stmt, BlockStatement):
            self._emit("{")
            self._generate_block_body(stmt)
            self._emit("}")
        elif isinstance(stmt, ExternStatement):
            self._emit(f"// extern {stmt.name} declared (handled by C headers)")
        elif isinstance(stmt, ReturnStatement):
            self._generate_return(stmt)
        elif isinstance(stmt, ExpressionStatement):
            self._generate_expression_statement(stmt)
        elif isinstance(stmt, FunctionDeclaration):
            raise UnsupportedFeatureError(
                f"nested function declaration '{stmt.name}'",
                location=stmt.location,
                source_line=self._get_source_line(stmt.location),
                alternative="declare functions at the top level",
            )
        else:
            raise UnknownNodeError(stmt, getattr(stmt, "location", None))

    def _generate_block_body(self, block: BlockStatement) -> None:
        """Generate a block's statements in a new scope, one level in."""
        state = self._state
        state.scopes.push()
        state.indent_level += 1
        for stmt in block.statements:
            self._generate_statement(stmt)
        state.indent_level -= 1
        state.scopes.pop()

    def _generate_let(self, stmt: LetStatement) -> None:
        """Generate a variable declaration: var x [= value]"""
        scopes = self._state.scopes

        existing = scopes.lookup_current(stmt.name)
        if existing is not None:
            reason = None
            if existing.is_parameter:
                reason = f"'{stmt.name}' is a parameter of '{self._state.current_function.name}'"
            raise DuplicateDeclarationError(
                stmt.name,
                location=stmt.location,
                original_location=existing.location,
                source_line=self._get_source_line(stmt.location),
                reason=reason,
            )
        self._check_reserved(stmt.name, stmt.location)

        # The initializer is generated before the declaration so that it
        # still refers to any outer binding of the same name.
        if stmt.value is None:
            value_type, value = ValueType.INT, None
        else:
            value_type = self.infer_type(stmt.value)
            value = self._generate_expression(stmt.value)

        symbol = SymbolInfo(
            stmt.name, value_type, stmt.location,
            c_name=self._c_name_for(stmt.name, scopes.visible_c_names()),
        )
        scopes.declare(symbol)
        if value is None:
            self._emit(f"{value_type.c_type} {symbol.c_name};")
        else:
            self._emit(f"{value_type.c_type} {symbol.c_name} = {value};")

    def _generate_assign(self, stmt: AssignStatement) -> None:
        """
        Generate an assignment: x = value

        Assigning to a name that is not visible declares it in the
        current scope.
        """
        scopes = self._state.scopes
        value_type = self.infer_type(stmt.value)
        value = self._generate_expression(stmt.value)

        symbol = scopes.lookup(stmt.name)
        if symbol is None:
            self._check_reserved(stmt.name, stmt.location)
            symbol = SymbolInfo(
                stmt.name, value_type, stmt.location,
                c_name=self._c_name_for(stmt.name, scopes.visible_c_names()),
            )
            scopes.declare(symbol)
            self._emit(f"{value_type.c_type} {symbol.c_name} = {value};")
            return

        if symbol.value_type is not value_type:
            raise LangTypeError(
                f"cannot assign a {value_type} value to {symbol.value_type} variable '{stmt.name}'",
                expected_type=str(symbol.value_type),
                actual_type=str(value_type),
                location=stmt.location,
                source_line=self._get_source_line(stmt.location),
            )

        self._emit(f"{symbol.c_name} = {value};")

    def _generate_print(self, stmt: PrintStatement) -> None:
        value_type = self.infer_type(stmt.value)
        value = self._generate_expression(stmt.value)
        self._emit(self._printf(value_type, value))

    def _printf(self, value_type: ValueType, value: str) -> str:
        return f'printf("{value_type.printf_format}\\n", {value});'

    def _generate_if(self, stmt: IfStatement) -> None:
        condition = self._generate_expression(stmt.condition)
        self._emit(f"if ({condition}) {{")
        self._generate_block_body(stmt.consequence)
        if stmt.alternative is not None:
            self._emit("} else {")
            self._generate_block_body(stmt.alternative)
        self._emit("}")

    def _generate_return(self, stmt: ReturnStatement) -> None:
        if stmt.value is None:
            self._emit("return 0;")
            return

        if self.infer_type(stmt.value).is_string:
            where = self._state.current_function
            owner = f"function '{where.name}'" if where else "main"
            raise LangTypeError(
                f"{owner} cannot return a string",
                expected_type=str(FUNCTION_VALUE_TYPE),
                actual_type=str(ValueType.STRING),
                location=stmt.location,
                source_line=self._get_source_line(stmt.location),
            )

        self._emit(f"return {self._generate_expression(stmt.value)};")

    def _generate_expression_statement(self, stmt: ExpressionStatement) -> None:
        """
        Generate a bare expression.

        In main() the value is printed automatically; inside a function
        it is only evaluated.
        """
        value = self._generate_expression(stmt.expression)

        if self._state.current_function is not None:
            self._emit(f"{value};")
            return

        self._emit_comment(f"Auto-print: {value}")
        self._emit(self._printf(self.infer_type(stmt.expression), value))

    # =========================================================================
    # Type Inference
    # =========================================================================

    def infer_type(self, expr: Expression) -> ValueType:
        """Infer the type of an expression in the current scope."""
        if isinstance(expr, StringLiteral):
            return ValueType.STRING
        if isinstance(expr, Identifier):
            symbol = self._state.scopes.lookup(expr.name)
            return symbol.value_type if symbol else ValueType.INT
        if isinstance(expr, InfixExpression) and self._is_simple_concat(expr):
            return ValueType.STRING
        return ValueType.INT

    def _is_string_variable(self, expr: Expression) -> bool:
        if not isinstance(expr, Identifier):
            return False
        symbol = self._state.scopes.lookup(expr.name)
        return symbol is not None and symbol.value_type.is_string

    def _is_simple_concat(self, expr: InfixExpression) -> bool:
        """True for literal + literal, literal + strvar and strvar + literal."""
        if expr.operator != "+":
            return False
        left_literal = isinstance(expr.left, StringLiteral)
        right_literal = isinstance(expr.right, StringLiteral)
        return (
            (left_literal and right_literal)
            or (left_literal and self._is_string_variable(expr.right))
            or (self._is_string_variable(expr.left) and right_literal)
        )

    def _is_string_comparison(self, expr: InfixExpression) -> bool:
        """True for == or != with a string-typed operand (emitted via strcmp)."""
        return expr.operator in ("==", "!=") and (
            self.infer_type(expr.left).is_string
            or self.infer_type(expr.right).is_string
        )

    # =========================================================================
    # Expression Generation
    # =========================================================================

    def _generate_expression(self, expr: Expression) -> str:
        """Return the C text of an expression."""
        if isinstance(expr, IntegerLiteral):
            return str(expr.value)
        if isinstance(expr, StringLiteral):
            self._check_string_literal(expr)
            return c_string_literal(expr.value)
        if isinstance(expr, Identifier):
            return self._generate_identifier(expr)
        if isinstance(expr, InfixExpression):
            return self._generate_infix(expr)
        if isinstance(expr, CallExpression):
            return self._generate_call(expr)
        if isinstance(expr, FunctionLiteral):
            raise UnsupportedFeatureError(
                "function literal used as a value",
                location=expr.location,
                source_line=self._get_source_line(expr.location),
                alternative="declare it at the top level with 'func name(...)'",
            )
        raise UnknownNodeError(expr, getattr(expr, "location", None))

    def _check_string_literal(self, expr: StringLiteral) -> None:
        """Text is copied verbatim, so a trailing backslash would escape the closing quote."""
        trailing = len(expr.value) - len(expr.value.rstrip("\\"))
        if trailing % 2:
            raise InvalidStringLiteralError(
                expr.value,
                location=expr.location,
                source_line=self._get_source_line(expr.location),
            )

    def _generate_identifier(self, expr: Identifier) -> str:
        symbol = self._state.scopes.lookup(expr.name)
        if symbol is not None:
            return symbol.c_name

        if expr.name in self._state.functions:
            raise UnsupportedFeatureError(
                f"function '{expr.name}' used as a value",
                location=expr.location,
                source_line=self._get_source_line(expr.location),
                alternative=f"call it: {expr.name}(...)",
            )

        candidates = self._state.scopes.visible_names() + list(self._state.functions)
        raise UndeclaredIdentifierError(
            expr.name,
            location=expr.location,
            source_line=self._get_source_line(expr.location),
            similar_identifiers=find_similar_names(expr.name, candidates),
        )

    def _generate_infix(self, expr: InfixExpression) -> str:
        operator = expr.operator

        if operator == "+" and self._is_simple_concat(expr):
            return self._generate_concat(expr)

        left_type = self.infer_type(expr.left)
        right_type = self.infer_type(expr.right)

        if self._is_string_comparison(expr):
            if left_type is not right_type:
                raise LangTypeError(
                    f"cannot compare {left_type} with {right_type} using '{operator}'",
                    location=expr.location,
                    source_line=self._get_source_line(expr.location),
                )
            left = self._generate_expression(expr.left)
            right = self._generate_expression(expr.right)
            return f"(strcmp({left}, {right}) {operator} 0)"

        if left_type.is_string or right_type.is_string:
            if operator == "+":
                message = "unsupported string concatenation"
                hint = ("only literal + literal, literal + variable and "
                        "variable + literal can be concatenated")
            else:
                message = f"operator '{operator}' cannot be applied to a string"
                hint = None
            raise LangTypeError(
                message,
                location=expr.location,
                source_line=self._get_source_line(expr.location),
                hint=hint,
            )

        left = self._generate_operand(expr.left)
        right = self._generate_operand(expr.right)
        return f"{left} {operator} {right}"

    def _generate_operand(self, expr: Expression) -> str:
        """Parenthesise nested arithmetic so the source grouping survives."""
        text = self._generate_expression(expr)
        if (isinstance(expr, InfixExpression)
                and not self._is_simple_concat(expr)
                and not self._is_string_comparison(expr)):
            return f"({text})"
        return text

    def _generate_concat(self, expr: InfixExpression) -> str:
        """
        Generate a string concatenation.

        Two literals are folded into one; otherwise the helper builds
        the result at run time.
        """
        if isinstance(expr.left, StringLiteral) and isinstance(expr.right, StringLiteral):
            self._check_string_literal(expr.left)
            self._check_string_literal(expr.right)
            return c_string_literal(expr.left.value + expr.right.value)

        left = self._generate_expression(expr.left)
        right = self._generate_expression(expr.right)
        return f"{CONCAT_HELPER}({left}, {right})"

    def _generate_call(self, expr: CallExpression) -> str:
        """
        Generate a function call.

        Calls to program functions are checked for argument count and
        int arguments. Any other callee is assumed to come from the C
        headers and is passed through unchecked.
        """
        if not isinstance(expr.function, Identifier):
            raise UnsupportedFeatureError(
                "calling the result of an expression",
                location=expr.location,
                source_line=self._get_source_line(expr.location),
                alternative="call functions by name",
            )

        name = expr.function.name
        info = self._state.functions.get(name)
        if info is None and self._state.scopes.lookup(name) is not None:
            raise LangTypeError(
                f"variable '{name}' cannot be called",
                location=expr.location,
                source_line=self._get_source_line(expr.location),
            )
        if info is not None:
            if len(expr.arguments) != info.param_count:
                raise ArgumentCountError(
                    name,
                    info.param_count,
                    len(expr.arguments),
                    location=expr.location,
                    source_line=self._get_source_line(expr.location),
                )
            for argument in expr.arguments:
                if self.infer_type(argument).is_string:
                    raise LangTypeError(
                        f"cannot pass a string to '{name}'",
                        expected_type=str(FUNCTION_VALUE_TYPE),
                        actual_type=str(ValueType.STRING),
                        location=argument.location,
                        source_line=self._get_source_line(argument.location),
                    )

        arguments = ", ".join(self._generate_expression(a) for a in expr.arguments)
        return f"{name}({arguments})"


# =============================================================================
# Helpers
# =============================================================================

def c_string_literal(value: str) -> str:
    """
    Quote a string for C.

    The text is emitted verbatim except for raw newline, carriage
    return and tab characters, which C does not allow inside a literal.
    """
    escaped = value.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    return f'"{escaped}"'


def find_similar_names(name: str, candidates: list[str]) -> list[str]:
    """
    Find names similar to an unknown one, for "did you mean" hints.

    Uses a simple edit distance heuristic; at most 3 suggestions.
    """
    name_lower = name.lower()
    similar = []

    for candidate in candidates:
        candidate_lower = candidate.lower()
        if (
            candidate_lower == name_lower or
            abs(len(candidate) - len(name)) <= 1 and
            _edit_distance(name_lower, candidate_lower) <= 2
        ):
            similar.append(candidate)

    return similar[:3]


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    distances = range(len(s2) + 1)
    for i, c1 in enumerate(s1):
        new_distances = [i + 1]
        for j, c2 in enumerate(s2):
            if c1 == c2:
                new_distances.append(distances[j])
            else:
                new_distances.append(1 + min((
                    distances[j],
                    distances[j + 1],
                    new_distances[-1]
                )))
        distances = new_distances

    return distances[-1]

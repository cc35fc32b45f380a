"""
CCCP Abstract Syntax Tree (AST) Definitions
===========================================

This module defines the AST node types produced by the CCCP parser and
consumed by the code generator.

Node Hierarchy
--------------
ASTNode (base)
├── Program - root node, ordered top-level statements
├── Statements
│   ├── LetStatement - var name [= value]
│   ├── AssignStatement - name = value
│   ├── PrintStatement - print(value)
│   ├── IfStatement - if condition { ... }
│   ├── BlockStatement - { ... }
│   ├── ExternStatement - extern name;
│   ├── ReturnStatement - return [value]
│   ├── FunctionDeclaration - func name(params) { ... }
│   └── ExpressionStatement - expression evaluated for its value
└── Expressions
    ├── Identifier - unresolved name
    ├── IntegerLiteral - decimal integer
    ├── StringLiteral - "text"
    ├── InfixExpression - left op right
    ├── CallExpression - callee(arguments)
    └── FunctionLiteral - func(params) { ... }

Design Notes
------------
- All nodes are frozen dataclasses; child sequences are tuples, so the
  tree cannot change once the parser has built it
- Each node may carry its source location, which is ignored when
  nodes are compared
- Identifiers are never resolved here; scope resolution belongs to the
  code generator
"""

from dataclasses import dataclass, field, fields
from typing import Any, Optional

from cccp.errors import SourceLocation


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass(frozen=True)
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location where this node appears (keyword-only)
    """
    location: Optional[SourceLocation] = field(
        default=None, compare=False, repr=False, kw_only=True
    )


@dataclass(frozen=True)
class Expression(ASTNode):
    """Base class for all expression nodes."""
    pass


@dataclass(frozen=True)
class Statement(ASTNode):
    """Base class for all statement nodes."""
    pass


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class Identifier(Expression):
    """Reference to a variable, parameter or function by name."""
    name: str


@dataclass(frozen=True)
class IntegerLiteral(Expression):
    value: int


@dataclass(frozen=True)
class StringLiteral(Expression):
    """String constant. The value is the raw text between the quotes."""
    value: str


@dataclass(frozen=True)
class InfixExpression(Expression):
    """
    Binary operation.

    Attributes:
        operator: One of "+", "-", "*", "/", "==", "!="
        left: Left operand
        right: Right operand
    """
    operator: str
    left: Expression
    right: Expression


@dataclass(frozen=True)
class CallExpression(Expression):
    """
    Function call.

    The callee is an arbitrary expression so that chained calls such as
    f(1)(2) parse. The code generator only accepts identifier callees.

    Attributes:
        function: The callee expression
        arguments: Argument expressions, in order
    """
    function: Expression
    arguments: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class FunctionLiteral(Expression):
    """
    Anonymous function: func(a, b) { ... }

    Attributes:
        parameters: Parameter names, in order
        body: The function body
    """
    parameters: tuple[Identifier, ...]
    body: "BlockStatement"


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass(frozen=True)
class BlockStatement(Statement):
    """Braced statement list; also the body of functions and if statements."""
    statements: tuple[Statement, ...] = ()


@dataclass(frozen=True)
class LetStatement(Statement):
    """
    Variable declaration.

        var x = 5;
        var greeting;

    Attributes:
        name: The declared variable name
        value: Optional initializer
    """
    name: str
    value: Optional[Expression] = None


@dataclass(frozen=True)
class AssignStatement(Statement):
    name: str
    value: Expression


@dataclass(frozen=True)
class PrintStatement(Statement):
    value: Expression


@dataclass(frozen=True)
class IfStatement(Statement):
    """
    Conditional statement.

    Attributes:
        condition: The condition expression
        consequence: Block executed when the condition is non-zero
        alternative: Optional block executed otherwise
    """
    condition: Expression
    consequence: BlockStatement
    alternative: Optional[BlockStatement] = None


@dataclass(frozen=True)
class ExternStatement(Statement):
    """extern name; declares a function supplied by the C headers."""
    name: str


@dataclass(frozen=True)
class ReturnStatement(Statement):
    value: Optional[Expression] = None


@dataclass(frozen=True)
class FunctionDeclaration(Statement):
    """
    Named function definition.

    Every parameter and the return value are C ints.

    Attributes:
        name: Function name
        parameters: Parameter names, in order
        body: The function body
    """
    name: str
    parameters: tuple[Identifier, ...]
    body: BlockStatement


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    """Expression used as a statement, e.g. a call made for its side effect."""
    expression: Expression


# =============================================================================
# Program Root Node
# =============================================================================

@dataclass(frozen=True)
class Program(ASTNode):
    """Root node: the top-level statements in source order."""
    statements: tuple[Statement, ...] = ()


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_* methods for the node types they care
    about; everything else falls through to generic_visit.

    Usage:
        class CallCounter(ASTVisitor):
            def __init__(self):
                self.calls = 0

            def visit_CallExpression(self, node):
                self.calls += 1
                self.generic_visit(node)

        counter = CallCounter()
        counter.visit(program)
    """

    def visit(self, node: ASTNode) -> Any:
        """Visit a node by dispatching to visit_<ClassName>."""
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit all child nodes of the node."""
        for node_field in fields(node):
            value = getattr(node, node_field.name)
            if isinstance(value, ASTNode):
                self.visit(value)
            elif isinstance(value, tuple):
                for item in value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Produces an indented tree, one node per line:

        Program:
          LetStatement:
            Name: x
            Value:
              Integer: 5

    Usage:
        printer = ASTPrinter()
        print(printer.print(program))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Print the AST and return as string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        """Emit a line with current indentation."""
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _indent(self) -> None:
        self.indent_level += 1

    def _dedent(self) -> None:
        self.indent_level = max(0, self.indent_level - 1)

    def _child(self, label: str, node: Optional[ASTNode]) -> None:
        """Emit 'label:' and the child node one level further in."""
        if node is None:
            return
        self._emit(f"{label}:")
        self._indent()
        self.visit(node)
        self._dedent()

    def _children(self, label: str, nodes: tuple) -> None:
        if not nodes:
            return
        self._emit(f"{label}:")
        self._indent()
        for node in nodes:
            self.visit(node)
        self._dedent()

    def _params(self, parameters: tuple[Identifier, ...]) -> str:
        return ", ".join(p.name for p in parameters)

    # Statements

    def visit_Program(self, node: Program):
        self._emit("Program:")
        self._indent()
        for stmt in node.statements:
            self.visit(stmt)
        self._dedent()

    def visit_LetStatement(self, node: LetStatement):
        self._emit("LetStatement:")
        self._indent()
        self._emit(f"Name: {node.name}")
        self._child("Value", node.value)
        self._dedent()

    def visit_AssignStatement(self, node: AssignStatement):
        self._emit("AssignStatement:")
        self._indent()
        self._emit(f"Name: {node.name}")
        self._child("Value", node.value)
        self._dedent()

    def visit_PrintStatement(self, node: PrintStatement):
        self._emit("PrintStatement:")
        self._indent()
        self._child("Value", node.value)
        self._dedent()

    def visit_IfStatement(self, node: IfStatement):
        self._emit("IfStatement:")
        self._indent()
        self._child("Condition", node.condition)
        self._child("Consequence", node.consequence)
        self._child("Alternative", node.alternative)
        self._dedent()

    def visit_BlockStatement(self, node: BlockStatement):
        self._emit("BlockStatement:")
        self._indent()
        for stmt in node.statements:
            self.visit(stmt)
        self._dedent()

    def visit_ExternStatement(self, node: ExternStatement):
        self._emit("ExternStatement:")
        self._indent()
        self._emit(f"Name: {node.name}")
        self._dedent()

    def visit_ReturnStatement(self, node: ReturnStatement):
        self._emit("ReturnStatement:")
        self._indent()
        self._child("Value", node.value)
        self._dedent()

    def visit_FunctionDeclaration(self, node: FunctionDeclaration):
        self._emit(f"FunctionDeclaration: {node.name}({self._params(node.parameters)})")
        self._indent()
        self._child("Body", node.body)
        self._dedent()

    def visit_ExpressionStatement(self, node: ExpressionStatement):
        self._emit("ExpressionStatement:")
        self._indent()
        self.visit(node.expression)
        self._dedent()

    # Expressions

    def visit_Identifier(self, node: Identifier):
        self._emit(f"Identifier: {node.name}")

    def visit_IntegerLiteral(self, node: IntegerLiteral):
        self._emit(f"Integer: {node.value}")

    def visit_StringLiteral(self, node: StringLiteral):
        self._emit(f"String: {node.value}")

    def visit_InfixExpression(self, node: InfixExpression):
        self._emit(f"InfixExpression: ({node.operator})")
        self._indent()
        self._child("Left", node.left)
        self._child("Right", node.right)
        self._dedent()

    def visit_CallExpression(self, node: CallExpression):
        self._emit("FunctionCall:")
        self._indent()
        self._child("Function", node.function)
        self._children("Arguments", node.arguments)
        self._dedent()

    def visit_FunctionLiteral(self, node: FunctionLiteral):
        self._emit(f"FunctionLiteral: ({self._params(node.parameters)})")
        self._indent()
        self._child("Body", node.body)
        self._dedent()

"""
CCCP Parser
===========

This module implements the parser for the CCCP language. Statements are
parsed by recursive descent; expressions by precedence climbing (Pratt
parsing), where each token kind has at most one prefix rule and at most
one infix rule.

Grammar (Simplified EBNF)
-------------------------
program         ::= statement*
statement       ::= let_stmt | print_stmt | if_stmt | extern_stmt
                  | return_stmt | func_decl | block | assign_stmt
                  | expr_stmt
let_stmt        ::= 'var' IDENT ('=' expr)? ';'?
assign_stmt     ::= IDENT '=' expr ';'?
print_stmt      ::= 'print' '(' expr ')' ';'?
if_stmt         ::= 'if' expr block
extern_stmt     ::= 'extern' IDENT ';'
return_stmt     ::= 'return' expr? ';'?
func_decl       ::= 'func' IDENT params block
block           ::= '{' statement* '}'
expr_stmt       ::= expr ';'?

expr            ::= prefix ('(' args ')')* (infix_op expr)*
prefix          ::= IDENT | INT | STRING | '(' expr ')' | 'func' params block
params          ::= '(' (IDENT (',' IDENT)*)? ')'
args            ::= (expr (',' expr)*)?

Expression Precedence (lowest to highest)
-----------------------------------------
1. LOWEST
2. EQUALS     == !=
3. SUM        + -
4. PRODUCT    * /
5. CALL       f(...)

Equal-precedence chains associate to the left: a - b - c is (a - b) - c.

Error Recovery
--------------
Syntax errors never raise. Each one is recorded in an ErrorCollector,
the statement being parsed is dropped, and the parser skips ahead to
the next statement boundary so that later errors are still reported.

Example Usage
-------------
>>> from cccp.lang.parser import parse_source
>>> program, errors = parse_source('var x = 5; print(x);')
>>> len(program.statements), errors
(2, [])
"""

import logging
from enum import IntEnum
from typing import Callable, Optional

from cccp.errors import SourceLocation
from cccp.lang.lexer import Lexer, Token, TokenType, STATEMENT_KEYWORDS
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
from cccp.lang.errors import (
    LangSyntaxError,
    UnexpectedTokenError,
    NoPrefixRuleError,
    InvalidIntegerError,
    UnbalancedBraceError,
    ErrorCollector,
)

logger = logging.getLogger(__name__)

# Largest value an integer literal may have (signed 64-bit)
MAX_INTEGER = 2**63 - 1


class Precedence(IntEnum):
    """Binding strength of expression operators."""
    LOWEST = 1
    EQUALS = 2
    SUM = 3
    PRODUCT = 4
    CALL = 5


INFIX_PRECEDENCE: dict[TokenType, Precedence] = {
    TokenType.EQ: Precedence.EQUALS,
    TokenType.NOT_EQ: Precedence.EQUALS,
    TokenType.PLUS: Precedence.SUM,
    TokenType.MINUS: Precedence.SUM,
    TokenType.ASTERISK: Precedence.PRODUCT,
    TokenType.SLASH: Precedence.PRODUCT,
}


def _describe_kind(kind: TokenType) -> str:
    """Describe a token kind the way diagnostics name it."""
    if kind in (TokenType.IDENT, TokenType.INT, TokenType.STRING, TokenType.EOF):
        return kind.value
    if kind in STATEMENT_KEYWORDS:
        return f"'{kind.value.lower()}'"
    return f"'{kind.value}'"


class Parser:
    """
    Parser for CCCP source.

    Pulls tokens lazily from a Lexer, holding two tokens of lookahead
    (current and peek). Every parse method starts with the first token
    of its construct as the current token and leaves the cursor on the
    first token after it. On a syntax error the method records a
    diagnostic and returns None.

    Attributes:
        lexer: The token source
        filename: Source filename for error reporting
    """

    def __init__(
        self,
        lexer: Lexer,
        source_lines: Optional[list[str]] = None,
    ):
        """
        Initialize the parser.

        Args:
            lexer: Lexer positioned at the start of the source
            source_lines: Original source lines for error context
                (defaults to the lexer's source)
        """
        self.lexer = lexer
        self.filename = lexer.filename
        if source_lines is None:
            source_lines = lexer.source.splitlines()
        self.source_lines = source_lines

        # Error collection for multiple error reporting
        self._errors = ErrorCollector()

        # Number of tokens consumed, used to guarantee forward progress
        self._consumed = 0

        # Set once end of input inside a block has been reported
        self._reported_unterminated = False

        self._prefix_rules: dict[TokenType, Callable[[], Optional[Expression]]] = {
            TokenType.IDENT: self._parse_identifier,
            TokenType.INT: self._parse_integer_literal,
            TokenType.STRING: self._parse_string_literal,
            TokenType.LPAREN: self._parse_grouped_expression,
            TokenType.FUNC: self._parse_function_literal,
        }

        self._current: Token = lexer.next_token()
        self._peek_token: Token = lexer.next_token()

    # =========================================================================
    # Public Interface
    # =========================================================================

    def parse_program(self) -> tuple[Program, list[str]]:
        """
        Parse the whole token stream.

        Returns:
            (program, errors): the Program and the diagnostic messages.
            A non-empty error list means the program must not be compiled.
        """
        statements: list[Statement] = []

        while not self._check(TokenType.EOF):
            if self._errors.should_stop():
                break

            if self._check(TokenType.RBRACE):
                self._error(UnbalancedBraceError(
                    "unmatched '}'",
                    self._current.location,
                    hint="remove the '}' or add the missing '{'",
                    source_line=self._get_source_line(self._current.line),
                ))
                self._advance()
                continue

            stmt = self._parse_statement_or_recover()
            if stmt is not None:
                statements.append(stmt)

        program = Program(
            tuple(statements),
            location=SourceLocation(self.filename, 1, 1),
        )
        logger.debug(
            f"Parsed {len(statements)} top-level statements, "
            f"{self._errors.error_count()} errors"
        )
        return program, self.errors

    def parse(self) -> Program:
        """
        Parse the token stream, raising on any syntax error.

        Raises:
            CompilationError: Report of every diagnostic collected
        """
        program, _ = self.parse_program()
        self._errors.raise_if_errors()
        return program

    @property
    def errors(self) -> list[str]:
        """Diagnostic messages collected so far."""
        return self._errors.messages()

    @property
    def diagnostics(self) -> list[LangSyntaxError]:
        """Structured diagnostics (with locations) collected so far."""
        return list(self._errors.errors)

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _advance(self) -> Token:
        """Consume and return the current token."""
        token = self._current
        if token.kind is not TokenType.EOF:
            self._current = self._peek_token
            self._peek_token = self.lexer.next_token()
            self._consumed += 1
        return token

    def _check(self, kind: TokenType) -> bool:
        """Check if the current token is of the given kind."""
        return self._current.kind is kind

    def _check_peek(self, kind: TokenType) -> bool:
        return self._peek_token.kind is kind

    def _match(self, kind: TokenType) -> Optional[Token]:
        """Consume the current token if it is of the given kind."""
        if self._check(kind):
            return self._advance()
        return None

    def _expect(self, kind: TokenType) -> Optional[Token]:
        """
        Expect and consume a token of the given kind.

        Records an UnexpectedTokenError and returns None if the current
        token is anything else.
        """
        if self._check(kind):
            return self._advance()

        self._error(UnexpectedTokenError(
            _describe_kind(kind),
            self._current.describe(),
            self._current.location,
            self._get_source_line(self._current.line),
        ))
        return None

    def _get_source_line(self, line: int) -> Optional[str]:
        """Get source line for error reporting."""
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    def _error(self, error: LangSyntaxError) -> None:
        logger.debug(f"Syntax error: {error.message}")
        self._errors.add(error)

    def _synchronize(self) -> None:
        """
        Skip to the next statement boundary after a syntax error.

        Consumes tokens up to and including the next ';', or up to (but
        not including) the next '}' or statement keyword.
        """
        while not self._check(TokenType.EOF):
            if self._match(TokenType.SEMICOLON):
                return
            if self._check(TokenType.RBRACE) or self._current.kind in STATEMENT_KEYWORDS:
                return
            self._advance()

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_statement_or_recover(self) -> Optional[Statement]:
        """Parse one statement; on failure, resynchronize and return None."""
        start = self._consumed
        error_count = self._errors.error_count()

        stmt = self._parse_statement()
        if stmt is not None:
            return stmt

        if self._errors.error_count() > error_count:
            self._synchronize()
        # Guarantee progress on a statement that consumed nothing
        if self._consumed == start and not self._check(TokenType.EOF):
            self._advance()
        return None

    def _parse_statement(self) -> Optional[Statement]:
        """Dispatch on the current token to the statement parsers."""
        kind = self._current.kind

        if kind is TokenType.VAR:
            return self._parse_let_statement()
        if kind is TokenType.PRINT:
            return self._parse_print_statement()
        if kind is TokenType.IF:
            return self._parse_if_statement()
        if kind is TokenType.EXTERN:
            return self._parse_extern_statement()
        if kind is TokenType.RETURN:
            return self._parse_return_statement()
        if kind is TokenType.FUNC and self._check_peek(TokenType.IDENT):
            return self._parse_function_declaration()
        if kind is TokenType.LBRACE:
            return self._parse_block()
        if kind is TokenType.IDENT and self._check_peek(TokenType.ASSIGN):
            return self._parse_assign_statement()

        return self._parse_expression_statement()

    def _parse_let_statement(self) -> Optional[LetStatement]:
        """Parse: var name [= value] [;]"""
        location = self._advance().location

        name = self._expect(TokenType.IDENT)
        if name is None:
            return None

        value = None
        if self._match(TokenType.ASSIGN):
            value = self._parse_expression(Precedence.LOWEST)
            if value is None:
                return None

        self._match(TokenType.SEMICOLON)
        return LetStatement(name.literal, value, location=location)

    def _parse_assign_statement(self) -> Optional[AssignStatement]:
        """Parse: name = value [;]"""
        name = self._advance()
        self._advance()  # '='

        value = self._parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        self._match(TokenType.SEMICOLON)
        return AssignStatement(name.literal, value, location=name.location)

    def _parse_print_statement(self) -> Optional[PrintStatement]:
        """Parse: print(value) [;]"""
        location = self._advance().location

        if self._expect(TokenType.LPAREN) is None:
            return None

        value = self._parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        if self._expect(TokenType.RPAREN) is None:
            return None

        self._match(TokenType.SEMICOLON)
        return PrintStatement(value, location=location)

    def _parse_if_statement(self) -> Optional[IfStatement]:
        """
        Parse: if condition { ... }

        The condition is any expression; the usual parenthesised form
        parses as a grouped expression.
        """
        location = self._advance().location

        condition = self._parse_expression(Precedence.LOWEST)
        if condition is None:
            return None

        if not self._check(TokenType.LBRACE):
            self._expect(TokenType.LBRACE)
            return None

        consequence = self._parse_block()
        if consequence is None:
            return None

        return IfStatement(condition, consequence, location=location)

    def _parse_extern_statement(self) -> Optional[ExternStatement]:
        """Parse: extern name;"""
        location = self._advance().location

        name = self._expect(TokenType.IDENT)
        if name is None:
            return None

        if self._expect(TokenType.SEMICOLON) is None:
            return None

        return ExternStatement(name.literal, location=location)

    def _parse_return_statement(self) -> Optional[ReturnStatement]:
        """Parse: return [value] [;]"""
        location = self._advance().location

        value = None
        if not (self._check(TokenType.SEMICOLON)
                or self._check(TokenType.RBRACE)
                or self._check(TokenType.EOF)):
            value = self._parse_expression(Precedence.LOWEST)
            if value is None:
                return None

        self._match(TokenType.SEMICOLON)
        return ReturnStatement(value, location=location)

    def _parse_function_declaration(self) -> Optional[FunctionDeclaration]:
        """Parse: func name(params) { ... }"""
        location = self._advance().location
        name = self._advance()

        parameters = self._parse_parameters()
        if parameters is None:
            return None

        if not self._check(TokenType.LBRACE):
            self._expect(TokenType.LBRACE)
            return None

        body = self._parse_block()
        if body is None:
            return None

        return FunctionDeclaration(name.literal, parameters, body, location=location)

    def _parse_expression_statement(self) -> Optional[ExpressionStatement]:
        location = self._current.location

        expression = self._parse_expression(Precedence.LOWEST)
        if expression is None:
            return None

        self._match(TokenType.SEMICOLON)
        return ExpressionStatement(expression, location=location)

    def _parse_block(self) -> Optional[BlockStatement]:
        """
        Parse: { statement* }

        Nested blocks are parsed recursively, so the block consumes
        exactly its own statements and its matching '}'.
        """
        open_brace = self._advance()
        statements: list[Statement] = []

        while not self._check(TokenType.RBRACE):
            if self._check(TokenType.EOF):
                if not self._reported_unterminated:
                    self._reported_unterminated = True
                    self._error(UnbalancedBraceError(
                        "unexpected end of input inside block",
                        open_brace.location,
                        hint="add the missing '}' to close this block",
                        source_line=self._get_source_line(open_brace.line),
                    ))
                return None

            stmt = self._parse_statement_or_recover()
            if stmt is not None:
                statements.append(stmt)

        self._advance()  # '}'
        return BlockStatement(tuple(statements), location=open_brace.location)

    def _parse_parameters(self) -> Optional[tuple[Identifier, ...]]:
        """Parse: ( [IDENT (, IDENT)*] )"""
        if self._expect(TokenType.LPAREN) is None:
            return None

        parameters: list[Identifier] = []
        if self._match(TokenType.RPAREN):
            return ()

        while True:
            name = self._expect(TokenType.IDENT)
            if name is None:
                return None
            parameters.append(Identifier(name.literal, location=name.location))
            if not self._match(TokenType.COMMA):
                break

        if self._expect(TokenType.RPAREN) is None:
            return None

        return tuple(parameters)

    # =========================================================================
    # Expression Parsing
    # =========================================================================

    def _parse_expression(self, precedence: Precedence) -> Optional[Expression]:
        """
        Parse an expression whose operators bind tighter than precedence.

        The prefix rule for the current token parses the left operand;
        '(' suffixes are then consumed greedily as calls, and infix
        operators of higher precedence fold the result to the left.
        """
        prefix = self._prefix_rules.get(self._current.kind)
        if prefix is None:
            self._error(NoPrefixRuleError(
                self._current.describe(),
                self._current.location,
                self._get_source_line(self._current.line),
            ))
            return None

        left = prefix()
        if left is None:
            return None

        while self._check(TokenType.LPAREN):
            left = self._parse_call(left)
            if left is None:
                return None

        while precedence < INFIX_PRECEDENCE.get(self._current.kind, Precedence.LOWEST):
            left = self._parse_infix_expression(left)
            if left is None:
                return None

        return left

    def _parse_infix_expression(self, left: Expression) -> Optional[Expression]:
        operator = self._advance()
        right = self._parse_expression(INFIX_PRECEDENCE[operator.kind])
        if right is None:
            return None
        return InfixExpression(operator.literal, left, right, location=operator.location)

    def _parse_call(self, function: Expression) -> Optional[CallExpression]:
        """Parse the argument list of a call; the current token is '('."""
        location = self._advance().location

        arguments: list[Expression] = []
        if not self._match(TokenType.RPAREN):
            while True:
                argument = self._parse_expression(Precedence.LOWEST)
                if argument is None:
                    return None
                arguments.append(argument)
                if not self._match(TokenType.COMMA):
                    break
            if self._expect(TokenType.RPAREN) is None:
                return None

        return CallExpression(function, tuple(arguments), location=location)

    def _parse_identifier(self) -> Identifier:
        token = self._advance()
        return Identifier(token.literal, location=token.location)

    def _parse_integer_literal(self) -> Optional[IntegerLiteral]:
        token = self._advance()
        value = int(token.literal)
        if value > MAX_INTEGER:
            self._error(InvalidIntegerError(
                token.literal,
                token.location,
                self._get_source_line(token.line),
            ))
            return None
        return IntegerLiteral(value, location=token.location)

    def _parse_string_literal(self) -> StringLiteral:
        token = self._advance()
        return StringLiteral(token.literal, location=token.location)

    def _parse_grouped_expression(self) -> Optional[Expression]:
        """Parse: ( expr )"""
        self._advance()
        expression = self._parse_expression(Precedence.LOWEST)
        if expression is None:
            return None
        if self._expect(TokenType.RPAREN) is None:
            return None
        return expression

    def _parse_function_literal(self) -> Optional[FunctionLiteral]:
        """Parse: func(params) { ... }"""
        location = self._advance().location

        parameters = self._parse_parameters()
        if parameters is None:
            return None

        if not self._check(TokenType.LBRACE):
            self._expect(TokenType.LBRACE)
            return None

        body = self._parse_block()
        if body is None:
            return None

        return FunctionLiteral(parameters, body, location=location)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(source: str, filename: str = "<input>") -> tuple[Program, list[str]]:
    """
    Lex and parse source text in one call.

    Args:
        source: CCCP source code
        filename: Source filename for error messages

    Returns:
        (program, errors) as returned by Parser.parse_program()
    """
    parser = Parser(Lexer(source, filename))
    return parser.parse_program()

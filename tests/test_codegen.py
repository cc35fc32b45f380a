# =============================================================================
# test_codegen.py - C Code Generator Tests
# =============================================================================
# Tests for C emission from the CCCP AST.
#
# Test coverage includes:
#   - Program layout: includes, helper, declarations, definitions, main
#   - Type inference and string handling (concat, folding, strcmp)
#   - Scoping of blocks and functions
#   - Auto-print and default returns
#   - Semantic and unsupported-feature errors
# =============================================================================

from dataclasses import dataclass

import pytest
from cccp.lang.parser import parse_source
from cccp.lang.codegen import (
    CodeGenerator,
    ScopeChain,
    SymbolInfo,
    c_string_literal,
    find_similar_names,
)
from cccp.lang.types import ValueType
from cccp.lang.ast import (
    Program,
    Statement,
    IfStatement,
    BlockStatement,
    PrintStatement,
    IntegerLiteral,
    Identifier,
)
from cccp.lang.errors import (
    UndeclaredIdentifierError,
    DuplicateDeclarationError,
    LangTypeError,
    ArgumentCountError,
    UnsupportedFeatureError,
    UnknownNodeError,
    InvalidStringLiteralError,
)


# =============================================================================
# Helper Functions
# =============================================================================

def generate(source: str, **kwargs) -> str:
    """Parse valid source and generate C."""
    program, errors = parse_source(source, "<test>")
    assert errors == [], f"unexpected parse errors: {errors}"
    return CodeGenerator(**kwargs).generate(program)


def function_body(c_source: str, signature: str) -> list[str]:
    """Return the lines of a function definition between its braces."""
    lines = c_source.splitlines()
    start = lines.index(f"{signature} {{")
    end = lines.index("}", start)
    return lines[start + 1:end]


def main_body(c_source: str) -> list[str]:
    return function_body(c_source, "int main(void)")


# =============================================================================
# Program Layout Tests
# =============================================================================

class TestProgramLayout:
    """Test the overall shape of the generated C."""

    def test_includes_and_helper(self):
        c = generate("print(1);")
        assert "#include <stdio.h>" in c
        assert "#include <string.h>" in c
        assert "#include <stdlib.h>" in c
        assert "char* concat_strings(const char* a, const char* b) {" in c
        assert "    char* result = malloc(strlen(a) + strlen(b) + 1);" in c

    def test_main_returns_zero(self):
        c = generate("print(1);")
        assert main_body(c)[-1] == "    return 0;"
        assert c.endswith("}\n")

    def test_let_and_print(self):
        """var x = 5; print(x); declares an int and prints it with %d."""
        body = main_body(generate("var x = 5; print(x);"))
        assert body[:2] == [
            "    int x = 5;",
            '    printf("%d\\n", x);',
        ]

    def test_let_without_value(self):
        assert "    int x;" in main_body(generate("var x;"))

    def test_function_declaration_before_definition_before_main(self):
        c = generate("func add(a, b) { return a + b; } print(add(2, 3));")
        declaration = c.index("int add(int a, int b);")
        definition = c.index("int add(int a, int b) {")
        main = c.index("int main(void) {")
        assert declaration < definition < main

    def test_function_definition(self):
        c = generate("func add(a, b) { return a + b; } print(add(2, 3));")
        assert function_body(c, "int add(int a, int b)") == ["    return a + b;"]
        assert '    printf("%d\\n", add(2, 3));' in main_body(c)

    def test_function_table(self):
        program, _ = parse_source("func add(a, b) { return a + b; } print(add(2, 3));")
        generator = CodeGenerator()
        generator.generate(program)
        assert list(generator.functions) == ["add"]
        assert generator.functions["add"].param_count == 2

    def test_zero_parameter_signature_is_void(self):
        c = generate("func f() { return 1; }")
        assert "int f(void);" in c

    def test_function_used_before_declaration(self):
        """Functions are extracted before main is emitted."""
        c = generate("print(add(1, 2)); func add(a, b) { return a + b; }")
        assert '    printf("%d\\n", add(1, 2));' in main_body(c)

    def test_anonymous_functions_numbered_in_order(self):
        c = generate("func() { print(1); } func(a) { return a; }")
        assert "int func_0(void);" in c
        assert "int func_1(int a);" in c
        assert c.index("int func_0(void) {") < c.index("int func_1(int a) {")

    def test_extern_is_comment_only(self):
        """extern emits a comment and changes nothing else."""
        plain = generate("print(1);")
        with_extern = generate("extern puts; print(1);")
        comment = "    // extern puts declared (handled by C headers)"
        assert comment in with_extern.splitlines()
        assert [l for l in with_extern.splitlines() if l != comment] == plain.splitlines()

    def test_deterministic(self):
        """Identical input yields byte-identical output."""
        source = 'func f(a) { return a * 2; } var s = "x"; print(s + "y"); print(f(3));'
        assert generate(source) == generate(source)

    def test_generator_is_reusable(self):
        """State is reset on every generate() call."""
        generator = CodeGenerator()
        first, _ = parse_source("func() { return 1; } var x = 1;")
        generator.generate(first)
        second, _ = parse_source("func() { return 2; } var x = 2;")
        c = generator.generate(second)
        assert "int func_0(void);" in c
        assert "func_1" not in c

    def test_emit_comments_false(self):
        c = generate("print(1); 2;", emit_comments=False)
        assert "//" not in c

    def test_banner_names_file(self):
        c = generate("print(1);")
        assert c.splitlines()[0] == "// Generated by cccp from <test>"


# =============================================================================
# Type Inference and String Tests
# =============================================================================

class TestStrings:
    """Test string typing, concatenation and comparison."""

    def test_string_variable(self):
        body = main_body(generate('var a = "Hi, "; print(a);'))
        assert body[:2] == [
            '    char* a = "Hi, ";',
            '    printf("%s\\n", a);',
        ]

    def test_identifier_plus_literal_uses_helper(self):
        """b = a + "there" is a string built by concat_strings."""
        body = main_body(generate('var a = "Hi, "; var b = a + "there"; print(b);'))
        assert '    char* b = concat_strings(a, "there");' in body
        assert '    printf("%s\\n", b);' in body

    def test_literal_plus_identifier_uses_helper(self):
        body = main_body(generate('var a = "there"; print("Hi, " + a);'))
        assert '    printf("%s\\n", concat_strings("Hi, ", a));' in body

    def test_literal_plus_literal_is_folded(self):
        body = main_body(generate('print("Hi, " + "there");'))
        assert '    printf("%s\\n", "Hi, there");' in body

    def test_identifier_plus_identifier_is_error(self):
        with pytest.raises(LangTypeError, match="unsupported string concatenation"):
            generate('var a = "x"; var b = "y"; print(a + b);')

    def test_string_equality_uses_strcmp(self):
        body = main_body(generate('var a = "x"; if (a == "x") { print(1); }'))
        assert '    if ((strcmp(a, "x") == 0)) {' in body

    def test_string_inequality_uses_strcmp(self):
        body = main_body(generate('var a = "x"; print(a != "y");'))
        assert '    printf("%d\\n", (strcmp(a, "y") != 0));' in body

    def test_string_compared_with_int_is_error(self):
        with pytest.raises(LangTypeError, match="cannot compare string with int"):
            generate('var a = "x"; print(a == 1);')

    def test_arithmetic_on_string_is_error(self):
        with pytest.raises(LangTypeError, match="operator '\\*' cannot be applied"):
            generate('var a = "x"; print(a * 2);')

    def test_string_literal_escaping(self):
        assert c_string_literal("a\nb\tc") == '"a\\nb\\tc"'
        assert c_string_literal("back\\slash") == '"back\\slash"'

    @pytest.mark.parametrize("source", [
        'print("abc\\");',
        'var s = "C:\\";',
        'print("a\\" + "b");',
        'print("\\\\\\");',
    ])
    def test_trailing_backslash_is_error(self, source):
        """A literal ending in an odd run of backslashes would escape its closing quote."""
        with pytest.raises(InvalidStringLiteralError, match="ends with a backslash"):
            generate(source)

    def test_escaped_trailing_backslash(self):
        body = main_body(generate('print("C:\\\\");'))
        assert body[0] == '    printf("%s\\n", "C:\\\\");'

    def test_infer_type(self):
        generator = CodeGenerator()
        assert generator.infer_type(IntegerLiteral(1)) is ValueType.INT
        assert generator.infer_type(Identifier("unknown")) is ValueType.INT


# =============================================================================
# Expression Emission Tests
# =============================================================================

class TestExpressions:
    """Test arithmetic emission."""

    def test_nested_arithmetic_is_parenthesised(self):
        body = main_body(generate("print((1 + 2) * 3);"))
        assert '    printf("%d\\n", (1 + 2) * 3);' in body

    def test_precedence_made_explicit(self):
        body = main_body(generate("print(1 + 2 * 3);"))
        assert '    printf("%d\\n", 1 + (2 * 3));' in body

    def test_integer_comparison(self):
        body = main_body(generate("var x = 1; if (x == 1) { print(x); }"))
        assert "    if (x == 1) {" in body

    def test_c_library_calls_pass_through(self):
        """Callees outside the function table are not checked."""
        body = main_body(generate('extern puts; puts("hi");'))
        assert '    printf("%d\\n", puts("hi"));' in body


# =============================================================================
# Statement Emission Tests
# =============================================================================

class TestStatements:
    """Test statement emission."""

    def test_assignment_to_existing(self):
        body = main_body(generate("var x = 1; x = 2;"))
        assert "    x = 2;" in body

    def test_assignment_declares_new_name(self):
        body = main_body(generate('y = 3; s = "t";'))
        assert "    int y = 3;" in body
        assert '    char* s = "t";' in body

    def test_assignment_type_mismatch(self):
        with pytest.raises(LangTypeError, match="cannot assign a string value"):
            generate('var x = 1; x = "s";')

    def test_if_block(self):
        body = main_body(generate("var x = 1; if (x) { print(x); }"))
        assert body[1:4] == [
            "    if (x) {",
            '        printf("%d\\n", x);',
            "    }",
        ]

    def test_if_with_alternative(self):
        program = Program((
            IfStatement(
                IntegerLiteral(1),
                BlockStatement((PrintStatement(IntegerLiteral(1)),)),
                BlockStatement((PrintStatement(IntegerLiteral(2)),)),
            ),
        ))
        body = main_body(CodeGenerator().generate(program))
        assert body[:5] == [
            "    if (1) {",
            '        printf("%d\\n", 1);',
            "    } else {",
            '        printf("%d\\n", 2);',
            "    }",
        ]

    def test_bare_block(self):
        body = main_body(generate("{ var a = 1; }"))
        assert body[:3] == ["    {", "        int a = 1;", "    }"]

    def test_auto_print_in_main(self):
        body = main_body(generate("5 + 3;"))
        assert body[:2] == [
            "    // Auto-print: 5 + 3",
            '    printf("%d\\n", 5 + 3);',
        ]

    def test_auto_print_string(self):
        body = main_body(generate('"hi";'))
        assert '    printf("%s\\n", "hi");' in body

    def test_no_auto_print_in_function(self):
        c = generate('extern puts; func greet() { puts("hi"); }')
        assert function_body(c, "int greet(void)") == [
            '    puts("hi");',
            "    return 0;",
        ]

    def test_default_return_appended(self):
        c = generate("func f() { print(1); }")
        assert function_body(c, "int f(void)")[-1] == "    return 0;"

    def test_explicit_return_not_duplicated(self):
        c = generate("func f() { return 7; }")
        assert function_body(c, "int f(void)") == ["    return 7;"]

    def test_bare_return(self):
        c = generate("func f() { return; }")
        assert function_body(c, "int f(void)") == ["    return 0;"]


# =============================================================================
# Scope Tests
# =============================================================================

class TestScopes:
    """Test block and function scoping."""

    def test_block_variable_invisible_after_block(self):
        """A variable declared in an if block cannot be used after it."""
        with pytest.raises(UndeclaredIdentifierError, match="undeclared identifier 'y'"):
            generate("if (1) { var y = 2; } print(y);")

    def test_redeclaration_after_block_is_allowed(self):
        body = main_body(generate("if (1) { var y = 2; } var y = 3;"))
        assert "    int y = 3;" in body

    def test_shadowing_in_nested_block(self):
        """A shadowing variable gets its own C name; the outer one is untouched."""
        body = main_body(generate("var x = 1; if (1) { var x = 2; print(x); } print(x);"))
        assert body == [
            "    int x = 1;",
            "    if (1) {",
            "        int x_1 = 2;",
            '        printf("%d\\n", x_1);',
            "    }",
            '    printf("%d\\n", x);',
            "    return 0;",
        ]

    def test_shadow_initializer_reads_outer_binding(self):
        """var x = 5 { var x = x + 1; print(x) } reads the outer x."""
        body = main_body(generate("var x = 5 { var x = x + 1; print(x) }"))
        assert "        int x_1 = x + 1;" in body
        assert '        printf("%d\\n", x_1);' in body

    def test_string_shadow_initializer(self):
        body = main_body(generate('var s = "a"; { var s = s + "b"; print(s); }'))
        assert '        char* s_1 = concat_strings(s, "b");' in body

    def test_shadowed_parameter(self):
        c = generate("func f(a) { if (1) { var a = a * 2; return a; } return a; }")
        assert function_body(c, "int f(int a)") == [
            "    if (1) {",
            "        int a_1 = a * 2;",
            "        return a_1;",
            "    }",
            "    return a;",
        ]

    def test_shadow_suffix_skips_visible_names(self):
        body = main_body(generate("var x = 1; var x_1 = 2; { var x = 3; print(x); }"))
        assert "        int x_2 = 3;" in body

    def test_assignment_to_shadow_uses_its_c_name(self):
        body = main_body(generate("var x = 1; { var x = 2; x = 3; }"))
        assert "        x_1 = 3;" in body

    def test_variable_named_like_function(self):
        """A local never hides a program function in C."""
        body = main_body(generate("func add(a, b) { return a + b; } var add = 1; print(add(add, 2));"))
        assert "    int add_1 = 1;" in body
        assert '    printf("%d\\n", add(add_1, 2));' in body

    def test_parameter_named_like_function(self):
        c = generate("func f(f) { return f; }")
        assert function_body(c, "int f(int f_1)") == ["    return f_1;"]

    def test_redeclaration_in_same_scope(self):
        with pytest.raises(DuplicateDeclarationError, match="redeclaration of 'x'"):
            generate("var x = 1; var x = 2;")

    def test_outer_variable_visible_in_block(self):
        body = main_body(generate('var s = "a"; if (1) { print(s + "b"); }'))
        assert '        printf("%s\\n", concat_strings(s, "b"));' in body

    def test_main_variables_invisible_in_functions(self):
        with pytest.raises(UndeclaredIdentifierError):
            generate("var x = 1; func f() { return x; }")

    def test_parameters_are_visible(self):
        c = generate("func f(a) { var b = a + 1; return b; }")
        assert function_body(c, "int f(int a)") == [
            "    int b = a + 1;",
            "    return b;",
        ]

    def test_parameter_redeclared_in_body(self):
        with pytest.raises(DuplicateDeclarationError, match="'a' is a parameter of 'f'"):
            generate("func f(a) { var a = 2; }")

    def test_duplicate_parameter(self):
        with pytest.raises(DuplicateDeclarationError, match="appears twice"):
            generate("func f(a, a) { return a; }")

    def test_undeclared_suggestion(self):
        with pytest.raises(UndeclaredIdentifierError) as exc_info:
            generate("var name = 1; print(nmae);")
        assert exc_info.value.similar_identifiers == ["name"]
        assert "did you mean 'name'?" in str(exc_info.value)

    def test_scope_chain(self):
        scopes = ScopeChain()
        scopes.declare(SymbolInfo("x", ValueType.INT))
        scopes.push()
        scopes.declare(SymbolInfo("x", ValueType.STRING))
        assert scopes.lookup("x").value_type is ValueType.STRING
        assert scopes.depth == 2
        scopes.pop()
        assert scopes.lookup("x").value_type is ValueType.INT
        with pytest.raises(RuntimeError):
            scopes.pop()


# =============================================================================
# Function Error Tests
# =============================================================================

class TestFunctionErrors:
    """Test semantic checks on functions and calls."""

    def test_argument_count(self):
        with pytest.raises(ArgumentCountError, match="'add' expects 2 arguments, got 1"):
            generate("func add(a, b) { return a + b; } print(add(1));")

    def test_string_argument(self):
        with pytest.raises(LangTypeError, match="cannot pass a string to 'f'"):
            generate('func f(a) { return a; } print(f("s"));')

    def test_string_return(self):
        with pytest.raises(LangTypeError, match="cannot return a string"):
            generate('func f() { return "s"; }')

    def test_duplicate_function(self):
        with pytest.raises(DuplicateDeclarationError, match="redeclaration of 'f'"):
            generate("func f() { } func f() { }")

    @pytest.mark.parametrize("name", ["main", "concat_strings", "strlen", "int"])
    def test_reserved_function_names(self, name):
        with pytest.raises(DuplicateDeclarationError, match="reserved"):
            generate(f"func {name}() {{ return 0; }}")

    @pytest.mark.parametrize("source", [
        "var int = 5; print(int);",
        "var printf = 1;",
        "while = 2;",
        "func f(char) { return 1; }",
        "{ var malloc; }",
    ])
    def test_reserved_variable_names(self, source):
        """Names that clash with the generated C are rejected."""
        with pytest.raises(DuplicateDeclarationError, match="reserved by the generated C program"):
            generate(source)

    def test_calling_a_variable(self):
        with pytest.raises(LangTypeError, match="variable 'puts' cannot be called"):
            generate('var puts = 1; puts("x");')

    def test_function_name_as_value(self):
        with pytest.raises(UnsupportedFeatureError, match="function 'f' used as a value"):
            generate("func f() { return 1; } var g = f;")

    def test_function_literal_as_value(self):
        with pytest.raises(UnsupportedFeatureError, match="function literal"):
            generate("var f = func(a) { return a; };")

    def test_nested_function_declaration(self):
        with pytest.raises(UnsupportedFeatureError, match="nested function declaration 'g'"):
            generate("func f() { func g() { return 1; } }")

    def test_calling_expression_result(self):
        with pytest.raises(UnsupportedFeatureError):
            generate("func f() { return 1; } print(f()(2));")


class TestUnknownNodes:
    """Unrecognised nodes are hard errors, never skipped."""

    def test_unknown_statement(self):
        @dataclass(frozen=True)
        class Bogus(Statement):
            pass

        with pytest.raises(UnknownNodeError, match="Bogus"):
            CodeGenerator().generate(Program((Bogus(),)))


class TestSimilarNames:
    def test_find_similar_names(self):
        assert find_similar_names("cout", ["count", "total", "cnt"]) == ["count", "cnt"]
        assert find_similar_names("zzz", ["count"]) == []

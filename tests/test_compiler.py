# =============================================================================
# test_compiler.py - Compiler Pipeline and Error Reporting Tests
# =============================================================================

import pytest
from cccp.errors import CCCPError, SourceLocation, ToolchainError
from cccp.lang import compiler as compiler_module
from cccp.lang.compiler import (
    CCCPCompiler,
    CompilerOptions,
    compile_cccp,
    compile_file,
)
from cccp.lang.errors import (
    LangError,
    CompilationError,
    UnexpectedTokenError,
    UndeclaredIdentifierError,
    ErrorCollector,
)


# =============================================================================
# Pipeline Tests
# =============================================================================

class TestCompileSource:
    """Test CCCPCompiler.compile_source."""

    def test_success(self):
        result = CCCPCompiler().compile_source(
            "func add(a, b) { return a + b; } print(add(2, 3));"
        )
        assert result.success
        assert result.function_names == ["add"]
        assert len(result.ast.statements) == 2
        assert "int add(int a, int b);" in result.c_source
        assert result.errors == []

    def test_filename_in_banner(self):
        result = CCCPCompiler(CompilerOptions(filename="hello.cccp")).compile_source("print(1);")
        assert result.filename == "hello.cccp"
        assert "// Generated by cccp from hello.cccp" in result.c_source

    def test_filename_argument_overrides_options(self):
        result = CCCPCompiler().compile_source("print(1);", "other.cccp")
        assert result.filename == "other.cccp"

    def test_emit_comments_option(self):
        result = CCCPCompiler(CompilerOptions(emit_comments=False)).compile_source("print(1);")
        assert "//" not in result.c_source

    def test_syntax_error_raises(self):
        """var = 5; produces diagnostics and no C."""
        with pytest.raises(CompilationError) as exc_info:
            CCCPCompiler().compile_source("var = 5;")
        diagnostics = exc_info.value.diagnostics
        assert len(diagnostics) == 1
        assert isinstance(diagnostics[0], UnexpectedTokenError)

    def test_syntax_error_skips_generation(self, monkeypatch):
        """Code generation is never attempted once a syntax error is recorded."""
        class ExplodingGenerator:
            def __init__(self, *args, **kwargs):
                raise AssertionError("code generation attempted")

        monkeypatch.setattr(compiler_module, "CodeGenerator", ExplodingGenerator)
        with pytest.raises(CompilationError):
            CCCPCompiler().compile_source("var = 5; print(1);")

    def test_all_syntax_errors_reported(self):
        with pytest.raises(CompilationError) as exc_info:
            CCCPCompiler().compile_source("var = 1;\nprint x;\n")
        message = str(exc_info.value)
        assert "<input>:1:5: error: expected IDENT, got '='" in message
        assert "<input>:2:7: error: expected '(', got IDENT 'x'" in message
        assert message.endswith("2 errors")

    def test_semantic_error_raises_compilation_error(self):
        with pytest.raises(CompilationError) as exc_info:
            CCCPCompiler().compile_source("if (1) { var y = 2; }\nprint(y);")
        (diagnostic,) = exc_info.value.diagnostics
        assert isinstance(diagnostic, UndeclaredIdentifierError)
        assert diagnostic.source_line == "print(y);"
        assert "undeclared identifier 'y'" in str(exc_info.value)

    def test_compiler_is_reusable(self):
        """Errors from one compilation do not leak into the next."""
        compiler = CCCPCompiler()
        with pytest.raises(CompilationError):
            compiler.compile_source("var = 5;")
        assert compiler.compile_source("print(1);").success


class TestConvenienceFunctions:
    """Test compile_cccp and compile_file."""

    def test_compile_cccp(self):
        c_source = compile_cccp("var x = 5; print(x);")
        assert "int x = 5;" in c_source

    def test_compile_file(self, tmp_path):
        source = tmp_path / "prog.cccp"
        source.write_text('print("hi");')
        output = tmp_path / "prog.c"

        c_source = compile_file(str(source), str(output))

        assert output.read_text() == c_source
        assert f"// Generated by cccp from {source}" in c_source

    def test_examples_compile(self, examples_dir):
        sources = sorted(examples_dir.glob("*.cccp"))
        assert sources
        for source in sources:
            assert "int main(void) {" in compile_file(str(source))

    def test_compile_file_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CCCPCompiler().compile_file(str(tmp_path / "missing.cccp"))


# =============================================================================
# Error Formatting Tests
# =============================================================================

class TestErrorFormatting:
    """Test diagnostic rendering."""

    def test_location_source_line_caret_and_hint(self):
        error = UndeclaredIdentifierError(
            "nmae",
            location=SourceLocation("t.cccp", 3, 7),
            source_line="print(nmae);",
            similar_identifiers=["name"],
        )
        assert str(error) == "\n".join([
            "t.cccp:3:7: error: undeclared identifier 'nmae'",
            "    print(nmae);",
            "          ^",
            "hint: did you mean 'name'?",
        ])

    def test_without_location(self):
        assert str(LangError("something broke")) == "error: something broke"

    def test_hierarchy(self):
        assert issubclass(CompilationError, CCCPError)
        assert issubclass(UnexpectedTokenError, LangError)
        assert issubclass(ToolchainError, CCCPError)

    def test_source_location_str(self):
        assert str(SourceLocation("a.cccp", 4, 2)) == "a.cccp:4:2"


class TestErrorCollector:
    """Test ErrorCollector."""

    def test_collects_and_reports(self):
        collector = ErrorCollector()
        collector.add(LangError("first", SourceLocation("f", 1, 1)))
        assert collector.has_errors()
        assert collector.messages() == ["first"]
        assert collector.report() == "f:1:1: error: first\n\n1 error"

    def test_should_stop(self):
        collector = ErrorCollector(max_errors=2)
        collector.add(LangError("a"))
        assert not collector.should_stop()
        collector.add(LangError("b"))
        assert collector.should_stop()

    def test_raise_if_errors(self):
        collector = ErrorCollector()
        collector.raise_if_errors()
        collector.add(LangError("a"))
        with pytest.raises(CompilationError):
            collector.raise_if_errors()

    def test_clear(self):
        collector = ErrorCollector()
        collector.add(LangError("a"))
        collector.clear()
        assert not collector.has_errors()

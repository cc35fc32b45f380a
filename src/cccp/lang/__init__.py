"""
CCCP Language Compiler
======================

Compiles the CCCP language, a small imperative language with integers,
strings, functions and if-blocks, into C99 source code.

Pipeline
--------
    Source → Lexer → Parser → AST → Code Generator → C source

The generated C is then built and run by cccp.toolchain.

Usage
-----
>>> from cccp.lang import compile_cccp
>>> c_source = compile_cccp('var greeting = "Hi, "; print(greeting + "there");')

Language Summary
----------------
- var name = value;      declare a variable (int or string, inferred)
- name = value;          assign (declares the name if not yet visible)
- print(value);          print with a newline
- if (cond) { ... }      conditional block
- func name(a, b) { }    function; parameters and result are ints
- extern name;           name a C library function
- return value;          return from a function
- a bare expression at the top level is printed automatically
"""

from cccp.lang.compiler import (
    CCCPCompiler,
    CompilerOptions,
    CompilerResult,
    compile_cccp,
    compile_file,
)
from cccp.lang.errors import (
    LangError,
    CompilationError,
    LangSyntaxError,
    LangSemanticError,
    LangTypeError,
    UndeclaredIdentifierError,
    DuplicateDeclarationError,
    ArgumentCountError,
    InvalidStringLiteralError,
    CodeGenError,
    UnsupportedFeatureError,
    UnknownNodeError,
)
from cccp.lang.lexer import Lexer, Token, TokenType
from cccp.lang.parser import Parser, parse_source
from cccp.lang.codegen import CodeGenerator
from cccp.lang.ast import ASTPrinter, Program

__all__ = [
    # Compiler
    "CCCPCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_cccp",
    "compile_file",
    # Pipeline stages
    "Lexer",
    "Token",
    "TokenType",
    "Parser",
    "parse_source",
    "CodeGenerator",
    "ASTPrinter",
    "Program",
    # Errors
    "LangError",
    "CompilationError",
    "LangSyntaxError",
    "LangSemanticError",
    "LangTypeError",
    "UndeclaredIdentifierError",
    "DuplicateDeclarationError",
    "ArgumentCountError",
    "InvalidStringLiteralError",
    "CodeGenError",
    "UnsupportedFeatureError",
    "UnknownNodeError",
]

"""
CCCP Type Model
===============

The language has exactly two value types. Every variable, parameter and
expression is one of them; the code generator infers which from the
shape of the expression that produces the value.

| Type   | C type  | printf format |
|--------|---------|---------------|
| int    | int     | %d            |
| string | char*   | %s            |

Functions always take and return int.
"""

from enum import Enum


class ValueType(Enum):
    """The two value types of the language."""
    INT = "int"
    STRING = "string"

    def __str__(self) -> str:
        return self.value

    @property
    def c_type(self) -> str:
        """The C spelling used in declarations."""
        return "char*" if self is ValueType.STRING else "int"

    @property
    def printf_format(self) -> str:
        """The printf conversion used to print a value of this type."""
        return "%s" if self is ValueType.STRING else "%d"

    @property
    def is_string(self) -> bool:
        return self is ValueType.STRING


# Type of every function parameter and return value
FUNCTION_VALUE_TYPE = ValueType.INT

from __future__ import annotations


class TranspilerError(RuntimeError):
    """A template could not be transpiled. *fragment* is the offending source text."""

    def __init__(self, message: str, fragment: str = ''):
        super().__init__(message)
        self.fragment = fragment


class UnsupportedExpressionError(TranspilerError):
    def __init__(self, expr: str):
        super().__init__(f'Cannot convert {expr}', expr)


class UnsupportedElementError(TranspilerError):
    def __init__(self, fragment: str):
        super().__init__(f"Cannot transpile XSL element '{fragment}'", fragment)


class UnconvertibleAttributeValueError(TranspilerError):
    def __init__(self, fragment: str):
        super().__init__(f"Cannot transpile attribute value template '{fragment}'", fragment)

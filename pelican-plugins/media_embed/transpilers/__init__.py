"""Build-time transpilers from the XSLT media-site templates to host template dialects."""
from __future__ import annotations

from .base import Transpiler
from .errors import (
    TranspilerError,
    UnconvertibleAttributeValueError,
    UnsupportedElementError,
    UnsupportedExpressionError,
)
from .xenforo import XenForoTemplate, convert_xpath

__all__ = [
    'Transpiler',
    'TranspilerError',
    'UnconvertibleAttributeValueError',
    'UnsupportedElementError',
    'UnsupportedExpressionError',
    'XenForoTemplate',
    'convert_xpath',
]

"""Transpile media-site XSLT templates to XenForo template syntax.

The upstream template generator only emits a small subset of XSLT, so the
conversion is a fixed sequence of regex passes over the template text rather
than a real XSLT processor:

    <xsl:if test="@id">...</xsl:if>          ->  <xf:if is="$id">...</xf:if>
    <xsl:value-of select="@id"/>             ->  {$id}
    <xsl:value-of select="100*@height div@width"/>
                                             ->  {{ 100*$height/$width }}

Conditionals found inside ``xsl:attribute`` bodies are folded into inline
ternaries, then the attributes are moved onto the element they belong to.
Anything the passes do not recognise is an error: a half-converted template
would break every page that embeds the site.
"""
from __future__ import annotations

import re
from base64 import b64decode, b64encode
from html import unescape
from typing import List, Tuple

from .base import Transpiler
from .errors import (
    UnconvertibleAttributeValueError,
    UnsupportedElementError,
    UnsupportedExpressionError,
)

XPATH_SHAPES: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"@(\w+)"), r'$\1'),
    (re.compile(r"@(\w+)(='.*?')"), r'$\1=\2'),
    (re.compile(r"@(\w+)>(\d+)"), r'$\1>\2'),
    (re.compile(r"100\*@height div@width"), '100*$height/$width'),
    (re.compile(r"100\*\(@height\+(\d+)\)div@width"), r'100*($height+\1)/$width'),
]

# Applied in order, each over the whole template
REPLACEMENTS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r'\{\{'), '&#123;'),
    (re.compile(r'\}\}'), '&#125;'),
    (re.compile(r'\{@(\w+)\}'), r'{$\1}'),
    (re.compile(r'<xsl:value-of select="@(\w+)"/>'), r'{$\1}'),
    (re.compile(r'(<iframe[^>]+?)/>'), r'\1></iframe>'),
    (re.compile(r' data-s9e-livepreview[^=]*="[^"]*"'), ''),

    (re.compile(r'<xsl:if test="([^"]+)">'), r'<xf:if is="\1">'),
    (re.compile(r'</xsl:if>'), '</xf:if>'),
    (re.compile(r'<xsl:choose><xsl:when test="([^"]+)">'), r'<xf:if is="\1">'),
    (re.compile(r'</xsl:when><xsl:when test="([^"]+)">'), r'<xf:elseif is="\1">'),
    (re.compile(r'</xsl:when><xsl:otherwise>'), '<xf:else/>'),
    (re.compile(r'</xsl:otherwise></xsl:choose>'), '</xf:if>'),
    (re.compile(r'</xsl:when></xsl:choose>'), '</xf:if>'),
]

CONDITION_PATTERN = re.compile(r'(<xf:(?:else)?if is=")([^"]+)')
VALUE_OF_PATTERN = re.compile(r'<xsl:value-of select="(.*?)"/>')
ATTRIBUTE_BODY_PATTERN = re.compile(r'(<xsl:attribute[^>]+>)(.*?)(?=</xsl:attribute)')
TERNARY_PATTERN = re.compile(r'<xf:if is="([^"]+)">([^<]+)(?:<xf:else/>([^<]+))?</xf:if>')
INLINE_ATTRIBUTE_PATTERN = re.compile(
    r'(<(?!\w+:)[^>]*)><xsl:attribute name="(\w+)">(.*?)</xsl:attribute>'
)
XSL_ELEMENT_PATTERN = re.compile(r'<xsl:[^>]*>?')
SINGLETON_BRACE_PATTERN = re.compile(r'(?<!\{)\{(?![{$])[^}]*\}?')

EXPRESSION_PATTERN = re.compile(r'\{\{\s*(.*?)\s*\}\}')
VARIABLE_PATTERN = re.compile(r'\{(\$\w+)\}')
# NUL cannot appear in template text, so it delimits hidden expressions
HIDDEN_EXPRESSION_PATTERN = re.compile(r"\x00([^\x00]+)\x00")


def convert_xpath(expr: str) -> str:
    """Convert one XPath attribute test to a XenForo expression.

    Only the shapes produced by the template generator are recognised and the
    whole expression has to match one of them.
    """
    expr = unescape(expr)
    for pattern, replacement in XPATH_SHAPES:
        match = pattern.fullmatch(expr)
        if match:
            return match.expand(replacement)
    raise UnsupportedExpressionError(expr)


def _hide_expression(match: re.Match) -> str:
    return '\x00' + b64encode(match.group(1).encode('utf-8')).decode('ascii') + '\x00'


def _restore_expression(match: re.Match) -> str:
    return "' . (" + b64decode(match.group(1)).decode('utf-8') + ") . '"


def convert_mixed_content(text: str) -> str:
    """Turn text mixing literals, ``{$var}`` and ``{{ expr }}`` into a string expression."""
    # Expressions are hidden while the literal text gets quoted
    text = EXPRESSION_PATTERN.sub(_hide_expression, text)
    text = "'" + text.replace('\\', '\\\\').replace("'", "\\'") + "'"
    text = VARIABLE_PATTERN.sub(r"' . \1 . '", text)
    text = HIDDEN_EXPRESSION_PATTERN.sub(_restore_expression, text)

    return text.replace("'' . ", '').replace(" . ''", '')


def _ternary(match: re.Match) -> str:
    condition, true_branch, false_branch = match.groups()
    true_expr = convert_mixed_content(true_branch)
    false_expr = convert_mixed_content(false_branch) if false_branch is not None else "''"

    return '{{ ' + condition + ' ? ' + true_expr + ' : ' + false_expr + ' }}'


def convert_ternaries(text: str) -> str:
    """Collapse tag-free ``xf:if`` blocks into ternaries, innermost first."""
    while True:
        converted = TERNARY_PATTERN.sub(_ternary, text)
        if converted == text:
            return converted
        text = converted


class XenForoTemplate(Transpiler):
    def transpile(self, template: str) -> str:
        for pattern, replacement in REPLACEMENTS:
            template = pattern.sub(replacement, template)

        template = CONDITION_PATTERN.sub(
            lambda m: m.group(1) + convert_xpath(m.group(2)),
            template,
        )
        template = VALUE_OF_PATTERN.sub(
            lambda m: '{{ ' + convert_xpath(m.group(1)) + ' }}',
            template,
        )
        template = ATTRIBUTE_BODY_PATTERN.sub(
            lambda m: m.group(1) + convert_ternaries(m.group(2)),
            template,
        )
        template = self._inline_attributes(template)
        self._check(template)

        return template.replace('&#123;', '{').replace('&#125;', '}')

    @staticmethod
    def _inline_attributes(template: str) -> str:
        count = 1
        while count:
            template, count = INLINE_ATTRIBUTE_PATTERN.subn(r'\1 \2="\3">', template, count=1)
        return template

    @staticmethod
    def _check(template: str) -> None:
        match = XSL_ELEMENT_PATTERN.search(template)
        if match:
            raise UnsupportedElementError(match.group(0))
        match = SINGLETON_BRACE_PATTERN.search(template)
        if match:
            raise UnconvertibleAttributeValueError(match.group(0))

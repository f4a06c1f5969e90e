from __future__ import annotations

import pytest

from media_embed.transpilers import (
    Transpiler,
    TranspilerError,
    UnconvertibleAttributeValueError,
    UnsupportedElementError,
    UnsupportedExpressionError,
    XenForoTemplate,
    convert_xpath,
)
from media_embed.transpilers.xenforo import convert_mixed_content, convert_ternaries


@pytest.fixture
def transpiler():
    return XenForoTemplate()


class TestConvertXPath:
    @pytest.mark.parametrize(
        "expr,expected",
        [
            ("@id", "$id"),
            ("@foo='bar'", "$foo=='bar'"),
            ("@foo=&apos;bar&apos;", "$foo=='bar'"),
            ("@width>100", "$width>100"),
            ("@width&gt;100", "$width>100"),
            ("100*@height div@width", "100*$height/$width"),
            ("100*(@height+60)div@width", "100*($height+60)/$width"),
        ],
    )
    def test_recognized_shapes(self, expr, expected):
        assert convert_xpath(expr) == expected

    @pytest.mark.parametrize(
        "expr",
        ["@foo + @bar", "@a div @b", "100*@height div @width", "@id and @t", "string(@id)", "x@id"],
    )
    def test_unrecognized_expressions_raise(self, expr):
        with pytest.raises(UnsupportedExpressionError) as exc_info:
            convert_xpath(expr)
        assert exc_info.value.fragment == expr
        assert expr in str(exc_info.value)

    def test_error_is_a_transpiler_error(self):
        with pytest.raises(TranspilerError):
            convert_xpath("@foo + @bar")


class TestMixedContent:
    def test_literal_text_is_quoted(self):
        assert convert_mixed_content("abc") == "'abc'"

    def test_variables_are_concatenated(self):
        assert convert_mixed_content("a{$b}c") == "'a' . $b . 'c'"

    def test_empty_concatenations_are_removed(self):
        assert convert_mixed_content("{$b}") == "$b"
        assert convert_mixed_content("?t={$t}") == "'?t=' . $t"

    def test_expressions_are_wrapped_in_parentheses(self):
        assert convert_mixed_content("w:{{ 100*$height/$width }}%") == "'w:' . (100*$height/$width) . '%'"

    def test_at_signs_in_literal_text_are_kept(self):
        assert convert_mixed_content("a@b {{ x }} c@d") == "'a@b ' . (x) . ' c@d'"

    def test_quotes_in_literal_text_are_escaped(self):
        assert convert_mixed_content("it's {$b}") == "'it\\'s ' . $b"
        assert convert_mixed_content("a\\b") == "'a\\\\b'"

    def test_ternaries_collapse_innermost_first(self):
        text = '<xf:if is="$a">A<xf:if is="$b">B</xf:if></xf:if>'
        assert convert_ternaries(text) == "{{ $a ? 'A' . ($b ? 'B' : '') : '' }}"

    def test_blocks_with_nested_markup_are_kept(self):
        text = '<xf:if is="$a"><b>A</b></xf:if>'
        assert convert_ternaries(text) == text


class TestTranspile:
    def test_is_a_transpiler(self, transpiler):
        assert isinstance(transpiler, Transpiler)

    def test_attribute_shorthand(self, transpiler):
        template = '<iframe src="https://example.com/{@id}"/>'
        assert transpiler.transpile(template) == '<iframe src="https://example.com/{$id}"></iframe>'

    def test_value_of_attribute(self, transpiler):
        assert transpiler.transpile('<span><xsl:value-of select="@title"/></span>') == '<span>{$title}</span>'

    def test_value_of_expression(self, transpiler):
        template = '<b><xsl:value-of select="100*@height div@width"/></b>'
        assert transpiler.transpile(template) == '<b>{{ 100*$height/$width }}</b>'

    def test_escaped_braces(self, transpiler):
        template = '<div style="padding-bottom:{{100}}%"></div>'
        assert transpiler.transpile(template) == '<div style="padding-bottom:{100}%"></div>'

    def test_livepreview_attributes_are_removed(self, transpiler):
        template = '<iframe data-s9e-livepreview-ignore-attrs="style" src="x"></iframe>'
        assert transpiler.transpile(template) == '<iframe src="x"></iframe>'

    def test_if(self, transpiler):
        template = "<xsl:if test=\"@foo='bar'\">X</xsl:if>"
        assert transpiler.transpile(template) == "<xf:if is=\"$foo=='bar'\">X</xf:if>"

    def test_choose(self, transpiler):
        template = (
            '<xsl:choose>'
            '<xsl:when test="@a">A</xsl:when>'
            '<xsl:when test="@b">B</xsl:when>'
            '<xsl:otherwise>C</xsl:otherwise>'
            '</xsl:choose>'
        )
        assert transpiler.transpile(template) == '<xf:if is="$a">A<xf:elseif is="$b">B<xf:else/>C</xf:if>'

    def test_choose_without_otherwise(self, transpiler):
        template = '<xsl:choose><xsl:when test="@a">A</xsl:when></xsl:choose>'
        assert transpiler.transpile(template) == '<xf:if is="$a">A</xf:if>'

    def test_conditional_attribute_becomes_ternary(self, transpiler):
        template = (
            '<a><xsl:attribute name="class">'
            "<xsl:if test=\"@foo='bar'\">X</xsl:if>"
            '</xsl:attribute></a>'
        )
        assert transpiler.transpile(template) == "<a class=\"{{ $foo=='bar' ? 'X' : '' }}\"></a>"

    def test_choose_in_attribute_becomes_ternary(self, transpiler):
        template = (
            '<a><xsl:attribute name="class"><xsl:choose>'
            "<xsl:when test=\"@foo='bar'\">X</xsl:when>"
            '<xsl:otherwise>Y</xsl:otherwise>'
            '</xsl:choose></xsl:attribute></a>'
        )
        assert transpiler.transpile(template) == "<a class=\"{{ $foo=='bar' ? 'X' : 'Y' }}\"></a>"

    def test_iframe_src_with_optional_start(self, transpiler):
        template = (
            '<iframe><xsl:attribute name="src">https://example.com/embed/'
            '<xsl:value-of select="@id"/>'
            '<xsl:if test="@t">?start=<xsl:value-of select="@t"/></xsl:if>'
            '</xsl:attribute></iframe>'
        )
        assert transpiler.transpile(template) == (
            "<iframe src=\"https://example.com/embed/{$id}{{ $t ? '?start=' . $t : '' }}\"></iframe>"
        )

    def test_ternary_with_expression(self, transpiler):
        template = (
            '<div><xsl:attribute name="style"><xsl:choose>'
            '<xsl:when test="@width&gt;100">width:<xsl:value-of select="100*@height div@width"/>%</xsl:when>'
            '<xsl:otherwise>width:100%</xsl:otherwise>'
            '</xsl:choose></xsl:attribute></div>'
        )
        assert transpiler.transpile(template) == (
            "<div style=\"{{ $width>100 ? 'width:' . (100*$height/$width) . '%' : 'width:100%' }}\"></div>"
        )

    def test_nested_conditionals_in_attribute(self, transpiler):
        template = (
            '<a><xsl:attribute name="title">'
            '<xsl:if test="@a">A<xsl:if test="@b">B</xsl:if></xsl:if>'
            '</xsl:attribute></a>'
        )
        assert transpiler.transpile(template) == "<a title=\"{{ $a ? 'A' . ($b ? 'B' : '') : '' }}\"></a>"

    def test_at_sign_next_to_expression_in_ternary(self, transpiler):
        template = (
            '<a><xsl:attribute name="title">'
            '<xsl:if test="@a">a@b <xsl:value-of select="100*@height div@width"/></xsl:if>'
            '</xsl:attribute></a>'
        )
        assert transpiler.transpile(template) == (
            "<a title=\"{{ $a ? 'a@b ' . (100*$height/$width) : '' }}\"></a>"
        )

    def test_handle_url_in_ternary(self, transpiler):
        template = (
            '<iframe><xsl:attribute name="src">'
            '<xsl:if test="@u">https://www.tiktok.com/@<xsl:value-of select="@u"/>/x@y:'
            '<xsl:value-of select="100*(@height+60)div@width"/></xsl:if>'
            '</xsl:attribute></iframe>'
        )
        assert transpiler.transpile(template) == (
            "<iframe src=\"{{ $u ? 'https://www.tiktok.com/@' . $u . '/x@y:'"
            " . (100*($height+60)/$width) : '' }}\"></iframe>"
        )

    def test_apostrophe_in_ternary_branch(self, transpiler):
        template = (
            '<a><xsl:attribute name="title">'
            "<xsl:if test=\"@a\">it's <xsl:value-of select=\"@a\"/></xsl:if>"
            '</xsl:attribute></a>'
        )
        assert transpiler.transpile(template) == "<a title=\"{{ $a ? 'it\\'s ' . $a : '' }}\"></a>"

    def test_sibling_attributes_are_all_inlined(self, transpiler):
        template = (
            '<iframe>'
            '<xsl:attribute name="src">a</xsl:attribute>'
            '<xsl:attribute name="title">b</xsl:attribute>'
            '</iframe>'
        )
        assert transpiler.transpile(template) == '<iframe src="a" title="b"></iframe>'

    def test_leftover_xsl_element_raises(self, transpiler):
        with pytest.raises(UnsupportedElementError) as exc_info:
            transpiler.transpile('<div><xsl:copy-of select="@foo"/></div>')
        assert exc_info.value.fragment == '<xsl:copy-of select="@foo"/>'

    def test_unconvertible_attribute_value_template_raises(self, transpiler):
        with pytest.raises(UnconvertibleAttributeValueError) as exc_info:
            transpiler.transpile('<div title="{substring(@id, 1)}"></div>')
        assert exc_info.value.fragment == '{substring(@id, 1)}'

    def test_unsupported_condition_raises(self, transpiler):
        with pytest.raises(UnsupportedExpressionError):
            transpiler.transpile('<xsl:if test="@foo + @bar">x</xsl:if>')

    def test_unsupported_value_of_raises(self, transpiler):
        with pytest.raises(UnsupportedExpressionError) as exc_info:
            transpiler.transpile('<b><xsl:value-of select="@a div @b"/></b>')
        assert exc_info.value.fragment == '@a div @b'

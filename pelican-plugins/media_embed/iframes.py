"""Replace embedded iframes with lazy-loading placeholders.

Rendered pages contain iframes marked with ``data-s9e-mediaembed``, either
directly or inside a marked wrapper::

    <span data-s9e-mediaembed="youtube" style="..."><span style="...">
        <iframe data-s9e-mediaembed-c2l="youtube" src="..." ...></iframe>
    </span></span>

Each iframe becomes an empty ``<span>`` holding its attributes as a JSON list
in ``data-s9e-mediaembed-iframe``. The bootstrap script appended to the page
turns placeholders back into iframes once they scroll into view, or on click
for click-to-load (``c2l``) embeds. Markup that does not have the expected
shape is left alone.
"""
from __future__ import annotations

import json
import logging
import re
from html import escape
from pathlib import Path
from typing import Dict, List

from .oembed import OembedSession

logger = logging.getLogger(__name__)

MARKER = 'data-s9e-mediaembed="'
BOOTSTRAP_SCRIPT = Path(__file__).with_name('bootstrap.min.js').read_text(encoding='utf-8')

IFRAME_PATTERN = re.compile(
    r'(?P<wrapper><span data-s9e-mediaembed="[^>]+><span[^>]*>)?'
    r'(?P<iframe><iframe(?(wrapper)|(?= data-s9e-mediaembed="[^"]))[^>]*></iframe>)'
    # Iframes inside a <template> are built by other scripts
    r'(?!(?:</span>)*\s*</template>)'
)
ATTRIBUTE_PATTERN = re.compile(r'([-\w]+)="([^"]*)')
BACKGROUND_PATTERN = re.compile(r'\bbackground:([^;]+);?')
UNESCAPED_AMP_PATTERN = re.compile(r'&(?!(?:[A-Za-z][A-Za-z0-9]*|#[0-9]+|#[xX][0-9A-Fa-f]+);)')

PLACEHOLDER_ATTRIBUTES = (
    'data-s9e-mediaembed',
    'data-s9e-mediaembed-c2l',
    'data-s9e-mediaembed-c2l-background',
    'data-s9e-mediaembed-c2l-oembed-id',
    'style',
)


def parse_attributes(element: str) -> Dict[str, str]:
    return dict(ATTRIBUTE_PATTERN.findall(element))


def separate_click_to_load(attributes: Dict[str, str]) -> Dict[str, str]:
    """Promote the click-to-load source and move the background out of ``style``."""
    attributes = dict(attributes)
    if 'data-s9e-mediaembed-c2l-src' in attributes:
        attributes['src'] = attributes['data-s9e-mediaembed-c2l-src']
    if 'data-s9e-mediaembed-c2l' in attributes and 'style' in attributes:
        match = BACKGROUND_PATTERN.search(attributes['style'])
        if match:
            attributes['data-s9e-mediaembed-c2l-background'] = 'background:' + match.group(1).strip()
            style = BACKGROUND_PATTERN.sub('', attributes['style']).strip()
            if style:
                attributes['style'] = style
            else:
                del attributes['style']

    return attributes


def _escape_attribute(value: str) -> str:
    return escape(value, quote=False).replace('"', '&quot;')


def _escape_payload(payload: str) -> str:
    payload = UNESCAPED_AMP_PATTERN.sub('&amp;', payload)
    return payload.replace('<', '&lt;').replace('>', '&gt;').replace("'", '&#39;')


def build_placeholder(attributes: Dict[str, str]) -> str:
    values: List[str] = []
    for name, value in attributes.items():
        if 'c2l' in name:
            continue
        values.extend((name, value))

    html = '<span'
    for name in PLACEHOLDER_ATTRIBUTES:
        if name in attributes:
            html += f' {name}="{_escape_attribute(attributes[name])}"'
    html += " data-s9e-mediaembed-iframe='" + _escape_payload(json.dumps(values, separators=(',', ':'))) + "'"
    html += '></span>'

    return html


class IframeRewriter:
    """Rewrite the iframes of one rendered page at a time.

    The oEmbed store and service are passed on to the :class:`OembedSession`
    created for every call to :meth:`rewrite`.
    """

    def __init__(self, store=None, service=None, rng=None, clock=None):
        self.store = store
        self.service = service
        self.rng = rng
        self.clock = clock

    def new_session(self) -> OembedSession:
        kwargs = {'clock': self.clock} if self.clock is not None else {}
        return OembedSession(self.store, self.service, rng=self.rng, **kwargs)

    def rewrite(self, html: str) -> str:
        if MARKER not in html:
            return html

        session = self.new_session()
        count = 0

        def _repl(match: re.Match) -> str:
            nonlocal count
            count += 1
            return (match.group('wrapper') or '') + self.replace_iframe(match.group('iframe'), session)

        html = IFRAME_PATTERN.sub(_repl, html)
        html = session.enrich(html)
        if not count:
            return html

        logger.debug('Replaced %d embedded iframe(s)', count)
        return html + '<script>' + BOOTSTRAP_SCRIPT + '</script>'

    @staticmethod
    def replace_iframe(iframe: str, session: OembedSession) -> str:
        attributes = separate_click_to_load(parse_attributes(iframe))
        if 'data-s9e-mediaembed-api' in attributes:
            attributes.pop('onload', None)
        if 'data-s9e-mediaembed-c2l' in attributes and 'data-s9e-mediaembed-c2l-oembed-id' in attributes:
            session.record_candidate(
                attributes['data-s9e-mediaembed-c2l'],
                attributes['data-s9e-mediaembed-c2l-oembed-id'],
            )

        return build_placeholder(attributes)

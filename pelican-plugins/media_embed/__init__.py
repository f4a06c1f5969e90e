"""
Media Embed Plugin for Pelican

Rewrites the media embeds of every written HTML page into lazy-loading
placeholders, adds cached oEmbed titles to click-to-load embeds and appends
the bootstrap script that builds the real iframes in the browser.

Configuration (optional in pelicanconf.py):
    MEDIAEMBED_ENABLED = True
    MEDIAEMBED_OEMBED_STORE = None     # object with find_by_hashes(hashes)
    MEDIAEMBED_OEMBED_SERVICE = None   # object with get_active_fetch_count()
                                       # and fetch_oembed(site_id, media_id)

Without a store or service, placeholders are produced without titles.

MEDIAEMBED_MASTODON_HOSTS (one host per line) is not read here; it is the
allow-list filters.filter_mastodon_host() looks up in the settings passed to it.
"""
from __future__ import annotations

import logging
from pathlib import Path

from pelican import signals

from .iframes import IframeRewriter

logger = logging.getLogger(__name__)


def build_rewriter(settings) -> IframeRewriter:
    return IframeRewriter(
        store=settings.get('MEDIAEMBED_OEMBED_STORE'),
        service=settings.get('MEDIAEMBED_OEMBED_SERVICE'),
    )


def rewrite_written_file(path, context):
    """Rewrite one output file. Called by Pelican after each page is written."""
    context = context or {}
    if not context.get('MEDIAEMBED_ENABLED', True):
        return
    output_path = Path(path)
    if output_path.suffix.lower() != '.html':
        return

    original = output_path.read_text(encoding='utf-8')
    rewritten = build_rewriter(context).rewrite(original)
    if rewritten != original:
        output_path.write_text(rewritten, encoding='utf-8')
        logger.debug('Rewrote media embeds in %s', output_path)


def register():
    """Register the plugin with Pelican."""
    signals.content_written.connect(rewrite_written_file)

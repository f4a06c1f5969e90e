"""Attribute filters applied to values captured from media URLs.

Every filter returns the normalised value, or ``None`` when the value is
invalid. Filters never raise; the caller decides whether an invalid value
drops the attribute or rejects the embed altogether.
"""
from __future__ import annotations

import re
from typing import Optional
from urllib.parse import quote

DEFAULT_MASTODON_HOSTS = 'mastodon.social'

IDENTIFIER_PATTERN = re.compile(r'[-0-9A-Za-z_]+')
TIMESTAMP_PATTERN = re.compile(r'(?=[0-9])(?:([0-9]+)h)?(?:([0-9]+)m)?(?:([0-9]+)s)?')
UINT_PATTERN = re.compile(r'\s*\+?(0|[1-9][0-9]*)\s*')
# A lone "%" or any character outside !#$%&*+,-./0-9:;=?@A-Z_a-z~
URL_UNSAFE_PATTERN = re.compile(r'%(?![0-9A-Fa-f]{2})|[^!#-&*-;=?-Z_a-z~]')


def filter_identifier(value: str) -> Optional[str]:
    return value if IDENTIFIER_PATTERN.fullmatch(value) else None


def filter_allowed_host(value: str, allow_list: str = DEFAULT_MASTODON_HOSTS) -> Optional[str]:
    """Return the lower-cased host if it appears in the newline-delimited *allow_list*."""
    hosts = {line.strip().lower() for line in allow_list.split('\n')}
    host = value.lower()
    return host if host and host in hosts else None


def filter_mastodon_host(value: str, settings=None) -> Optional[str]:
    allow_list = (settings or {}).get('MEDIAEMBED_MASTODON_HOSTS') or DEFAULT_MASTODON_HOSTS
    return filter_allowed_host(value, allow_list)


def filter_timestamp(value: str) -> Optional[int]:
    """Accept ``1h2m3s``-style durations (in seconds) or a plain unsigned integer."""
    match = TIMESTAMP_PATTERN.fullmatch(value)
    if match:
        hours, minutes, seconds = (int(group or 0) for group in match.groups())
        return hours * 3600 + minutes * 60 + seconds
    return filter_uint(value)


def filter_uint(value: str) -> Optional[int]:
    match = UINT_PATTERN.fullmatch(value)
    return int(match.group(1)) if match else None


def filter_url(value: str) -> str:
    """Percent-encode unsafe characters and stray ``%`` signs.

    Already encoded sequences are left alone, so the filter is idempotent.
    """
    return URL_UNSAFE_PATTERN.sub(lambda m: quote(m.group(0), safe=''), value)

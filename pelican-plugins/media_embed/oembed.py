"""oEmbed title enrichment for click-to-load placeholders.

Titles are read from the host's oEmbed cache and, at most once per render,
fetched live for one random media item whose title is still unknown. The
fetch itself, and recording its success or failure, belong to the host's
oEmbed service; this module only decides what to ask for.

An :class:`OembedSession` holds the state of one render and must not be
shared between renders.
"""
from __future__ import annotations

import hashlib
import logging
import random
import re
import time
from dataclasses import dataclass
from html import escape
from typing import Callable, Dict, Iterable, Optional, Protocol

logger = logging.getLogger(__name__)

MAX_ACTIVE_FETCHES = 2
MAX_FAIL_COUNT = 10
REFETCH_DELAY = 3600

TITLE_ATTR = 'data-s9e-mediaembed-c2l-oembed-title'
OEMBED_TAG_PATTERN = re.compile(
    r'(?P<head>data-s9e-mediaembed-c2l="(?P<site>[^"<>]+)"[^>]*?'
    r'data-s9e-mediaembed-c2l-oembed-id="(?P<media>[^"<>]+)")'
    r'(?P<rest>[^<>]*>)'
)
TITLE_ATTR_PATTERN = re.compile(r'\s' + TITLE_ATTR + r'="[^"]*"')


@dataclass
class OembedRecord:
    media_id: str
    site_id: str
    title: Optional[str] = None
    fail_count: int = 0
    failed_date: int = 0


class OembedStore(Protocol):
    def find_by_hashes(self, hashes: Iterable[str]) -> Iterable[OembedRecord]: ...


class OembedService(Protocol):
    def get_active_fetch_count(self) -> int: ...

    def fetch_oembed(self, site_id: str, media_id: str) -> Optional[OembedRecord]: ...


def media_hash(site_id: str, media_id: str) -> str:
    return hashlib.md5((site_id + media_id).encode('utf-8')).hexdigest()


def should_refetch(record: OembedRecord, now: float) -> bool:
    if record.title is not None:
        return False
    if record.fail_count >= MAX_FAIL_COUNT:
        return False
    # Leave at least an hour between a failure and the next attempt
    if record.failed_date > now - REFETCH_DELAY:
        return False
    return True


class OembedSession:
    def __init__(
        self,
        store: Optional[OembedStore] = None,
        service: Optional[OembedService] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.service = service
        self.rng = rng or random.Random()
        self.clock = clock
        self.candidates: Dict[str, Dict[str, str]] = {}
        self.titles: Dict[str, Dict[str, str]] = {}

    def record_candidate(self, site_id: str, media_id: str) -> None:
        self.candidates.setdefault(site_id, {})[media_id] = media_id

    def enrich(self, html: str) -> str:
        self._load_cached_titles()
        self._fetch_one()
        self.candidates = {}

        return OEMBED_TAG_PATTERN.sub(self._replace_title, html)

    def _load_cached_titles(self) -> None:
        hashes = [
            media_hash(site_id, media_id)
            for site_id, media_ids in self.candidates.items()
            for media_id in media_ids
        ]
        if not hashes or self.store is None:
            return

        now = self.clock()
        for record in self.store.find_by_hashes(hashes):
            self._set_title(record.site_id, record.media_id, record.title)
            if not should_refetch(record, now):
                self.candidates.get(record.site_id, {}).pop(record.media_id, None)

    def _fetch_one(self) -> None:
        candidates = {site_id: media_ids for site_id, media_ids in self.candidates.items() if media_ids}
        if not candidates or self.service is None:
            return
        if self.service.get_active_fetch_count() >= MAX_ACTIVE_FETCHES:
            logger.debug('Skipping oEmbed fetch, too many fetches in progress')
            return

        site_id = self.rng.choice(sorted(candidates))
        media_id = self.rng.choice(sorted(candidates[site_id]))
        try:
            record = self.service.fetch_oembed(site_id, media_id)
        except Exception:
            logger.warning('oEmbed fetch failed for %s:%s', site_id, media_id, exc_info=True)
            return
        if record is not None:
            self._set_title(site_id, media_id, record.title)

    def _set_title(self, site_id: str, media_id: str, title: Optional[str]) -> None:
        self.titles.setdefault(site_id, {})[media_id] = title or ''

    def _replace_title(self, match: re.Match) -> str:
        head = TITLE_ATTR_PATTERN.sub('', match.group('head'))
        rest = TITLE_ATTR_PATTERN.sub('', match.group('rest'))
        title = self.titles.get(match.group('site'), {}).get(match.group('media'))
        if title is None:
            return head + rest

        return f'{head} {TITLE_ATTR}="{escape(title)}"{rest}'

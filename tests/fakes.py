from __future__ import annotations

from media_embed.oembed import OembedRecord, media_hash

NOW = 1_700_000_000


class FakeStore:
    def __init__(self, records=()):
        self.records = list(records)
        self.queries = []

    def find_by_hashes(self, hashes):
        hashes = set(hashes)
        self.queries.append(hashes)
        return [r for r in self.records if media_hash(r.site_id, r.media_id) in hashes]


class FakeService:
    def __init__(self, active=0, titles=None, error=None):
        self.active = active
        self.titles = titles or {}
        self.error = error
        self.fetched = []

    def get_active_fetch_count(self):
        return self.active

    def fetch_oembed(self, site_id, media_id):
        self.fetched.append((site_id, media_id))
        if self.error is not None:
            raise self.error
        if (site_id, media_id) not in self.titles:
            return None
        return OembedRecord(media_id, site_id, self.titles[(site_id, media_id)])

"""Content-addressed response cache.

Chat requests are fingerprinted from their normalized content, and the
provider's response is stored on disk under that fingerprint so that an
identical conversation replays without a network call.
"""

from tool_relay.cache.fingerprint import canonical_json, fingerprint
from tool_relay.cache.store import CacheEntry, ResponseCache

__all__ = ["CacheEntry", "ResponseCache", "canonical_json", "fingerprint"]

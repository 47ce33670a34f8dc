from pap.stores.local_cache import COLLECTION_KEYS, LocalCacheStore

__all__ = ["COLLECTION_KEYS", "LocalCacheStore"]

"""Redis adapter – cache client and snapshot store."""
from workforce_audit.adapters.redis.cache import RedisCache
from workforce_audit.adapters.redis.snapshot_store import RedisSnapshotStore

__all__ = ["RedisCache", "RedisSnapshotStore"]

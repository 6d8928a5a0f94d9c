"""Redis helpers for once-per-visitor view accounting."""

from __future__ import annotations

from agora.infra.redis import redis_client

_VIEW_KEY = "discussion:view:{discussion_id}:{visitor}"


def view_key(visitor_ip: str, discussion_id: int) -> str:
    return _VIEW_KEY.format(discussion_id=discussion_id, visitor=visitor_ip or "unknown")


class ViewDedupCache:
    """Seen-markers with a TTL; an expired marker lets the visitor count again."""

    async def has(self, key: str) -> bool:
        """Plain existence check from the `ViewCache` contract; the view path uses `claim`."""
        return bool(await redis_client.exists(key))

    async def set(self, key: str, ttl: int) -> None:
        """Unconditional mark from the `ViewCache` contract; `claim` is its race-free form."""
        await redis_client.set(key, "1", ex=max(1, int(ttl)))

    async def claim(self, key: str, ttl: int) -> bool:
        """Atomically mark the key; True only for the caller that created it."""
        created = await redis_client.set(key, "1", ex=max(1, int(ttl)), nx=True)
        return bool(created)

    async def release(self, key: str) -> None:
        await redis_client.delete(key)


__all__ = ["ViewDedupCache", "view_key"]

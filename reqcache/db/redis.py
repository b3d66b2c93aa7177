"""Redis-backed store handle.

Each session opens a fresh single-connection `redis.asyncio.Redis`
client, verifies it with PING, and closes it again when the session
ends.  No connection is shared between sessions.

Connection settings come from StoreConfig:
  host / port           where Redis listens
  password              sent with AUTH when set; None skips AUTH
  connect_timeout_ms    socket connect timeout
"""

from __future__ import annotations

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from reqcache.db.store import StoreConnection, StoreHandle


class RedisStoreHandle(StoreHandle):
    _transport_errors = (RedisError,)

    def _client(self) -> aioredis.Redis:
        return aioredis.Redis(
            host=self.config.host,
            port=self.config.port,
            password=self.config.password,
            socket_connect_timeout=self.config.connect_timeout_ms / 1000,
            decode_responses=True,  # get() returns str, not bytes
            single_connection_client=True,
        )

    async def _open(self) -> StoreConnection:
        client = self._client()
        try:
            await client.ping()  # type: ignore[misc]  # redis stubs mistype async ping as bool
        except RedisError:
            await client.aclose()
            raise
        return client

    async def _close(self, conn: StoreConnection) -> None:
        await conn.aclose()  # type: ignore[attr-defined]

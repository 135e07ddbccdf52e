from __future__ import annotations

import threading
from collections import defaultdict

from .connection import Connection


class ConnectionPool:
    """
    Thread-safe pool of idle connections keyed by (scheme, host, port).
    """

    def __init__(
        self,
        timeout: float = 10.0,
        verify: bool = True,
        max_per_host: int = 4,
    ) -> None:
        self.timeout = timeout
        self.verify = verify
        self.max_per_host = max_per_host
        self._pools: dict[tuple[str, str, int], list[Connection]] = defaultdict(list)
        self._lock = threading.Lock()

    def acquire(self, scheme: str, host: str, port: int) -> Connection:
        key = (scheme, host, port)
        with self._lock:
            bucket = self._pools[key]
            while bucket:
                conn = bucket.pop()
                if not conn.closed:
                    return conn
        return Connection(host, port, scheme, self.timeout, self.verify)

    def release(self, conn: Connection) -> None:
        if conn.closed:
            return
        key = (conn.scheme, conn.host, conn.port)
        with self._lock:
            bucket = self._pools[key]
            if len(bucket) < self.max_per_host:
                bucket.append(conn)
                return
        conn.close()

    def close(self) -> None:
        with self._lock:
            conns = [conn for bucket in self._pools.values() for conn in bucket]
            self._pools.clear()
        for conn in conns:
            conn.close()

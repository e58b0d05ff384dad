"""
MongoDB sink and query adapters for logmongo.

Every call opens its own client, performs one operation and closes the
client again; nothing is pooled across requests.
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple, Union
from urllib.parse import parse_qsl, urlsplit

import certifi
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import ConfigurationError

from logmongo.config.settings import get_settings

logger = logging.getLogger(__name__)

# Query defaults
DEFAULT_QUERY_LIMIT = 1000
DEFAULT_QUERY_SKIP = 0

TLS_SCHEMES = ("mongodb+srv://",)


SortSpec = Union[Mapping[str, int], Sequence[Tuple[str, int]]]


def _requests_tls(url: str) -> bool:
    """Whether ``url`` turns TLS on: tls/ssl options first, then the SRV scheme."""
    options = {
        key.lower(): value.lower()
        for key, value in parse_qsl(urlsplit(url).query)
    }
    flag = options.get("tls", options.get("ssl"))
    if flag is not None:
        return flag == "true"
    return url.startswith(TLS_SCHEMES)


def _client_kwargs(url: str) -> Dict[str, Any]:
    """Connection options for ``url``."""
    kwargs: Dict[str, Any] = {
        "serverSelectionTimeoutMS": get_settings().server_selection_timeout_ms,
    }

    # CA bundle only where the URI itself turns TLS on
    if _requests_tls(url):
        kwargs["tlsCAFile"] = certifi.where()

    return kwargs


def _check_target(url: Optional[str], db: Optional[str], collection: Optional[str]):
    missing = [
        label for label, value in (("url", url), ("db", db), ("collection", collection))
        if not value
    ]
    if missing:
        raise ConfigurationError(
            f"persistence target is incomplete, missing: {', '.join(missing)}"
        )


def _sort_list(sort: Optional[SortSpec]) -> List[Tuple[str, int]]:
    if not sort:
        return []
    if isinstance(sort, Mapping):
        return list(sort.items())
    return [tuple(item) for item in sort]


async def insert_records(
    url: str,
    db: str,
    collection: str,
    records: List[Dict[str, Any]],
):
    """
    Insert a batch of records.

    Args:
        url: MongoDB connection URI
        db: Database name
        collection: Collection name
        records: Documents to insert

    Returns:
        The driver's InsertManyResult

    Raises:
        ConfigurationError: If url, db or collection is missing
        PyMongoError: On connection or write failure
    """
    _check_target(url, db, collection)

    client = AsyncIOMotorClient(url, **_client_kwargs(url))
    try:
        result = await client[db][collection].insert_many(records)
        logger.debug(f"Inserted {len(records)} record(s) into {db}.{collection}")
        return result
    finally:
        client.close()


async def find_records(
    url: str,
    db: str,
    collection: str,
    find: Optional[Dict[str, Any]] = None,
    sort: Optional[SortSpec] = None,
    limit: Optional[int] = DEFAULT_QUERY_LIMIT,
    skip: Optional[int] = DEFAULT_QUERY_SKIP,
) -> List[Dict[str, Any]]:
    """
    Retrieve stored records.

    Args:
        url: MongoDB connection URI
        db: Database name
        collection: Collection name
        find: Filter document (all records when omitted)
        sort: Mapping or list of (field, direction) pairs
        limit: Maximum records (0 or None means the default, 1000)
        skip: Records to skip

    Returns:
        Matching documents
    """
    _check_target(url, db, collection)

    limit = limit or DEFAULT_QUERY_LIMIT
    skip = skip or DEFAULT_QUERY_SKIP

    client = AsyncIOMotorClient(url, **_client_kwargs(url))
    try:
        cursor = client[db][collection].find(find or {})
        sort_list = _sort_list(sort)
        if sort_list:
            cursor = cursor.sort(sort_list)
        cursor = cursor.skip(skip).limit(limit)
        return await cursor.to_list(length=limit)
    finally:
        client.close()


class MongoSink:
    """
    Best-effort record sink for one persistence target.

    ``submit`` schedules an insert as a detached task and returns
    immediately; the outcome is only logged. Delivery is at most once:
    a failed insert is reported and dropped.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        db: Optional[str] = None,
        collection: Optional[str] = None,
    ):
        """
        Initialize sink.

        Args:
            url: MongoDB connection URI
            db: Database name
            collection: Collection name
        """
        self.url = url
        self.db = db
        self.collection = collection
        self._pending: Set[asyncio.Task] = set()

    @property
    def configured(self) -> bool:
        return bool(self.url and self.db and self.collection)

    @property
    def pending(self) -> int:
        """Number of inserts still in flight."""
        return len(self._pending)

    async def insert(self, records: List[Dict[str, Any]]):
        return await insert_records(self.url, self.db, self.collection, records)

    async def query(
        self,
        find: Optional[Dict[str, Any]] = None,
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = DEFAULT_QUERY_LIMIT,
        skip: Optional[int] = DEFAULT_QUERY_SKIP,
    ) -> List[Dict[str, Any]]:
        return await find_records(
            self.url, self.db, self.collection,
            find=find, sort=sort, limit=limit, skip=skip,
        )

    def submit(self, records: List[Dict[str, Any]]) -> asyncio.Task:
        """
        Schedule an insert without waiting for it.

        Must be called from a running event loop.

        Args:
            records: Documents to insert

        Returns:
            The detached task (callers are not expected to await it)
        """
        task = asyncio.get_running_loop().create_task(self.insert(records))
        self._pending.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.warning("Record insert was cancelled")
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"Failed to persist request record to {self.db}.{self.collection}: {error}"
            )

    async def drain(self) -> None:
        """Wait for all in-flight inserts to settle."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

"""
Request logging middleware.

Builds one record per request from a format template and hands it to
a MongoDB sink without waiting for the write.
"""

import logging
import warnings
from typing import Any, Callable, Dict, List, Optional

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from logmongo.config.settings import Settings, get_settings
from logmongo.core.exchange import RequestView, ResponseView
from logmongo.core.formats import FormatCatalog, FormatSpec, get_format_catalog
from logmongo.core.lifecycle import LifecycleTracker
from logmongo.core.tokens import TokenRegistry, get_token_registry
from logmongo.core.values import Record
from logmongo.database.mongodb import (
    DEFAULT_QUERY_SKIP,
    MongoSink,
    SortSpec,
)

logger = logging.getLogger(__name__)


SkipPredicate = Callable[[RequestView, ResponseView], bool]


class RequestLoggerMiddleware:
    """
    ASGI middleware that persists a structured record per HTTP request.

    By default the record is built once the response has finished
    (including responses cut short by an error). With ``immediate=True``
    it is built as soon as the request arrives, before the app runs.

    Example:
        app.add_middleware(
            RequestLoggerMiddleware,
            format="tiny",
            url="mongodb://localhost:27017",
            db="logs",
            collection="requests",
        )
    """

    def __init__(
        self,
        app: ASGIApp,
        format: Optional[FormatSpec] = None,
        *,
        url: Optional[str] = None,
        db: Optional[str] = None,
        collection: Optional[str] = None,
        immediate: Optional[bool] = None,
        skip: Optional[SkipPredicate] = None,
        trust_proxy: bool = False,
        omit_absent: bool = False,
        registry: Optional[TokenRegistry] = None,
        catalog: Optional[FormatCatalog] = None,
        sink: Optional[MongoSink] = None,
        tracker: Optional[LifecycleTracker] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize middleware.

        Args:
            app: Downstream ASGI application
            format: Format name, raw template or builder (settings default when omitted)
            url: MongoDB connection URI
            db: Database name
            collection: Collection name
            immediate: Log on request arrival instead of response finish
            skip: Predicate (request, response) -> bool suppressing a record;
                ``response.finished`` is False when the body was cut short
            trust_proxy: Take the client IP from X-Forwarded-For
            omit_absent: Leave absent fields out of stored documents
            registry: Token registry (process-wide one when omitted)
            catalog: Format catalog (process-wide one when omitted)
            sink: Record sink (a MongoSink for url/db/collection when omitted)
            tracker: Lifecycle tracker
            settings: Settings used to fill in missing options
        """
        self.app = app
        settings = settings or get_settings()

        self.registry = registry or get_token_registry()
        self.catalog = catalog or get_format_catalog()
        self.tracker = tracker or LifecycleTracker()

        if sink is None:
            url = url or settings.mongodb_uri or None
            db = db or settings.db_name or None
            collection = collection or settings.collection or None
            if not (url and db and collection):
                message = "RequestLoggerMiddleware options must include url, db and collection"
                warnings.warn(message, DeprecationWarning, stacklevel=2)
                logger.warning(message)
            sink = MongoSink(url, db, collection)
        self.sink = sink

        self.immediate = settings.immediate if immediate is None else immediate
        self.skip = skip
        self.trust_proxy = trust_proxy
        self.omit_absent = omit_absent
        self.query_limit = settings.query_limit

        self.build_record = self.catalog.lookup(
            format if format is not None else settings.log_format
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = RequestView.from_scope(scope, trust_proxy=self.trust_proxy)
        response = ResponseView()
        self.tracker.start_request(request)

        if self.immediate:
            self.tracker.mark_response(response)
            self.log_request(request, response)
            await self.app(scope, receive, send)
            return

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                self.tracker.mark_response(response)
                response.capture_start(message)
                await send(message)
                response.headers_sent = True
                return

            await send(message)
            if message["type"] == "http.response.body" and not message.get("more_body", False):
                response.finished = True

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            self.log_request(request, response)

    def log_request(self, request: RequestView, response: ResponseView) -> Optional[Record]:
        """
        Build and submit the record for one exchange.

        Never raises; failures are logged.

        Returns:
            The submitted record, or None if nothing was submitted
        """
        try:
            if self.skip is not None and self.skip(request, response):
                logger.debug("skip request")
                return None

            record = self.build_record(self.registry, request, response)
            if record is None or _is_absent(record):
                logger.debug("skip line")
                return None

            logger.debug(f"log request {record!r}")
            self.sink.submit([self._to_document(record)])
            return record
        except Exception as e:
            logger.error(f"Request logging failed: {e}", exc_info=True)
            return None

    def _to_document(self, record) -> Dict[str, Any]:
        if isinstance(record, Record):
            return record.to_document(omit_absent=self.omit_absent)
        document = dict(record)
        if self.omit_absent:
            document = {k: v for k, v in document.items() if v is not None}
        return document

    async def retrieve(
        self,
        find: Optional[Dict[str, Any]] = None,
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
        skip: Optional[int] = DEFAULT_QUERY_SKIP,
    ) -> List[Dict[str, Any]]:
        """
        Query records previously stored by this middleware's sink.

        A missing or zero ``limit`` falls back to the configured query limit.
        """
        return await self.sink.query(
            find=find, sort=sort, limit=limit or self.query_limit, skip=skip
        )


def _is_absent(record) -> bool:
    if isinstance(record, Record):
        return record.is_absent
    return all(value is None for value in dict(record).values())

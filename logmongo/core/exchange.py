"""
Read-only views of an in-flight HTTP exchange.

Token resolvers only ever see these views, never the raw ASGI messages.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from starlette.datastructures import Headers

from logmongo.core.lifecycle import TimingMark


@dataclass
class RequestView:
    """Request side of an exchange."""
    
    method: str
    url: str
    original_url: Optional[str] = None
    headers: Headers = field(default_factory=Headers)
    http_version: str = "1.1"
    
    # Explicit client IP set by the transport (e.g. a trusted proxy hop)
    ip: Optional[str] = None
    
    # Cached at request start by the lifecycle tracker
    remote_address: Optional[str] = None
    
    # Peer address of the underlying connection
    socket_address: Optional[str] = None
    
    started: Optional[TimingMark] = None
    
    @classmethod
    def from_scope(cls, scope: Dict[str, Any], trust_proxy: bool = False) -> "RequestView":
        """
        Build a view from an ASGI HTTP scope.
        
        Args:
            scope: ASGI connection scope
            trust_proxy: Use the first X-Forwarded-For hop as the client IP
        
        Returns:
            RequestView
        """
        headers = Headers(scope=scope)
        
        path = scope.get("path", "")
        raw_path = scope.get("raw_path")
        url = raw_path.decode("latin-1") if raw_path else path
        
        # raw_path keeps percent-encoding and already carries any root_path
        original_url = url
        query_string = scope.get("query_string", b"")
        if query_string:
            original_url += "?" + query_string.decode("latin-1")
        
        ip = None
        if trust_proxy:
            forwarded = headers.get("x-forwarded-for")
            if forwarded:
                ip = forwarded.split(",")[0].strip() or None
        
        client = scope.get("client")
        socket_address = client[0] if client else None
        
        return cls(
            method=scope.get("method", "GET"),
            url=url,
            original_url=original_url,
            headers=headers,
            http_version=scope.get("http_version", "1.1"),
            ip=ip,
            socket_address=socket_address,
        )

    def client_address(self) -> Optional[str]:
        """Explicit client IP, then the cached address, then the socket peer."""
        return self.ip or self.remote_address or self.socket_address or None


@dataclass
class ResponseView:
    """Response side of an exchange."""
    
    status_code: Optional[int] = None
    headers: Headers = field(default_factory=Headers)
    headers_sent: bool = False
    finished: bool = False
    started: Optional[TimingMark] = None
    
    def capture_start(self, message: Dict[str, Any]) -> None:
        """Take status and headers from an ``http.response.start`` message."""
        self.status_code = message.get("status")
        self.headers = Headers(raw=list(message.get("headers", [])))

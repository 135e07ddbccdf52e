from formwire.parts import FormPart, FilePart, Part
from formwire.multipart import MultipartBody, build_multipart
from formwire.request import Request, MultipartRequest
from formwire.models import Response, CacheEntry, Result
from formwire.cache import parse_cache_headers
from formwire.retry import RetryPolicy
from formwire.network import HttpNetwork
from formwire.request_queue import RequestQueue
from formwire.errors import (
    FormwireError,
    ConnectionError,
    TLSNegotiationError,
    ProtocolError,
    HTTPError,
    BodyBuildError,
    ParseError,
    RetryError,
    InvalidURLError,
)

__version__ = "0.1.0"

__all__ = [
    "FormPart",
    "FilePart",
    "Part",
    "MultipartBody",
    "build_multipart",
    "Request",
    "MultipartRequest",
    "Response",
    "CacheEntry",
    "Result",
    "parse_cache_headers",
    "RetryPolicy",
    "HttpNetwork",
    "RequestQueue",
    "FormwireError",
    "ConnectionError",
    "TLSNegotiationError",
    "ProtocolError",
    "HTTPError",
    "BodyBuildError",
    "ParseError",
    "RetryError",
    "InvalidURLError",
]

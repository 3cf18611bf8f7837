from marketfeed.query.base import QueryResult, QueryService
from marketfeed.query.coalescer import RequestCoalescer, call_signature
from marketfeed.query.params import build_offer_params, build_params, build_request_params
from marketfeed.query.rpc import DEFAULT_FUNCTIONS, RpcQueryService
from marketfeed.query.static import StaticQueryService

__all__ = [
    "DEFAULT_FUNCTIONS",
    "QueryResult",
    "QueryService",
    "RequestCoalescer",
    "RpcQueryService",
    "StaticQueryService",
    "build_offer_params",
    "build_params",
    "build_request_params",
    "call_signature",
]

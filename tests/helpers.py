"""
Test doubles: scripted GraphQL client and a recording sleep.
"""

from typing import Any, Callable, Dict, List, Optional, Union

from bulkops.shopify import GraphQLResponse


def make_response(
    data: Optional[Dict[str, Any]] = None,
    errors: Optional[List[str]] = None,
    available: Optional[float] = None,
    maximum: float = 2000,
    restore_rate: float = 100,
    cost: float = 10,
) -> GraphQLResponse:
    """Build a GraphQLResponse, optionally with a throttle status."""
    body: Dict[str, Any] = {}
    if data is not None:
        body["data"] = data
    if errors:
        body["errors"] = [{"message": m} for m in errors]
    if available is not None:
        body["extensions"] = {
            "cost": {
                "requestedQueryCost": cost,
                "actualQueryCost": cost,
                "throttleStatus": {
                    "maximumAvailable": maximum,
                    "currentlyAvailable": available,
                    "restoreRate": restore_rate,
                },
            }
        }
    return GraphQLResponse.model_validate(body)


Reply = Union[GraphQLResponse, BaseException]


class FakeClient:
    """
    Stand-in for ShopifyClient.

    Replies come from `handler(query, variables)` when given, otherwise from
    the `replies` queue. Exceptions are raised instead of returned.
    """

    def __init__(
        self,
        replies: Optional[List[Reply]] = None,
        handler: Optional[Callable[[str, Dict[str, Any]], Reply]] = None,
    ):
        self.replies = list(replies or [])
        self.handler = handler
        self.calls: List[Dict[str, Any]] = []

    async def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> GraphQLResponse:
        self.calls.append({"query": query, "variables": variables or {}})
        reply = self.handler(query, variables or {}) if self.handler else self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


class SleepRecorder:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)



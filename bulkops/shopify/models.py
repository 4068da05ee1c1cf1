"""
Pydantic models for Admin GraphQL responses.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ThrottleStatus(BaseModel):
    """Token-bucket state reported under extensions.cost.throttleStatus."""
    maximum_available: float = Field(alias="maximumAvailable")
    currently_available: float = Field(alias="currentlyAvailable")
    restore_rate: float = Field(alias="restoreRate")


class QueryCost(BaseModel):
    """Cost block reported under extensions.cost."""
    requested_query_cost: Optional[float] = Field(default=None, alias="requestedQueryCost")
    actual_query_cost: Optional[float] = Field(default=None, alias="actualQueryCost")
    throttle_status: Optional[ThrottleStatus] = Field(default=None, alias="throttleStatus")


class ThrottleReading(BaseModel):
    """Point-in-time snapshot of the throttle budget after one call."""
    currently_available: float
    maximum_available: float
    restore_rate: float
    actual_cost: Optional[float] = None

    @property
    def percent_available(self) -> int:
        if not self.maximum_available:
            return 0
        return round(self.currently_available / self.maximum_available * 100)


class GraphQLError(BaseModel):
    """One entry of the top-level errors array."""
    model_config = ConfigDict(extra="allow")

    message: str


class GraphQLResponse(BaseModel):
    """
    Parsed body of a GraphQL call.

    Top-level `errors` and per-mutation `userErrors` are both kept as data;
    classifying them is the executor's job.
    """
    model_config = ConfigDict(extra="allow")

    data: Optional[Dict[str, Any]] = None
    errors: Optional[List[GraphQLError]] = None
    extensions: Optional[Dict[str, Any]] = None

    @property
    def error_messages(self) -> List[str]:
        return [e.message for e in self.errors or []]

    @property
    def cost(self) -> Optional[QueryCost]:
        if not self.extensions or "cost" not in self.extensions:
            return None
        return QueryCost.model_validate(self.extensions["cost"])

    @property
    def throttle_reading(self) -> Optional[ThrottleReading]:
        """Throttle snapshot, or None when the response carries no cost block."""
        cost = self.cost
        if cost is None or cost.throttle_status is None:
            return None
        status = cost.throttle_status
        return ThrottleReading(
            currently_available=status.currently_available,
            maximum_available=status.maximum_available,
            restore_rate=status.restore_rate,
            actual_cost=cost.actual_query_cost,
        )

    def user_errors(self, root_field: str, key: str = "userErrors") -> List[Dict[str, Any]]:
        """
        Get the userErrors of a mutation payload.
        
        Args:
            root_field: Top-level field of the mutation (e.g. "tagsAdd")
            key: Error list field, "mediaUserErrors" for media mutations
            
        Returns:
            List of userError objects, empty if none
        """
        payload = (self.data or {}).get(root_field) or {}
        return payload.get(key) or []


def format_user_errors(user_errors: List[Dict[str, Any]]) -> str:
    """Join userErrors into one line, prefixed by code or field path."""
    parts = []
    for error in user_errors:
        prefix = error.get("code")
        if not prefix:
            field = error.get("field")
            prefix = ".".join(field) if isinstance(field, list) else (field or "ERROR")
        parts.append(f"{prefix}: {error.get('message', str(error))}")
    return "; ".join(parts)

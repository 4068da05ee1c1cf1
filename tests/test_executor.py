"""
Tests for the rate-limited executor (retry, backoff, throttle handling).
"""

import httpx
import pytest

from bulkops.errors import ConfigError
from bulkops.shopify import (
    ErrorClassifier,
    RateLimitedExecutor,
    ShopifyAuthError,
    ShopifyClientError,
    ShopifyTransientError,
)
from helpers import FakeClient, make_response


def call_of(client: FakeClient):
    return lambda: client.execute("mutation", {})


TAGS_OK = {"tagsAdd": {"node": {"id": "gid://shopify/Product/1"}, "userErrors": []}}


class TestBackoffDelay:
    """Tests for the exponential backoff schedule."""

    def test_first_attempt_waits_one_second(self):
        """The first retry waits the base delay."""
        assert RateLimitedExecutor.backoff_delay(0) == 1.0

    def test_delay_doubles(self):
        """Each further attempt doubles the delay."""
        assert RateLimitedExecutor.backoff_delay(1) == 2.0
        assert RateLimitedExecutor.backoff_delay(3) == 8.0

    def test_delay_is_capped_at_thirty_seconds(self):
        """Attempt 5 would be 32s uncapped."""
        assert RateLimitedExecutor.backoff_delay(4) == 16.0
        assert RateLimitedExecutor.backoff_delay(5) == 30.0
        assert RateLimitedExecutor.backoff_delay(10) == 30.0

    @pytest.mark.asyncio
    async def test_jitter_is_added_to_sleep(self, sleeper):
        """Jitter is added on top of the backoff delay."""
        executor = RateLimitedExecutor(sleep=sleeper, jitter=lambda: 0.25)
        client = FakeClient([
            make_response(errors=["Throttled"]),
            make_response(data=TAGS_OK),
        ])

        await executor.execute(call_of(client), max_retries=3)

        assert sleeper.delays == [1.25]


class TestErrorClassifier:
    """Tests for throttle / transient classification."""

    def test_throttle_message_matches_case_insensitively(self):
        """Throttle keywords match regardless of case."""
        assert ErrorClassifier().is_throttle_message("THROTTLED") is True
        assert ErrorClassifier().is_throttle_message("Field 'x' doesn't exist") is False

    def test_transport_errors_are_transient(self):
        """Network errors and 429/5xx responses are transient."""
        classifier = ErrorClassifier()
        assert classifier.is_transient(httpx.ConnectError("boom")) is True
        assert classifier.is_transient(httpx.ReadTimeout("slow")) is True
        assert classifier.is_transient(ShopifyTransientError("bad gateway", 502)) is True

    def test_message_keywords_are_transient(self):
        """Untyped errors are classified by their message."""
        classifier = ErrorClassifier()
        assert classifier.is_transient(RuntimeError("read ECONNRESET")) is True
        assert classifier.is_transient(RuntimeError("request failed (503)")) is True
        assert classifier.is_transient(ValueError("bad input")) is False

    def test_client_errors_are_judged_by_type_not_body(self):
        """A 4xx body mentioning 500 or a timeout is still not transient."""
        classifier = ErrorClassifier()
        assert classifier.is_transient(
            ShopifyClientError("GraphQL request failed (400): invalid id gid://shopify/Product/75001")
        ) is False
        assert classifier.is_transient(
            ShopifyClientError("GraphQL request failed (404): upstream timed out")
        ) is False

    def test_keywords_are_configurable(self):
        """Custom keyword lists replace the defaults."""
        classifier = ErrorClassifier(throttle_keywords=["slow down"], transient_keywords=[])
        assert classifier.is_throttle_message("Please slow down") is True
        assert classifier.is_throttle_message("Throttled") is False
        assert classifier.is_transient(RuntimeError("503")) is False


class TestExecute:
    """Tests for RateLimitedExecutor.execute outcomes."""

    @pytest.mark.asyncio
    async def test_success_carries_throttle_reading(self, executor, sleeper):
        """A success reports the throttle reading of its response."""
        client = FakeClient([make_response(data=TAGS_OK, available=1500, cost=10)])

        outcome = await executor.execute(call_of(client), max_retries=3, root_field="tagsAdd")

        assert outcome.success is True
        assert outcome.throttled is False
        assert outcome.throttle.currently_available == 1500
        assert outcome.throttle.actual_cost == 10
        assert outcome.attempts == 1
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_throttle_error_is_retried_with_backoff(self, executor, sleeper):
        """Throttle errors are retried with growing delays."""
        client = FakeClient([
            make_response(errors=["Throttled"]),
            make_response(errors=["Throttled"]),
            make_response(data=TAGS_OK),
        ])

        outcome = await executor.execute(call_of(client), max_retries=3)

        assert outcome.success is True
        assert outcome.throttled is True
        assert outcome.attempts == 3
        assert sleeper.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_throttle_error_fails_after_retries_exhausted(self, executor, sleeper):
        """Throttling past max_retries is a failure."""
        client = FakeClient([make_response(errors=["Throttled"]) for _ in range(3)])

        outcome = await executor.execute(call_of(client), max_retries=2)

        assert outcome.success is False
        assert "Throttled" in outcome.error
        assert len(client.calls) == 3
        assert sleeper.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_user_errors_are_not_retried(self, executor, sleeper):
        """userErrors fail at once, prefixed by field."""
        data = {"tagsAdd": {"node": None, "userErrors": [
            {"field": ["id"], "message": "Product does not exist"},
        ]}}
        client = FakeClient([make_response(data=data)])

        outcome = await executor.execute(call_of(client), max_retries=5, root_field="tagsAdd")

        assert outcome.success is False
        assert outcome.error == "id: Product does not exist"
        assert len(client.calls) == 1
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_user_error_code_is_used_as_prefix(self, executor):
        """The userError code is preferred over the field path."""
        data = {"translationsRegister": {"translations": None, "userErrors": [
            {"code": "INVALID_KEY_FOR_MODEL", "field": ["translations"], "message": "Key is invalid"},
        ]}}
        client = FakeClient([make_response(data=data)])

        outcome = await executor.execute(
            call_of(client), max_retries=5, root_field="translationsRegister"
        )

        assert outcome.error == "INVALID_KEY_FOR_MODEL: Key is invalid"

    @pytest.mark.asyncio
    async def test_non_throttle_graphql_errors_are_not_retried(self, executor):
        """Other GraphQL errors fail at once."""
        client = FakeClient([make_response(errors=["Field 'foo' doesn't exist on type 'Product'"])])

        outcome = await executor.execute(call_of(client), max_retries=5)

        assert outcome.success is False
        assert outcome.error.startswith("GraphQL errors:")
        assert len(client.calls) == 1

    @pytest.mark.asyncio
    async def test_transient_exception_is_retried(self, executor, sleeper):
        """Network errors and 5xx are retried and flag throttling."""
        client = FakeClient([
            httpx.ConnectError("connection reset"),
            ShopifyTransientError("GraphQL request failed (502): bad gateway", 502),
            make_response(data=TAGS_OK),
        ])

        outcome = await executor.execute(call_of(client), max_retries=6)

        assert outcome.success is True
        assert outcome.throttled is True
        assert sleeper.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_transient_exception_surfaces_raw_error_when_exhausted(self, executor):
        """The last raw error message is reported."""
        client = FakeClient([httpx.ConnectError("read ECONNRESET") for _ in range(2)])

        outcome = await executor.execute(call_of(client), max_retries=1)

        assert outcome.success is False
        assert outcome.error == "read ECONNRESET"

    @pytest.mark.asyncio
    async def test_zero_retries_makes_a_single_attempt(self, executor, sleeper):
        """max_retries=0 means exactly one attempt."""
        client = FakeClient([make_response(errors=["Throttled"])])

        outcome = await executor.execute(call_of(client), max_retries=0)

        assert outcome.success is False
        assert len(client.calls) == 1
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self, executor, sleeper):
        """A rejected request fails at once even if its body looks transient."""
        error = ShopifyClientError(
            "GraphQL request failed (400): Product/75001 not found"
        )
        client = FakeClient([error for _ in range(7)])

        outcome = await executor.execute(call_of(client), max_retries=6)

        assert outcome.success is False
        assert len(client.calls) == 1
        assert sleeper.delays == []
        assert "75001" in outcome.error

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_a_failure_without_retry(self, executor):
        """Unclassified exceptions fail without retry."""
        client = FakeClient([KeyError("data")])

        outcome = await executor.execute(call_of(client), max_retries=5)

        assert outcome.success is False
        assert len(client.calls) == 1

    @pytest.mark.asyncio
    async def test_fatal_errors_propagate(self, executor):
        """Auth and config errors are raised to the caller."""
        with pytest.raises(ShopifyAuthError):
            await executor.execute(call_of(FakeClient([ShopifyAuthError("denied")])), max_retries=5)

        with pytest.raises(ConfigError):
            await executor.execute(call_of(FakeClient([ConfigError("no secret")])), max_retries=5)

    @pytest.mark.asyncio
    async def test_low_budget_adds_pause_after_success(self, executor, sleeper):
        """A nearly empty budget adds a pause after success."""
        client = FakeClient([make_response(data=TAGS_OK, available=40)])

        outcome = await executor.execute(call_of(client), max_retries=3, root_field="tagsAdd")

        assert outcome.success is True
        assert outcome.throttled is True
        assert sleeper.delays == [1.0]

    @pytest.mark.asyncio
    async def test_negative_max_retries_is_rejected(self, executor):
        """A negative retry count is invalid."""
        with pytest.raises(ValueError):
            await executor.execute(call_of(FakeClient()), max_retries=-1)

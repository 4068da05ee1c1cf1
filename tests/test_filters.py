"""
Tests for customer/order email filters.
"""

from bulkops.processor.filters import (
    DEFAULT_MARKETPLACE_DOMAINS,
    build_domain_pattern,
    count_email_domains,
    customer_email,
    matches_domain,
    order_email,
)


class TestDomainPattern:
    """Tests for marketplace domain matching."""

    pattern = build_domain_pattern(DEFAULT_MARKETPLACE_DOMAINS)

    def test_matches_marketplace_relay_addresses(self):
        """Marketplace relay domains match, in any case."""
        assert matches_domain("x123@marketplace.amazon.de", self.pattern) is True
        assert matches_domain("ORDER@Kaufland-Marketplace.DE", self.pattern) is True
        assert matches_domain("buyer@bol.com", self.pattern) is True

    def test_ignores_regular_addresses(self):
        """Domains only count after the '@'."""
        assert matches_domain("jane@example.com", self.pattern) is False
        assert matches_domain("amazon@example.com", self.pattern) is False

    def test_dots_are_literal(self):
        """Dots in domains are not regex wildcards."""
        assert matches_domain("x@bolxcom.nl", self.pattern) is False

    def test_missing_email(self):
        """No address never matches."""
        assert matches_domain(None, self.pattern) is False
        assert matches_domain("", self.pattern) is False


class TestEmailAccessors:
    def test_customer_email(self):
        """The customer's default email address is used."""
        assert customer_email({"defaultEmailAddress": {"emailAddress": "a@b.de"}}) == "a@b.de"
        assert customer_email({"defaultEmailAddress": None}) is None

    def test_order_email(self):
        """The order email is used."""
        assert order_email({"email": "a@b.de"}) == "a@b.de"
        assert order_email({}) is None


class TestCountEmailDomains:
    def test_counts_per_domain(self):
        """Addresses are counted per '@domain' in first-seen order."""
        counts = count_email_domains([
            "a@shop.de", "b@amazon.de", "c@shop.de", None, "broken",
        ])

        assert counts == {"@shop.de": 2, "@amazon.de": 1}
        assert list(counts) == ["@shop.de", "@amazon.de"]

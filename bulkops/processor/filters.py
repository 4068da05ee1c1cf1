"""
Filters applied to fetched customers and orders.
"""

import re
from collections import Counter
from typing import Any, Dict, Iterable, Optional, Pattern


# Marketplace relay addresses whose customers/orders get cleaned up
DEFAULT_MARKETPLACE_DOMAINS = [
    "kaufland",
    "amazon",
    "bol.com",
    "gartentraume",
    "brico",
    "mirakl",
    "praxis",
    "diymaxeda",
    "worten",
    "insightlyservice",
    "allegro",
    "productpine",
    "rakuten",
    "octopia",
]


def build_domain_pattern(domains: Iterable[str]) -> Pattern[str]:
    """One case-insensitive regex matching any of the domains after the '@'."""
    alternatives = "|".join(re.escape(d) for d in domains)
    return re.compile(rf"@.*(?:{alternatives})", re.IGNORECASE)


def customer_email(customer: Dict[str, Any]) -> Optional[str]:
    return (customer.get("defaultEmailAddress") or {}).get("emailAddress")


def order_email(order: Dict[str, Any]) -> Optional[str]:
    return order.get("email")


def matches_domain(email: Optional[str], pattern: Pattern[str]) -> bool:
    return bool(email) and pattern.search(email) is not None


def count_email_domains(emails: Iterable[Optional[str]]) -> Dict[str, int]:
    """Count addresses per '@domain', in first-seen order."""
    counts: Counter = Counter()
    for email in emails:
        if email and "@" in email:
            counts["@" + email.split("@", 1)[1]] += 1
    return dict(counts)

"""
Shopify bulk operations - checkpointed batch jobs over the Admin GraphQL API.
"""

__version__ = "1.0.0"

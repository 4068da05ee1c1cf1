"""
GraphQL query strings for Shopify Admin API.

Every query here pages through a connection exposing `nodes` and `pageInfo`.
"""


TRANSLATABLE_RESOURCES_QUERY = '''
query getTranslatableResources($resourceType: TranslatableResourceType!, $first: Int!, $after: String) {
  translatableResources(first: $first, after: $after, resourceType: $resourceType) {
    nodes {
      resourceId
      translatableContent {
        digest
        key
        locale
        value
      }
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
'''

CUSTOMERS_QUERY = '''
query getCustomers($first: Int!, $after: String) {
  customers(first: $first, after: $after) {
    nodes {
      id
      defaultEmailAddress {
        emailAddress
      }
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
'''

ORDERS_QUERY = '''
query getOrders($first: Int!, $after: String) {
  orders(first: $first, after: $after) {
    nodes {
      id
      email
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
'''

# Product ids with the SKU of their first variant, used to map SKUs to products
PRODUCT_SKUS_QUERY = '''
query getProductSkus($first: Int!, $after: String) {
  products(first: $first, after: $after) {
    nodes {
      id
      handle
      variants(first: 1) {
        nodes {
          sku
        }
      }
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
'''

"""
GraphQL mutation strings for Shopify Admin API.
"""


# Register translations for one translatable resource
TRANSLATIONS_REGISTER = '''
mutation translationsRegister($resourceId: ID!, $translations: [TranslationInput!]!) {
  translationsRegister(resourceId: $resourceId, translations: $translations) {
    translations {
      key
      locale
      value
    }
    userErrors {
      code
      field
      message
    }
  }
}
'''

# Add tags to a product (or any taggable node)
TAGS_ADD = '''
mutation tagsAdd($id: ID!, $tags: [String!]!) {
  tagsAdd(id: $id, tags: $tags) {
    node {
      id
    }
    userErrors {
      field
      message
    }
  }
}
'''

CUSTOMER_DELETE = '''
mutation customerDelete($input: CustomerDeleteInput!) {
  customerDelete(input: $input) {
    deletedCustomerId
    userErrors {
      field
      message
    }
  }
}
'''

ORDER_DELETE = '''
mutation orderDelete($orderId: ID!) {
  orderDelete(orderId: $orderId) {
    deletedId
    userErrors {
      field
      message
    }
  }
}
'''

# Overwrite a product handle, keeping a redirect from the old one
PRODUCT_HANDLE_UPDATE = '''
mutation productUpdate($product: ProductUpdateInput!) {
  productUpdate(product: $product) {
    product {
      id
      handle
    }
    userErrors {
      field
      message
    }
  }
}
'''

# Set the custom.feature_list metafield of a product
PRODUCT_FEATURE_LIST_UPDATE = '''
mutation updateProductFeatureList($product: ProductUpdateInput!) {
  productUpdate(product: $product) {
    product {
      id
      featureList: metafield(namespace: "custom", key: "feature_list") {
        jsonValue
      }
    }
    userErrors {
      field
      message
    }
  }
}
'''

PRODUCT_SEO_UPDATE = '''
mutation productUpdateSeo($product: ProductUpdateInput!) {
  productUpdate(product: $product) {
    product {
      id
      seo {
        title
        description
      }
    }
    userErrors {
      field
      message
    }
  }
}
'''

# Attach media (e.g. an external video) to a product
PRODUCT_MEDIA_ADD = '''
mutation addProductVideo($product: ProductUpdateInput!, $media: [CreateMediaInput!]) {
  productUpdate(product: $product, media: $media) {
    product {
      id
    }
    userErrors {
      field
      message
    }
  }
}
'''

PRODUCT_REORDER_MEDIA = '''
mutation reorderProductMedia($id: ID!, $moves: [MoveInput!]!) {
  productReorderMedia(id: $id, moves: $moves) {
    mediaUserErrors {
      field
      message
    }
  }
}
'''

# Overwrite a collection's title, handle and description, keeping a redirect
COLLECTION_UPDATE = '''
mutation collectionUpdate($input: CollectionInput!) {
  collectionUpdate(input: $input) {
    collection {
      id
      title
      handle
      descriptionHtml
    }
    userErrors {
      field
      message
    }
  }
}
'''

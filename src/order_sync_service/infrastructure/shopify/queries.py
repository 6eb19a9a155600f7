"""GraphQL documents for the Shopify Admin API."""

ORDER_FIELDS = """
    id
    name
    email
    createdAt
    displayFulfillmentStatus
    displayFinancialStatus
    customer {
      id
      firstName
      lastName
      email
    }
    lineItems(first: 50) {
      edges {
        node {
          id
          title
          quantity
          originalUnitPrice
          variant {
            id
            title
            price
            sku
          }
        }
      }
    }
    totalPriceSet {
      shopMoney {
        amount
        currencyCode
      }
    }
    subtotalPriceSet {
      shopMoney {
        amount
        currencyCode
      }
    }
    shippingAddress {
      address1
      address2
      city
      province
      zip
      country
      phone
    }
    fulfillments {
      status
      trackingInfo {
        number
        url
      }
    }
    tags
    note
"""

# Full catalog traversal, newest first
FETCH_ORDERS_PAGE = f"""
  query GetOrdersPage($first: Int!, $cursor: String) {{
    orders(first: $first, after: $cursor, sortKey: CREATED_AT, reverse: true) {{
      pageInfo {{
        hasNextPage
        endCursor
      }}
      edges {{
        cursor
        node {{
{ORDER_FIELDS}
        }}
      }}
    }}
  }}
"""

FETCH_OPEN_ORDERS = """
  query GetOpenOrders($first: Int!) {
    orders(
      first: $first,
      query: "fulfillment_status:unfulfilled OR fulfillment_status:in_progress",
      sortKey: CREATED_AT,
      reverse: true
    ) {
      edges {
        node {
          id
          name
          createdAt
          displayFulfillmentStatus
          displayFinancialStatus
          totalPriceSet {
            shopMoney {
              amount
              currencyCode
            }
          }
          customer {
            firstName
            lastName
            email
          }
          lineItems(first: 10) {
            edges {
              node {
                title
                quantity
                variant {
                  title
                  price
                }
              }
            }
          }
        }
      }
    }
  }
"""

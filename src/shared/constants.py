"""Shared constants across the application."""

# Document store collections
ORDERS_COLLECTION = "shopify-orders"
SYNC_JOBS_COLLECTION = "sync-jobs"

# Sync job types
FULL_ORDER_SYNC_JOB = "full-order-sync"

# Job identifiers are "sync_<epoch milliseconds>"
JOB_ID_PREFIX = "sync_"

# Batch sizes
ORDER_PAGE_SIZE = 50  # Shopify recommended page size
COMMIT_BATCH_SIZE = 100
LINE_ITEMS_PER_ORDER = 50
DEFAULT_BOUNDED_SYNC_LIMIT = 50

# Read path defaults
DEFAULT_ORDERS_PAGE_SIZE = 25
MAX_ORDERS_PAGE_SIZE = 250

# Retry / pacing (seconds)
STORE_RETRY_ATTEMPTS = 3
STORE_RETRY_DELAY = 1.0
INTER_PAGE_DELAY = 1.0

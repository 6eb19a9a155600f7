"""Code shared between the API service and the sync worker."""

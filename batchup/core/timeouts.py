"""Shared timing constants."""

# Metadata service requests (credential request, confirmation, records)
DEFAULT_HTTP_TIMEOUT_SECONDS = 30

# Hard deadline for one direct transfer to storage
DEFAULT_TRANSFER_DEADLINE_SECONDS = 60

# Elapsed-time reporter
DEFAULT_ELAPSED_INTERVAL_SECONDS = 1.0
SLOW_UPLOAD_THRESHOLD_SECONDS = 30

"""Constants for the transport layer.

Centralizes the API endpoint, status ranges, and connection-reuse limits.
"""

# API endpoint
DEFAULT_BASE_URL = "https://api.winnipegtransit.com/v3/"
DEFAULT_USER_AGENT = "winnipeg-transit-py"
DEFAULT_TIMEOUT_SECONDS = 30.0

# Every logical endpoint path is suffixed with this marker
JSON_SUFFIX = ".json"
JSON_CONTENT_TYPE = "application/json"

# Credential query parameter and its replacement in surfaced URLs
API_KEY_PARAM = "api-key"
REDACTED_API_KEY = "REDACTED"

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300

# Upper bound on how much of a discarded body is read before close (2 KiB)
MAX_BODY_SLURP_SIZE = 2 << 10

# Chunk size for streaming reads
DEFAULT_CHUNK_SIZE = 8192

# Round-trips and body reads that may be in flight at once per client. A call
# abandoned by its context keeps its worker until the httpx timeout fires.
DEFAULT_MAX_DISPATCH_WORKERS = 16

"""HTTP host defaults."""

DEFAULT_API_PORT = 3000
DEFAULT_FRONTEND_ORIGIN = "http://localhost:5173"

# Phase-space resolution used when a request does not specify one
DEFAULT_HTTP_PHASE_SPACE_RESOLUTION = 15

# Milliseconds between streamed batches
DEFAULT_STREAM_UPDATE_INTERVAL_MS = 100

# Records included in the run-complete broadcast preview
BROADCAST_PREVIEW_RECORDS = 10

# Request quota on /api routes: this many requests per window, per client
DEFAULT_RATE_LIMIT_REQUESTS = 100
DEFAULT_RATE_LIMIT_WINDOW_SECONDS = 15 * 60

# Largest accepted request body (scenarios may carry full result sets)
MAX_REQUEST_BODY_BYTES = 1024 * 1024

# Concurrent /api/live connections allowed from one client address
MAX_LIVE_CONNECTIONS_PER_CLIENT = 5

# Responses at least this large are gzip-compressed when the client accepts it
GZIP_MINIMUM_SIZE = 1000

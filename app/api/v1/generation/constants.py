"""Constants for the blog generation endpoint."""

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

DEGRADED_HEADER = "X-Generation-Degraded"

# Seconds between client-disconnect checks while the upstream call is pending
DISCONNECT_POLL_INTERVAL = 0.5

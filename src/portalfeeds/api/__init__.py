"""HTTP API over the feed service."""

"""HTTP server -- Bot Framework webhook and health probe."""

"""HTTP request and response types used by the ASGI host."""

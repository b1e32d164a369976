"""ASGI host — turns ASGI messages into requests and results into responses."""

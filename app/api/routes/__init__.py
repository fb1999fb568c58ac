"""Route modules exposed by the API package."""

from . import estimates, metrics, ping, queues, tickets

__all__ = ["estimates", "metrics", "ping", "queues", "tickets"]

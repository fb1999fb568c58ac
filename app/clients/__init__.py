"""HTTP clients for the services the admission core collaborates with."""

from .attractions import AttractionDirectoryClient, AttractionSnapshot
from .base import ServiceClient
from .queues import QueueServiceClient
from .users import UserRegistryClient

__all__ = [
    "AttractionDirectoryClient",
    "AttractionSnapshot",
    "QueueServiceClient",
    "ServiceClient",
    "UserRegistryClient",
]

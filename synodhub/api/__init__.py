"""Remote service adapter"""

from .remote_client import RemoteServiceClient

__all__ = ["RemoteServiceClient"]

"""
Utils package - Utility modules for filer injector functionality.

Contains helper modules for:
- Kubernetes client configuration and filer secret lookup
- Background aiohttp servers (webhook and metrics endpoints)
"""

from filer_injector.utils.http_server import HTTPServer
from filer_injector.utils.kubernetes import (
    get_kubernetes_client,
    list_filer_credentials,
)

__all__ = [
    "HTTPServer",
    "get_kubernetes_client",
    "list_filer_credentials",
]

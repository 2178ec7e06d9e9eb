"""
Client modules for external services.

- UpstreamModelClient: submits images to hosted detection endpoints
"""

from src.clients.upstream import UpstreamModelClient, create_http_client


__all__ = [
    'UpstreamModelClient',
    'create_http_client',
]

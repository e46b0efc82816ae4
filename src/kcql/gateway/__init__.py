"""
KCQL Gateway module - cluster API access.

The live-cluster gateway needs the ``kubernetes`` extra and is imported
from kcql.gateway.kube directly.
"""

from kcql.gateway.base import ApiGateway
from kcql.gateway.memory import DEFAULT_CATALOG, InMemoryGateway

__all__ = [
    "ApiGateway",
    "DEFAULT_CATALOG",
    "InMemoryGateway",
]

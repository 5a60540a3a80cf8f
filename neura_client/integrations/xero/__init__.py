"""
Xero Integration Package
Client side of the Xero OAuth connection flow.
"""

from neura_client.integrations.xero.connect import XeroConnectService
from neura_client.integrations.xero.schemas import XeroAuthURLResponse

__all__ = [
    "XeroConnectService",
    "XeroAuthURLResponse",
]

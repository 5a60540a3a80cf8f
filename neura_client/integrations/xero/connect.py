"""
Xero Connect
Starts the Xero OAuth flow. The redirect itself belongs to the UI layer.
"""

import logging

from neura_client.core.http import ApiClient
from neura_client.integrations.xero.schemas import XeroAuthURLResponse

logger = logging.getLogger(__name__)


class XeroConnectService:
    CONNECT_PATH = "/integrations/xero/connect"

    def __init__(self, api: ApiClient):
        self.api = api

    async def get_authorization_url(self) -> XeroAuthURLResponse:
        """
        Ask the backend for a Xero authorization URL.

        Raises:
            NeuraApiError: Request failed
        """
        data = await self.api.get(self.CONNECT_PATH)
        response = XeroAuthURLResponse.model_validate(data)
        logger.info("Obtained Xero authorization URL")
        return response

"""
Neura Client
Entry point: logging setup and the dashboard factory.
"""

import asyncio
import logging
from typing import Optional

from neura_client.config import settings
from neura_client.core.http import ApiClient
from neura_client.dashboard import Dashboard
from neura_client.feedback.service import FeedbackService
from neura_client.insights.lifecycle import InsightLifecycleManager
from neura_client.insights.polling import PollingOrchestrator
from neura_client.integrations.xero.connect import XeroConnectService
from neura_client.settings.store import SettingsStore

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_dashboard(api: Optional[ApiClient] = None, page_size: Optional[int] = None) -> Dashboard:
    """
    Dashboard factory.
    Builds the store/manager/orchestrator graph around one API client.
    """
    api = api or ApiClient()
    insights = InsightLifecycleManager(api, page_size=page_size)
    settings_store = SettingsStore(api)
    orchestrator = PollingOrchestrator(api, insights, settings_store)
    return Dashboard(
        insights,
        settings_store,
        orchestrator,
        feedback=FeedbackService(api),
        xero=XeroConnectService(api),
    )


async def run() -> None:
    """Load the dashboard once and log a summary."""
    async with ApiClient() as api:
        dashboard = create_dashboard(api)
        await dashboard.load()
        view = dashboard.view()

        if view.error:
            logger.error("Dashboard failed to load: %s", view.error)
            return

        logger.info(
            "Business health score %d (%s), data quality %s",
            view.health_score,
            view.health_status.label,
            view.data_quality.value,
        )
        logger.info(
            "%d need attention, %d worth knowing, %d resolved",
            len(view.watch_insights),
            len(view.ok_insights),
            len(view.resolved_insights),
        )


if __name__ == "__main__":
    configure_logging()
    asyncio.run(run())

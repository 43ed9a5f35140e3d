from __future__ import annotations

from app.assets.singleton import get_assets
from app.campaign import Campaign
from app.config import load_config
from app.core.scheduler import AsyncioScheduler
from app.websocket_hub import hub


_CAMPAIGN: Campaign | None = None


def build_campaign() -> Campaign:
    return Campaign(
        assets=get_assets(),
        scheduler=AsyncioScheduler(),
        config=load_config(),
        listener=lambda event: hub.publish_nowait(event.as_message()),
    )


def get_campaign() -> Campaign:
    """The single in-process campaign, created on first use."""

    global _CAMPAIGN
    if _CAMPAIGN is None:
        _CAMPAIGN = build_campaign()
    return _CAMPAIGN


def close_campaign() -> None:
    global _CAMPAIGN
    if _CAMPAIGN is not None:
        _CAMPAIGN.close()
        _CAMPAIGN = None

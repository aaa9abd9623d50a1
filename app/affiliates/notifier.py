"""
Discord webhook notification for newly registered affiliates.

Best effort: delivery failures are logged and never reach the caller, so a broken
webhook cannot fail a registration.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from app.affiliates.models import Affiliate
from app.core.config import settings

logger = logging.getLogger(__name__)

EMBED_TITLE = "🎉 Nouvel affilié enregistré"
EMBED_COLOR = 0x00FF00


def build_affiliate_embed(affiliate: Affiliate) -> Dict[str, Any]:
    """Webhook payload with a single embed describing the affiliate."""
    fields: List[Dict[str, Any]] = [
        {"name": "Code", "value": affiliate.code, "inline": True},
        {"name": "Nom", "value": f"{affiliate.first_name} {affiliate.last_name}", "inline": True},
        {"name": "Email", "value": affiliate.email, "inline": False},
        {"name": "Téléphone", "value": affiliate.phone, "inline": True},
    ]
    if affiliate.instagram:
        fields.append({"name": "Instagram", "value": affiliate.instagram, "inline": True})

    return {
        "embeds": [
            {
                "title": EMBED_TITLE,
                "color": EMBED_COLOR,
                "fields": fields,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        ]
    }


class DiscordNotifier:
    def __init__(
        self,
        webhook_url: Optional[str],
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.transport = transport

    async def notify_affiliate_created(self, affiliate: Affiliate) -> bool:
        """Post the embed. Returns True on a 2xx response, False otherwise."""
        if not self.webhook_url:
            logger.debug("DISCORD_WEBHOOK_URL not set, skipping notification for %s", affiliate.code)
            return False

        payload = build_affiliate_embed(affiliate)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.webhook_url, json=payload)
                response.raise_for_status()
        except Exception:
            logger.exception("Failed to send Discord notification for affiliate %s", affiliate.code)
            return False
        return True


def get_notifier() -> DiscordNotifier:
    return DiscordNotifier(
        settings.discord_webhook_url,
        timeout=settings.webhook_timeout_seconds,
    )

from __future__ import annotations

from flask import Blueprint, current_app

from ..utils.http import handle_action

blueprint = Blueprint("system", __name__)


@blueprint.get("/health")
def health():
    def action():
        config = current_app.config["APP_CONFIG"]
        return {
            "status": "ok",
            "service": "woo-reservations",
            "defaultSite": config.default_site,
            "sites": {site: creds.is_configured for site, creds in config.sites.items()},
            "reservationApi": bool(config.reservation_api.endpoint),
        }

    return handle_action(action)

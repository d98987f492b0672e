from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

SUPPORTED_SITES = ("es", "en")
RESPONSE_MODES = ("wrapped", "http")


def _load_dotenv() -> None:
    env_path = os.environ.get("DOTENV_CONFIG_PATH")
    if env_path:
        candidate = Path(env_path).expanduser()
    else:
        candidate = BASE_DIR / ".env"
    load_dotenv(candidate)


def _to_int(value: Optional[str], fallback: int) -> int:
    try:
        if value is None or value == "":
            return fallback
        return int(value)
    except (TypeError, ValueError):
        return fallback


def _to_float(value: Optional[str], fallback: float) -> float:
    try:
        if value is None or value == "":
            return fallback
        return float(value)
    except (TypeError, ValueError):
        return fallback


def _parse_list(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _to_bool(value: Optional[str], fallback: bool = False) -> bool:
    if value is None:
        return fallback
    text = str(value).strip().lower()
    if text == "":
        return fallback
    return text in ("1", "true", "yes", "on")


def _s(val: Optional[str]) -> str:
    return (val or "").strip()


@dataclass(frozen=True)
class SiteCredentials:
    """WooCommerce REST credentials for one storefront locale."""

    site: str
    store_url: str
    consumer_key: str
    consumer_secret: str
    api_version: str = "wc/v3"
    timeout_seconds: float = 25.0

    @property
    def api_base(self) -> str:
        base_url = self.store_url.rstrip("/")
        version = self.api_version.strip("/") or "wc/v3"
        return f"{base_url}/wp-json/{version}"

    @property
    def is_configured(self) -> bool:
        return bool(self.store_url and self.consumer_key and self.consumer_secret)


@dataclass(frozen=True)
class ReservationApiSettings:
    endpoint: str
    auth_url: str = ""
    username: str = ""
    password: str = ""
    store: str = ""
    timeout_seconds: float = 30.0

    @property
    def uses_token(self) -> bool:
        return bool(self.auth_url)


@dataclass
class AppConfig:
    node_env: str
    port: int
    log_level: str
    default_site: str
    sites: Dict[str, SiteCredentials]
    reservation_api: ReservationApiSettings
    require_payment_event: bool
    response_mode: str
    enrich_max_workers: int
    http_concurrency: int
    http_connect_timeout_seconds: float
    http_read_timeout_seconds: float
    cors_allow_list: List[str]
    flask_settings: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_production(self) -> bool:
        return self.node_env.lower() == "production"

    def credentials_for(self, site: Optional[str]) -> SiteCredentials:
        """
        Resolve the credential set for a `site` discriminator.

        Unknown or empty values fall back to the default site.
        """
        key = _s(site).lower()
        if key in self.sites:
            return self.sites[key]
        return self.sites[self.default_site]


def _load_site(site: str, api_version: str, timeout: float) -> SiteCredentials:
    suffix = site.upper()
    return SiteCredentials(
        site=site,
        store_url=_s(os.environ.get(f"WC_STORE_URL_{suffix}")),
        consumer_key=_s(os.environ.get(f"WC_CONSUMER_KEY_{suffix}")),
        consumer_secret=_s(os.environ.get(f"WC_CONSUMER_SECRET_{suffix}")),
        api_version=api_version,
        timeout_seconds=timeout,
    )


def load_config() -> AppConfig:
    _load_dotenv()

    node_env = os.environ.get("NODE_ENV", "development")
    cors_allow_list = _parse_list(os.environ.get("CORS_ALLOW_ORIGINS") or "*")

    api_version = _s(os.environ.get("WC_API_VERSION") or "wc/v3")
    woo_timeout = _to_float(os.environ.get("WC_REQUEST_TIMEOUT_SECONDS"), 25.0)

    default_site = _s(os.environ.get("DEFAULT_SITE") or "es").lower()
    if default_site not in SUPPORTED_SITES:
        default_site = "es"

    response_mode = _s(os.environ.get("RESPONSE_MODE") or "wrapped").lower()
    if response_mode not in RESPONSE_MODES:
        response_mode = "wrapped"

    return AppConfig(
        node_env=node_env,
        port=_to_int(os.environ.get("PORT"), 9950),
        log_level=os.environ.get("LOG_LEVEL", "info" if node_env == "production" else "debug"),
        default_site=default_site,
        sites={site: _load_site(site, api_version, woo_timeout) for site in SUPPORTED_SITES},
        reservation_api=ReservationApiSettings(
            endpoint=_s(os.environ.get("RESV_API_ENDPOINT")),
            auth_url=_s(os.environ.get("RESV_API_AUTH")),
            username=_s(os.environ.get("RESV_API_USERNAME")),
            password=os.environ.get("RESV_API_PASSWORD", ""),
            store=_s(os.environ.get("RESV_API_STORE")),
            timeout_seconds=_to_float(os.environ.get("RESV_REQUEST_TIMEOUT_SECONDS"), 30.0),
        ),
        require_payment_event=_to_bool(os.environ.get("RESV_REQUIRE_PAYMENT_EVENT"), True),
        response_mode=response_mode,
        enrich_max_workers=max(1, min(_to_int(os.environ.get("ENRICH_MAX_WORKERS"), 8), 32)),
        http_concurrency=max(1, min(_to_int(os.environ.get("HTTP_CONCURRENCY"), 8), 32)),
        http_connect_timeout_seconds=_to_float(os.environ.get("HTTP_CONNECT_TIMEOUT_SECONDS"), 3.5),
        http_read_timeout_seconds=_to_float(os.environ.get("HTTP_READ_TIMEOUT_SECONDS"), 12.0),
        cors_allow_list=cors_allow_list,
        flask_settings={
            "JSON_SORT_KEYS": False,
        },
    )

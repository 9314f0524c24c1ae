"""
Centralized engine settings (environment variables / .env).
Timeouts escalate from a single click attempt up to the human-login ceiling.
"""
# @file purpose: Centralized settings using Pydantic Settings.

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="AA_", env_file=".env", extra="ignore")

    config_path: Path = Path("config.json")
    log_level: str = "INFO"
    artifacts_dir: Path | None = None

    # browser fingerprint
    browser_channel: str | None = None
    user_agent: str = DEFAULT_USER_AGENT

    # navigation
    navigation_timeout_ms: int = 60_000
    fallback_navigation_timeout_ms: int = 30_000
    landing_probe_timeout_ms: int = 10_000

    # activation techniques
    standard_click_timeout_ms: int = 2_000
    forced_click_timeout_ms: int = 1_000

    # settle delays (no deterministic signal available)
    settle_ms: int = 500
    apply_settle_ms: int = 2_000
    page_settle_ms: int = 3_000

    # overlays
    secondary_apply_timeout_ms: int = 2_500
    max_consent_dismissals: int = 6

    # authentication race
    auth_timeout_ms: int = 60_000
    auth_ceiling_ms: int = 300_000


settings = Settings()

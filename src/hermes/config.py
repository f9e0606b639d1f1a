"""Application configuration using pydantic-settings.

Values are read from the environment (or a local .env file), using the same
variable names the backend deployment already exports.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_KEY = "default-secure-api-key"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # HTTP service
    # ======================
    service_host: str = Field(default="127.0.0.1", description="API server host")
    service_port: int = Field(default=3001, description="API server port")
    api_key: str = Field(
        default=DEFAULT_API_KEY, description="Shared secret expected in the x-api-key header"
    )
    debug: bool = Field(default=False, description="Enable debug logging")

    # ======================
    # Main backend
    # ======================
    main_backend_url: str = Field(
        default="http://127.0.0.1:3000", description="Base URL of the off-chain backend"
    )
    notify_timeout: float = Field(
        default=10.0, description="Timeout in seconds for backend notifications"
    )

    # ======================
    # Chain
    # ======================
    provider_url: str = Field(
        default="https://data-seed-prebsc-1-s1.bnbchain.org:8545/",
        description="JSON-RPC provider URL",
    )
    ws_provider_url: Optional[str] = Field(
        default=None, description="Optional WebSocket provider URL for event streaming"
    )
    zephyr_contract_address: Optional[str] = Field(
        default=None, description="Address of the Zephyr custody contract"
    )
    wallet_private_key: Optional[str] = Field(
        default=None, description="Private key of the Hermes signing wallet"
    )
    tx_receipt_timeout: Optional[float] = Field(
        default=None, description="Seconds to wait for a receipt (None = web3 default)"
    )

    # ======================
    # Listener
    # ======================
    poll_interval: float = Field(
        default=5.0, description="Seconds between eth_getLogs polls"
    )
    reconnect_delay: float = Field(
        default=5.0, description="Seconds to wait before re-subscribing after a source error"
    )
    max_block_range: int = Field(
        default=1000, ge=1, description="Most blocks requested in one eth_getLogs call"
    )

    # ======================
    # Storage
    # ======================
    transactions_db_path: str = Field(
        default="./trdb.json", description="Deposit transaction log file"
    )
    divine_tokens_cache_path: str = Field(
        default="./divineTokensCache.json", description="Divine token cache file"
    )

    @property
    def uses_websocket(self) -> bool:
        """Check if a streaming provider is configured."""
        return bool(self.ws_provider_url)

    @property
    def has_default_api_key(self) -> bool:
        return self.api_key == DEFAULT_API_KEY

    def missing_required(self) -> list[str]:
        """Return env var names of required settings that are not set."""
        missing = []
        if not self.zephyr_contract_address:
            missing.append("ZEPHYR_CONTRACT_ADDRESS")
        if not self.wallet_private_key:
            missing.append("WALLET_PRIVATE_KEY")
        if not self.api_key:
            missing.append("API_KEY")
        return missing

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "debug": self.debug,
            "service_host": self.service_host,
            "service_port": self.service_port,
            "main_backend_url": self.main_backend_url,
            "api_key": "***" if self.api_key else "(not set)",
            "chain": {
                "provider_url": self._redact_url(self.provider_url),
                "ws_provider_url": (
                    self._redact_url(self.ws_provider_url) if self.ws_provider_url else "(not set)"
                ),
                "zephyr_contract_address": self.zephyr_contract_address or "(not set)",
                "wallet_private_key": "***" if self.wallet_private_key else "(not set)",
            },
            "listener": {
                "mode": "websocket" if self.uses_websocket else "polling",
                "poll_interval": self.poll_interval,
                "max_block_range": self.max_block_range,
                "reconnect_delay": self.reconnect_delay,
            },
            "storage": {
                "transactions_db_path": self.transactions_db_path,
                "divine_tokens_cache_path": self.divine_tokens_cache_path,
            },
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact credentials embedded in a provider URL."""
        if "://" in url and "@" in url:
            proto, rest = url.split("://", 1)
            if "@" in rest:
                creds, host = rest.rsplit("@", 1)
                if ":" in creds:
                    user, _ = creds.split(":", 1)
                    return f"{proto}://{user}:***@{host}"
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

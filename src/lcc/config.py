"""Application settings via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables with LCC_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="LCC_",
        env_file=".env",
        case_sensitive=False,
    )

    # --- Core ---
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Persistence ---
    store_backend: str = "file"  # "file" | "memory"
    data_dir: str = "data"
    quest_catalog_path: str = ""

    # --- Ledger ---
    ledger_provider: str = "memory"  # "memory" | "jsonrpc"
    primary_rpc_url: str = "https://api.devnet.solana.com"
    fallback_rpc_url: str = "https://rpc.ankr.com/solana_devnet"
    ledger_max_attempts: int = 5
    ledger_retry_base_delay_seconds: float = 1.0
    ledger_request_timeout_seconds: float = 30.0
    server_wallet_address: str = "9kkHQYtLU142sFFHB7u7rB2C8MqQyhRKFiM85h81Ctgd"
    min_mint_balance: int = 30_000_000  # 0.03 SOL in lamports

    # --- Assets ---
    asset_output_dir: str = "output"
    public_base_url: str = "http://localhost:3000"
    asset_verify_layers: bool = False
    seller_fee_basis_points: int = 500

    # --- Credentials ---
    password_min_length: int = 4
    password_max_length: int = 128
    username_max_length: int = 32


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()

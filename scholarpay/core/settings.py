"""Configuration and environment settings for ScholarPay."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings for ScholarPay."""

    database_url: str = "sqlite:///scholarpay.db"
    payman_base_url: str = "https://agent.payman.ai"
    payman_ask_path: str = "/api/a2a/ask"
    payman_token_path: str = "/api/oauth2/token"
    payman_authorize_url: str = "https://app.paymanai.com/oauth/authorize"
    payman_client_id: str = ""
    payman_client_secret: str = ""
    payman_redirect_uri: str = "http://127.0.0.1:8000/oauth/callback"
    payman_scopes: str = (
        "read_balance,read_list_wallets,read_list_payees,read_list_transactions,"
        "write_create_payee,write_send_payment,write_create_wallet"
    )
    payman_wallet_number: int = 3
    payman_timeout_seconds: float = 30.0
    register_payee_on_submit: bool = False
    log_file: str | None = None
    server_host: str = "127.0.0.1"
    server_port: int = 8000

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def get_settings() -> "Settings":
    """Return an instance of the application settings."""
    return Settings()

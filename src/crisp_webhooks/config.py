"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Local development mode (set CRISP_WEBHOOKS_LOCAL_MODE=1 to accept plain HTTP)
    local_mode: bool = False

    # Accept plain HTTP outside local mode (e.g. TLS terminated upstream without proxy headers)
    disable_https_check: bool = False

    # Receiver secrets: {receiver_name: {receiver_id: secret}}; "default" is the id-less entry
    secret_keys: dict[str, dict[str, str]] = {}

    # Optional JSON file shaped like {"WebHooks": {"Crisp": {"SecretKey": {"default": "..."}}}}
    config_file: str | None = None

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"
    json_logs: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "CRISP_WEBHOOKS_",
        "env_nested_delimiter": "__",
    }

    @property
    def https_required(self) -> bool:
        """Return False when the HTTPS requirement is waived for this process."""
        return not (self.local_mode or self.disable_https_check)


settings = Settings()

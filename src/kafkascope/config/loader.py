"""Configuration loader for kafkascope."""
import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATE_FORMAT = "%d-%m-%Y %H:%M:%S"


class ConnectConfig(BaseModel):
    """Authentication and transport settings applied to every connection."""

    model_config = ConfigDict(frozen=True)

    api_key: str | None = None
    api_secret: str | None = None
    tls: bool = False
    skip_tls_verify: bool = False
    scram: bool = False
    timeout_ms: int = Field(default=5000, gt=0)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    @property
    def security_protocol(self) -> str:
        if self.api_key:
            return "SASL_SSL" if self.tls else "SASL_PLAINTEXT"
        return "SSL" if self.tls else "PLAINTEXT"

    def to_confluent_config(self) -> dict[str, Any]:
        """Convert to Confluent Kafka configuration format.

        Returns:
            Dictionary with the security and timeout properties, without
            ``bootstrap.servers``
        """
        config: dict[str, Any] = {
            "socket.connection.setup.timeout.ms": self.timeout_ms,
        }

        if self.security_protocol != "PLAINTEXT":
            config["security.protocol"] = self.security_protocol

        if self.api_key:
            config["sasl.mechanism"] = "SCRAM-SHA-512" if self.scram else "PLAIN"
            config["sasl.username"] = self.api_key
            config["sasl.password"] = self.api_secret or ""

        if self.tls and self.skip_tls_verify:
            config["enable.ssl.certificate.verification"] = False
            config["ssl.endpoint.identification.algorithm"] = "none"

        return config


class AppConfig(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        env_prefix="KAFKASCOPE_",
        validate_assignment=True,
    )

    bootstrap_servers: str = "localhost:9092"
    connect: ConnectConfig = Field(default_factory=ConnectConfig)
    log_file: str = "./kafkascope.log"
    log_level: str = "INFO"
    date_format: str = DEFAULT_DATE_FORMAT
    delimiter: str = "\n"

    @field_validator('bootstrap_servers', mode='before')
    @classmethod
    def validate_bootstrap_servers(cls, v):
        """Accept a list as well as the comma separated form."""
        if isinstance(v, (list, tuple)):
            v = ",".join(v)
        if not [server for server in str(v).split(",") if server.strip()]:
            raise ValueError("At least one bootstrap server is required")
        return v

    @property
    def bootstrap_list(self) -> list[str]:
        return [server.strip() for server in self.bootstrap_servers.split(",") if server.strip()]

    @field_validator('delimiter')
    @classmethod
    def validate_delimiter(cls, v):
        if len(v.encode("utf-8")) != 1:
            raise ValueError("Delimiter must be a single byte character")
        return v

    @classmethod
    def from_file(cls, config_file: str) -> "AppConfig":
        """Load configuration from a JSON file.

        Both the nested layout (``{"connect": {"tls": true}}``) and the
        dotted librdkafka keys (``bootstrap.servers``, ``sasl.username``)
        are accepted.

        Args:
            config_file: Path to configuration file

        Returns:
            AppConfig instance
        """
        with open(config_file) as f:
            config_data = json.load(f)
        if not isinstance(config_data, dict):
            raise ValueError(f"{config_file} must hold a JSON object")

        app_config: dict[str, Any] = {}
        connect_config: dict[str, Any] = dict(config_data.pop("connect", {}) or {})

        for key, value in config_data.items():
            if key in ("bootstrap.servers", "bootstrap_servers"):
                app_config["bootstrap_servers"] = value
            elif key == "sasl.username":
                connect_config["api_key"] = value
            elif key == "sasl.password":
                connect_config["api_secret"] = value
            elif key == "sasl.mechanism":
                connect_config["scram"] = str(value).upper().startswith("SCRAM")
            elif key == "security.protocol":
                connect_config["tls"] = str(value).upper() in ("SSL", "SASL_SSL")
            elif key == "enable.ssl.certificate.verification":
                connect_config["skip_tls_verify"] = not value
            elif key == "socket.connection.setup.timeout.ms":
                connect_config["timeout_ms"] = value
            else:
                app_config[key] = value

        return cls(connect=ConnectConfig(**connect_config), **app_config)

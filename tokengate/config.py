"""
TokenGate Configuration Management

Centralized configuration using Pydantic Settings for type-safe environment
variable loading with validation.

Networks are identified by name in configuration and by integer chain id at
request time. Only networks listed in ENABLED_NETWORKS are accepted by the
gate; every other chain id is rejected before any contract call.
"""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChainNetwork(str, Enum):
    """Blockchain networks the gate can verify ownership on."""

    BASE = "base"
    BASE_SEPOLIA = "base_sepolia"  # Testnet


# EIP-155 chain ids for each network
CHAIN_IDS: dict[ChainNetwork, int] = {
    ChainNetwork.BASE: 8453,
    ChainNetwork.BASE_SEPOLIA: 84532,
}

# Public RPC endpoints, overridable per network via settings
RPC_ENDPOINTS: dict[ChainNetwork, str] = {
    ChainNetwork.BASE: "https://mainnet.base.org",
    ChainNetwork.BASE_SEPOLIA: "https://sepolia.base.org",
}


@dataclass(frozen=True)
class NetworkConfig:
    """Resolved connection details for one enabled network."""

    name: str
    chain_id: int
    rpc_url: str


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ═══════════════════════════════════════════════════════════════
    # APPLICATION
    # ═══════════════════════════════════════════════════════════════
    app_name: str = Field(default="tokengate", description="Application name")
    app_env: Literal["development", "staging", "production", "testing"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )

    # API Server
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated CORS origins",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into list."""
        origins = [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
        if self.app_env == "production" and "*" in origins:
            raise ValueError("Wildcard CORS origin not allowed in production")
        return origins

    # ═══════════════════════════════════════════════════════════════
    # CONTENT STORAGE
    # ═══════════════════════════════════════════════════════════════
    storage_backend: Literal["neo4j", "memory"] = Field(
        default="neo4j", description="Content store backend"
    )

    neo4j_uri: str = Field(default="bolt://localhost:7687", description="Neo4j connection URI")
    neo4j_user: str = Field(default="neo4j", description="Neo4j username")
    neo4j_password: str = Field(default="", description="Neo4j password")
    neo4j_database: str = Field(default="neo4j", description="Neo4j database name")

    # Connection Pool
    neo4j_max_connection_lifetime: int = Field(
        default=3600, description="Max connection lifetime in seconds"
    )
    neo4j_max_connection_pool_size: int = Field(
        default=50, ge=1, description="Max connection pool size"
    )
    neo4j_connection_timeout: int = Field(
        default=30, ge=1, description="Connection timeout in seconds"
    )

    # ═══════════════════════════════════════════════════════════════
    # CHAIN ACCESS
    # ═══════════════════════════════════════════════════════════════
    enabled_networks: list[ChainNetwork] = Field(
        default=[ChainNetwork.BASE, ChainNetwork.BASE_SEPOLIA],
        description="Networks whose chain ids are accepted by the gate",
    )
    base_rpc_url: str | None = Field(default=None, description="Override for the Base RPC URL")
    base_sepolia_rpc_url: str | None = Field(
        default=None, description="Override for the Base Sepolia RPC URL"
    )
    strict_rpc_hosts: bool = Field(
        default=False,
        description="Reject RPC URLs outside the known-host allowlist instead of warning",
    )

    # Balance probing
    probe_call_timeout_seconds: float = Field(
        default=10.0, gt=0, le=120, description="Timeout for each chain call made while probing"
    )
    probe_concurrently: bool = Field(
        default=False,
        description="Issue all balance strategies at once and keep the earliest-listed success",
    )

    @field_validator("enabled_networks")
    @classmethod
    def validate_enabled_networks(cls, v: list[ChainNetwork]) -> list[ChainNetwork]:
        if not v:
            raise ValueError("At least one network must be enabled")
        # Preserve order, drop duplicates
        return list(dict.fromkeys(v))

    def get_rpc_endpoint(self, network: ChainNetwork) -> str:
        """Get the RPC endpoint for a network, honouring overrides."""
        overrides = {
            ChainNetwork.BASE: self.base_rpc_url,
            ChainNetwork.BASE_SEPOLIA: self.base_sepolia_rpc_url,
        }
        return overrides.get(network) or RPC_ENDPOINTS[network]

    def get_network_configs(self) -> list[NetworkConfig]:
        """Resolve every enabled network into connection details."""
        return [
            NetworkConfig(
                name=network.value,
                chain_id=CHAIN_IDS[network],
                rpc_url=self.get_rpc_endpoint(network),
            )
            for network in self.enabled_networks
        ]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

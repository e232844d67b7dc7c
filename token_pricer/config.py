"""
Configuration loading and validation for the token pricer.

Settings come from an optional YAML file validated with Pydantic, then
environment overrides. Every field has a PancakeSwap / BSC mainnet default,
so an empty file (or no file) is a valid configuration. The resulting
PricerConfig is frozen and shared read-only by every component.
"""

import os
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Literal, Mapping, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as SchemaError

from .address import normalize
from .constants import (
    BUSD,
    DEFAULT_AGGREGATOR_TIMEOUT_SEC,
    DEFAULT_AGGREGATOR_URL,
    DEFAULT_DECIMALS,
    DEFAULT_RPC_URL,
    DEFAULT_USER_AGENT,
    FEE_TIER_ORDER,
    PANCAKE_FACTORY_V3,
    PANCAKE_QUOTER_V3,
    PANCAKE_ROUTER_V2,
    USDC,
    USDT,
    V3_STRATEGY_POOL_STATE,
    WBNB,
    FeeTier,
)
from .exceptions import ConfigError, InvalidAddress

ENV_RPC_URL = "PRICER_RPC_URL"
ENV_AGGREGATOR_URL = "PRICER_AGGREGATOR_URL"


def _checksum(value: Any) -> str:
    try:
        return normalize(value)
    except InvalidAddress as e:
        raise ValueError(str(e)) from e


class TokenConfig(BaseModel):
    """A token the pricer knows by address and label."""

    model_config = ConfigDict(frozen=True)

    address: str
    symbol: str = Field(min_length=1)
    decimals: int = Field(default=DEFAULT_DECIMALS, ge=0, le=255)

    @field_validator("address", mode="before")
    @classmethod
    def validate_address(cls, v):
        return _checksum(v)


class KnownPoolConfig(BaseModel):
    """A pre-registered V3 pool for an unordered token pair."""

    model_config = ConfigDict(frozen=True)

    token_a: str
    token_b: str
    address: str

    @field_validator("token_a", "token_b", "address", mode="before")
    @classmethod
    def validate_address(cls, v):
        return _checksum(v)

    @model_validator(mode="after")
    def validate_distinct_tokens(self):
        if self.token_a == self.token_b:
            raise ValueError(f"known pool {self.address} lists the same token twice")
        return self


class V2Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    router: str = PANCAKE_ROUTER_V2

    @field_validator("router", mode="before")
    @classmethod
    def validate_address(cls, v):
        return _checksum(v)


class V3Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    strategy: Literal["pool_state", "quoter"] = V3_STRATEGY_POOL_STATE
    factory: str = PANCAKE_FACTORY_V3
    quoter: str = PANCAKE_QUOTER_V3
    fee_tiers: Tuple[FeeTier, ...] = FEE_TIER_ORDER
    known_pools: Tuple[KnownPoolConfig, ...] = ()

    @field_validator("factory", "quoter", mode="before")
    @classmethod
    def validate_address(cls, v):
        return _checksum(v)

    @field_validator("fee_tiers")
    @classmethod
    def validate_fee_tiers(cls, v):
        if len(set(v)) != len(v):
            raise ValueError(f"fee_tiers contains duplicates: {list(v)}")
        return v


class AggregatorConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: str = DEFAULT_AGGREGATOR_URL
    timeout_sec: float = Field(default=DEFAULT_AGGREGATOR_TIMEOUT_SEC, gt=0, le=60)
    user_agent: str = DEFAULT_USER_AGENT

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL: {v}")
        return v.rstrip("/")


class PricerConfig(BaseModel):
    """
    Complete, immutable pricer configuration.

    Attributes:
        rpc_url: HTTP(S) JSON-RPC endpoint
        native: Wrapped native gas token (NATIVE quote)
        stable: Pegged stable token (STABLE quote)
        bridges: The two stable tokens used as V2 intermediate hops
        v2: V2 router settings
        v3: V3 factory/quoter settings, fee tiers and known pools
        aggregator: External aggregator API settings
    """

    model_config = ConfigDict(frozen=True)

    rpc_url: str = DEFAULT_RPC_URL
    native: TokenConfig = TokenConfig(address=WBNB, symbol="WBNB")
    stable: TokenConfig = TokenConfig(address=USDT, symbol="USDT")
    bridges: Tuple[TokenConfig, TokenConfig] = (
        TokenConfig(address=BUSD, symbol="BUSD"),
        TokenConfig(address=USDC, symbol="USDC"),
    )
    v2: V2Config = V2Config()
    v3: V3Config = V3Config()
    aggregator: AggregatorConfig = AggregatorConfig()

    @field_validator("rpc_url")
    @classmethod
    def validate_rpc_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"rpc_url must be an http(s) URL: {v}")
        return v

    @model_validator(mode="after")
    def validate_quote_tokens(self):
        if self.native.address == self.stable.address:
            raise ValueError("native and stable tokens must differ")
        return self

    def known_pool_table(self) -> Mapping[FrozenSet[str], str]:
        """Read-only mapping from an unordered token pair to its pool address."""
        return MappingProxyType(
            {
                frozenset((pool.token_a, pool.token_b)): pool.address
                for pool in self.v3.known_pools
            }
        )

    def token_labels(self) -> Dict[str, str]:
        """Symbols of the configured native, stable and bridge tokens by address."""
        labels = {token.address: token.symbol for token in self.bridges}
        labels[self.stable.address] = self.stable.symbol
        labels[self.native.address] = self.native.symbol
        return labels


def config_from_dict(
    config_dict: Dict[str, Any], environ: Optional[Mapping[str, str]] = None
) -> PricerConfig:
    """
    Validate a config dictionary and apply environment overrides.

    Args:
        config_dict: Parsed YAML content
        environ: Environment mapping (default: os.environ)

    Returns:
        Validated PricerConfig

    Raises:
        ConfigError: If any field is invalid
    """
    environ = os.environ if environ is None else environ
    data = dict(config_dict)

    if environ.get(ENV_RPC_URL):
        data["rpc_url"] = environ[ENV_RPC_URL]
    if environ.get(ENV_AGGREGATOR_URL):
        aggregator = dict(data.get("aggregator") or {})
        aggregator["base_url"] = environ[ENV_AGGREGATOR_URL]
        data["aggregator"] = aggregator

    try:
        return PricerConfig.model_validate(data)
    except SchemaError as e:
        raise ConfigError(
            f"Invalid config: {e}", {"errors": e.errors(include_url=False)}
        ) from e


def load_config(
    config_path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
) -> PricerConfig:
    """
    Load and validate config from an optional YAML file.

    Args:
        config_path: Path to config YAML file, or None for defaults
        environ: Environment mapping (default: os.environ)

    Returns:
        Validated PricerConfig

    Raises:
        ConfigError: If the file is missing, unparsable or invalid
    """
    config_dict: Dict[str, Any] = {}

    if config_path is not None:
        if not os.path.exists(config_path):
            raise ConfigError(f"Config file not found: {config_path}")
        try:
            with open(config_path, "r") as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML: {e}") from e

        if loaded is not None:
            if not isinstance(loaded, dict):
                raise ConfigError("Config file must contain a YAML dictionary")
            config_dict = loaded

    return config_from_dict(config_dict, environ)

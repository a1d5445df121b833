"""Configuration for the fusion swap escrow programs.

Programs accept a ``SwapConfig`` dict of overrides; unspecified values fall
back to the defaults below. ``load_config_from_env`` builds the same dict
from ``FUSION_*`` environment variables (a ``.env`` file is honoured).
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional, TypedDict

from dotenv import load_dotenv

# Default deployment addresses
DEFAULT_PROGRAM_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
DEFAULT_HTLC_ADDRESS = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"

DEFAULT_CHAIN_ID = 1
DEFAULT_MIN_HTLC_DURATION = 1  # seconds


class SwapConfig(TypedDict, total=False):
    """Configuration overrides for the escrow programs."""

    program_address: str
    """Source-chain escrow program address. Default: DEFAULT_PROGRAM_ADDRESS"""

    htlc_address: str
    """Destination-chain HTLC custody address. Default: DEFAULT_HTLC_ADDRESS"""

    chain_id: int
    """Chain id used for order signing and HTLC linkage. Default: 1"""

    enforce_whitelist: bool
    """Require whitelisted resolvers for fill/cancel_by_resolver. Default: False"""

    min_htlc_duration: int
    """Shortest accepted HTLC time lock in seconds. Default: 1"""

    max_htlc_duration: Optional[int]
    """Longest accepted HTLC time lock in seconds. Default: unbounded"""

    log_level: str
    """Logging level for ``configure_logging``. Default: INFO"""


@dataclass
class ResolvedSwapConfig:
    """Resolved configuration with all defaults applied."""

    program_address: str
    htlc_address: str
    chain_id: int
    enforce_whitelist: bool
    min_htlc_duration: int
    max_htlc_duration: Optional[int]
    log_level: str


def resolve_config(config: Optional[SwapConfig] = None) -> ResolvedSwapConfig:
    """Apply defaults to a partial configuration.

    Raises:
        ValueError: If the HTLC duration bounds are inconsistent
    """
    config = config or {}
    resolved = ResolvedSwapConfig(
        program_address=config.get("program_address", DEFAULT_PROGRAM_ADDRESS),
        htlc_address=config.get("htlc_address", DEFAULT_HTLC_ADDRESS),
        chain_id=config.get("chain_id", DEFAULT_CHAIN_ID),
        enforce_whitelist=config.get("enforce_whitelist", False),
        min_htlc_duration=config.get("min_htlc_duration", DEFAULT_MIN_HTLC_DURATION),
        max_htlc_duration=config.get("max_htlc_duration"),
        log_level=config.get("log_level", "INFO"),
    )

    if resolved.min_htlc_duration < 1:
        raise ValueError(
            f"min_htlc_duration must be positive: {resolved.min_htlc_duration}"
        )
    if (
        resolved.max_htlc_duration is not None
        and resolved.max_htlc_duration < resolved.min_htlc_duration
    ):
        raise ValueError(
            f"max_htlc_duration {resolved.max_htlc_duration}s is below "
            f"min_htlc_duration {resolved.min_htlc_duration}s"
        )
    return resolved


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config_from_env() -> SwapConfig:
    """Read configuration overrides from the environment.

    Recognised variables: FUSION_PROGRAM_ADDRESS, FUSION_HTLC_ADDRESS,
    FUSION_CHAIN_ID, FUSION_ENFORCE_WHITELIST, FUSION_MIN_HTLC_DURATION,
    FUSION_MAX_HTLC_DURATION, FUSION_LOG_LEVEL.
    """
    load_dotenv()

    config: SwapConfig = {}
    if os.environ.get("FUSION_PROGRAM_ADDRESS"):
        config["program_address"] = os.environ["FUSION_PROGRAM_ADDRESS"]
    if os.environ.get("FUSION_HTLC_ADDRESS"):
        config["htlc_address"] = os.environ["FUSION_HTLC_ADDRESS"]
    if os.environ.get("FUSION_CHAIN_ID"):
        config["chain_id"] = int(os.environ["FUSION_CHAIN_ID"])
    if os.environ.get("FUSION_ENFORCE_WHITELIST"):
        config["enforce_whitelist"] = _env_bool(os.environ["FUSION_ENFORCE_WHITELIST"])
    if os.environ.get("FUSION_MIN_HTLC_DURATION"):
        config["min_htlc_duration"] = int(os.environ["FUSION_MIN_HTLC_DURATION"])
    if os.environ.get("FUSION_MAX_HTLC_DURATION"):
        config["max_htlc_duration"] = int(os.environ["FUSION_MAX_HTLC_DURATION"])
    if os.environ.get("FUSION_LOG_LEVEL"):
        config["log_level"] = os.environ["FUSION_LOG_LEVEL"]
    return config


def configure_logging(config: Optional[SwapConfig] = None) -> None:
    """Configure root logging for scripts; the library itself never does."""
    resolved = resolve_config(config)
    logging.basicConfig(
        level=resolved.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

from dataclasses import dataclass
from pathlib import Path
import os

from dotenv import load_dotenv

from inbox_triage.errors import ConfigError


@dataclass
class Config:
    host_address: str
    acceptance_score: float
    scorer_host: str
    scorer_port: int
    scorer_timeout: float
    credentials_dir: Path
    contexts_path: Path
    label_prefix: str
    auto_reply: bool
    vip_senders: list[str]
    check_interval: int
    max_cycles: int
    log_level: str
    log_dir: Path | None


def _number(name: str, default: str, cast):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a {cast.__name__}, got {raw!r}") from None


def load_config() -> Config:
    """Load configuration from environment variables with defaults."""
    load_dotenv()
    acceptance_score = _number("ACCEPTANCE_SCORE", "0.8", float)
    if not 0.0 <= acceptance_score <= 1.0:
        raise ConfigError(f"ACCEPTANCE_SCORE must be within [0, 1], got {acceptance_score}")
    scorer_port = _number("SCORER_PORT", "63778", int)
    if not 0 < scorer_port < 65536:
        raise ConfigError(f"SCORER_PORT out of range: {scorer_port}")
    scorer_timeout = _number("SCORER_TIMEOUT", "5.0", float)
    if scorer_timeout <= 0:
        raise ConfigError(f"SCORER_TIMEOUT must be positive, got {scorer_timeout}")
    check_interval = _number("CHECK_INTERVAL", "60", int)
    if check_interval <= 0:
        raise ConfigError(f"CHECK_INTERVAL must be positive, got {check_interval}")
    max_cycles = _number("MAX_CYCLES", "10", int)
    if max_cycles < 1:
        raise ConfigError(f"MAX_CYCLES must be at least 1, got {max_cycles}")
    log_dir = os.getenv("LOG_DIR", "").strip()
    return Config(
        host_address=os.getenv("HOST_ADDRESS", "").strip(),
        acceptance_score=acceptance_score,
        scorer_host=os.getenv("SCORER_HOST", "localhost"),
        scorer_port=scorer_port,
        scorer_timeout=scorer_timeout,
        credentials_dir=Path(os.getenv("CREDENTIALS_DIR", "credentials")),
        contexts_path=Path(os.getenv("CONTEXTS_PATH", "contexts.yaml")),
        label_prefix=os.getenv("LABEL_PREFIX", ""),
        auto_reply=os.getenv("AUTO_REPLY", "true").lower() == "true",
        vip_senders=[s.strip() for s in os.getenv("VIP_SENDERS", "").split(",") if s.strip()],
        check_interval=check_interval,
        max_cycles=max_cycles,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_dir=Path(log_dir).resolve() if log_dir else None,
    )

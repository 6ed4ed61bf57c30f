from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Dict, Optional

BASE_DIR = Path(__file__).parent
DEFAULT_LLM_ENDPOINT = "https://api.openai.com/v1/chat/completions"


def _load_dotenv() -> None:
    repo_root = Path(__file__).resolve().parents[2]
    candidates = [repo_root / ".env", Path.cwd() / ".env"]
    for env_path in candidates:
        if not env_path.exists():
            continue
        try:
            for line in env_path.read_text().splitlines():
                stripped = line.strip()
                if not stripped or stripped.startswith("#") or "=" not in stripped:
                    continue
                key, value = stripped.split("=", 1)
                key = key.strip()
                value = value.strip().strip('"').strip("'")
                if key and key not in os.environ:
                    os.environ[key] = value
        except OSError:
            continue
        break


_load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes"}


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class AgentConfig:
    model: str = field(default_factory=lambda: os.getenv("AGENT_MODEL", "gpt-4"))
    temperature: float = field(default_factory=lambda: float(os.getenv("AGENT_TEMPERATURE", "0.1")))
    max_tokens: int = field(default_factory=lambda: int(os.getenv("AGENT_MAX_TOKENS", "4000")))
    retry_attempts: int = field(default_factory=lambda: int(os.getenv("AGENT_RETRY_ATTEMPTS", "3")))
    # Carried for callers and reported in /config; no pipeline step reads it.
    confidence_threshold: float = field(
        default_factory=lambda: float(os.getenv("AGENT_CONFIDENCE_THRESHOLD", "0.7"))
    )
    enable_validation: bool = field(default_factory=lambda: _env_flag("AGENT_ENABLE_VALIDATION", True))
    enable_correction: bool = field(default_factory=lambda: _env_flag("AGENT_ENABLE_CORRECTION", True))

    def __post_init__(self) -> None:
        if not isinstance(self.model, str):
            raise ValueError(f"model must be a string, got {type(self.model).__name__}")
        for name in ("temperature", "confidence_threshold"):
            if not _is_number(getattr(self, name)):
                raise ValueError(f"{name} must be a number, got {getattr(self, name)!r}")
        for name in ("max_tokens", "retry_attempts"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        for name in ("enable_validation", "enable_correction"):
            if not isinstance(getattr(self, name), bool):
                raise ValueError(f"{name} must be true or false, got {getattr(self, name)!r}")
        if not self.model.strip():
            raise ValueError("model must be a non-empty provider model identifier")
        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError(f"temperature must be within [0, 1], got {self.temperature}")
        if self.max_tokens < 1:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")
        if self.retry_attempts < 1:
            raise ValueError(f"retry_attempts must be >= 1, got {self.retry_attempts}")
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError(
                f"confidence_threshold must be within [0, 1], got {self.confidence_threshold}"
            )

    def with_updates(self, updates: Optional[Dict[str, object]] = None) -> "AgentConfig":
        updates = dict(updates or {})
        known = {f.name for f in fields(self)}
        unknown = sorted(set(updates) - known)
        if unknown:
            raise ValueError(f"Unknown agent config option(s): {', '.join(unknown)}")
        return replace(self, **updates)

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class LLMSettings:
    endpoint: str = field(default_factory=lambda: os.getenv("LLM_ENDPOINT") or DEFAULT_LLM_ENDPOINT)
    api_key: Optional[str] = field(
        default_factory=lambda: os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY")
    )
    timeout: float = field(default_factory=lambda: float(os.getenv("LLM_TIMEOUT", "60")))


@dataclass(frozen=True)
class AppConfig:
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    runs_dir: Path = BASE_DIR / "runs"
    save_runs: bool = _env_flag("SAVE_RUNS", True)


CONFIG = AppConfig()


def resolve_llm_settings() -> LLMSettings:
    _load_dotenv()
    return LLMSettings()

"""Load settings.yaml into typed dataclasses. Applies environment overrides."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class ModelConfig:
    name: str
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    max_tokens: int
    temperature: float = 0.7
    base_url: str | None = None


@dataclass
class PromptsConfig:
    agent: str
    token_agent: str
    clerk: str
    token_clerk: str


@dataclass
class DefaultsConfig:
    backend: str
    mock: bool = False
    environment: str = "development"
    step_timeout_sec: float = 30.0

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    models: dict[str, ModelConfig]
    prompts: PromptsConfig
    available_providers: set[str] = field(default_factory=set)


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    COUNCIL_MOCK and COUNCIL_ENV in the environment override the file's
    ``defaults.mock`` and ``defaults.environment``.

    Raises FileNotFoundError if settings file missing.
    Logs missing API keys but does not raise; backends without a key are
    left out of available_providers and the canned backend is used instead.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    defaults_raw = raw["defaults"]
    mock = bool(defaults_raw.get("mock", False))
    mock_env = os.environ.get("COUNCIL_MOCK", "").strip().lower()
    if mock_env:
        mock = mock_env in _TRUTHY

    defaults = DefaultsConfig(
        backend=str(defaults_raw["backend"]),
        mock=mock,
        environment=os.environ.get("COUNCIL_ENV", "").strip() or str(defaults_raw.get("environment", "development")),
        step_timeout_sec=float(defaults_raw.get("step_timeout_sec", 30)),
    )

    prompts_raw = raw["prompts"]
    prompts = PromptsConfig(
        agent=prompts_raw["agent"],
        token_agent=prompts_raw["token_agent"],
        clerk=prompts_raw["clerk"],
        token_clerk=prompts_raw["token_clerk"],
    )

    models: dict[str, ModelConfig] = {}
    available_providers: set[str] = set()

    for provider_name, model_raw in raw["models"].items():
        model_cfg = ModelConfig(
            name=provider_name,
            sdk=model_raw["sdk"],
            model=model_raw["model"],
            api_key_env=model_raw["api_key_env"],
            timeout_sec=int(model_raw["timeout_sec"]),
            max_tokens=int(model_raw["max_tokens"]),
            temperature=float(model_raw.get("temperature", 0.7)),
            base_url=model_raw.get("base_url"),
        )
        models[provider_name] = model_cfg

        api_key = os.environ.get(model_raw["api_key_env"], "").strip()
        if api_key:
            available_providers.add(provider_name)
            logger.info("Backend available: %s", provider_name)
        else:
            logger.info(
                "Backend skipped (no API key): %s (set %s in .env)",
                provider_name,
                model_raw["api_key_env"],
            )

    return AppConfig(
        defaults=defaults,
        models=models,
        prompts=prompts,
        available_providers=available_providers,
    )

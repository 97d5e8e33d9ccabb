from pydantic_settings import BaseSettings
from pathlib import Path
from typing import Any

from src.sohl.models import SohlVariant

class Settings(BaseSettings):
    # Rules
    variant: SohlVariant = SohlVariant.LEGENDARY
    critical_success_divisor: int | None = None     # None keeps the variant's own thresholds
    failure_band: int | None = None
    target_floor: int | None = None
    target_ceiling: int | None = None
    seed: int | None = None

    # LLM Settings
    ollama_host: str = "http://localhost:11434"
    planner_model: str = "mistral:7b"
    llm_timeout: float = 30.0

    # Logging
    log_level: str = "INFO"
    log_file: Path | None = None
    enable_color: bool = True

    class Config:
        env_file = ".env"
        env_prefix = "SOHL_"

    def threshold_overrides(self) -> dict[str, Any]:
        """Threshold values set in the environment, to merge over the variant's own."""
        overrides = {
            "critical_success_divisor": self.critical_success_divisor,
            "failure_band": self.failure_band,
            "target_floor": self.target_floor,
            "target_ceiling": self.target_ceiling,
        }
        return {k: v for k, v in overrides.items() if v is not None}

settings = Settings()

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

_env_path = Path(__file__).resolve().parents[1] / ".env"
if _env_path.is_file():
    load_dotenv(_env_path, override=False)


@dataclass
class Settings:
    """Configuration loaded from CIFSTRUCT_* environment variables.

      CIFSTRUCT_AUX_WORKERS=1        threads for the auxiliary table passes (1 = serial)
      CIFSTRUCT_LOG_LEVEL=INFO
      CIFSTRUCT_DATASET_PATTERN=*.cif*
      CIFSTRUCT_PROGRESS=true        tqdm progress bars when loading datasets
    """

    aux_workers: int = 1
    log_level: str = "INFO"
    dataset_pattern: str = "*.cif*"
    progress: bool = True


def load_settings() -> Settings:
    """Load settings from environment variables."""
    return Settings(
        aux_workers=max(1, int(os.environ.get("CIFSTRUCT_AUX_WORKERS", "1"))),
        log_level=os.environ.get("CIFSTRUCT_LOG_LEVEL", "INFO"),
        dataset_pattern=os.environ.get("CIFSTRUCT_DATASET_PATTERN", "*.cif*"),
        progress=os.environ.get("CIFSTRUCT_PROGRESS", "true").lower() in ("true", "1", "yes"),
    )

from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field


Framing = Literal["legacy", "length_prefixed"]


class Settings(BaseModel):
    # Cipher
    rounds: int = Field(default=5, ge=1, le=16)

    # Transport
    framing: Framing = Field(default="legacy", description="legacy drops zero bytes on decode")
    combined_framing: bool = Field(default=False, description="Prepend IV bytes to the ciphertext")
    allow_insecure_iv_fallback: bool = Field(default=True)

    # Logging
    log_level: str = Field(default="INFO")

    # Evaluation
    global_seed: int = Field(default=1337)
    eval_vectors: int = Field(default=1000, ge=1)
    sac_trials: int = Field(default=200, ge=1)

    # Paths
    runs_dir: str = Field(default="runs")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    # Load .env if present
    load_dotenv()

    def _bool(name: str, default: bool) -> bool:
        v = os.getenv(name)
        if v is None:
            return default
        return v.strip().lower() in {"1", "true", "yes", "y", "on"}

    return Settings(
        rounds=int(os.getenv("SPN_ROUNDS", "5")),
        framing=os.getenv("SPN_FRAMING", "legacy"),
        combined_framing=_bool("SPN_COMBINED_FRAMING", False),
        allow_insecure_iv_fallback=_bool("SPN_ALLOW_INSECURE_IV_FALLBACK", True),
        log_level=os.getenv("SPN_LOG_LEVEL", "INFO"),
        global_seed=int(os.getenv("GLOBAL_SEED", "1337")),
        eval_vectors=int(os.getenv("SPN_EVAL_VECTORS", "1000")),
        sac_trials=int(os.getenv("SPN_SAC_TRIALS", "200")),
        runs_dir=os.getenv("SPN_RUNS_DIR", "runs"),
    )

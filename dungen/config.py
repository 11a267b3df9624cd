"""
Configuration for dungeon generation runs.

Environment variables (all optional):
    DUNGEN_LLM_BACKEND  - none | command | ollama (default: none)
    DUNGEN_LLM_COMMAND  - command-line tool for the "command" backend (default: llm)
    DUNGEN_LLM_TIMEOUT  - per-request timeout in seconds (default: 120)
    OLLAMA_BASE_URL     - Ollama server URL (default: http://localhost:11434)
    OLLAMA_MODEL        - Ollama model name (default: mistral)
"""

import os
import logging
from typing import Any, Optional
from dataclasses import dataclass, field

from dungen.llm.client import LLMCommandClient, OllamaClient, TextGenerationClient

logger = logging.getLogger(__name__)

LLM_BACKENDS = ('none', 'command', 'ollama')


@dataclass
class LLMConfig:
    """Text-generation backend settings."""
    backend: str = 'none'
    command: str = 'llm'
    base_url: str = 'http://localhost:11434'
    model: str = 'mistral'
    timeout: float = 120.0

    def __post_init__(self):
        if self.backend not in LLM_BACKENDS:
            raise ValueError(f"Unknown LLM backend {self.backend!r}, expected one of {LLM_BACKENDS}")

    @classmethod
    def from_env(cls) -> 'LLMConfig':
        return cls(
            backend=os.getenv('DUNGEN_LLM_BACKEND', 'none'),
            command=os.getenv('DUNGEN_LLM_COMMAND', 'llm'),
            base_url=os.getenv('OLLAMA_BASE_URL', 'http://localhost:11434'),
            model=os.getenv('OLLAMA_MODEL', 'mistral'),
            timeout=float(os.getenv('DUNGEN_LLM_TIMEOUT', '120')),
        )


@dataclass
class GenerationConfig:
    """Settings for one generation run."""
    max_steps: int = 20
    seed: Optional[Any] = None
    llm: LLMConfig = field(default_factory=LLMConfig)


def create_text_client(config: LLMConfig) -> Optional[TextGenerationClient]:
    """Build the configured text-generation backend, or None for 'none'."""
    if config.backend == 'command':
        return LLMCommandClient(command=config.command, timeout=config.timeout)
    if config.backend == 'ollama':
        return OllamaClient(base_url=config.base_url, model=config.model, timeout=config.timeout)
    logger.debug("Text generation disabled")
    return None

"""
Text-Generation Clients
=======================

Backends that turn a prompt into text. Every backend raises
TextGenerationError on failure; callers that treat text as optional
(see narrator.py) catch it and carry on.

Backends:
    LLMCommandClient - runs the ``llm`` command-line tool
    OllamaClient     - posts to an Ollama-compatible /api/chat endpoint
"""

import logging
import subprocess
from typing import List, Optional

import requests

from dungen.core.errors import TextGenerationError

logger = logging.getLogger(__name__)


class TextGenerationClient:
    """Base interface for text-generation backends."""

    def generate(self, prompt: str) -> str:
        """Generate text from prompt."""
        raise NotImplementedError("Subclasses must implement generate method.")


class LLMCommandClient(TextGenerationClient):
    """Runs a command-line LLM tool with the prompt as its last argument."""

    def __init__(self, command: str = "llm", extra_args: Optional[List[str]] = None, timeout: float = 120.0):
        self.command = command
        self.extra_args = list(extra_args or [])
        self.timeout = timeout

    def generate(self, prompt: str) -> str:
        args = [self.command, *self.extra_args, prompt]
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise TextGenerationError(f"Error executing {self.command}: {e}") from e
        except UnicodeDecodeError as e:
            raise TextGenerationError(f"{self.command} produced undecodable output: {e}") from e
        return result.stdout.strip()


class OllamaClient(TextGenerationClient):
    """Chat-completion client for an Ollama server."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "mistral",
        timeout: float = 300.0,
        temperature: float = 0.7,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.temperature = temperature

    def generate(self, prompt: str) -> str:
        payload = {
            "model": self.model,
            "options": {"temperature": self.temperature},
            "messages": [
                {
                    "role": "user",
                    "content": prompt,
                }
            ],
            "stream": False,
        }

        try:
            response = requests.post(
                f"{self.base_url}/api/chat",
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
            return data["message"]["content"].strip()
        except requests.exceptions.RequestException as e:
            raise TextGenerationError(f"Ollama request failed: {e}") from e
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise TextGenerationError(f"Unexpected Ollama response: {e}") from e

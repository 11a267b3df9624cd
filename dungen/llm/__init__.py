"""
Text generation used by rule builders for flavor text.
"""

from .client import TextGenerationClient, LLMCommandClient, OllamaClient
from .narrator import Narrator

__all__ = [
    'TextGenerationClient',
    'LLMCommandClient',
    'OllamaClient',
    'Narrator',
]

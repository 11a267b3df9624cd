"""
Narrator: second-person flavor text for generated rooms.

All methods return None when the backend fails, so rule builders can omit
the optional text field and keep going.
"""

import logging
from typing import Optional

from dungen.core.errors import TextGenerationError
from dungen.llm.client import TextGenerationClient

logger = logging.getLogger(__name__)

NARRATOR_PREFIX = "In the second person, as a narrator to a player, "
THEME_PROMPT = (
    "A two-or-three word adjectival phrase, evocative of a dungeon "
    "(e.g. 'rusty iron' or 'dank mildewy')."
)


class Narrator:
    """Wraps a text-generation client with the dungeon narration prompts."""

    def __init__(self, client: TextGenerationClient):
        self.client = client

    def _generate(self, prompt: str) -> Optional[str]:
        try:
            return self.client.generate(prompt)
        except TextGenerationError as e:
            logger.warning(f"Text generation failed: {e}")
            return None

    def as_narrator(self, prompt: str) -> Optional[str]:
        return self._generate(NARRATOR_PREFIX + prompt)

    def theme(self) -> Optional[str]:
        """A short adjectival phrase used as the style token for a branch."""
        return self._generate(THEME_PROMPT)

    def rewrite(self, style: str, template: str) -> Optional[str]:
        """Reword ``template`` in the given style."""
        return self.as_narrator(f"reword the following text with a {style} theme: {template}")

    def continue_narrative(self, style: str, prior: str, template: str) -> Optional[str]:
        """Continue ``prior`` with a styled rewording of ``template``."""
        prior = prior.replace("\n", " ")
        return self.as_narrator(
            f"continue the following narrative with a {style}-themed rewording "
            f"of '{template}': {prior}"
        )

"""CHANGELOG entry generation from git patches."""

import os
from abc import ABC, abstractmethod
from typing import Any

import requests

from pubspec_bump.logger import Logger, get_default_logger

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4.1-mini"

DEFAULT_CHANGELOG_PROMPT = """You are generating a CHANGELOG entry from a git patch.

Follow this exact structure and style:

## <version>

- Short, high-level summary items as bullet points.
- Group related changes under the same class, module, or file name.
- Use backticks for class names, methods, fields, and files.
- For grouped items, use nested bullet points.
- Be concise, technical, and factual.
- Do not invent changes that are not present in the patch.
- Prefer "Added / Updated / Fixed / Removed" wording.

Example output:

## 1.2.3

- New `SomeDomainEntity`.

- `SomeCommandBuilder`:
  - `buildSomething`: added parameter `fooId`.

- `SomeService`:
  - Added field `extraItems`.
  - `fetchItems`:
    - Added parameters `lastItemIds`, `includeExtras`.

- Configuration:
  - Updated default value of `maxRetries`.

- Dependency updates:
  - `http`: ^1.2.0
  - `collection`: ^1.18.0
  - `intl`: ^0.19.0
"""


class GeneratorError(Exception):
    """Raised when CHANGELOG generation fails."""

    pass


def get_openai_api_key(
    api_key: str | None = None, config: dict[str, Any] | None = None
) -> str | None:
    """Get the OpenAI API key from the command line, environment or config.

    Args:
        api_key: Explicitly provided key (takes precedence)
        config: Configuration dict

    Returns:
        API key, or None if none is configured
    """
    if api_key:
        return api_key

    token = os.getenv("OPENAI_API_KEY")
    if token:
        return token

    openai_config = (config or {}).get("openai") or {}
    return openai_config.get("api-key") or None


class ChangelogGenerator(ABC):
    """Turns a unified diff into a CHANGELOG entry."""

    def __init__(
        self,
        api_key: str | None = None,
        prompt: str = DEFAULT_CHANGELOG_PROMPT,
        logger: Logger | None = None,
    ):
        self.api_key = api_key
        self.prompt = prompt
        self.logger = logger or get_default_logger()

    @abstractmethod
    def generate(self, patch: str) -> str | None:
        """Generate a CHANGELOG entry from a patch.

        Args:
            patch: Unified diff (e.g. from ``git diff``)

        Returns:
            Markdown entry, or None if generation is skipped

        Raises:
            GeneratorError: If the backing service fails
        """
        pass

    def __repr__(self) -> str:
        name = type(self).__name__
        if self.api_key is not None:
            return f"{name}(api_key={'*' * len(self.api_key)})"
        return f"{name}()"


class OpenAIChangelogGenerator(ChangelogGenerator):
    """CHANGELOG generator backed by the OpenAI Chat Completions API."""

    def __init__(
        self,
        api_key: str | None = None,
        prompt: str = DEFAULT_CHANGELOG_PROMPT,
        model: str = DEFAULT_MODEL,
        logger: Logger | None = None,
        timeout: float | None = None,
    ):
        super().__init__(api_key=api_key, prompt=prompt, logger=logger)
        self.model = model
        self.timeout = timeout

    def generate(self, patch: str) -> str | None:
        if not patch.strip():
            return None

        if not self.api_key:
            self.logger.warning("❌ No OpenAI API Key! Can't generate CHANGELOG entry!")
            return None

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json; charset=utf-8",
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.prompt},
                {"role": "user", "content": patch},
            ],
            "temperature": 0.1,
        }

        try:
            response = requests.post(
                OPENAI_CHAT_URL, headers=headers, json=payload, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise GeneratorError(f"Failed to reach OpenAI API: {e}")

        if response.status_code != 200:
            raise GeneratorError(f"OpenAI API error ({response.status_code}): {response.text}")

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise GeneratorError(f"Unexpected OpenAI API response: {e}")

        self.logger.log("📝 Generated CHANGELOG entry:")
        self.logger.log(f"<<{content}>>")

        return content

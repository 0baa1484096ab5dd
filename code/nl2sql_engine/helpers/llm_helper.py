"""
Language model access for NL2SQL.

The engine only needs ``call(prompt) -> text``. OpenAIChatModel provides
that over the OpenAI / Azure OpenAI chat completions API.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Union

from openai import AzureOpenAI, OpenAI

from .config_helper import LLMConfig
from .env_helper import EnvHelper

logger = logging.getLogger(__name__)


class ChatModel(ABC):
    """Synchronous, single-request language model."""

    @abstractmethod
    def call(self, prompt: str) -> str:
        """Send one prompt and return the response text."""
        ...


class OpenAIChatModel(ChatModel):
    """ChatModel backed by an OpenAI or Azure OpenAI client."""

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        client: Optional[Union[OpenAI, AzureOpenAI]] = None,
        env_helper: Optional[EnvHelper] = None,
    ):
        """
        Initialize the chat model.

        Args:
            config: Model parameters (model, temperature, max tokens, timeout)
            client: Optional pre-configured OpenAI client
            env_helper: Optional environment accessor used to build a client
        """
        self.config = config or LLMConfig()
        self.env_helper = env_helper or EnvHelper()
        self.client = client or self._create_openai_client()

        logger.info(f"OpenAIChatModel initialized with model: {self.config.model}")

    def _create_openai_client(self) -> Union[OpenAI, AzureOpenAI]:
        """Create an OpenAI client from environment configuration."""
        if self.env_helper.AZURE_OPENAI_ENDPOINT:
            return AzureOpenAI(
                api_key=self.env_helper.AZURE_OPENAI_API_KEY,
                api_version=self.env_helper.AZURE_OPENAI_API_VERSION,
                azure_endpoint=self.env_helper.AZURE_OPENAI_ENDPOINT,
                timeout=self.config.timeout,
                max_retries=0,
            )
        return OpenAI(
            api_key=self.env_helper.OPENAI_API_KEY,
            timeout=self.config.timeout,
            max_retries=0,
        )

    def call(self, prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.config.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
        )

        if response.usage:
            logger.debug(f"Model call used {response.usage.total_tokens} tokens")

        return response.choices[0].message.content or ""

"""Ollama client used by the plan proposer, with retry logic."""

import logging
from typing import Any

import ollama

logger = logging.getLogger(__name__)


class OllamaClient:
    """Thin wrapper over ``ollama.Client`` for the planner.

    Example:
        >>> client = OllamaClient(model_name="mistral:7b")
        >>> text = client.generate("Propose a plan to start combat", json_mode=True)
    """

    DEFAULT_MODEL = "mistral:7b"
    DEFAULT_BASE_URL = "http://localhost:11434"
    DEFAULT_TIMEOUT = 30.0
    MAX_RETRIES = 3

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        temperature: float | None = None,
    ):
        """
        Args:
            model_name: The model to use. Defaults to mistral:7b.
            base_url: Ollama server URL. Defaults to http://localhost:11434.
            timeout: Request timeout in seconds. Defaults to 30.
            temperature: Sampling temperature; None keeps the model default.
        """
        self.model_name = model_name or self.DEFAULT_MODEL
        self.base_url = base_url or self.DEFAULT_BASE_URL
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self.temperature = temperature

        self._client = ollama.Client(host=self.base_url, timeout=self.timeout)

        logger.debug(
            "Initialized OllamaClient with model=%s, base_url=%s, timeout=%s",
            self.model_name,
            self.base_url,
            self.timeout,
        )

    def health_check(self) -> bool:
        """True if the server answers and the configured model is pulled."""
        try:
            models = self._client.list()
            model_names = [m.model for m in models["models"]]
            model_base = self.model_name.split(":")[0]
            is_available = any(
                self.model_name == name or name.startswith(model_base)
                for name in model_names
            )
            if not is_available:
                logger.warning(
                    "Model %s not found. Available models: %s",
                    self.model_name,
                    model_names,
                )
            return is_available

        except Exception as e:
            logger.error("Health check failed: %s", e)
            return False

    def generate(
        self,
        prompt: str,
        system: str | None = None,
        json_mode: bool = False,
    ) -> str:
        """Send one chat turn and return the reply text.

        Args:
            prompt: The user prompt to send.
            system: Optional system prompt.
            json_mode: Ask the server to constrain output to JSON.

        Raises:
            ollama.ResponseError: If the request still fails after MAX_RETRIES.
        """
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        request: dict[str, Any] = {"model": self.model_name, "messages": messages}
        if json_mode:
            request["format"] = "json"
        if self.temperature is not None:
            request["options"] = {"temperature": self.temperature}

        for attempt in range(1, self.MAX_RETRIES + 1):
            try:
                logger.debug("Generation attempt %d/%d (prompt_len=%d)", attempt, self.MAX_RETRIES, len(prompt))
                response = self._client.chat(**request)
                content = response["message"]["content"]
                logger.debug("Response received - length=%d", len(content))
                return content

            except ollama.ResponseError as e:
                logger.warning("Attempt %d failed with ResponseError: %s", attempt, e)
                if attempt == self.MAX_RETRIES:
                    raise

            except Exception as e:
                logger.warning("Attempt %d failed with error: %s", attempt, e)
                if attempt == self.MAX_RETRIES:
                    raise

        raise RuntimeError("Generation failed after all retries")

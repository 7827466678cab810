"""
LLM Client for the Lucid Vision backend
---------------------------------------
Thin interface over Azure OpenAI and OpenAI chat completions. Implements both
``TextAnalysisProvider`` (JSON analysis) and ``TextGenerationProvider``
(questions, summaries, taglines).
"""

from __future__ import annotations

import json
import os
import re
from typing import Any, Dict, List, Optional

import structlog
from openai import AsyncOpenAI

from core.config import LLM_MODEL, LLM_TIMEOUT_SECONDS
from utils.retry import get_llm_retry_decorator

# ────────────────────────────────────────────────────────────
#  Logging
# ────────────────────────────────────────────────────────────
logger = structlog.get_logger(__name__)


# ────────────────────────────────────────────────────────────
#  Helper Functions
# ────────────────────────────────────────────────────────────
_WRAPPING_QUOTES = re.compile(r"^[\"'“”‘’]+|[\"'“”‘’]+$")


def strip_wrapping_quotes(text: Optional[str]) -> str:
    """Trim whitespace and any straight or curly quotes wrapping model output."""
    return _WRAPPING_QUOTES.sub("", (text or "").strip()).strip()


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Attempt to extract a JSON object from a possibly noisy LLM string."""
    try:
        # Fast path: exact JSON string
        value = json.loads(text)
        return value if isinstance(value, dict) else None
    except Exception:
        pass
    try:
        start = text.find("{")
        end = text.rfind("}")
        if start != -1 and end != -1 and end > start:
            value = json.loads(text[start : end + 1])
            return value if isinstance(value, dict) else None
    except Exception:
        return None
    return None


# ────────────────────────────────────────────────────────────
#  Main LLM Client
# ────────────────────────────────────────────────────────────
class LLMClient:
    """Chat-completions client shared by every provider-backed service."""

    def __init__(self):
        self.azure_client: Optional[AsyncOpenAI] = None
        self.openai_client: Optional[AsyncOpenAI] = None
        self._initialized = False
        self._azure_endpoint: Optional[str] = None
        self._azure_api_version: str = "preview"

        # Try to initialize clients
        try:
            self._init_clients()
            self._initialized = True
        except Exception as e:
            logger.warning(f"LLM client initialization deferred: {e}")

    def _init_clients(self) -> None:
        """Initialize Azure and/or OpenAI clients based on environment."""
        # Azure OpenAI
        azure_key = os.getenv("AZURE_OPENAI_API_KEY")
        azure_endpoint = os.getenv("AZURE_OPENAI_ENDPOINT")
        azure_deployment = os.getenv("AZURE_OPENAI_DEPLOYMENT")
        self._azure_api_version = os.getenv("AZURE_OPENAI_API_VERSION", "preview")

        if azure_key and azure_endpoint and azure_deployment:
            self._azure_endpoint = azure_endpoint.rstrip("/")
            # Use OpenAI v1-compatible path with explicit api-version for Azure
            azure_base = f"{self._azure_endpoint}/openai/v1"
            if self._azure_api_version:
                azure_base = f"{azure_base}?api-version={self._azure_api_version}"
            self.azure_client = AsyncOpenAI(
                api_key=azure_key,
                base_url=azure_base,
                timeout=LLM_TIMEOUT_SECONDS,
            )
            logger.info(
                "✓ Azure OpenAI client initialized",
                _type="azure",
                endpoint=self._azure_endpoint,
                api_version=self._azure_api_version,
            )

        # OpenAI Cloud
        openai_key = os.getenv("OPENAI_API_KEY")
        if openai_key:
            self.openai_client = AsyncOpenAI(api_key=openai_key, timeout=LLM_TIMEOUT_SECONDS)
            logger.info("✓ OpenAI client initialized")

        if not self.azure_client and not self.openai_client:
            raise RuntimeError("Neither AZURE_OPENAI_* nor OPENAI_API_KEY environment variables are set")

    def _ensure_initialized(self) -> None:
        """Ensure client is initialized before use."""
        if not self._initialized:
            self._init_clients()
            self._initialized = True

    # ────────────────────────────────────────────────────────────
    #  Public Interfaces
    # ────────────────────────────────────────────────────────────

    @get_llm_retry_decorator()
    async def generate_text(
        self,
        prompt: str,
        *,
        system: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 300,
        json_mode: bool = False,
        model: Optional[str] = None,
    ) -> str:
        """Single chat completion; returns the stripped message text."""
        self._ensure_initialized()

        messages: List[Dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        # Select client (prefer Azure)
        client = self.azure_client or self.openai_client
        if not client:
            logger.error("No LLM client available")
            raise RuntimeError("No LLM client available")

        deployment = self._get_deployment_name(model or LLM_MODEL)
        kwargs: Dict[str, Any] = {
            "model": deployment,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await client.chat.completions.create(**kwargs)
        except Exception as e:
            logger.error(
                "LLM request failed",
                error=str(e),
                model=deployment,
                client_type="azure" if client == self.azure_client else "openai",
            )
            raise

        if hasattr(response, "choices") and response.choices:
            result = (response.choices[0].message.content or "").strip()
            logger.debug(
                "Completion received",
                response_length=len(result),
                model=deployment,
            )
            return result
        logger.warning("Empty response received from LLM")
        return ""

    async def analyze_json(
        self,
        prompt: str,
        *,
        temperature: float = 0.3,
    ) -> Dict[str, Any]:
        """Generate a JSON object; raises ValueError when none can be parsed."""
        raw = await self.generate_text(
            prompt,
            temperature=temperature,
            max_tokens=800,
            json_mode=True,
        )
        data = extract_json_object(raw)
        if data is None:
            logger.error("Failed to parse structured output", preview=raw[:200])
            raise ValueError("Structured generation failed")
        return data

    def get_active_backend_info(self) -> Dict[str, Any]:
        """Return diagnostic info about configured backends."""
        return {
            "azure_enabled": bool(self.azure_client),
            "openai_enabled": bool(self.openai_client),
            "default_model": self._get_deployment_name(LLM_MODEL),
            "api_version": self._azure_api_version,
        }

    def is_initialized(self) -> bool:
        """Check if client is initialized."""
        return self._initialized

    def initialize(self) -> None:
        """Initialize the client if not already done."""
        self._ensure_initialized()

    # ────────────────────────────────────────────────────────────
    #  Private Helper Methods
    # ────────────────────────────────────────────────────────────

    def _get_deployment_name(self, model: str) -> str:
        """Get deployment name for Azure or model name for OpenAI."""
        if self.azure_client:
            return os.getenv("AZURE_OPENAI_DEPLOYMENT", model)
        return model


# ────────────────────────────────────────────────────────────
#  Singleton Instance
# ────────────────────────────────────────────────────────────
llm_client = LLMClient()


async def initialise_llm_client() -> bool:
    """Initialize LLM client on FastAPI startup."""
    try:
        if not llm_client.is_initialized():
            llm_client.initialize()
            logger.info("✓ LLM client initialized successfully")
        return True
    except Exception as e:
        logger.error(f"Failed to initialize LLM client: {e}")
        return False

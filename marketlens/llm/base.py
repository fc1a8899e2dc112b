"""Base interface for LLM gateways."""

from abc import ABC, abstractmethod
from typing import Any, Dict

from marketlens.llm.models import GatewayReply


class BaseLLMGateway(ABC):
    """Abstract base class for chat-completions gateways with tool calling."""

    @abstractmethod
    async def request_analysis(
        self,
        model: str,
        system_prompt: str,
        prompt: str,
        tool_schema: Dict[str, Any],
    ) -> GatewayReply:
        """Ask a model to call the analysis tool for a prompt.

        Args:
            model: Gateway model identifier
            system_prompt: System prompt constraining the model
            prompt: Market analysis prompt
            tool_schema: Function schema the model must call

        Returns:
            The tool-call arguments, or free-text content if no call was made

        Raises:
            GatewayError: If the request fails or the reply is empty
        """
        pass

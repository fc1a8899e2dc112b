"""OpenAI-compatible LLM gateway implementation."""

import logging
from typing import Any, Dict, Optional

import openai
from openai import AsyncOpenAI

from marketlens.analysis.prompt_builder import ANALYSIS_TOOL_NAME
from marketlens.config import Settings, get_settings
from marketlens.exceptions import GatewayError
from marketlens.llm.base import BaseLLMGateway
from marketlens.llm.models import GatewayReply

logger = logging.getLogger(__name__)


class LLMGateway(BaseLLMGateway):
    """Gateway routing chat completions to many vendors behind one API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        """Initialize gateway.

        Without an API key no client is built and every request fails.

        Args:
            settings: Application settings. If None, uses config singleton.
            client: Preconfigured client. If None, one is built from settings.
        """
        self.settings = settings or get_settings()

        if client is None and self.settings.llm_gateway_api_key:
            # The gateway speaks the OpenAI chat-completions protocol
            client = AsyncOpenAI(
                api_key=self.settings.llm_gateway_api_key,
                base_url=self.settings.llm_gateway_base_url,
                timeout=self.settings.llm_request_timeout,
                max_retries=0,
            )
        self.client = client

    def _request_options(self, model: str) -> Dict[str, Any]:
        if model.startswith("openai/"):
            return {"max_completion_tokens": self.settings.llm_max_tokens}
        return {
            "max_tokens": self.settings.llm_max_tokens,
            "temperature": self.settings.llm_temperature,
        }

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
        if self.client is None:
            raise GatewayError("LLM gateway API key not configured", model=model)

        logger.info(f"Attempting structured analysis with model: {model}")

        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                tools=[tool_schema],
                tool_choice={"type": "function", "function": {"name": ANALYSIS_TOOL_NAME}},
                **self._request_options(model),
            )
        except openai.APIStatusError as e:
            raise GatewayError(
                f"{model} error: {e.status_code} {e.message}",
                model=model,
                status_code=e.status_code,
            ) from e
        except openai.OpenAIError as e:
            raise GatewayError(f"{model} request failed: {str(e)}", model=model) from e

        if not response.choices:
            raise GatewayError(f"{model} returned no choices", model=model)

        message = response.choices[0].message

        for tool_call in message.tool_calls or []:
            function = getattr(tool_call, "function", None)
            if function is not None and function.name == ANALYSIS_TOOL_NAME:
                return GatewayReply(model=model, tool_arguments=function.arguments)

        logger.error(f"{model}: No valid tool call in response")

        if message.content:
            return GatewayReply(model=model, content=message.content)

        raise GatewayError(f"{model} returned neither a tool call nor content", model=model)

from openai import OpenAI
import logging
from typing import List
from django.conf import settings

from resume_qa.models.chat_models import ChatRequest, ChatResponse, Message, TokenUsage
from ..exceptions import RemoteCallFailure

logger = logging.getLogger(__name__)


class OpenAIService:
    def __init__(self, client=None, embedding_model: str = None, chat_model: str = None):
        self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY)
        self.embedding_model = embedding_model or settings.OPENAI_EMBEDDING_MODEL
        self.chat_model = chat_model or settings.OPENAI_CHAT_MODEL

    def create_embedding(self, text: str) -> List[float]:
        try:
            response = self.client.embeddings.create(
                model=self.embedding_model,
                input=text
            )
            return response.data[0].embedding
        except Exception as e:
            logger.error(f"Error creating embedding: {e}")
            raise RemoteCallFailure(f"Embedding request failed: {e}") from e

    def create_completion(self, request):
        """
        Synchronous wrapper for completion API

        Args:
            request: ChatRequest object with messages and model information

        Returns:
            ChatResponse object with generated content
        """
        try:
            messages = [{"role": msg.role, "content": msg.content} for msg in request.messages]

            options = {"max_tokens": request.max_tokens}
            if request.temperature is not None:
                options["temperature"] = request.temperature
            if request.json_mode:
                options["response_format"] = {"type": "json_object"}

            response = self.client.chat.completions.create(
                model=request.model,
                messages=messages,
                **options
            )

            choice = response.choices[0]
            usage = getattr(response, "usage", None)
            return ChatResponse(
                content=choice.message.content or "",
                model=request.model,
                finish_reason=choice.finish_reason,
                token_usage=TokenUsage(
                    prompt_tokens=usage.prompt_tokens,
                    completion_tokens=usage.completion_tokens,
                    total_tokens=usage.total_tokens,
                ) if usage else None,
            )

        except Exception as e:
            logger.error(f"Error in OpenAI completion: {e}")
            raise RemoteCallFailure(f"Completion request failed: {e}") from e

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Run a single system + user exchange against the configured chat model."""
        chat_request = ChatRequest(
            messages=[
                Message(role="system", content=system_prompt),
                Message(role="user", content=user_prompt),
            ],
            model=self.chat_model,
            temperature=settings.OPENAI_CHAT_TEMPERATURE,
            max_tokens=settings.OPENAI_CHAT_MAX_TOKENS,
        )
        logger.info(f"Sending completion request to OpenAI with model: {self.chat_model}")
        return self.create_completion(chat_request).content

# Copyright 2025 LLM Inference Service Contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.


"""OpenAI Chat Completions backend."""
import logging
from typing import Dict, List, Any, Optional

import openai
from openai import OpenAI

from .base import BackendAdapter, UPSTREAM_TIMEOUT_SECONDS
from ..core.errors import InvalidResponseShape, UpstreamError
from ..core.schemas import (
    ChatMessage, ChatRequest, ChatResult, GenerateRequest, GenerateResult, Provider, ProviderModel
)

logger = logging.getLogger(__name__)

# These models reject max_tokens (they expect max_completion_tokens), so the
# field is left out of the request entirely.
NEWER_MODELS = frozenset({
    'gpt-4o',
    'gpt-4o-mini',
    'gpt-5',
    'gpt-4.1',
    'gpt-4.5',
})


def is_newer_model(model: str) -> bool:
    return model in NEWER_MODELS


class OpenAIBackend(BackendAdapter):
    """Adapter for the OpenAI chat completion API."""

    def __init__(self, api_key: str, client: Optional[OpenAI] = None):
        super().__init__(api_key)
        self.client = client or OpenAI(api_key=api_key, timeout=UPSTREAM_TIMEOUT_SECONDS, max_retries=0)

    def name(self) -> str:
        return Provider.OPENAI.value

    def build_params(self, model: str, messages: List[ChatMessage], max_tokens: int) -> Dict[str, Any]:
        """Keyword arguments for chat.completions.create."""
        params = {
            'model': model,
            'messages': [{'role': msg.role, 'content': msg.content} for msg in messages],
        }
        if not is_newer_model(model):
            params['max_tokens'] = max_tokens
        return params

    def generate(self, request: GenerateRequest) -> GenerateResult:
        params = self.build_params(request.model, [ChatMessage('user', request.prompt)], request.max_tokens)
        message, created = self._complete(params)
        return GenerateResult(model=request.model, content=message.content, created_at=created)

    def chat(self, request: ChatRequest) -> ChatResult:
        params = self.build_params(request.model, request.messages, request.max_tokens)
        message, created = self._complete(params)
        return ChatResult(model=request.model, message=message, created_at=created)

    def _complete(self, params: Dict[str, Any]):
        try:
            resp = self.client.chat.completions.create(**params)
        except openai.OpenAIError as e:
            raise UpstreamError(f'openai API error: {e}') from e

        try:
            choice = resp.choices[0].message
            message = ChatMessage(role=choice.role or 'assistant', content=choice.content or '')
            return message, str(resp.created)
        except (AttributeError, IndexError, TypeError):
            logger.error(f"Unexpected OpenAI response shape: {str(resp)[:200]}")
            raise InvalidResponseShape()

    def list_models(self) -> List[ProviderModel]:
        try:
            page = self.client.models.list()
        except openai.OpenAIError as e:
            raise UpstreamError(f'failed to list openai models: {e}') from e
        return [ProviderModel(id=model.id) for model in page.data]

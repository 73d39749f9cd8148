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


"""Ollama API format adapters."""
import logging
import uuid
from typing import Dict, Any

from .base import RequestAdapter
from ..core.errors import InvalidRequest, InvalidResponseShape
from ..core.schemas import (
    BackendResult, ChatMessage, ChatRequest, ChatResult, GenerateRequest, GenerateResult, ProxyRequest
)
from ..core.tokens import compute_max_output_tokens, validate_within_limits

logger = logging.getLogger(__name__)


class OllamaGenerateAdapter(RequestAdapter):
    """Adapter for Ollama generate API format."""

    api_format = 'ollama_generate'

    def parse_request(self, data: Dict[str, Any], request_id: str = None) -> ProxyRequest:
        """Parse Ollama generate request."""
        model_name = data.get('model')
        prompt = data.get('prompt') or ''
        if not isinstance(prompt, str):
            raise InvalidRequest("prompt must be a string")

        entry = self.resolve_model(model_name)
        # The prompt is budgeted as a single user message; no pre-check for generate
        max_tokens = compute_max_output_tokens(entry, [ChatMessage('user', prompt)])

        return ProxyRequest(
            request_id=request_id or str(uuid.uuid4()),
            model_name=model_name,
            entry=entry,
            backend_request=GenerateRequest(model=entry.provider_model_id, prompt=prompt, max_tokens=max_tokens),
            stream=bool(data.get('stream', False)),
            additional_params={'api_format': self.api_format, 'options': data.get('options') or {}},
        )

    def response_text(self, result: BackendResult) -> str:
        if getattr(result, 'kind', None) != GenerateResult.kind:
            raise InvalidResponseShape()
        return result.content

    def format_response(self, result: BackendResult, request: ProxyRequest) -> Dict[str, Any]:
        """Format response in Ollama generate format."""
        return self.format_chunk(request.model_name, result.created_at, self.response_text(result), True)

    def format_chunk(self, model: str, created_at: str, content: str, done: bool) -> Dict[str, Any]:
        return {
            'model': model,
            'created_at': created_at,
            'response': content,
            'done': done,
            'context': [],
        }


class OllamaChatAdapter(RequestAdapter):
    """Adapter for Ollama chat API format."""

    api_format = 'ollama_chat'

    def parse_request(self, data: Dict[str, Any], request_id: str = None) -> ProxyRequest:
        """Parse Ollama chat request, rejecting inputs that do not fit the model."""
        model_name = data.get('model')
        messages = self.parse_messages(data.get('messages', []))

        entry = self.resolve_model(model_name)
        validate_within_limits(entry, messages)
        max_tokens = compute_max_output_tokens(entry, messages)

        return ProxyRequest(
            request_id=request_id or str(uuid.uuid4()),
            model_name=model_name,
            entry=entry,
            backend_request=ChatRequest(model=entry.provider_model_id, messages=messages, max_tokens=max_tokens),
            stream=bool(data.get('stream', False)),
            additional_params={'api_format': self.api_format, 'options': data.get('options') or {}},
        )

    def response_text(self, result: BackendResult) -> str:
        if getattr(result, 'kind', None) != ChatResult.kind:
            raise InvalidResponseShape()
        return result.message.content

    def format_response(self, result: BackendResult, request: ProxyRequest) -> Dict[str, Any]:
        """Format response in Ollama chat format."""
        return self.format_chunk(request.model_name, result.created_at, self.response_text(result), True)

    def format_chunk(self, model: str, created_at: str, content: str, done: bool) -> Dict[str, Any]:
        return {
            'model': model,
            'created_at': created_at,
            'message': {
                'role': 'assistant',
                'content': content,
            },
            'done': done,
            'context': [],
        }

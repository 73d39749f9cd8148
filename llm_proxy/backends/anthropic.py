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


"""Anthropic Messages API backend."""
import logging
from typing import Dict, List, Any, Tuple

import requests

from .base import BackendAdapter, UPSTREAM_TIMEOUT_SECONDS
from ..core.errors import InvalidResponseShape, UpstreamError
from ..core.schemas import (
    ChatMessage, ChatRequest, ChatResult, GenerateRequest, GenerateResult, Provider, ProviderModel
)

logger = logging.getLogger(__name__)

ANTHROPIC_API_URL = 'https://api.anthropic.com/v1'
ANTHROPIC_VERSION = '2023-06-01'


class AnthropicBackend(BackendAdapter):
    """Adapter for the Anthropic Messages API."""

    def __init__(self, api_key: str, base_url: str = ANTHROPIC_API_URL, session: requests.Session = None):
        super().__init__(api_key)
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()

    def name(self) -> str:
        return Provider.ANTHROPIC.value

    def generate(self, request: GenerateRequest) -> GenerateResult:
        payload = self.build_payload(request.model, [ChatMessage('user', request.prompt)], request.max_tokens)
        data = self._post_messages(payload)
        text, message_id = self._extract(data)
        return GenerateResult(model=request.model, content=text, created_at=message_id)

    def chat(self, request: ChatRequest) -> ChatResult:
        payload = self.build_payload(request.model, request.messages, request.max_tokens)
        data = self._post_messages(payload)
        text, message_id = self._extract(data)
        return ChatResult(model=request.model, message=ChatMessage('assistant', text), created_at=message_id)

    def build_payload(self, model: str, messages: List[ChatMessage], max_tokens: int) -> Dict[str, Any]:
        """Build the request body; system messages go to the top-level system field."""
        system_parts, turns = self._split_system(messages)
        payload = {
            'model': model,
            'max_tokens': max_tokens,
            'messages': turns,
        }
        if system_parts:
            payload['system'] = '\n\n'.join(system_parts)
        return payload

    def _split_system(self, messages: List[ChatMessage]) -> Tuple[List[str], List[Dict[str, str]]]:
        system_parts = []
        turns = []
        for msg in messages:
            if msg.role.lower() == 'system':
                system_parts.append(msg.content)
            else:
                turns.append({'role': msg.role, 'content': msg.content})
        return system_parts, turns

    def _headers(self) -> Dict[str, str]:
        return {
            'Content-Type': 'application/json',
            'x-api-key': self.api_key,
            'anthropic-version': ANTHROPIC_VERSION,
        }

    def _post_messages(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = self.session.post(
                f'{self.base_url}/messages',
                json=payload,
                headers=self._headers(),
                timeout=UPSTREAM_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            raise UpstreamError(f'anthropic API request failed: {e}') from e

        if resp.status_code != 200:
            raise UpstreamError(f'anthropic API error: {resp.text}')

        try:
            return resp.json()
        except ValueError as e:
            raise InvalidResponseShape(f'anthropic API returned invalid JSON: {e}') from e

    def _extract(self, data: Dict[str, Any]) -> Tuple[str, str]:
        """First content block's text and the message id."""
        try:
            return data['content'][0]['text'], data['id']
        except (KeyError, IndexError, TypeError):
            logger.error(f"Unexpected Anthropic response shape: {str(data)[:200]}")
            raise InvalidResponseShape()

    def list_models(self) -> List[ProviderModel]:
        try:
            resp = self.session.get(
                f'{self.base_url}/models',
                params={'limit': 1000},
                headers=self._headers(),
                timeout=UPSTREAM_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            raise UpstreamError(f'failed to list anthropic models: {e}') from e

        if resp.status_code != 200:
            raise UpstreamError(f'anthropic API error (status {resp.status_code}): {resp.text}')

        models = []
        for item in resp.json().get('data', []):
            models.append(ProviderModel(
                id=item['id'],
                display_name=item.get('display_name', ''),
                context_size=item.get('context_size', 0) or 0,
            ))
        return models

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


"""Backend registry: holds provider adapters and routes requests to them."""
import logging
from typing import Dict, List, Optional

from .base import BackendAdapter
from .anthropic import AnthropicBackend
from .openai import OpenAIBackend
from ..core.errors import BackendNotRegistered, BackendUnavailable
from ..core.schemas import BackendRequest, BackendResult, ModelEntry, Provider

logger = logging.getLogger(__name__)


class BackendRegistry:
    """Adapters keyed by provider id."""

    def __init__(self):
        self._backends: Dict[Provider, BackendAdapter] = {}

    def register(self, provider_id, adapter: BackendAdapter) -> None:
        self._backends[Provider(provider_id)] = adapter
        logger.info(f"Registered backend {adapter.name()}")

    def get(self, provider_id) -> Optional[BackendAdapter]:
        return self._backends.get(Provider(provider_id))

    def list_available(self) -> List[Provider]:
        return [provider for provider, adapter in self._backends.items() if adapter.is_available()]

    def dispatch(self, entry: ModelEntry, request: BackendRequest) -> BackendResult:
        """Send a generic request to the adapter serving the entry's provider."""
        provider = entry.provider_id
        adapter = self._backends.get(provider)
        if adapter is None:
            raise BackendNotRegistered(provider.value)
        if not adapter.is_available():
            raise BackendUnavailable(provider.value)

        if request.kind == 'generate':
            return adapter.generate(request)
        if request.kind == 'chat':
            return adapter.chat(request)
        raise ValueError(f"unsupported request type: {request.kind}")


def create_backend_registry(anthropic_api_key: str = '', openai_api_key: str = '') -> BackendRegistry:
    """Register an adapter for every provider that has credentials."""
    registry = BackendRegistry()
    if anthropic_api_key:
        registry.register(Provider.ANTHROPIC, AnthropicBackend(anthropic_api_key))
    if openai_api_key:
        registry.register(Provider.OPENAI, OpenAIBackend(openai_api_key))
    return registry

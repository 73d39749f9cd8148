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


"""Base adapter for Ollama request/response format conversion."""
from abc import ABC, abstractmethod
from typing import Dict, List, Any

from ..core.catalog import ModelCatalog
from ..core.errors import InvalidRequest, ModelNotFound
from ..core.schemas import BackendResult, ChatMessage, ModelEntry, ProxyRequest


class RequestAdapter(ABC):
    """Converts between an Ollama API shape and the generic backend shape."""

    api_format = 'unknown'

    def __init__(self, catalog: ModelCatalog):
        """Initialize adapter with the model catalog."""
        self.catalog = catalog

    def resolve_model(self, model_name: str) -> ModelEntry:
        """Catalog entry for a public model name."""
        if model_name is not None and not isinstance(model_name, str):
            raise InvalidRequest("model must be a string")
        entry = self.catalog.lookup(model_name) if model_name else None
        if entry is None or not entry.enabled:
            raise ModelNotFound(model_name)
        return entry

    def parse_messages(self, raw_messages: Any) -> List[ChatMessage]:
        if not isinstance(raw_messages, list):
            raise InvalidRequest("messages must be a list")
        messages = []
        for msg in raw_messages:
            if not isinstance(msg, dict):
                raise InvalidRequest("each message must be an object with role and content")
            content = msg.get('content', '')
            if content is None:
                content = ''
            if not isinstance(content, str):
                raise InvalidRequest("message content must be a string")
            messages.append(ChatMessage(role=str(msg.get('role', 'user')), content=content))
        return messages

    @abstractmethod
    def parse_request(self, data: Dict[str, Any], request_id: str = None) -> ProxyRequest:
        """Parse an Ollama request into a resolved backend request."""
        pass

    @abstractmethod
    def format_response(self, result: BackendResult, request: ProxyRequest) -> Dict[str, Any]:
        """Format a backend result as a complete Ollama response."""
        pass

    @abstractmethod
    def format_chunk(self, model: str, created_at: str, content: str, done: bool) -> Dict[str, Any]:
        """Format one ndjson line of a streamed Ollama response."""
        pass

    @abstractmethod
    def response_text(self, result: BackendResult) -> str:
        """Text carried by a backend result of this adapter's shape."""
        pass

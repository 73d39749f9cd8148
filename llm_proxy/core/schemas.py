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

"""Core data structures for the Ollama-compatible proxy."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Dict, Any, List, Optional, Union

PLACEHOLDER_MODEL_SIZE = 1_000_000_000  # 1GB, there are no local weights to measure


class Provider(str, Enum):
    """Upstream providers a model can be routed to."""
    ANTHROPIC = 'anthropic'
    OPENAI = 'openai'


def ollama_timestamp(moment: Optional[datetime] = None) -> str:
    """Format a timestamp the way Ollama clients expect (YYYY-MM-DDTHH:MM:SS.sssZ)."""
    moment = moment or datetime.now(timezone.utc)
    return moment.strftime('%Y-%m-%dT%H:%M:%S.') + f'{moment.microsecond // 1000:03d}Z'


@dataclass
class ChatMessage:
    role: str
    content: str


@dataclass
class GenerateRequest:
    """Single-prompt request sent to a backend"""
    kind: ClassVar[str] = 'generate'
    model: str
    prompt: str
    max_tokens: int


@dataclass
class ChatRequest:
    """Message-list request sent to a backend"""
    kind: ClassVar[str] = 'chat'
    model: str
    messages: List[ChatMessage]
    max_tokens: int


@dataclass
class GenerateResult:
    kind: ClassVar[str] = 'generate'
    model: str
    content: str
    created_at: str


@dataclass
class ChatResult:
    kind: ClassVar[str] = 'chat'
    model: str
    message: ChatMessage
    created_at: str


BackendRequest = Union[GenerateRequest, ChatRequest]
BackendResult = Union[GenerateResult, ChatResult]


@dataclass
class ModelEntry:
    """One published model and where it is served from."""
    public_name: str
    display_name: str
    provider_id: Provider
    provider_model_id: str
    family: str
    description: str
    context_window: int
    enabled: bool = True

    def __post_init__(self):
        self.provider_id = Provider(self.provider_id)
        if self.context_window <= 0:
            raise ValueError(f"context_window must be positive for {self.public_name}, got {self.context_window}")

    def to_ollama_model(self) -> Dict[str, Any]:
        """Render the entry as an element of /api/tags."""
        return {
            'name': self.public_name,
            'model': self.public_name,
            'modified_at': ollama_timestamp(),
            'size': PLACEHOLDER_MODEL_SIZE,
            'digest': f'sha256:{self.public_name}',
        }


@dataclass
class ProviderModel:
    """A model as reported by a provider's list-models endpoint."""
    id: str
    display_name: str = ''
    context_size: int = 0


@dataclass
class ProxyRequest:
    """An inbound Ollama request resolved against the catalog."""
    request_id: str
    model_name: str
    entry: ModelEntry
    backend_request: BackendRequest
    stream: bool
    additional_params: Dict[str, Any] = field(default_factory=dict)

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


"""Capability interface every upstream provider adapter implements."""
from abc import ABC, abstractmethod
from typing import List

from ..core.schemas import ChatRequest, ChatResult, GenerateRequest, GenerateResult, ProviderModel

UPSTREAM_TIMEOUT_SECONDS = 30


class BackendAdapter(ABC):
    """Translates generic requests to one provider's wire format and back."""

    def __init__(self, api_key: str):
        self.api_key = api_key or ''

    def is_available(self) -> bool:
        return self.api_key != ''

    @abstractmethod
    def name(self) -> str:
        """Provider id this adapter serves."""

    @abstractmethod
    def generate(self, request: GenerateRequest) -> GenerateResult:
        """Single-prompt completion."""

    @abstractmethod
    def chat(self, request: ChatRequest) -> ChatResult:
        """Message-list completion."""

    @abstractmethod
    def list_models(self) -> List[ProviderModel]:
        """Models the provider currently offers."""

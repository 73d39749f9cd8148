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


"""Core catalog, budgeting and data structures."""

from .schemas import (
    Provider, ChatMessage, GenerateRequest, ChatRequest, GenerateResult, ChatResult,
    ModelEntry, ProviderModel, ProxyRequest, ollama_timestamp,
)
from .errors import (
    ProxyError, InvalidRequest, ModelNotFound, RequestTooLong, BackendUnavailable,
    BackendNotRegistered, UpstreamError, InvalidResponseShape, CatalogPopulationError,
)
from .catalog import ModelCatalog, DEFAULT_MODELS, build_default_catalog, build_filtered_catalog

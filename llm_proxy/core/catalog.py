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


"""Model catalog: maps public model names to the provider that serves them."""
import logging
import threading
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from .schemas import ModelEntry, Provider

logger = logging.getLogger(__name__)

# Seed table for the static catalog modes.
DEFAULT_MODELS = (
    ModelEntry('claude-3.5-sonnet', 'Claude 3.5 Sonnet', Provider.ANTHROPIC, 'claude-3-5-sonnet-20241022',
               'claude', 'Most capable model for complex tasks', 200000),
    ModelEntry('claude-3.5-haiku', 'Claude 3.5 Haiku', Provider.ANTHROPIC, 'claude-3-5-haiku-20241022',
               'claude', 'Fast and efficient model', 200000),
    ModelEntry('claude-3-opus', 'Claude 3 Opus', Provider.ANTHROPIC, 'claude-3-opus-20240229',
               'claude', 'Most powerful model for complex reasoning', 200000),
    ModelEntry('claude-sonnet-4', 'Claude Sonnet 4', Provider.ANTHROPIC, 'claude-sonnet-4-20250514',
               'claude', 'High-performance model with extended reasoning', 200000),
    ModelEntry('gpt-4o', 'GPT-4o', Provider.OPENAI, 'gpt-4o',
               'gpt', 'Most capable GPT-4 model', 128000),
    ModelEntry('gpt-4o-mini', 'GPT-4o Mini', Provider.OPENAI, 'gpt-4o-mini',
               'gpt', 'Faster, cheaper GPT-4 model', 128000),
    ModelEntry('gpt-4', 'GPT-4', Provider.OPENAI, 'gpt-4',
               'gpt', 'Classic GPT-4 model', 8192),
    ModelEntry('gpt-3.5-turbo', 'GPT-3.5 Turbo', Provider.OPENAI, 'gpt-3.5-turbo',
               'gpt', 'Fast and efficient model', 16384),
)


class ModelCatalog:
    """Owns the public name -> ModelEntry mapping.

    Populated once at startup; mutation after that is guarded by a lock but
    callers are expected to keep it out of live traffic.
    """

    def __init__(self, entries: Iterable[ModelEntry] = ()):
        self._models: Dict[str, ModelEntry] = {}
        self._lock = threading.Lock()
        for entry in entries:
            self.add(entry)

    def __len__(self) -> int:
        with self._lock:
            return len(self._models)

    def __contains__(self, public_name: str) -> bool:
        with self._lock:
            return public_name in self._models

    def lookup(self, public_name: str) -> Optional[ModelEntry]:
        with self._lock:
            return self._models.get(public_name)

    def list_enabled(self) -> List[ModelEntry]:
        with self._lock:
            return [entry for entry in self._models.values() if entry.enabled]

    def list_by_provider(self, provider_id) -> List[ModelEntry]:
        provider_id = Provider(provider_id)
        return [entry for entry in self.list_enabled() if entry.provider_id == provider_id]

    def add(self, entry: ModelEntry) -> None:
        """Add an entry, replacing any existing entry with the same public name."""
        with self._lock:
            if entry.public_name in self._models:
                logger.debug(f"Replacing catalog entry {entry.public_name}")
            self._models[entry.public_name] = entry

    def remove(self, public_name: str) -> None:
        with self._lock:
            self._models.pop(public_name, None)

    def set_enabled(self, public_name: str, enabled: bool) -> None:
        with self._lock:
            entry = self._models.get(public_name)
            if entry:
                self._models[public_name] = replace(entry, enabled=enabled)

    def enable(self, public_name: str) -> None:
        self.set_enabled(public_name, True)

    def disable(self, public_name: str) -> None:
        self.set_enabled(public_name, False)


def build_default_catalog() -> ModelCatalog:
    """Catalog containing the full seed table."""
    return ModelCatalog(replace(entry) for entry in DEFAULT_MODELS)


def build_filtered_catalog(available_providers: Iterable) -> ModelCatalog:
    """Seed table restricted to providers that have credentials."""
    allowed = {Provider(p) for p in available_providers}
    catalog = ModelCatalog(replace(entry) for entry in DEFAULT_MODELS if entry.provider_id in allowed)
    logger.info(f"Loaded {len(catalog)} default models for backends: {sorted(p.value for p in allowed)}")
    return catalog

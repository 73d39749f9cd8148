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


"""Dynamic catalog population from the providers' list-models endpoints."""
import fnmatch
import logging
import re
from typing import List, Optional, Tuple

from .catalog import ModelCatalog
from .errors import CatalogPopulationError
from .schemas import ModelEntry, Provider, ProviderModel
from ..config import FilterRule, ModelFilters

logger = logging.getLogger(__name__)

# (provider, substring, context window), first match wins so more specific
# substrings come first.
CONTEXT_WINDOW_HINTS: Tuple[Tuple[Provider, str, int], ...] = (
    (Provider.OPENAI, 'gpt-5', 400000),
    (Provider.OPENAI, 'gpt-4.1', 1047576),
    (Provider.OPENAI, 'gpt-4o', 128000),
    (Provider.OPENAI, 'gpt-4-turbo', 128000),
    (Provider.OPENAI, 'gpt-4-32k', 32768),
    (Provider.OPENAI, 'gpt-4', 8192),
    (Provider.OPENAI, 'gpt-3.5-turbo-16k', 16384),
    (Provider.OPENAI, 'gpt-3.5', 4096),
    (Provider.ANTHROPIC, 'claude-3', 200000),
    (Provider.ANTHROPIC, 'claude-opus-4', 200000),
    (Provider.ANTHROPIC, 'claude-sonnet-4', 200000),
    (Provider.ANTHROPIC, 'claude-haiku-4', 200000),
    (Provider.ANTHROPIC, 'claude-2', 100000),
)

ANTHROPIC_FALLBACK_CONTEXT_WINDOW = 100000

_DATE_SUFFIX = re.compile(r'-(\d{8}|latest)$')
# claude-3-5-sonnet, claude-3-haiku
_LEGACY_CLAUDE = re.compile(r'^claude-(\d+)(?:-(\d+))?-([a-z]+)$')
# claude-sonnet-4, claude-opus-4-1
_MODERN_CLAUDE = re.compile(r'^claude-([a-z]+)-(\d+)(?:-(\d+))?$')


def matches_filters(model_id: str, rule: FilterRule) -> bool:
    """Exclude patterns win; an empty include list includes everything else."""
    for pattern in rule.exclude_patterns:
        if fnmatch.fnmatchcase(model_id, pattern):
            return False
    if not rule.include_patterns:
        return True
    return any(fnmatch.fnmatchcase(model_id, pattern) for pattern in rule.include_patterns)


def _anthropic_parts(model_id: str) -> Optional[Tuple[str, str, bool]]:
    """(version, tier, tier_first) for recognised Claude ids, None otherwise."""
    base = _DATE_SUFFIX.sub('', model_id)
    match = _LEGACY_CLAUDE.match(base)
    if match:
        major, minor, tier = match.groups()
        return (f'{major}.{minor}' if minor else major), tier, False
    match = _MODERN_CLAUDE.match(base)
    if match:
        tier, major, minor = match.groups()
        return (f'{major}.{minor}' if minor else major), tier, True
    return None


def generate_model_name(model_id: str, provider: Provider) -> str:
    """Public name for a provider model id, e.g. claude-3-5-sonnet-20241022 -> claude-3.5-sonnet."""
    if provider == Provider.ANTHROPIC:
        parts = _anthropic_parts(model_id)
        if parts is None:
            return _DATE_SUFFIX.sub('', model_id)
        version, tier, tier_first = parts
        if tier_first:
            return f'claude-{tier}-{version}'
        return f'claude-{version}-{tier}'
    return model_id


def generate_display_name(model_id: str, provider: Provider) -> str:
    if provider == Provider.ANTHROPIC:
        parts = _anthropic_parts(model_id)
        if parts is None:
            return ' '.join(word.capitalize() for word in _DATE_SUFFIX.sub('', model_id).split('-'))
        version, tier, tier_first = parts
        if tier_first:
            return f'Claude {tier.title()} {version}'
        return f'Claude {version} {tier.title()}'
    return model_id.upper()


def extract_family(model_id: str) -> str:
    return model_id.split('-', 1)[0]


def estimate_context_window(model_id: str, provider: Provider, default: int = 4096) -> int:
    """Context window from the hint table, falling back to a conservative default."""
    for hint_provider, substring, window in CONTEXT_WINDOW_HINTS:
        if hint_provider == provider and substring in model_id:
            return window
    if provider == Provider.ANTHROPIC:
        return ANTHROPIC_FALLBACK_CONTEXT_WINDOW
    return default


def describe(display_name: str, provider: Provider) -> str:
    vendor = 'Anthropic' if provider == Provider.ANTHROPIC else 'OpenAI'
    return f'{vendor} {display_name} model'


class ModelFetcher:
    """Builds catalog entries from the models each registered provider reports."""

    def __init__(self, registry, filters: ModelFilters, default_context_window: int = 4096):
        self.registry = registry
        self.filters = filters
        self.default_context_window = default_context_window

    def to_entry(self, model: ProviderModel, provider: Provider) -> ModelEntry:
        display_name = generate_display_name(model.id, provider)
        context_window = model.context_size or estimate_context_window(model.id, provider, self.default_context_window)
        return ModelEntry(
            public_name=generate_model_name(model.id, provider),
            display_name=display_name,
            provider_id=provider,
            provider_model_id=model.id,
            family=extract_family(model.id),
            description=describe(display_name, provider),
            context_window=context_window,
            enabled=True,
        )

    def fetch_provider(self, provider: Provider) -> List[ModelEntry]:
        """Fetch and filter one provider's models. Raises on upstream failure."""
        adapter = self.registry.get(provider)
        rule = self.filters.for_provider(provider.value)
        entries = []
        seen = set()
        for model in adapter.list_models():
            if not matches_filters(model.id, rule):
                logger.debug(f"Filtered out {provider.value} model {model.id}")
                continue
            entry = self.to_entry(model, provider)
            if entry.public_name in seen:
                logger.debug(f"Skipping {model.id}, {entry.public_name} already mapped")
                continue
            seen.add(entry.public_name)
            entries.append(entry)
        return entries

    def fetch_all(self) -> List[ModelEntry]:
        """Fetch every enabled provider that has credentials.

        A failing provider contributes nothing; an empty overall result is fatal.
        """
        entries = []
        for provider in Provider:
            rule = self.filters.for_provider(provider.value)
            adapter = self.registry.get(provider)
            if not rule.enabled or adapter is None or not adapter.is_available():
                continue
            try:
                provider_entries = self.fetch_provider(provider)
            except Exception as e:
                logger.warning(f"Failed to fetch {provider.value} models: {e}")
                continue
            logger.info(f"Fetched {len(provider_entries)} {provider.value} models")
            entries.extend(provider_entries)

        if not entries:
            raise CatalogPopulationError("no models could be fetched from any backend")
        return entries


def build_dynamic_catalog(registry, filters: ModelFilters, default_context_window: int = 4096) -> ModelCatalog:
    """Catalog populated from the providers' model lists."""
    fetcher = ModelFetcher(registry, filters, default_context_window)
    catalog = ModelCatalog(fetcher.fetch_all())
    logger.info(f"Loaded {len(catalog)} models dynamically from APIs")
    return catalog

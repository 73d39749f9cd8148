"""Model catalog lookup, listing and mutation."""
import pytest

from llm_proxy.core.catalog import DEFAULT_MODELS, ModelCatalog, build_default_catalog, build_filtered_catalog
from llm_proxy.core.schemas import ModelEntry, Provider


def test_default_catalog_has_unique_names_and_positive_windows():
    names = [entry.public_name for entry in DEFAULT_MODELS]
    assert len(names) == len(set(names))
    assert all(entry.context_window > 0 for entry in DEFAULT_MODELS)
    assert len(build_default_catalog()) == len(DEFAULT_MODELS)


def test_lookup_and_not_found(catalog):
    entry = catalog.lookup('gpt-4o')
    assert entry.provider_id == Provider.OPENAI
    assert entry.provider_model_id == 'gpt-4o'
    assert catalog.lookup('llama3:8b') is None


def test_list_by_provider_only_enabled(catalog):
    anthropic = catalog.list_by_provider('anthropic')
    assert anthropic
    assert all(entry.provider_id == Provider.ANTHROPIC for entry in anthropic)

    catalog.disable('claude-3.5-sonnet')
    names = [entry.public_name for entry in catalog.list_by_provider(Provider.ANTHROPIC)]
    assert 'claude-3.5-sonnet' not in names
    assert 'claude-3.5-sonnet' not in [e.public_name for e in catalog.list_enabled()]
    # Still present, just hidden
    assert catalog.lookup('claude-3.5-sonnet').enabled is False

    catalog.enable('claude-3.5-sonnet')
    assert catalog.lookup('claude-3.5-sonnet').enabled is True


def test_add_overwrites_and_remove():
    catalog = ModelCatalog()
    catalog.add(ModelEntry('custom', 'Custom', Provider.OPENAI, 'gpt-4', 'gpt', 'first', 8192))
    catalog.add(ModelEntry('custom', 'Custom', Provider.OPENAI, 'gpt-4-turbo', 'gpt', 'second', 128000))
    assert len(catalog) == 1
    assert catalog.lookup('custom').provider_model_id == 'gpt-4-turbo'

    catalog.remove('custom')
    assert catalog.lookup('custom') is None
    catalog.remove('custom')
    catalog.set_enabled('custom', True)
    assert len(catalog) == 0


def test_default_catalogs_are_independent():
    first = build_default_catalog()
    first.disable('gpt-4o')
    assert build_default_catalog().lookup('gpt-4o').enabled is True
    assert all(entry.enabled for entry in DEFAULT_MODELS)


def test_filtered_catalog_only_includes_available_providers():
    catalog = build_filtered_catalog([Provider.OPENAI])
    assert catalog.list_enabled()
    assert all(entry.provider_id == Provider.OPENAI for entry in catalog.list_enabled())
    assert build_filtered_catalog([]).list_enabled() == []


def test_model_entry_rejects_non_positive_context_window():
    with pytest.raises(ValueError):
        ModelEntry('bad', 'Bad', Provider.OPENAI, 'bad', 'bad', 'bad', 0)


def test_to_ollama_model_shape():
    model = build_default_catalog().lookup('gpt-4o').to_ollama_model()
    assert model['name'] == 'gpt-4o'
    assert model['model'] == 'gpt-4o'
    assert model['digest'] == 'sha256:gpt-4o'
    assert model['size'] == 1_000_000_000

"""Backend registry routing."""
import pytest

from llm_proxy.backends.anthropic import AnthropicBackend
from llm_proxy.backends.openai import OpenAIBackend
from llm_proxy.backends.registry import BackendRegistry, create_backend_registry
from llm_proxy.core.catalog import DEFAULT_MODELS
from llm_proxy.core.errors import BackendNotRegistered, BackendUnavailable
from llm_proxy.core.schemas import ChatMessage, ChatRequest, GenerateRequest, Provider

from conftest import FakeBackend


def test_every_default_model_routes_to_its_provider(registry, anthropic_backend, openai_backend):
    backends = {Provider.ANTHROPIC: anthropic_backend, Provider.OPENAI: openai_backend}
    for entry in DEFAULT_MODELS:
        request = GenerateRequest(model=entry.provider_model_id, prompt='hi', max_tokens=100)
        registry.dispatch(entry, request)
        assert backends[entry.provider_id].requests[-1] is request


def test_dispatch_uses_request_kind(registry, openai_backend, catalog):
    entry = catalog.lookup('gpt-4')
    generate = registry.dispatch(entry, GenerateRequest(model='gpt-4', prompt='hi', max_tokens=100))
    chat = registry.dispatch(entry, ChatRequest(model='gpt-4', messages=[ChatMessage('user', 'hi')], max_tokens=100))
    assert generate.kind == 'generate'
    assert chat.kind == 'chat'


def test_unregistered_provider_is_unavailable(catalog):
    registry = BackendRegistry()
    registry.register(Provider.OPENAI, FakeBackend(Provider.OPENAI))
    entry = catalog.lookup('claude-3.5-sonnet')
    with pytest.raises(BackendUnavailable) as exc_info:
        registry.dispatch(entry, GenerateRequest(model=entry.provider_model_id, prompt='hi', max_tokens=100))
    assert isinstance(exc_info.value, BackendNotRegistered)
    assert 'anthropic' in exc_info.value.message
    assert exc_info.value.status_code == 500


def test_registered_without_credentials_is_unavailable(catalog):
    registry = BackendRegistry()
    registry.register(Provider.OPENAI, FakeBackend(Provider.OPENAI, api_key=''))
    entry = catalog.lookup('gpt-4o')
    with pytest.raises(BackendUnavailable) as exc_info:
        registry.dispatch(entry, GenerateRequest(model='gpt-4o', prompt='hi', max_tokens=100))
    assert not isinstance(exc_info.value, BackendNotRegistered)
    assert registry.list_available() == []


def test_factory_registers_only_configured_providers():
    registry = create_backend_registry(anthropic_api_key='sk-ant', openai_api_key='')
    assert isinstance(registry.get(Provider.ANTHROPIC), AnthropicBackend)
    assert registry.get(Provider.OPENAI) is None
    assert registry.list_available() == [Provider.ANTHROPIC]

    registry = create_backend_registry(anthropic_api_key='', openai_api_key='sk-test')
    assert isinstance(registry.get('openai'), OpenAIBackend)
    assert registry.get('anthropic') is None

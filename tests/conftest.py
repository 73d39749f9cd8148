"""Shared fixtures: a fake backend and a Flask app wired to it."""
import pytest

from llm_proxy.backends.base import BackendAdapter
from llm_proxy.backends.registry import BackendRegistry
from llm_proxy.config import ProxyConfig
from llm_proxy.core.catalog import build_default_catalog
from llm_proxy.core.errors import UpstreamError
from llm_proxy.core.schemas import ChatMessage, ChatResult, GenerateResult, Provider, ProviderModel
from llm_proxy.main import create_app


class FakeBackend(BackendAdapter):
    """Backend that answers every request with a canned reply."""

    def __init__(self, provider, api_key='test-key', reply='Hello!!', models=(), fail=None):
        super().__init__(api_key)
        self.provider = Provider(provider)
        self.reply = reply
        self.models = list(models)
        self.fail = fail
        self.requests = []

    def name(self):
        return self.provider.value

    def generate(self, request):
        self.requests.append(request)
        if self.fail:
            raise UpstreamError(self.fail)
        return GenerateResult(model=request.model, content=self.reply, created_at='msg_123')

    def chat(self, request):
        self.requests.append(request)
        if self.fail:
            raise UpstreamError(self.fail)
        return ChatResult(model=request.model, message=ChatMessage('assistant', self.reply), created_at='1700000000')

    def list_models(self):
        if isinstance(self.fail, Exception):
            raise self.fail
        return [ProviderModel(id=model_id) for model_id in self.models]


@pytest.fixture
def anthropic_backend():
    return FakeBackend(Provider.ANTHROPIC)


@pytest.fixture
def openai_backend():
    return FakeBackend(Provider.OPENAI)


@pytest.fixture
def registry(anthropic_backend, openai_backend):
    registry = BackendRegistry()
    registry.register(Provider.ANTHROPIC, anthropic_backend)
    registry.register(Provider.OPENAI, openai_backend)
    return registry


@pytest.fixture
def config(tmp_path):
    return ProxyConfig(
        anthropic_api_key='test-anthropic',
        openai_api_key='test-openai',
        streaming_chunk_size=3,
        streaming_delay_ms=0,
        model_config_path=None,
        catalog_mode='static',
        log_dir=tmp_path / 'logs',
    )


@pytest.fixture
def catalog():
    return build_default_catalog()


@pytest.fixture
def app(config, registry, catalog):
    app, _, _ = create_app(config, registry=registry, catalog=catalog)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()

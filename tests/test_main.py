"""Startup: catalog mode selection and fail-fast behaviour."""
import logging
from unittest import mock

import pytest

from conftest import FakeBackend
from llm_proxy import main as proxy_main
from llm_proxy.backends.registry import BackendRegistry
from llm_proxy.core.catalog import DEFAULT_MODELS
from llm_proxy.core.errors import CatalogPopulationError
from llm_proxy.core.schemas import Provider
from llm_proxy.utils.logging import QUIET_LOGGERS, setup_logging


def make_registry(anthropic_models=(), openai_models=(), openai=True):
    registry = BackendRegistry()
    registry.register(Provider.ANTHROPIC, FakeBackend(Provider.ANTHROPIC, models=anthropic_models))
    if openai:
        registry.register(Provider.OPENAI, FakeBackend(Provider.OPENAI, models=openai_models))
    return registry


def test_build_catalog_static(config):
    catalog = proxy_main.build_catalog(config, make_registry(openai=False))
    assert len(catalog) == len(DEFAULT_MODELS)


def test_build_catalog_filtered_keeps_registered_providers(config):
    config.catalog_mode = 'filtered'
    catalog = proxy_main.build_catalog(config, make_registry(openai=False))
    providers = {entry.provider_id for entry in catalog.list_enabled()}
    assert providers == {Provider.ANTHROPIC}
    assert 'gpt-4o' not in catalog


def test_build_catalog_dynamic_uses_listed_models(config):
    config.catalog_mode = 'dynamic'
    registry = make_registry(
        anthropic_models=['claude-3-5-sonnet-20241022'],
        openai_models=['gpt-4o', 'whisper-1'],
    )
    catalog = proxy_main.build_catalog(config, registry)
    assert sorted(entry.public_name for entry in catalog.list_enabled()) == ['claude-3.5-sonnet', 'gpt-4o']
    assert catalog.lookup('claude-3.5-sonnet').provider_model_id == 'claude-3-5-sonnet-20241022'


def test_build_catalog_dynamic_with_no_models_raises(config):
    config.catalog_mode = 'dynamic'
    with pytest.raises(CatalogPopulationError):
        proxy_main.build_catalog(config, make_registry())


def test_main_exits_when_no_models_are_fetched(config):
    config.catalog_mode = 'dynamic'
    with mock.patch.object(proxy_main, 'load_dotenv'), \
            mock.patch.object(proxy_main, 'parse_arguments', return_value=config), \
            mock.patch.object(proxy_main, 'create_backend_registry', return_value=make_registry()), \
            mock.patch('flask.Flask.run') as run:
        with pytest.raises(SystemExit) as exc:
            proxy_main.main()
    assert exc.value.code == 1
    run.assert_not_called()


def test_main_exits_on_invalid_configuration(config):
    config.anthropic_api_key = ''
    config.openai_api_key = ''
    with mock.patch.object(proxy_main, 'load_dotenv'), \
            mock.patch.object(proxy_main, 'parse_arguments', return_value=config):
        with pytest.raises(SystemExit) as exc:
            proxy_main.main()
    assert exc.value.code == 1


def test_main_runs_the_app(config):
    with mock.patch.object(proxy_main, 'load_dotenv'), \
            mock.patch.object(proxy_main, 'parse_arguments', return_value=config), \
            mock.patch.object(proxy_main, 'create_backend_registry', return_value=make_registry()), \
            mock.patch('flask.Flask.run') as run:
        proxy_main.main()
    run.assert_called_once()
    assert run.call_args.kwargs['port'] == config.port
    assert run.call_args.kwargs['threaded'] is True


def test_setup_logging_quiets_http_clients(tmp_path):
    log_file = setup_logging(tmp_path / 'logs')
    assert log_file == tmp_path / 'logs' / 'proxy.log'
    assert (tmp_path / 'logs').is_dir()
    for name in QUIET_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING

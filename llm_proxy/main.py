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


"""Main entry point for the Ollama-compatible proxy."""
import logging
import sys
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .config import ProxyConfig, parse_arguments, load_model_filters
from .utils.logging import setup_logging
from .backends.registry import BackendRegistry, create_backend_registry
from .core.catalog import ModelCatalog, build_default_catalog, build_filtered_catalog
from .core.errors import CatalogPopulationError
from .core.fetcher import build_dynamic_catalog
from .api.routes import create_routes

logger = logging.getLogger(__name__)


def build_catalog(config: ProxyConfig, registry: BackendRegistry) -> ModelCatalog:
    """Populate the model catalog according to the configured mode."""
    if config.catalog_mode == 'static':
        return build_default_catalog()
    if config.catalog_mode == 'filtered':
        return build_filtered_catalog(registry.list_available())

    filters = load_model_filters(config.model_config_path)
    return build_dynamic_catalog(registry, filters, config.default_context_window)


def create_app(config: ProxyConfig, registry: Optional[BackendRegistry] = None,
               catalog: Optional[ModelCatalog] = None) -> tuple[Flask, ModelCatalog, BackendRegistry]:
    """Create and configure the Flask application.

    Raises CatalogPopulationError when dynamic population finds no models.
    """
    setup_logging(config.log_dir, config.debug)

    app = Flask(__name__)
    app.config['DEBUG'] = config.debug

    logger.info("Initializing core components...")

    if registry is None:
        registry = create_backend_registry(config.anthropic_api_key, config.openai_api_key)
    logger.info(f"Available backends: {[p.value for p in registry.list_available()]}")

    if catalog is None:
        catalog = build_catalog(config, registry)
    logger.info(f"Catalog ({config.catalog_mode}) holds {len(catalog.list_enabled())} enabled models")

    api_blueprint = create_routes(catalog, registry, config)
    app.register_blueprint(api_blueprint)
    logger.info("API routes registered")

    return app, catalog, registry


def main():
    """Main entry point."""
    load_dotenv()
    try:
        config = parse_arguments()
        config.validate()
        app, catalog, registry = create_app(config)
    except CatalogPopulationError as e:
        logger.critical(f"Failed to fetch models dynamically: {e}")
        sys.exit(1)
    except ValueError as e:
        logger.critical(f"Invalid configuration: {e}")
        sys.exit(1)

    logger.info("=" * 60)
    logger.info("LLM Proxy Starting")
    logger.info("=" * 60)
    logger.info(f"Server starting on http://{config.host}:{config.port}")
    logger.info(f"Backends: {[p.value for p in registry.list_available()]}, models: {len(catalog.list_enabled())}")
    logger.info("=" * 60)

    try:
        app.run(
            host=config.host,
            port=config.port,
            debug=config.debug,
            threaded=True,
            use_reloader=False
        )
    except KeyboardInterrupt:
        logger.info("Server stopped by user")


if __name__ == '__main__':
    main()

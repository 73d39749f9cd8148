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


"""Configuration management for the Ollama-compatible proxy."""
import argparse
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

CATALOG_MODES = ('static', 'filtered', 'dynamic')


@dataclass
class FilterRule:
    """Include/exclude glob patterns for one provider's model list."""
    enabled: bool = False
    include_patterns: List[str] = field(default_factory=list)
    exclude_patterns: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'FilterRule':
        if not data:
            return cls()
        return cls(
            enabled=bool(data.get('enabled', False)),
            include_patterns=[str(p) for p in data.get('include_patterns') or []],
            exclude_patterns=[str(p) for p in data.get('exclude_patterns') or []],
        )


@dataclass
class ModelFilters:
    anthropic: FilterRule = field(default_factory=FilterRule)
    openai: FilterRule = field(default_factory=FilterRule)

    def for_provider(self, provider_id: str) -> FilterRule:
        return getattr(self, str(provider_id))


def default_model_filters() -> ModelFilters:
    """Filters used when no filter file can be loaded."""
    return ModelFilters(
        anthropic=FilterRule(enabled=True, include_patterns=['claude-*']),
        openai=FilterRule(
            enabled=True,
            include_patterns=['gpt-4*', 'gpt-3.5-turbo*', 'gpt-5*'],
            exclude_patterns=['*-instruct*', '*audio*', '*realtime*', '*search*', '*transcribe*', '*tts*', '*image*'],
        ),
    )


def load_model_filters(config_path: Optional[Path]) -> ModelFilters:
    """Load provider filter rules from a YAML file.

    Returns the default filters when the path is unset or the file cannot be
    read or parsed. A provider missing from a loaded file is disabled.
    """
    if not config_path:
        return default_model_filters()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning(f"Model config file {config_path} not found, using default filters")
        return default_model_filters()
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load model config from {config_path}: {e}")
        return default_model_filters()

    filters = data.get('model_filters') if isinstance(data, dict) else None
    if not isinstance(filters, dict):
        logger.warning(f"No model_filters section in {config_path}, using default filters")
        return default_model_filters()

    logger.info(f"Loaded model filters from {config_path}")
    return ModelFilters(
        anthropic=FilterRule.from_dict(filters.get('anthropic')),
        openai=FilterRule.from_dict(filters.get('openai')),
    )


@dataclass
class ProxyConfig:
    """Proxy configuration parameters."""
    host: str = '0.0.0.0'
    port: int = 11434
    anthropic_api_key: str = ''
    openai_api_key: str = ''
    default_context_window: int = 4096
    streaming_chunk_size: int = 3
    streaming_delay_ms: int = 50
    model_config_path: Optional[Path] = Path('config.yaml')
    catalog_mode: str = 'dynamic'
    log_dir: Path = Path('logs')
    debug: bool = False

    @property
    def has_anthropic(self) -> bool:
        return self.anthropic_api_key != ''

    @property
    def has_openai(self) -> bool:
        return self.openai_api_key != ''

    def validate(self) -> None:
        if not self.has_anthropic and not self.has_openai:
            raise ValueError("at least one API key must be provided (ANTHROPIC_API_KEY or OPENAI_API_KEY)")
        if self.port <= 0:
            raise ValueError("port must be specified")
        if self.streaming_chunk_size < 1:
            raise ValueError("streaming chunk size must be at least 1")
        if self.streaming_delay_ms < 0:
            raise ValueError("streaming delay must not be negative")
        if self.catalog_mode not in CATALOG_MODES:
            raise ValueError(f"catalog mode must be one of {', '.join(CATALOG_MODES)}")


def get_env(key: str, default: str = '') -> str:
    value = os.environ.get(key)
    return value if value else default


def get_env_int(key: str, default: int) -> int:
    value = os.environ.get(key)
    if value:
        try:
            return int(value)
        except ValueError:
            logger.warning(f"Ignoring non-integer value for {key}: {value!r}")
    return default


def get_env_bool(key: str) -> bool:
    return get_env(key).lower() in ('1', 'true', 'yes', 'on')


def parse_arguments(argv: Optional[List[str]] = None) -> ProxyConfig:
    """Parse command line arguments, defaulting each one from the environment."""
    parser = argparse.ArgumentParser(description='Run an Ollama-compatible proxy for Anthropic and OpenAI models')
    parser.add_argument('--host', type=str, default=get_env('HOST', '0.0.0.0'),
                        help='Host to listen on (env HOST, default: 0.0.0.0)')
    parser.add_argument('--port', type=int, default=get_env_int('PORT', 11434),
                        help='Port to listen on (env PORT, default: 11434)')
    parser.add_argument('--anthropic-api-key', type=str, default=get_env('ANTHROPIC_API_KEY'),
                        help='Anthropic API key (env ANTHROPIC_API_KEY)')
    parser.add_argument('--openai-api-key', type=str, default=get_env('OPENAI_API_KEY'),
                        help='OpenAI API key (env OPENAI_API_KEY)')
    parser.add_argument('--default-context-window', type=int, default=get_env_int('DEFAULT_MAX_TOKENS', 4096),
                        help='Context window assumed for fetched models with no known size (env DEFAULT_MAX_TOKENS, default: 4096)')
    parser.add_argument('--streaming-chunk-size', type=int, default=get_env_int('STREAMING_CHUNK_SIZE', 3),
                        help='Characters per simulated streaming chunk (env STREAMING_CHUNK_SIZE, default: 3)')
    parser.add_argument('--streaming-delay-ms', type=int, default=get_env_int('STREAMING_DELAY_MS', 50),
                        help='Delay between streaming chunks in ms (env STREAMING_DELAY_MS, default: 50)')
    parser.add_argument('--model-config', type=str, default=get_env('MODEL_CONFIG_PATH', 'config.yaml'),
                        help='YAML file with model filter rules (env MODEL_CONFIG_PATH, default: config.yaml)')
    parser.add_argument('--catalog-mode', choices=CATALOG_MODES, default=get_env('CATALOG_MODE', 'dynamic'),
                        help='How to populate the model catalog (env CATALOG_MODE, default: dynamic)')
    parser.add_argument('--log-dir', type=str, default=get_env('LOG_DIR', 'logs'),
                        help='Path to the logs directory (env LOG_DIR, default: logs)')
    parser.add_argument('--debug', action='store_true', default=get_env_bool('DEBUG'),
                        help='Enable debug logging (env DEBUG)')

    args = parser.parse_args(argv)

    return ProxyConfig(
        host=args.host,
        port=args.port,
        anthropic_api_key=args.anthropic_api_key or '',
        openai_api_key=args.openai_api_key or '',
        default_context_window=args.default_context_window,
        streaming_chunk_size=args.streaming_chunk_size,
        streaming_delay_ms=args.streaming_delay_ms,
        model_config_path=Path(args.model_config) if args.model_config else None,
        catalog_mode=args.catalog_mode,
        log_dir=Path(args.log_dir),
        debug=args.debug,
    )

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


"""Flask routes for the Ollama-compatible proxy."""
import logging
from typing import Dict, Any

from flask import Blueprint, request, jsonify

from .. import __version__
from ..adapters import OllamaChatAdapter, OllamaGenerateAdapter
from ..core.errors import InvalidRequest, ProxyError
from .handlers import RequestHandler
from .streaming import StreamingEmitter

logger = logging.getLogger(__name__)

PROXY_NAME = 'llm-proxy'

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, POST, PUT, DELETE, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type, Authorization',
    'Access-Control-Max-Age': '86400',
}


def _json_body() -> Dict[str, Any]:
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise InvalidRequest('invalid JSON body')
    return data


def _wants_stream(data: Dict[str, Any]) -> bool:
    stream = data.get('stream')
    if stream is None:
        return False
    if not isinstance(stream, bool):
        raise InvalidRequest('stream must be a boolean')
    return stream


def create_routes(catalog, registry, config) -> Blueprint:
    """Create and configure all API routes."""
    api_bp = Blueprint('api', __name__)
    emitter = StreamingEmitter(config.streaming_chunk_size, config.streaming_delay_ms)
    handler = RequestHandler(registry, emitter)

    def backend_names():
        return [provider.value for provider in registry.list_available()]

    def tags_payload():
        return {'models': [entry.to_ollama_model() for entry in catalog.list_enabled()]}

    def health_payload():
        backends = backend_names()
        return {
            'status': 'healthy',
            'available_backends': len(backends),
            'total_models': len(catalog.list_enabled()),
            'backends': backends,
        }

    def show_model(model_name: str):
        if not model_name:
            return jsonify({'error': 'model parameter is required'}), 400
        entry = catalog.lookup(model_name)
        if entry is None or not entry.enabled:
            return jsonify({'error': 'model not found'}), 400
        return jsonify(entry.to_ollama_model())

    def managed_by_backends():
        return jsonify({'status': 'success', 'message': 'Models are managed by backends'})

    # ============================================================================
    # CORS
    # ============================================================================

    @api_bp.before_app_request
    def handle_preflight():
        logger.debug(f"[REQUEST] {request.method} {request.path} from {request.remote_addr}")
        if request.method == 'OPTIONS':
            return '', 204

    @api_bp.after_app_request
    def add_cors_headers(response):
        for key, value in CORS_HEADERS.items():
            response.headers[key] = value
        return response

    @api_bp.app_errorhandler(ProxyError)
    def handle_proxy_error(e: ProxyError):
        return jsonify({'error': e.message}), e.status_code

    # ============================================================================
    # Generation Endpoints
    # ============================================================================

    @api_bp.route('/api/generate', methods=['POST'])
    def ollama_generate():
        """Ollama generate endpoint."""
        data = _json_body()
        stream = _wants_stream(data)
        adapter = OllamaGenerateAdapter(catalog)
        try:
            if stream:
                return handler.create_streaming_response(adapter, data)
            return handler.handle_non_streaming_request(adapter, data)
        except Exception:
            logger.exception("Error in Ollama generate")
            return jsonify({'error': 'internal server error'}), 500

    @api_bp.route('/api/chat', methods=['POST'])
    def ollama_chat():
        """Ollama chat endpoint."""
        data = _json_body()
        stream = _wants_stream(data)
        adapter = OllamaChatAdapter(catalog)
        try:
            if stream:
                return handler.create_streaming_response(adapter, data)
            return handler.handle_non_streaming_request(adapter, data)
        except Exception:
            logger.exception("Error in Ollama chat")
            return jsonify({'error': 'internal server error'}), 500

    @api_bp.route('/api/embeddings', methods=['POST'])
    def ollama_embeddings():
        return jsonify({'error': 'embeddings not implemented'}), 501

    # ============================================================================
    # Model Management Endpoints
    # ============================================================================

    @api_bp.route('/api/tags', methods=['GET'])
    @api_bp.route('/v1/models', methods=['GET'])
    @api_bp.route('/models', methods=['GET'])
    def ollama_models():
        """List all enabled models."""
        return jsonify(tags_payload())

    @api_bp.route('/api/show', methods=['POST'])
    def ollama_show():
        data = _json_body()
        return show_model(data.get('model') or data.get('name') or '')

    @api_bp.route('/api/show/<path:model_name>', methods=['GET'])
    def ollama_show_by_path(model_name: str):
        return show_model(model_name)

    # No local model storage exists, so these always succeed
    api_bp.add_url_rule('/api/pull', 'ollama_pull', managed_by_backends, methods=['POST'])
    api_bp.add_url_rule('/api/push', 'ollama_push', managed_by_backends, methods=['POST'])
    api_bp.add_url_rule('/api/create', 'ollama_create', managed_by_backends, methods=['POST'])
    api_bp.add_url_rule('/api/copy', 'ollama_copy', managed_by_backends, methods=['POST'])
    api_bp.add_url_rule('/api/delete', 'ollama_delete', managed_by_backends, methods=['DELETE'])

    @api_bp.route('/api/ps', methods=['POST', 'GET'])
    def ollama_ps():
        return jsonify({'status': 'success', 'message': 'No local processes'})

    @api_bp.route('/api/stop', methods=['POST'])
    def ollama_stop():
        return jsonify({'status': 'success', 'message': 'No local processes to stop'})

    # ============================================================================
    # Service Info
    # ============================================================================

    @api_bp.route('/api/version', methods=['GET'])
    def ollama_version():
        return jsonify({
            'version': __version__,
            'proxy': PROXY_NAME,
            'backends': backend_names(),
        })

    @api_bp.route('/api', methods=['GET'])
    def api_info():
        return jsonify({'message': 'Ollama API proxy', 'version': __version__})

    @api_bp.route('/health', methods=['GET'])
    @api_bp.route('/status', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        return jsonify(health_payload())

    @api_bp.route('/', methods=['GET'])
    def root():
        return 'Ollama is running in proxy mode.', 200, {'Content-Type': 'text/plain; charset=utf-8'}

    return api_bp

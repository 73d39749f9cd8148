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


"""Request handlers for the Ollama generate and chat endpoints."""
import logging
import threading
import time
import uuid
from typing import Dict, Any

from flask import Response, jsonify

from ..adapters.base import RequestAdapter
from ..backends.registry import BackendRegistry
from ..core.errors import ProxyError
from .streaming import StreamingEmitter

logger = logging.getLogger(__name__)


class RequestHandler:
    """Runs a translated request against the backends, directly or as a stream."""

    def __init__(self, registry: BackendRegistry, emitter: StreamingEmitter):
        self.registry = registry
        self.emitter = emitter

    def handle_non_streaming_request(self, adapter: RequestAdapter, data: Dict[str, Any]):
        """Resolve, dispatch and return one JSON body."""
        req_id = str(uuid.uuid4())
        start_time = time.time()

        try:
            request_obj = adapter.parse_request(data, request_id=req_id)
            logger.info(f"[{req_id}] Handling non-streaming request. API: {adapter.api_format}, "
                        f"Model: {request_obj.model_name} -> {request_obj.entry.provider_id.value}/"
                        f"{request_obj.entry.provider_model_id}, max_tokens: {request_obj.backend_request.max_tokens}")
            result = self.registry.dispatch(request_obj.entry, request_obj.backend_request)
            response_data = adapter.format_response(result, request_obj)
        except ProxyError as e:
            logger.error(f"[{req_id}] {adapter.api_format} request failed: {e.message}")
            return jsonify({'error': e.message}), e.status_code

        logger.info(f"[{req_id}] Completed in {(time.time() - start_time) * 1000:.0f}ms")
        resp = jsonify(response_data)
        resp.headers['X-Request-ID'] = req_id
        return resp

    def create_streaming_response(self, adapter: RequestAdapter, data: Dict[str, Any]) -> Response:
        """Stream the response as ndjson; errors become a single terminal line."""
        req_id = str(uuid.uuid4())
        model_name = data.get('model')
        if not isinstance(model_name, str):
            model_name = ''
        cancelled = threading.Event()
        logger.info(f"[{req_id}] Creating streaming response for API: {adapter.api_format}, Model: {model_name}")

        def generate_stream_content():
            start_time = time.time()
            try:
                request_obj = adapter.parse_request(data, request_id=req_id)
                result = self.registry.dispatch(request_obj.entry, request_obj.backend_request)
                text = adapter.response_text(result)
            except ProxyError as e:
                logger.error(f"[{req_id}] Streaming {adapter.api_format} request failed: {e.message}")
                yield self.emitter.error_line(adapter, model_name, e.message)
                return
            except Exception:
                logger.exception(f"[{req_id}] Unexpected error in streaming {adapter.api_format} request")
                yield self.emitter.error_line(adapter, model_name, 'internal server error')
                return

            logger.info(f"[{req_id}] Backend responded in {(time.time() - start_time) * 1000:.0f}ms, "
                        f"streaming {len(text)} chars")
            yield from self.emitter.iter_lines(adapter, model_name, result.created_at, text, cancelled)

        return self.emitter.build_response(generate_stream_content(), cancelled, request_id=req_id)

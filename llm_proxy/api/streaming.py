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


"""Simulated streaming: re-renders one complete response as ndjson chunks."""
import json
import logging
import threading
from typing import Iterator, List, Optional

from flask import Response, stream_with_context

from ..adapters.base import RequestAdapter
from ..core.schemas import ollama_timestamp

logger = logging.getLogger(__name__)

NDJSON_MIMETYPE = 'application/x-ndjson'


class StreamingEmitter:
    """Splits response text into fixed-size slices, one ndjson line each.

    Upstream calls are not streamed; the delay between lines only emulates
    incremental delivery for clients that render as text arrives.
    """

    def __init__(self, chunk_size: int = 3, delay_ms: int = 50):
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self.chunk_size = chunk_size
        self.delay = max(delay_ms, 0) / 1000.0

    def split(self, text: str) -> List[str]:
        if not text:
            return ['']
        return [text[i:i + self.chunk_size] for i in range(0, len(text), self.chunk_size)]

    @staticmethod
    def encode(payload) -> str:
        return json.dumps(payload) + '\n'

    def error_line(self, adapter: RequestAdapter, model: str, message: str) -> str:
        """Single terminal line carrying an error for clients already reading ndjson."""
        return self.encode(adapter.format_chunk(model, ollama_timestamp(), f'Error: {message}', True))

    def iter_lines(self, adapter: RequestAdapter, model: str, created_at: str, text: str,
                   cancelled: Optional[threading.Event] = None) -> Iterator[str]:
        """Yield the response as ndjson lines; done is true only on the last one."""
        cancelled = cancelled or threading.Event()
        chunks = self.split(text)
        last = len(chunks) - 1
        for index, chunk in enumerate(chunks):
            yield self.encode(adapter.format_chunk(model, created_at, chunk, index == last))
            if index < last and cancelled.wait(self.delay):
                logger.info(f"Stream for {model} cancelled after {index + 1}/{len(chunks)} chunks")
                return

    def build_response(self, lines: Iterator[str], cancelled: threading.Event, request_id: str = None) -> Response:
        """Wrap a line iterator in an unbuffered ndjson response."""
        headers = {
            'Cache-Control': 'no-cache',
            'Connection': 'keep-alive',
            'X-Accel-Buffering': 'no',
        }
        if request_id:
            headers['X-Request-ID'] = request_id
        response = Response(stream_with_context(lines), mimetype=NDJSON_MIMETYPE, headers=headers)
        response.call_on_close(cancelled.set)
        return response

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


"""Token estimation and output budgeting.

Estimates use the common ~4 characters per token approximation. It tends to
overestimate for English text, which is the safe direction for both the input
validation and the output ceiling.
"""
from typing import Iterable

from .errors import RequestTooLong
from .schemas import ChatMessage, ModelEntry

MESSAGE_OVERHEAD_TOKENS = 4
REQUEST_OVERHEAD_TOKENS = 10
SAFETY_BUFFER_TOKENS = 100
MIN_OUTPUT_TOKENS = 100
MAX_OUTPUT_TOKENS = 4000
SMALL_CONTEXT_WINDOW = 8192


def estimate_tokens(text: str) -> int:
    """Estimate the token count of a piece of text (ceil(len/4) of the stripped text)."""
    if not text:
        return 0
    return (len(text.strip()) + 3) // 4


def estimate_message_tokens(messages: Iterable[ChatMessage]) -> int:
    """Estimate the token count of a full message list including formatting overhead."""
    total = 0
    for msg in messages:
        total += estimate_tokens(msg.role) + estimate_tokens(msg.content) + MESSAGE_OVERHEAD_TOKENS
    return total + REQUEST_OVERHEAD_TOKENS


def compute_max_output_tokens(entry: ModelEntry, messages: Iterable[ChatMessage]) -> int:
    """Output token ceiling for a request, clamped to [100, 4000]."""
    available = entry.context_window - estimate_message_tokens(messages) - SAFETY_BUFFER_TOKENS
    if available < MIN_OUTPUT_TOKENS:
        available = MIN_OUTPUT_TOKENS
    if available > MAX_OUTPUT_TOKENS:
        available = MAX_OUTPUT_TOKENS
    return available


def max_input_tokens(context_window: int) -> int:
    # Small windows reserve 25% for output, larger ones 50%
    if context_window <= SMALL_CONTEXT_WINDOW:
        return int(context_window * 0.75)
    return int(context_window * 0.5)


def validate_within_limits(entry: ModelEntry, messages: Iterable[ChatMessage]) -> None:
    """Raise RequestTooLong when the messages exceed the model's input budget."""
    estimated = estimate_message_tokens(messages)
    limit = max_input_tokens(entry.context_window)
    if estimated > limit:
        raise RequestTooLong(estimated, entry.context_window, limit)

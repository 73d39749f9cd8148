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


"""Error taxonomy shared by the translation layer, registry and adapters."""


class ProxyError(Exception):
    """Base class for errors that are turned into an HTTP response."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequest(ProxyError):
    """Malformed request body."""
    status_code = 400


class ModelNotFound(ProxyError):
    status_code = 400

    def __init__(self, model_name: str):
        super().__init__('model not found')
        self.model_name = model_name


class RequestTooLong(ProxyError):
    """Estimated input does not fit the model's input budget."""
    status_code = 400

    def __init__(self, estimated: int, limit: int, max_input_tokens: int):
        super().__init__(
            f"request too long: estimated {estimated} tokens exceeds model limit of {limit} tokens "
            f"(max input: {max_input_tokens} tokens). Please reduce the length of your messages"
        )
        self.estimated = estimated
        self.limit = limit
        self.max_input_tokens = max_input_tokens


class BackendUnavailable(ProxyError):
    """Backend is registered but has no credentials."""

    def __init__(self, provider: str, message: str = None):
        super().__init__(message or f'backend {provider} is not available')
        self.provider = provider


class BackendNotRegistered(BackendUnavailable):
    """No adapter was ever registered for the provider."""

    def __init__(self, provider: str):
        super().__init__(provider, f'backend {provider} not available')


class UpstreamError(ProxyError):
    """Provider returned a non-success response or could not be reached."""


class InvalidResponseShape(ProxyError):
    def __init__(self, message: str = 'invalid response type'):
        super().__init__(message)


class CatalogPopulationError(Exception):
    """Dynamic catalog population produced no usable models."""

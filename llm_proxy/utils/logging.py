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


"""Logging setup for the proxy: one log file plus stdout."""
import logging
import sys
from pathlib import Path

LOG_FILE_NAME = 'proxy.log'
LOG_FORMAT = '%(asctime)s - %(levelname)s - [%(threadName)s] - %(name)s - %(message)s'

# HTTP client loggers used by the Anthropic (requests) and OpenAI (httpx) backends
QUIET_LOGGERS = ('httpx', 'openai', 'urllib3')


def setup_logging(log_dir: Path, debug: bool = False) -> Path:
    """Configure root logging and return the log file path.

    Client library loggers are held at WARNING unless debug is on.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(sys.stdout),
        ]
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)

    logging.getLogger(__name__).info(f"Logging to {log_file} at {logging.getLevelName(level)}")
    return log_file

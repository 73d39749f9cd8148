"""Chunked ndjson emission."""
import json
import threading

from llm_proxy.adapters import OllamaChatAdapter, OllamaGenerateAdapter
from llm_proxy.api.streaming import StreamingEmitter


def parse(lines):
    return [json.loads(line) for line in lines]


def test_seven_chars_in_chunks_of_three(catalog):
    emitter = StreamingEmitter(chunk_size=3, delay_ms=0)
    adapter = OllamaGenerateAdapter(catalog)
    lines = list(emitter.iter_lines(adapter, 'gpt-4o', '1700000000', 'abcdefg'))

    assert all(line.endswith('\n') and line.count('\n') == 1 for line in lines)
    chunks = parse(lines)
    assert [c['response'] for c in chunks] == ['abc', 'def', 'g']
    assert [c['done'] for c in chunks] == [False, False, True]
    assert ''.join(c['response'] for c in chunks) == 'abcdefg'
    assert {c['created_at'] for c in chunks} == {'1700000000'}
    assert {c['model'] for c in chunks} == {'gpt-4o'}


def test_chat_chunks_carry_message_content(catalog):
    emitter = StreamingEmitter(chunk_size=4, delay_ms=0)
    chunks = parse(emitter.iter_lines(OllamaChatAdapter(catalog), 'claude-3.5-sonnet', 'msg_1', 'Hello, world'))
    assert ''.join(c['message']['content'] for c in chunks) == 'Hello, world'
    assert all(c['message']['role'] == 'assistant' for c in chunks)
    assert chunks[-1]['done'] is True
    assert chunks[-1]['context'] == []


def test_empty_text_yields_single_terminal_line(catalog):
    emitter = StreamingEmitter()
    chunks = parse(emitter.iter_lines(OllamaGenerateAdapter(catalog), 'gpt-4', '1', ''))
    assert chunks == [{'model': 'gpt-4', 'created_at': '1', 'response': '', 'done': True, 'context': []}]


def test_error_line(catalog):
    emitter = StreamingEmitter()
    chunk = json.loads(emitter.error_line(OllamaChatAdapter(catalog), 'nope', 'model not found'))
    assert chunk['done'] is True
    assert chunk['message']['content'] == 'Error: model not found'


def test_cancel_stops_between_chunks(catalog):
    emitter = StreamingEmitter(chunk_size=1, delay_ms=10)
    cancelled = threading.Event()
    cancelled.set()
    lines = list(emitter.iter_lines(OllamaGenerateAdapter(catalog), 'gpt-4', '1', 'abc', cancelled))
    assert len(lines) == 1

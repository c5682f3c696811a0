from voice_rig_agent.llm.sse import SSELineBuffer, event_data

STREAM = (
    'data: {"choices":[{"delta":{"content":"café"}}]}\r\n'
    "\r\n"
    'data: {"choices":[{"delta":{"content":" ok"}}]}\n'
    "\n"
    "data: [DONE]"
).encode("utf-8")


def split_lines(chunks):
    buffer = SSELineBuffer()
    lines = []
    for chunk in chunks:
        lines.extend(buffer.feed(chunk))
    lines.extend(buffer.flush())
    return lines


def test_output_does_not_depend_on_chunk_boundaries():
    expected = split_lines([STREAM])
    for size in (1, 2, 3, 7, 16):
        chunks = [STREAM[i:i + size] for i in range(0, len(STREAM), size)]
        assert split_lines(chunks) == expected


def test_multibyte_character_split_across_chunks():
    encoded = "data: é\n".encode("utf-8")
    split = encoded.index(b"\xc3") + 1
    assert split_lines([encoded[:split], encoded[split:]]) == ["data: é"]


def test_crlf_is_stripped_and_tail_flushed():
    buffer = SSELineBuffer()
    assert buffer.feed(b"data: a\r\ndata: b") == ["data: a"]
    assert buffer.flush() == ["data: b"]
    assert buffer.flush() == []


def test_event_data():
    assert event_data("data: {}") == "{}"
    assert event_data("data:{}") == "{}"
    assert event_data("data:  x") == " x"
    assert event_data(": keep-alive") is None
    assert event_data("event: message") is None

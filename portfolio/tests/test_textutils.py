import pytest

from portfolio.textutils import (
    MIN_CHUNK_WORDS,
    calculate_reading_time,
    chunk_text,
    generate_id,
    generate_slug,
    sanitize_text,
)


@pytest.mark.parametrize("title,expected", [
    ("Hello World", "hello-world"),
    ("  Spaces   everywhere  ", "spaces-everywhere"),
    ("C++ & Rust: a comparison!", "c-rust-a-comparison"),
    ("already-slugged--title", "already-slugged-title"),
    ("-Leading and trailing-", "leading-and-trailing"),
    ("Tiếng Việt", "ting-vit"),
])
def test_generate_slug(title, expected):
    assert generate_slug(title) == expected


def test_reading_time_rounds_up_with_minimum_of_one():
    assert calculate_reading_time("") == 1
    assert calculate_reading_time("word " * 200) == 1
    assert calculate_reading_time("word " * 201) == 2
    assert calculate_reading_time("word " * 100, words_per_minute=50) == 2


def test_generate_id_is_unique():
    assert generate_id() != generate_id()


def test_chunk_text_short_text_is_single_chunk():
    assert chunk_text("one two three") == ["one two three"]
    assert chunk_text("") == []


def test_chunk_text_overlaps_windows():
    words = [f"w{i}" for i in range(400)]
    chunks = chunk_text(" ".join(words), max_words=200, overlap=50)
    first = chunks[0].split()
    second = chunks[1].split()
    assert len(first) == 200
    assert first[-50:] == second[:50]
    assert chunks[-1].split()[-1] == "w399"


def test_chunk_text_merges_short_tail():
    words = [f"w{i}" for i in range(200 + MIN_CHUNK_WORDS // 2)]
    chunks = chunk_text(" ".join(words), max_words=200, overlap=0)
    assert len(chunks) == 1
    assert chunks[0].split() == words


def test_chunk_text_rejects_bad_overlap():
    with pytest.raises(ValueError):
        chunk_text("a b c", max_words=10, overlap=10)


def test_sanitize_text_strips_markup():
    assert sanitize_text("  <b>How</b> do <script>x</script>you work?  ") == "How do xyou work?"

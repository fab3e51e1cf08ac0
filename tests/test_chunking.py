import pytest

from kbchat.core.strategies.chunking import ParagraphChunker, chunk_text


def test_empty_input_returns_no_chunks() -> None:
    assert chunk_text("") == []
    assert chunk_text("\n\n  \n\n") == []


def test_paragraphs_that_fit_share_one_chunk() -> None:
    text = "Paris is the capital of France.\n\nBerlin is the capital of Germany."

    chunks = chunk_text(text, max_chunk_chars=2000)

    assert len(chunks) == 1
    assert chunks[0].index == 0
    assert chunks[0].text == text


def test_blank_lines_with_whitespace_split_paragraphs() -> None:
    text = "first\n   \n\n\nsecond\n \t\nthird"

    chunks = chunk_text(text, max_chunk_chars=12)

    assert [c.text for c in chunks] == ["first", "second", "third"]


def test_paragraphs_are_packed_greedily_in_order() -> None:
    paragraphs = ["a" * 10, "b" * 10, "c" * 10, "d" * 10]
    text = "\n\n".join(paragraphs)

    chunks = chunk_text(text, max_chunk_chars=22)

    assert [c.text for c in chunks] == [
        "a" * 10 + "\n\n" + "b" * 10,
        "c" * 10 + "\n\n" + "d" * 10,
    ]
    assert [c.index for c in chunks] == [0, 1]


def test_paragraph_exactly_at_limit_is_its_own_chunk() -> None:
    text = "x" * 20 + "\n\n" + "y" * 5

    chunks = chunk_text(text, max_chunk_chars=20)

    assert [c.text for c in chunks] == ["x" * 20, "y" * 5]


def test_oversized_paragraph_is_split_by_sentence() -> None:
    paragraph = "One two three. Four five six! Seven eight nine? Ten."

    chunks = chunk_text(paragraph, max_chunk_chars=30)

    assert [c.text for c in chunks] == [
        "One two three. Four five six!",
        "Seven eight nine? Ten.",
    ]
    assert all(len(c.text) <= 30 for c in chunks)


def test_single_sentence_longer_than_limit_is_kept_whole() -> None:
    sentence = "word " * 20 + "end."

    chunks = chunk_text(sentence.strip(), max_chunk_chars=10)

    assert len(chunks) == 1
    assert chunks[0].text == sentence.strip()


def test_chunks_are_non_empty_and_cover_text_in_order() -> None:
    paragraphs = [f"Paragraph {i} talks about topic {i}. It has two sentences." for i in range(30)]
    text = "\n\n".join(paragraphs)

    chunks = chunk_text(text, max_chunk_chars=200)

    assert all(c.text for c in chunks)
    assert [c.index for c in chunks] == list(range(len(chunks)))
    assert all(len(c.text) <= 200 for c in chunks)
    rebuilt = "\n\n".join(c.text for c in chunks)
    assert rebuilt == text


def test_non_positive_limit_is_rejected() -> None:
    with pytest.raises(ValueError):
        ParagraphChunker(0)

import asyncio

from conftest import FakeGenerationClient, collect, text_chunks
from kbchat.config.locales import EN
from kbchat.core.exceptions import GenerationError, MissingCredentialError
from kbchat.core.models.chat import Role, Source
from kbchat.core.models.generation import GenerationChunk, UsageMetadata
from kbchat.core.services.error_service import ErrorCategory
from kbchat.core.services.chat_service import TurnStatus
from kbchat.core.services.prompt_service import CONTEXT_BEGIN

CORPUS = "Paris is the capital of France.\n\nBerlin is the capital of Germany."


def test_grounded_answer_streams_and_records_usage(make_chat) -> None:
    client = FakeGenerationClient(text_chunks("Paris", " is the capital.", total_tokens=120))
    chat = make_chat(client, corpus=CORPUS)

    events = asyncio.run(collect(chat.process_message("capital of France")))

    assert [e.delta for e in events[:-1]] == ["Paris", " is the capital."]
    final = events[-1]
    assert final.outcome.status is TurnStatus.COMPLETED
    assert final.outcome.tokens == 120
    assert final.message.text == "Paris is the capital."
    assert final.message.sources == []
    assert chat.budget.consumed == 120
    assert chat.budget.turns_completed == 1

    request = client.requests[0]
    assert CONTEXT_BEGIN in request.system_instruction
    assert "Paris is the capital of France." in request.system_instruction
    assert request.contents == "capital of France"


def test_single_chunk_corpus_ranks_paris_into_context(make_chat) -> None:
    client = FakeGenerationClient(text_chunks("ok"))
    chat = make_chat(client, corpus=CORPUS, top_k=1)

    asyncio.run(collect(chat.process_message("capital of France")))

    assert "Paris is the capital of France." in client.requests[0].system_instruction


def test_top_one_excludes_less_relevant_paragraph(make_chat) -> None:
    client = FakeGenerationClient(text_chunks("ok"))
    chat = make_chat(client, corpus=CORPUS, top_k=1, chunk_size=40)

    asyncio.run(collect(chat.process_message("capital of France")))

    instruction = client.requests[0].system_instruction
    assert "Paris" in instruction
    assert "Berlin" not in instruction


def test_empty_corpus_refuses_without_calling_the_model(make_chat) -> None:
    client = FakeGenerationClient(text_chunks("should not be used"))
    chat = make_chat(client)

    events = asyncio.run(collect(chat.process_message("anything at all?")))

    assert len(events) == 1
    assert events[0].outcome.status is TurnStatus.REFUSED
    assert events[0].message.text == EN.knowledge_base_empty
    assert client.requests == []
    assert chat.budget.consumed == 0
    assert chat.budget.turns_completed == 0


def test_irrelevant_question_refuses_without_calling_the_model(make_chat) -> None:
    client = FakeGenerationClient(text_chunks("unused"))
    chat = make_chat(client, corpus=CORPUS)

    answer, outcome = asyncio.run(chat.ask("quantum chromodynamics"))

    assert outcome.status is TurnStatus.REFUSED
    assert answer.text == EN.no_relevant_content
    assert client.requests == []


def test_cancel_keeps_received_text_and_skips_metadata(make_chat) -> None:
    last = GenerationChunk(
        text="tail",
        is_final=True,
        usage=UsageMetadata(total_token_count=500),
        sources=(Source(uri="https://example.com"),),
    )
    client = FakeGenerationClient(
        (GenerationChunk(text="abcde"), GenerationChunk(text="fghijkl"), last)
    )
    chat = make_chat(client, corpus=CORPUS)

    async def consume():
        cancel_token = asyncio.Event()
        events = []
        async for event in chat.process_message("capital of France", cancel_token):
            events.append(event)
            if len(events) == 2:
                cancel_token.set()
        return events

    events = asyncio.run(consume())

    final = events[-1]
    assert final.outcome.status is TurnStatus.CANCELLED
    assert final.message.text == "abcdefghijkl"
    assert final.message.sources is None
    assert chat.budget.consumed == 0
    assert not chat.is_generating


def test_invalid_credential_failure_requests_reauthentication(make_chat) -> None:
    client = FakeGenerationClient(error=GenerationError("Requested entity was not found"))
    chat = make_chat(client, corpus=CORPUS)

    answer, outcome = asyncio.run(chat.ask("capital of France"))

    assert outcome.status is TurnStatus.FAILED
    assert outcome.classification.category is ErrorCategory.INVALID_CREDENTIAL
    assert outcome.must_reauthenticate
    assert answer.text == EN.invalid_credential


def test_mid_stream_failure_replaces_partial_text(make_chat) -> None:
    client = FakeGenerationClient(
        text_chunks("Partial answer", "more"),
        error=GenerationError("socket closed"),
        fail_after=1,
    )
    chat = make_chat(client, corpus=CORPUS)

    answer, outcome = asyncio.run(chat.ask("capital of France"))

    assert outcome.classification.category is ErrorCategory.UNKNOWN
    assert answer.text == EN.unknown.format(details="socket closed")
    assert "Partial answer" not in answer.text
    assert chat.budget.consumed == 0
    assert not chat.is_generating


def test_unwrapped_transport_error_fails_the_turn(make_chat) -> None:
    client = FakeGenerationClient(
        text_chunks("Partial", "more"),
        error=ConnectionResetError("peer reset"),
        fail_after=1,
    )
    chat = make_chat(client, corpus=CORPUS)

    answer, outcome = asyncio.run(chat.ask("capital of France"))

    assert outcome.status is TurnStatus.FAILED
    assert outcome.classification.category is ErrorCategory.UNKNOWN
    assert answer.text == EN.unknown.format(details="peer reset")
    assert chat.conversation.last is answer
    assert chat.budget.consumed == 0
    assert not chat.is_generating


def test_missing_credential_is_classified(make_chat) -> None:
    client = FakeGenerationClient(error=MissingCredentialError())
    chat = make_chat(client, corpus=CORPUS)

    answer, outcome = asyncio.run(chat.ask("capital of France"))

    assert outcome.classification.category is ErrorCategory.MISSING_CREDENTIAL
    assert not outcome.must_reauthenticate
    assert answer.text == EN.missing_credential


def test_conversation_records_both_sides_of_the_turn(make_chat) -> None:
    chat = make_chat(FakeGenerationClient(text_chunks("Paris.")), corpus=CORPUS)

    asyncio.run(chat.ask("capital of France"))

    roles = [m.role for m in chat.conversation.messages]
    assert roles == [Role.MODEL, Role.USER, Role.MODEL]
    assert chat.conversation.messages[0].text == EN.greeting_loaded
    assert chat.conversation.user_message_count == 1
    assert chat.conversation.search("paris")[0].text == "Paris."


def test_blank_message_is_ignored(make_chat) -> None:
    chat = make_chat(FakeGenerationClient(text_chunks("x")), corpus=CORPUS)

    events = asyncio.run(collect(chat.process_message("   ")))

    assert events == []
    assert len(chat.conversation.messages) == 1


def test_clear_session_resets_conversation_and_budget(make_chat) -> None:
    chat = make_chat(FakeGenerationClient(text_chunks("Paris.", total_tokens=10)), corpus=CORPUS)
    asyncio.run(chat.ask("capital of France"))

    chat.clear_session()

    assert chat.budget.consumed == 0
    assert [m.text for m in chat.conversation.messages] == [EN.greeting_loaded]


def test_greeting_reflects_empty_knowledge_base(make_chat) -> None:
    chat = make_chat(FakeGenerationClient())

    assert chat.conversation.last.text == EN.greeting_empty

import asyncio
import tempfile

import chainlit as cl

from kbchat.config.settings import settings
from kbchat.container import configure_container, container
from kbchat.core.exceptions import StorageError
from kbchat.core.protocols.storage import CredentialStoreProtocol
from kbchat.core.services.chat_service import ChatService, TurnStatus
from kbchat.core.services.history_service import HistoryExporter
from kbchat.core.services.knowledge_base_service import KnowledgeBaseService

configure_container(settings)


def _budget_summary(chat: ChatService) -> str:
    budget = chat.budget
    kb = container.resolve(KnowledgeBaseService)
    turns = budget.estimate_remaining_turns(settings.initial_turn_tokens)
    summary = (
        f"Tokens used: {budget.consumed:,} / {budget.total_limit:,} "
        f"({budget.usage_percentage:.1f}%)\n"
        f"Knowledge base: ~{kb.estimated_tokens:,} tokens\n"
        f"Estimated turns left: {turns}"
    )
    if budget.is_over_limit:
        summary += "\n\nToken limit exceeded. Clear the chat to continue."
    return summary


def _actions() -> list[cl.Action]:
    return [
        cl.Action(name="export_history", payload={}, label="Export chat"),
        cl.Action(name="show_budget", payload={}, label="Token budget"),
        cl.Action(name="clear_chat", payload={}, label="Clear chat"),
    ]


async def _ingest_uploads(elements: list) -> None:
    kb = container.resolve(KnowledgeBaseService)
    paths = [el.path for el in elements if getattr(el, "path", None)]
    if not paths:
        return

    try:
        report = await asyncio.to_thread(kb.ingest_files, paths, True)
    except StorageError:
        await cl.Message(
            content="The knowledge base could not be saved. It works for this session only."
        ).send()
        return

    lines = [f"Loaded: {name}" for name in report.documents]
    for failure in report.failures:
        reason = "password protected" if failure.password_protected else failure.reason
        lines.append(f"Skipped {failure.source}: {reason}")
    lines.append(f"Knowledge base: {report.chunk_count} chunks")
    await cl.Message(content="\n".join(lines)).send()


@cl.on_chat_start
async def start():
    chat = container.resolve(ChatService)
    cl.user_session.set("chat", chat)
    cl.user_session.set("cancel_token", None)

    await cl.Message(content=chat.conversation.last.text, actions=_actions()).send()


@cl.on_message
async def main(message: cl.Message):
    chat: ChatService = cl.user_session.get("chat")

    if message.elements:
        await _ingest_uploads(message.elements)
        if not message.content.strip():
            return

    if chat.budget.is_over_limit:
        await cl.Message(content=_budget_summary(chat)).send()
        return

    cancel_token = asyncio.Event()
    cl.user_session.set("cancel_token", cancel_token)

    msg = cl.Message(content="")
    await msg.send()

    try:
        async for event in chat.process_message(message.content, cancel_token):
            if event.outcome is None:
                if event.delta:
                    await msg.stream_token(event.delta)
                continue

            outcome = event.outcome
            if outcome.status in (TurnStatus.FAILED, TurnStatus.REFUSED):
                msg.content = event.message.text
            if outcome.must_reauthenticate:
                container.resolve(CredentialStoreProtocol).clear()
            if event.message.sources:
                msg.elements = [
                    cl.Text(name=s.title or s.uri, content=s.uri, display="inline")
                    for s in event.message.sources
                ]
    finally:
        cl.user_session.set("cancel_token", None)

    await msg.update()


@cl.on_stop
async def stop():
    cancel_token: asyncio.Event | None = cl.user_session.get("cancel_token")
    if cancel_token is not None:
        cancel_token.set()


@cl.action_callback("export_history")
async def export_history(action: cl.Action):
    chat: ChatService = cl.user_session.get("chat")
    exporter = container.resolve(HistoryExporter)
    path = exporter.export(chat.conversation.messages, tempfile.gettempdir())
    await cl.Message(
        content="Chat history exported.",
        elements=[cl.File(name=path.name, path=str(path))],
    ).send()


@cl.action_callback("show_budget")
async def show_budget(action: cl.Action):
    chat: ChatService = cl.user_session.get("chat")
    await cl.Message(content=_budget_summary(chat)).send()


@cl.action_callback("clear_chat")
async def clear_chat(action: cl.Action):
    chat: ChatService = cl.user_session.get("chat")
    chat.clear_session()
    await cl.Message(content=chat.conversation.last.text, actions=_actions()).send()

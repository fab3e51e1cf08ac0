import asyncio
import logging
import signal
import subprocess
import sys
from pathlib import Path

from kbchat.config.settings import settings
from kbchat.container import configure_container, container
from kbchat.core.exceptions import ExtractionError, StorageError
from kbchat.core.protocols.storage import CredentialStoreProtocol
from kbchat.core.services.chat_service import ChatService, TurnEvent, TurnStatus
from kbchat.core.services.history_service import HistoryExporter
from kbchat.core.services.knowledge_base_service import KnowledgeBaseService

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

USAGE = """Usage: kbchat <command> [args]
Commands:
  startup                 run the chainlit chat UI
  ingest <files...>       load documents (--append keeps the current ones)
  ingest-url [url]        load a remote PDF (default: REMOTE_PDF_URL)
  clear-kb                remove the knowledge base
  set-key <key>           store the provider API key
  ask <question>          ask one question
  chat                    interactive session (/budget, /export, /clear, /search, /quit)"""


def _print_report(report) -> None:
    for name in report.documents:
        logger.info(f"Loaded {name}")
    for failure in report.failures:
        reason = "password protected" if failure.password_protected else failure.reason
        logger.error(f"Skipped {failure.source}: {reason}")
    logger.info(f"Knowledge base: {report.chunk_count} chunks")


def _print_budget(chat: ChatService, kb: KnowledgeBaseService) -> None:
    budget = chat.budget
    static_cost = settings.initial_turn_tokens
    print(
        f"Tokens used: {budget.consumed:,} / {budget.total_limit:,} "
        f"({budget.usage_percentage:.1f}%)\n"
        f"Knowledge base: ~{kb.estimated_tokens:,} tokens\n"
        f"Estimated turns left: {budget.estimate_remaining_turns(static_cost)}"
    )
    if budget.is_over_limit:
        print("Token limit exceeded. Clear the session to continue.")


def _finish_turn(event: TurnEvent) -> None:
    outcome = event.outcome
    if outcome.status is TurnStatus.REFUSED:
        print(event.message.text)
    elif outcome.status is TurnStatus.FAILED:
        print(f"\n{event.message.text}")
        if outcome.must_reauthenticate:
            container.resolve(CredentialStoreProtocol).clear()
    elif outcome.status is TurnStatus.CANCELLED:
        print("\n[stopped]")
    else:
        print()
        for source in event.message.sources or []:
            print(f"  - {source.title or source.uri}: {source.uri}")


async def _stream_turn(chat: ChatService, question: str) -> None:
    """Stream one answer to stdout; Ctrl+C stops generation."""
    cancel_token = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel_token.set)
        handler_installed = True
    except NotImplementedError:
        # Windows event loops; Ctrl+C falls back to KeyboardInterrupt
        handler_installed = False

    try:
        async for event in chat.process_message(question, cancel_token):
            if event.outcome is None:
                print(event.delta, end="", flush=True)
            else:
                _finish_turn(event)
    finally:
        if handler_installed:
            loop.remove_signal_handler(signal.SIGINT)


def cmd_startup():
    """Startup command - run the chat UI."""
    logger.info("Starting Chainlit...")
    app_path = Path(__file__).parent / "chainlit_app.py"
    subprocess.run(
        [
            sys.executable,
            "-m",
            "chainlit",
            "run",
            str(app_path),
            "--host",
            "0.0.0.0",
            "--port",
            "8000",
        ]
    )


def cmd_ingest(args: list[str]):
    append = "--append" in args
    paths = [a for a in args if a != "--append"]
    if not paths:
        print("Usage: kbchat ingest <files...> [--append]")
        sys.exit(1)

    kb = container.resolve(KnowledgeBaseService)
    try:
        report = kb.ingest_files(paths, append=append)
    except StorageError as e:
        logger.error(f"Knowledge base could not be saved: {e}")
        sys.exit(1)
    _print_report(report)
    if not report.documents:
        sys.exit(1)


def cmd_ingest_url(args: list[str]):
    url = args[0] if args else settings.remote_pdf_url
    if not url:
        print("Usage: kbchat ingest-url <url> (or set REMOTE_PDF_URL)")
        sys.exit(1)

    kb = container.resolve(KnowledgeBaseService)
    try:
        report = kb.ingest_url(url)
    except (ExtractionError, StorageError) as e:
        logger.error(f"Failed to load {url}: {e}")
        sys.exit(1)
    _print_report(report)


def cmd_clear_kb():
    container.resolve(KnowledgeBaseService).clear()


def cmd_set_key(args: list[str]):
    if not args:
        print("Usage: kbchat set-key <key>")
        sys.exit(1)
    container.resolve(CredentialStoreProtocol).set(args[0])
    logger.info("API key stored")


def cmd_ask(args: list[str]):
    question = " ".join(args)
    if not question.strip():
        print("Usage: kbchat ask <question>")
        sys.exit(1)
    chat = container.resolve(ChatService)
    asyncio.run(_stream_turn(chat, question))


def cmd_chat():
    """Interactive session."""
    chat = container.resolve(ChatService)
    kb = container.resolve(KnowledgeBaseService)
    exporter = container.resolve(HistoryExporter)

    print(chat.conversation.last.text)
    while True:
        try:
            line = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not line:
            continue
        if line == "/quit":
            break
        if line == "/budget":
            _print_budget(chat, kb)
            continue
        if line == "/export":
            path = exporter.export(chat.conversation.messages)
            print(f"Saved {path}")
            continue
        if line == "/clear":
            chat.clear_session()
            print(chat.conversation.last.text)
            continue
        if line.startswith("/search "):
            for message in chat.conversation.search(line[len("/search "):]):
                print(f"[{message.role.value}] {message.text[:200]}")
            continue

        if chat.budget.is_over_limit:
            print("Token limit exceeded. Use /clear to start a new session.")
            continue

        asyncio.run(_stream_turn(chat, line))


def main():
    """CLI entry point."""
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    command, args = sys.argv[1], sys.argv[2:]

    if command == "startup":
        cmd_startup()
        return

    configure_container(settings)

    if command == "ingest":
        cmd_ingest(args)
    elif command == "ingest-url":
        cmd_ingest_url(args)
    elif command == "clear-kb":
        cmd_clear_kb()
    elif command == "set-key":
        cmd_set_key(args)
    elif command == "ask":
        cmd_ask(args)
    elif command == "chat":
        cmd_chat()
    else:
        print(f"Unknown command: {command}")
        print(USAGE)
        sys.exit(1)


if __name__ == "__main__":
    main()

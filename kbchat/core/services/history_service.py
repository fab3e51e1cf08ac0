"""Chat history export."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from ..models.chat import Message, Role

logger = logging.getLogger(__name__)

ROLE_PREFIXES = {Role.USER: "[User]", Role.MODEL: "[Assistant]"}
TURN_SEPARATOR = "\n\n" + "-" * 50 + "\n\n"


class HistoryExporter:
    """Render a conversation as a plain-text transcript."""

    def render(self, messages: Sequence[Message]) -> str:
        return TURN_SEPARATOR.join(
            f"{ROLE_PREFIXES[m.role]}: {m.text}" for m in messages
        )

    def filename(self, now: Optional[datetime] = None) -> str:
        """chat-history-<ISO timestamp, colons replaced>.txt"""
        now = now or datetime.now(timezone.utc)
        return f"chat-history-{now.isoformat().replace(':', '-')}.txt"

    def export(
        self,
        messages: Sequence[Message],
        directory: str | Path = ".",
        now: Optional[datetime] = None,
    ) -> Path:
        """Write the transcript to a timestamped file.

        Args:
            messages: Conversation messages.
            directory: Target folder, created if missing.
            now: Timestamp override.

        Returns:
            Path of the written file.
        """
        target_dir = Path(directory)
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / self.filename(now)
        path.write_text(self.render(messages), encoding="utf-8")
        logger.info(f"Exported {len(messages)} messages to {path}")
        return path

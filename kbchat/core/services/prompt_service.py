"""Prompt assembly."""

from ..models.generation import GenerationRequest, GenerationSettings

CONTEXT_BEGIN = "--- BEGIN CONTEXT ---"
CONTEXT_END = "--- END CONTEXT ---"


class PromptAssembler:
    """Combine system policy, retrieved context and the user query."""

    def system_instruction(self, policy: str, context: str) -> str:
        """Append a delimited context block to the policy when context exists."""
        if not context:
            return policy
        return f"{policy}\n\n{CONTEXT_BEGIN}\n{context}\n{CONTEXT_END}"

    def assemble(
        self,
        settings: GenerationSettings,
        context: str,
        query: str,
    ) -> GenerationRequest:
        """Build the generation request for one turn.

        Args:
            settings: Model settings for this turn.
            context: Retrieved context (may be empty).
            query: Raw user query, sent unmodified.

        Returns:
            Generation request.
        """
        return GenerationRequest(
            model=settings.model,
            temperature=settings.temperature,
            system_instruction=self.system_instruction(
                settings.system_instruction, context
            ),
            contents=query,
        )

from __future__ import annotations

"""Grounding prompt assembly."""

from dataclasses import dataclass
from typing import Sequence

DEFAULT_DOMAIN = "Expo"


def clarification_message(domain: str = DEFAULT_DOMAIN) -> str:
    """Return the fixed phrase used when the context cannot answer a query."""
    return (
        f"I’m sorry, but my knowledge is limited to {domain}. "
        f"Could you clarify what you're looking for regarding {domain} projects?"
    )


CLARIFICATION_MESSAGE = clarification_message()


@dataclass(frozen=True)
class PromptAssembler:
    """Build the prompt that restricts the model to retrieved context."""
    domain: str = DEFAULT_DOMAIN

    @property
    def fallback_phrase(self) -> str:
        return clarification_message(self.domain)

    def assemble(self, query: str, contexts: Sequence[str]) -> str:
        """Return the full prompt for a query and its ordered contexts.

        Empty contexts are kept so the block lines up with retrieval order.
        """
        fallback = self.fallback_phrase
        context_block = "\n".join(contexts)
        return (
            f"You are an AI specialized in answering questions about {self.domain} projects.\n"
            "You have the following CONTEXT as your entire knowledge base.\n"
            "If the user asks for anything outside the CONTEXT or the question cannot be "
            "answered with the CONTEXT,\n"
            "respond with a short clarifying question such as:\n"
            f"\"{fallback}\"\n"
            "Encourage the user to clarify or rephrase if necessary.\n"
            "\n"
            "CONTEXT:\n"
            f"{context_block}\n"
            "\n"
            f"USER QUERY: {query}\n"
            "\n"
            "Answer ONLY with information found in CONTEXT. If the information is not found, "
            "respond with:\n"
            f"\"{fallback}\"\n"
            "\n"
            "Final Answer:"
        )

from __future__ import annotations

"""Prompt assembly tests."""

from docqa.rag.prompt import CLARIFICATION_MESSAGE, PromptAssembler, clarification_message


def test_prompt_sections_are_in_order() -> None:
    prompt = PromptAssembler().assemble("How do I submit?", ["first body", "second body"])

    instruction = prompt.index("You have the following CONTEXT")
    context = prompt.index("CONTEXT:\nfirst body\nsecond body\n")
    query = prompt.index("USER QUERY: How do I submit?")
    assert instruction < context < query
    assert prompt.endswith("Final Answer:")


def test_prompt_names_the_fallback_phrase() -> None:
    prompt = PromptAssembler().assemble("q", ["body"])

    assert prompt.count(f"\"{CLARIFICATION_MESSAGE}\"") == 2


def test_prompt_keeps_empty_contexts_in_place() -> None:
    prompt = PromptAssembler().assemble("q", ["", "kept", ""])

    assert "CONTEXT:\n\nkept\n\n\nUSER QUERY: q" in prompt


def test_prompt_is_deterministic() -> None:
    assembler = PromptAssembler(domain="Expo")
    contexts = ["a", "", "c"]

    assert assembler.assemble("same", contexts) == PromptAssembler().assemble("same", list(contexts))


def test_query_is_verbatim() -> None:
    query = "  What does `npx expo start --tunnel` do?\n"

    prompt = PromptAssembler().assemble(query, [])

    assert f"USER QUERY: {query}\n" in prompt


def test_domain_changes_fallback_phrase() -> None:
    assembler = PromptAssembler(domain="React Native")

    assert assembler.fallback_phrase == clarification_message("React Native")
    assert "limited to React Native" in assembler.assemble("q", ["x"])

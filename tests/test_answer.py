"""Tests for chat model selection and answer generation."""

import tempfile
from pathlib import Path
from types import SimpleNamespace

import openai
import pytest

from thirdbrain.errors import ExternalProviderError
from thirdbrain.llm import (
    DEFAULT_MODEL,
    ChatClient,
    resolve_model_name,
)
from thirdbrain.models import ChildOf, Item, Page, RootOf, ThirdBrainConfig
from thirdbrain.prompting import (
    ANSWER_INSTRUCTIONS,
    SYSTEM_PREAMBLE,
    build_answer_messages,
    format_result_page,
    format_results,
    generate_answer,
)
from thirdbrain.retrieval.forest import ResultForest
from thirdbrain.store import NoteStore


class FakeCompletions:
    """Stands in for openai.OpenAI().chat.completions."""

    def __init__(self, reply: str | None = "The answer.[¹](((B)))", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.requests: list[dict] = []

    def create(self, model, messages):
        self.requests.append({"model": model, "messages": messages})
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def make_chat_client(**kwargs) -> tuple[ChatClient, FakeCompletions]:
    fake = FakeCompletions(**kwargs)
    client = ChatClient(client=SimpleNamespace(chat=SimpleNamespace(completions=fake)))
    return client, fake


@pytest.fixture
def store():
    """Alpha: A(B, C).  Beta: D."""
    with tempfile.TemporaryDirectory() as tmpdir:
        with NoteStore(Path(tmpdir) / "notes.db") as store:
            store.upsert_page(Page(title="Alpha", edit_time=1))
            store.upsert_page(Page(title="Beta", edit_time=1))
            store.upsert_item(Item(id="A", owner=RootOf(page_title="Alpha"), order_in_parent=0, contents="Garden plans"))
            store.upsert_item(Item(id="B", owner=ChildOf(item_id="A"), order_in_parent=0, contents="Tomatoes by the fence"))
            store.upsert_item(Item(id="C", owner=ChildOf(item_id="A"), order_in_parent=1, contents="Beans on the trellis"))
            store.upsert_item(Item(id="D", owner=RootOf(page_title="Beta"), order_in_parent=0, contents="Buy seeds"))
            yield store


class TestModelNames:
    """Tests for chat model alias resolution."""

    def test_resolve_alias(self) -> None:
        assert resolve_model_name("gpt-4-turbo") == "gpt-4-1106-preview"
        assert resolve_model_name("some-new-model") == "some-new-model"

    def test_default_model(self) -> None:
        assert DEFAULT_MODEL == ThirdBrainConfig().chat_model

    def test_client_sends_configured_model(self) -> None:
        fake = FakeCompletions()
        client = ChatClient(
            model="gpt-4o-mini",
            client=SimpleNamespace(chat=SimpleNamespace(completions=fake)),
        )

        client.complete([{"role": "user", "content": "hi"}])

        assert fake.requests[0]["model"] == "gpt-4o-mini"


class TestChatClient:
    """Tests for ChatClient."""

    def test_sends_resolved_model(self) -> None:
        client, fake = make_chat_client()
        messages = [{"role": "user", "content": "hi"}]

        assert client.complete(messages) == "The answer.[¹](((B)))"
        assert fake.requests == [{"model": "gpt-4-1106-preview", "messages": messages}]

    def test_provider_error_wrapped(self) -> None:
        client, _ = make_chat_client(error=openai.OpenAIError("timeout"))

        with pytest.raises(ExternalProviderError, match="timeout"):
            client.complete([{"role": "user", "content": "hi"}])

    def test_empty_reply_rejected(self) -> None:
        client, _ = make_chat_client(reply=None)

        with pytest.raises(ExternalProviderError, match="did not include"):
            client.complete([{"role": "user", "content": "hi"}])


class TestPrompting:
    """Tests for prompt assembly."""

    def test_format_result_page(self, store) -> None:
        """Test that each item shows its full contents and a block link."""
        forest = ResultForest().add_hits(store, [(0.1, "B")])
        page = forest.get_subset_page_list(store)[0]

        assert format_result_page(store, page) == "\n".join([
            "[[Alpha]]",
            "- Garden plans [*](((A)))",
            "\t- Tomatoes by the fence [*](((B)))",
        ])

    def test_format_results_best_page_first(self, store) -> None:
        forest = ResultForest().add_hits(store, [(0.3, "C"), (0.1, "D")])

        text = format_results(store, forest)

        assert text.split("\n") == [
            "[[Beta]]",
            "- Buy seeds [*](((D)))",
            "[[Alpha]]",
            "- Garden plans [*](((A)))",
            "\t- Beans on the trellis [*](((C)))",
        ]

    def test_build_answer_messages(self) -> None:
        """Test that the question is asked, notes given, and the question repeated."""
        messages = build_answer_messages("What to plant?", "[[Alpha]]")

        assert [m["role"] for m in messages] == ["system", "user", "system", "user", "system", "user", "system"]
        assert messages[0]["content"] == SYSTEM_PREAMBLE
        assert messages[1]["content"] == "What to plant?"
        assert messages[3]["content"] == "[[Alpha]]"
        assert messages[5]["content"] == "What to plant?"
        assert messages[6]["content"] == ANSWER_INSTRUCTIONS

    def test_generate_answer(self, store) -> None:
        client, fake = make_chat_client()
        forest = ResultForest().add_hits(store, [(0.1, "B")])

        answer = generate_answer(store, client, forest, "Where do tomatoes go?")

        assert answer == "The answer.[¹](((B)))"
        notes = fake.requests[0]["messages"][3]["content"]
        assert "Tomatoes by the fence [*](((B)))" in notes

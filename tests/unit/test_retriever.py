"""Tests for the query pipeline and prompt assembly."""
import httpx
import pytest

from ragfs.errors import StoreError, TransportError
from ragfs.rag.prompt import PromptTemplate, load_prompt_template
from ragfs.rag.retriever import Retriever
from ragfs.rag.store_infinity import VectorRow
from tests.unit.helpers import FakeStore, embedding_response, search_response


@pytest.fixture
def bare_prompt():
    return PromptTemplate("$context|$user_query")


def test_what_day_is_it_end_to_end(embedding_client, store_client, bare_prompt):
    embedder, embed_recorder = embedding_client(embedding_response([0.25, 0.5, 0.75]))
    store, store_recorder = store_client(
        search_response(("days.txt", 0, "Today is Saturday."), ("days.txt", 1, "Tomorrow is Sunday."))
    )
    retriever = Retriever(embedder=embedder, store=store, prompt=bare_prompt, top_n=2, method="text")

    prompt = retriever.answer_prompt("What day is it?")

    assert prompt == "Today is Saturday.Tomorrow is Sunday.|What day is it?"
    assert embed_recorder.json_body()["input"] == ["What day is it?"]
    [clause] = store_recorder.json_body()["search"]
    assert clause["matching_text"] == "What day is it?"
    assert clause["topn"] == 2


def test_dense_method_searches_with_query_vector(embedding_client, store_client, bare_prompt):
    embedder, _ = embedding_client(embedding_response([0.25, 0.5]))
    store, store_recorder = store_client(search_response(("a.txt", 0, "A.")))
    retriever = Retriever(embedder=embedder, store=store, prompt=bare_prompt, method="dense")

    retriever.answer_prompt("q")

    [clause] = store_recorder.json_body()["search"]
    assert clause["match_method"] == "dense"
    assert clause["query_vector"] == [0.25, 0.5]


def test_no_results_gives_empty_context(fake_embedder, bare_prompt):
    retriever = Retriever(embedder=fake_embedder, store=FakeStore(), prompt=bare_prompt)

    assert retriever.answer_prompt("Anything?") == "|Anything?"


def test_row_filter_drops_rows_before_context(fake_embedder, bare_prompt):
    store = FakeStore(
        search_rows=[
            VectorRow(name="a.txt", index=0, text="Keep me. "),
            VectorRow(name="b.txt", index=0, text="Drop me. "),
        ]
    )
    retriever = Retriever(
        embedder=fake_embedder,
        store=store,
        prompt=bare_prompt,
        row_filter=lambda row: row.name != "b.txt",
    )

    assert retriever.answer_prompt("q") == "Keep me. |q"


def test_default_settings_are_applied(fake_embedder, fake_store, bare_prompt):
    retriever = Retriever(embedder=fake_embedder, store=fake_store, prompt=bare_prompt)

    retriever.retrieve("q")

    [search] = fake_store.searches
    assert search["top_n"] == 2
    assert search["method"] == "text"
    assert search["query_text"] == "q"
    assert search["query_vector"] == [0.0, 0.5, 1.0]


def test_default_template_renders_both_fields(fake_embedder):
    store = FakeStore(search_rows=[VectorRow(name="a.txt", index=0, text="Today is Saturday.")])
    retriever = Retriever(embedder=fake_embedder, store=store, prompt=load_prompt_template())

    prompt = retriever.answer_prompt("What day is it?")

    assert "Today is Saturday." in prompt
    assert "What day is it?" in prompt
    assert "$" not in prompt


def test_embedding_failure_propagates(embedding_client, fake_store, bare_prompt):
    embedder, _ = embedding_client(httpx.Response(500, text="boom"))
    retriever = Retriever(embedder=embedder, store=fake_store, prompt=bare_prompt)

    with pytest.raises(TransportError):
        retriever.answer_prompt("q")
    assert fake_store.searches == []


def test_store_error_propagates(fake_embedder, store_client, bare_prompt):
    store, _ = store_client(httpx.Response(200, json={"error_code": 3018, "error_msg": "Table not found"}))
    retriever = Retriever(embedder=fake_embedder, store=store, prompt=bare_prompt)

    with pytest.raises(StoreError, match="Table not found"):
        retriever.answer_prompt("q")


def test_explicit_zero_top_n_is_kept(fake_embedder, fake_store, bare_prompt):
    retriever = Retriever(embedder=fake_embedder, store=fake_store, prompt=bare_prompt, top_n=0)

    retriever.retrieve("q")

    assert fake_store.searches[0]["top_n"] == 0

"""Test doubles shared by the unit tests."""
import json
import re

import httpx

EMBEDDING_URL = "http://embed.test"
STORE_URL = "http://infinity.test"
DOCS_URL = f"{STORE_URL}/databases/rfs/tables/data/docs"


class RegexSentenceTokenizer:
    """Splits after ., ! and ? so tests do not need the Punkt model."""

    pattern = re.compile(r"\S[^.!?]*[.!?]*")

    def span_tokenize(self, text):
        for match in self.pattern.finditer(text):
            yield match.span()


class FakeEmbedder:
    """Returns one small deterministic vector per input and records calls."""

    model = "fake-model"

    def __init__(self):
        self.calls = []

    def embed_batch(self, texts):
        self.calls.append(list(texts))
        return [[float(i), 0.5, 1.0] for i in range(len(texts))]

    def embed_one(self, text):
        return self.embed_batch([text])[0]


class FakeStore:
    """Collects inserted rows; optionally fails for row names containing a marker."""

    docs_url = DOCS_URL

    def __init__(self, fail_on=None, search_rows=None):
        self.inserted = []
        self.insert_calls = 0
        self.fail_on = fail_on
        self.search_rows = search_rows or []
        self.searches = []

    def insert(self, rows):
        self.insert_calls += 1
        if self.fail_on and any(self.fail_on in row.name for row in rows):
            raise RuntimeError(f"insert failed for {rows[0].name}")
        self.inserted.extend(rows)

    def search(self, **kwargs):
        self.searches.append(kwargs)
        return list(self.search_rows)


class Recorder:
    """MockTransport handler that records requests and replays canned responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def json_body(self, i=0):
        return json.loads(self.requests[i].content)


def embedding_response(*vectors):
    return httpx.Response(
        200,
        json={
            "object": "list",
            "data": [{"object": "embedding", "embedding": list(v)} for v in vectors],
        },
    )


def store_ok():
    return httpx.Response(200, json={"error_code": 0})


def search_response(*rows):
    """Infinity search body; each row given as (name, index, text)."""
    return httpx.Response(
        200,
        json={
            "error_code": 0,
            "output": [
                [{"name": name}, {"index": index}, {"fulltext_column": text}]
                for name, index, text in rows
            ],
            "total_hits_count": len(rows),
        },
    )

"""Tests for external client adapters."""

import asyncio

import pytest

from menu_advisor.adapters.openai_search_client import OpenAISearchClient


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str = '{"safe": []}') -> None:
        self.responses = _FakeResponses(output_text)
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def test_openai_search_client_grounds_with_web_search() -> None:
    fake = _FakeOpenAI()
    client = OpenAISearchClient(client=fake)

    result = asyncio.run(
        client.generate(
            model="gpt-5.2",
            reasoning_effort="low",
            store=False,
            prompt="Find Joe's Diner",
        )
    )

    assert result == '{"safe": []}'
    payload = fake.responses.last_payload
    assert payload is not None
    assert payload["model"] == "gpt-5.2"
    assert payload["store"] is False
    assert payload["tools"] == [{"type": "web_search"}]
    assert payload["reasoning"] == {"effort": "low"}
    assert payload["input"] == [
        {
            "role": "user",
            "content": [{"type": "input_text", "text": "Find Joe's Diner"}],
        }
    ]


def test_openai_search_client_sends_image_without_search() -> None:
    fake = _FakeOpenAI()
    client = OpenAISearchClient(client=fake)

    asyncio.run(
        client.generate(
            model="gpt-5.2",
            reasoning_effort=None,
            store=False,
            prompt="Read this menu",
            image_data_url="data:image/jpeg;base64,ZmFrZQ==",
            web_search=False,
        )
    )

    payload = fake.responses.last_payload
    assert payload is not None
    assert "tools" not in payload
    assert "reasoning" not in payload
    content = payload["input"][0]["content"]
    assert content[1] == {
        "type": "input_image",
        "image_url": "data:image/jpeg;base64,ZmFrZQ==",
    }


def test_openai_search_client_rejects_empty_output() -> None:
    client = OpenAISearchClient(client=_FakeOpenAI(output_text=""))

    with pytest.raises(RuntimeError):
        asyncio.run(
            client.generate(
                model="gpt-5.2", reasoning_effort="low", store=False, prompt="Hi"
            )
        )


def test_openai_search_client_close() -> None:
    fake = _FakeOpenAI()

    asyncio.run(OpenAISearchClient(client=fake).close())

    assert fake.closed is True

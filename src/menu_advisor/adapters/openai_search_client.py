"""OpenAI Responses API client with web-search grounding."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from menu_advisor.services.advisor import GroundedModelClient


@dataclass
class OpenAISearchClient(GroundedModelClient):
    """Grounded model client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAISearchClient":
        """Create an OpenAI client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        image_data_url: str | None = None,
        web_search: bool = True,
    ) -> str:
        """Call OpenAI Responses API and return the output text."""
        content: list[dict[str, object]] = [{"type": "input_text", "text": prompt}]
        if image_data_url:
            content.append({"type": "input_image", "image_url": image_data_url})
        request_payload: dict[str, object] = {
            "model": model,
            "input": [{"role": "user", "content": content}],
            "store": store,
        }
        if web_search:
            request_payload["tools"] = [{"type": "web_search"}]
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return output_text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()

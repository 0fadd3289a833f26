"""Gateway doubles shared by the dispatch, router and fallback tests."""

import json

import httpx


class FakeSleep:
    """Records backoff delays instead of sleeping."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def gateway_reply(content: str = "Simmer until thick.", prompt_tokens: int = 1000,
                  completion_tokens: int = 500, model: str = "google/gemini-flash-1.5") -> dict:
    return {
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": prompt_tokens, "completion_tokens": completion_tokens},
        "model": model,
    }


class RecordingHandler:
    """MockTransport handler replaying a fixed list of responses (last one repeats)."""

    def __init__(self, *responses: httpx.Response):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests) - 1, len(self.responses) - 1)
        return self.responses[index]

    @property
    def calls(self) -> int:
        return len(self.requests)

    def body(self, n: int = 0) -> dict:
        return json.loads(self.requests[n].content)


def mock_http(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))

"""
Tests for the language-model client wrapper and the text extractor.
"""

import asyncio
from types import SimpleNamespace

from trustscan.extractor import ContentExtractor
from trustscan.llm import DISABLED_MESSAGE, FAILED_MESSAGE, UNAVAILABLE_MESSAGE, LLMService
from trustscan.run_config import Settings


class FakeCompletions:
    def __init__(self, answer=None, error=None):
        self.answer = answer
        self.error = error
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.answer)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


class TestLLMService:

    def test_disabled_without_key(self):
        service = LLMService(Settings(gemini_api_key=""))
        assert not service.enabled
        assert asyncio.run(service.analyze_context("text", "prompt")) == DISABLED_MESSAGE

    def test_sends_prompt_and_context(self):
        completions = FakeCompletions(answer='{"issues": []}')
        service = LLMService(Settings(llm_model="gemini-test"), client=_client(completions))
        assert asyncio.run(service.analyze_context("page text", "audit prompt")) == '{"issues": []}'
        request = completions.requests[0]
        assert request["model"] == "gemini-test"
        assert request["messages"] == [
            {"role": "system", "content": "audit prompt"},
            {"role": "user", "content": "page text"},
        ]

    def test_model_not_found(self):
        service = LLMService(Settings(), client=_client(FakeCompletions(error=RuntimeError("404 model not found"))))
        assert asyncio.run(service.analyze_context("x", "y")) == UNAVAILABLE_MESSAGE

    def test_other_failure(self):
        service = LLMService(Settings(), client=_client(FakeCompletions(error=TimeoutError("slow"))))
        assert asyncio.run(service.analyze_context("x", "y")) == FAILED_MESSAGE


class TestContentExtractor:

    def test_noise_removed(self):
        html = """
        <html><head><title>T</title><style>body{}</style></head>
        <body><script>var x = 1;</script><h1>Hello</h1><noscript>enable js</noscript>
        <p>World   wide</p></body></html>
        """
        text = ContentExtractor.html_to_text(html)
        assert "Hello" in text
        assert "World wide" in text
        assert "var x" not in text
        assert "enable js" not in text

    def test_truncated(self):
        html = "<html><body><p>" + "a" * 500 + "</p></body></html>"
        assert len(ContentExtractor.html_to_text(html, limit=100)) == 100

    def test_empty(self):
        assert ContentExtractor.html_to_text("") == ""

"""Tests for premortem.utils.parsing: strip_fences, response_text, ainvoke_with_retry."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from premortem.utils.parsing import ainvoke_with_retry, response_text, strip_fences


# --- strip_fences ---

class TestStripFences:
    def test_strip_json_fences(self):
        text = '```json\n{"key": "value"}\n```'
        assert strip_fences(text) == '{"key": "value"}'

    def test_strip_plain_fences(self):
        text = '```\n[{"key": "value"}]\n```'
        assert strip_fences(text) == '[{"key": "value"}]'

    def test_no_fences_returns_stripped(self):
        text = '  {"key": "value"}  '
        assert strip_fences(text) == '{"key": "value"}'


# --- response_text ---

class TestResponseText:
    def test_string_content(self):
        assert response_text(MagicMock(content="hello")) == "hello"

    def test_list_of_parts_joined(self):
        response = MagicMock(content=[{"type": "text", "text": "he"}, {"type": "text", "text": "llo"}])
        assert response_text(response) == "hello"

    def test_none_content_is_empty(self):
        assert response_text(MagicMock(content=None)) == ""


# --- ainvoke_with_retry ---

class TestAinvokeWithRetry:
    def _mock_llm(self, side_effect):
        llm = MagicMock()
        llm.ainvoke = AsyncMock(side_effect=side_effect)
        return llm

    @patch("premortem.config._config", {"llm_max_retries": 3})
    def test_succeeds_on_first_try(self):
        response = MagicMock()
        response.content = '{"ok": true}'
        llm = self._mock_llm([response])

        result = asyncio.run(ainvoke_with_retry(llm, [{"role": "user", "content": "hi"}]))

        assert result.content == '{"ok": true}'
        assert llm.ainvoke.await_count == 1

    @patch("premortem.config._config", {"llm_max_retries": 3})
    def test_retries_on_connect_error(self, capsys):
        response = MagicMock()
        response.content = '{"ok": true}'
        llm = self._mock_llm([httpx.ConnectError("connection refused"), response])

        result = asyncio.run(ainvoke_with_retry(llm, [{"role": "user", "content": "hi"}]))

        assert result.content == '{"ok": true}'
        assert llm.ainvoke.await_count == 2
        assert "[PME] Transient error" in capsys.readouterr().err

    @patch("premortem.config._config", {"llm_max_retries": 3})
    def test_retries_on_429(self):
        response_429 = httpx.Response(429, request=httpx.Request("POST", "https://api.example.com"))
        response = MagicMock()
        response.content = '{"ok": true}'
        llm = self._mock_llm([
            httpx.HTTPStatusError("rate limited", request=response_429.request, response=response_429),
            response,
        ])

        result = asyncio.run(ainvoke_with_retry(llm, [{"role": "user", "content": "hi"}]))

        assert result.content == '{"ok": true}'
        assert llm.ainvoke.await_count == 2

    @patch("premortem.config._config", {"llm_max_retries": 1})
    def test_raises_after_max_retries(self):
        llm = self._mock_llm([httpx.ConnectError("fail 1"), httpx.ConnectError("fail 2")])

        with pytest.raises(httpx.ConnectError):
            asyncio.run(ainvoke_with_retry(llm, [{"role": "user", "content": "hi"}]))

        assert llm.ainvoke.await_count == 2  # 1 initial + 1 retry

    @patch("premortem.config._config", {"llm_max_retries": 3})
    def test_does_not_retry_on_auth_error(self):
        response_401 = httpx.Response(401, request=httpx.Request("POST", "https://api.example.com"))
        llm = self._mock_llm([
            httpx.HTTPStatusError("unauthorized", request=response_401.request, response=response_401),
        ])

        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(ainvoke_with_retry(llm, [{"role": "user", "content": "hi"}]))

        assert llm.ainvoke.await_count == 1

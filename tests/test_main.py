"""Tests for the CLI session driver."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

from premortem.main import run
from premortem.state import Screen


def _mock_llm(content: str):
    response = MagicMock()
    response.content = content
    instance = MagicMock()
    instance.ainvoke = AsyncMock(return_value=response)
    return instance


class TestRun:
    @patch("premortem.main.write_blueprint", return_value=Path("output/ice.md"))
    @patch("premortem.agents.inverter.ChatGoogleGenerativeAI")
    @patch("premortem.agents.roadmap.ChatGoogleGenerativeAI")
    def test_non_interactive_session_inverts_fallback(
        self, MockRoadmapLLM, MockInverterLLM, mock_write,
        valid_roadmap_response, inversion_pairs, mock_config, capsys,
    ):
        MockRoadmapLLM.return_value = _mock_llm(json.dumps(valid_roadmap_response))
        MockInverterLLM.return_value = _mock_llm(json.dumps(inversion_pairs))

        state = run("Artisanal ice cube subscription", doom_level=8, interactive=False)

        assert state["screen"] == Screen.INVERSION
        assert state["selected_ids"] == frozenset()
        mock_write.assert_called_once()
        out = capsys.readouterr().out
        assert "Failure Roadmap" in out
        assert "Anti-Fragile Blueprint" in out

    @patch("premortem.main.write_blueprint")
    @patch("premortem.agents.roadmap.ChatGoogleGenerativeAI")
    def test_roadmap_failure_reports_error(self, MockRoadmapLLM, mock_write, mock_config, capsys):
        MockRoadmapLLM.return_value = _mock_llm("not json")

        state = run("idea", doom_level=5, interactive=False)

        assert state["screen"] == Screen.LANDING
        assert "Analysis corrupted" in capsys.readouterr().err
        mock_write.assert_not_called()

    @patch("premortem.main.write_blueprint", return_value=Path("output/ice.md"))
    @patch("premortem.agents.inverter.ChatGoogleGenerativeAI")
    @patch("premortem.agents.roadmap.ChatGoogleGenerativeAI")
    @patch("builtins.input", side_effect=["o2 zzz", ""])
    def test_interactive_selection(
        self, _input, MockRoadmapLLM, MockInverterLLM, _write,
        valid_roadmap_response, inversion_pairs, mock_config,
    ):
        MockRoadmapLLM.return_value = _mock_llm(json.dumps(valid_roadmap_response))
        MockInverterLLM.return_value = _mock_llm(json.dumps(inversion_pairs))

        state = run("idea", doom_level=3, interactive=True)

        assert state["selected_ids"] == frozenset({"o2"})
        prompt = MockInverterLLM.return_value.ainvoke.await_args.args[0][1]["content"]
        assert prompt.endswith("FDA Paperwork: Ice is food.")

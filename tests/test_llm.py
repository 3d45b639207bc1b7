from unittest.mock import patch, MagicMock
from postman_testgen.llm import DEFAULT_MODEL, LlmClient, extract_json


def _response(content):
    mock_resp = MagicMock()
    mock_resp.choices = [MagicMock()]
    mock_resp.choices[0].message.content = content
    return mock_resp


class TestLlmClient:
    def test_default_model(self):
        client = LlmClient()
        assert client.model == DEFAULT_MODEL

    def test_custom_model(self):
        client = LlmClient(model="gpt-4o")
        assert client.model == "gpt-4o"

    @patch("postman_testgen.llm.completion")
    def test_call_returns_content(self, mock_completion):
        mock_completion.return_value = _response("test response")

        client = LlmClient(model="gpt-4o")
        result = client.call(system="You are helpful.", user="Hello")
        assert result == "test response"
        mock_completion.assert_called_once()

    @patch("postman_testgen.llm.completion")
    def test_call_passes_model_messages_and_temperature(self, mock_completion):
        mock_completion.return_value = _response("ok")

        client = LlmClient(model="claude-sonnet-4-20250514", temperature=0.5)
        client.call(system="sys", user="usr")

        call_kwargs = mock_completion.call_args[1]
        assert call_kwargs["model"] == "claude-sonnet-4-20250514"
        assert call_kwargs["temperature"] == 0.5
        messages = call_kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "sys"}
        assert messages[1] == {"role": "user", "content": "usr"}

    @patch("postman_testgen.llm.completion")
    def test_empty_content(self, mock_completion):
        mock_completion.return_value = _response(None)
        assert LlmClient().call(system="s", user="u") == ""


class TestExtractJson:
    def test_fenced_block(self):
        assert extract_json('Here:\n```json\n[{"a": 1}]\n```\nbye') == '[{"a": 1}]'

    def test_plain_fence(self):
        assert extract_json("```\n{}\n```") == "{}"

    def test_bare_text(self):
        assert extract_json("  [1, 2]\n") == "[1, 2]"

"""
Integration tests for the redflag-score command line.
"""

import json

import pytest

from redflag_engine.cli.score import build_parser, main, read_records
from redflag_engine.logging_config import setup_logging

pytestmark = pytest.mark.integration


MESSAGES = [
    {
        "id": "u-0",
        "thread_id": "t-urgent",
        "from": {"email": "boss@acme.com"},
        "subject": "Contract renewal",
        "body": "See notes.",
        "received_at": "2026-03-02T08:40:00Z",
    },
    {
        "id": "u-1",
        "thread_id": "t-urgent",
        "from": {"email": "boss@acme.com"},
        "subject": "Re: Contract renewal",
        "body": "See notes.",
        "received_at": "2026-03-02T08:50:00Z",
    },
    {
        "id": "u-2",
        "thread_id": "t-urgent",
        "from": {"email": "boss@acme.com"},
        "subject": "Urgent: contract renewal",
        "body": "See notes.",
        "received_at": "2026-03-02T09:00:00Z",
    },
    {
        "id": "q-0",
        "from": {"email": "alice@example.com"},
        "subject": "Lunch on Friday",
        "body": "Want to grab lunch together?",
        "received_at": "2026-03-02T08:55:00Z",
    },
]

VIPS = [{"id": "vip-1", "email": "boss@acme.com", "name": "The Boss", "added_at": "2026-01-01T00:00:00Z"}]


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI points logs at the captured stderr; reset afterwards."""
    yield
    setup_logging()


@pytest.fixture
def messages_json(tmp_path):
    path = tmp_path / "messages.json"
    path.write_text(json.dumps(MESSAGES), encoding="utf-8")
    return path


@pytest.fixture
def vips_json(tmp_path):
    path = tmp_path / "vips.json"
    path.write_text(json.dumps(VIPS), encoding="utf-8")
    return path


class TestReadRecords:
    """Test JSON and JSONL input parsing."""

    def test_json_array(self, messages_json):
        assert [r["id"] for r in read_records(messages_json)] == ["u-0", "u-1", "u-2", "q-0"]

    def test_jsonl(self, tmp_path):
        path = tmp_path / "messages.jsonl"
        path.write_text("\n".join(json.dumps(m) for m in MESSAGES) + "\n\n", encoding="utf-8")

        assert len(read_records(path)) == 4

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("  \n", encoding="utf-8")

        assert read_records(path) == []

    def test_malformed(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("[{not json", encoding="utf-8")

        with pytest.raises(ValueError):
            read_records(path)


class TestMain:
    """Test the end-to-end command."""

    def test_parser_defaults(self):
        args = build_parser().parse_args(["in.json"])

        assert args.output is None
        assert args.max_topics is None
        assert args.verbose is False

    def test_briefing_to_stdout(self, messages_json, vips_json, capsys):
        exit_code = main([str(messages_json), "--vips", str(vips_json)])

        assert exit_code == 0
        briefing = json.loads(capsys.readouterr().out)
        assert briefing["total_messages"] == 4
        assert briefing["total_flagged"] == 3
        assert briefing["topics"][0]["flagged_count"] == 3
        assert briefing["scores"]["q-0"]["is_flagged"] is False

    def test_stdout_stays_json_after_api_logged(self, messages_json, capsys):
        """Loggers used under the API's stdout config must follow the CLI to stderr."""
        from redflag_engine.api.app import app  # noqa: F401  configures logging on import
        from redflag_engine.pipeline import RedFlagPipeline
        from tests.fixtures.messages import make_message

        setup_logging()
        RedFlagPipeline().score_messages([make_message()])
        capsys.readouterr()

        exit_code = main([str(messages_json), "--verbose"])

        assert exit_code == 0
        captured = capsys.readouterr()
        assert json.loads(captured.out)["total_messages"] == 4
        assert "messages_scored" in captured.err

    def test_briefing_to_file(self, messages_json, tmp_path):
        output = tmp_path / "out" / "briefing.json"

        exit_code = main([str(messages_json), "--output", str(output), "--max-topics", "1"])

        assert exit_code == 0
        briefing = json.loads(output.read_text(encoding="utf-8"))
        assert len(briefing["topics"]) == 1
        assert set(briefing["scores"]) == {"u-0", "u-1", "u-2", "q-0"}

    def test_verbose_summary(self, messages_json, capsys):
        assert main([str(messages_json), "-v"]) == 0

        assert "Scored 4 messages" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        exit_code = main([str(tmp_path / "nope.json")])

        assert exit_code == 1
        assert "File not found" in capsys.readouterr().err

    def test_invalid_json(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text("[{not json", encoding="utf-8")

        assert main([str(path)]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_invalid_message_record(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([{"id": "x"}]), encoding="utf-8")

        assert main([str(path)]) == 1

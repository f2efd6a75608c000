"""
tests/test_cli.py

mintledger CLI: demo writes a log, replay reads it back.
"""

import json

from click.testing import CliRunner

from mintledger.cli import cli


def test_demo_then_replay(tmp_path):
    runner = CliRunner()
    log_path = tmp_path / "events.jsonl"

    result = runner.invoke(cli, ["demo", "--events", str(log_path)])
    assert result.exit_code == 0, result.output
    assert "Withdrawn       2" in result.output
    assert "Change returned 999999998" in result.output

    result = runner.invoke(cli, ["replay", str(log_path)])
    assert result.exit_code == 0, result.output
    assert "OK: history is consistent" in result.output


def test_replay_json_output(tmp_path):
    runner = CliRunner()
    log_path = tmp_path / "events.jsonl"
    runner.invoke(cli, ["demo", "--events", str(log_path)])

    result = runner.invoke(cli, ["replay", str(log_path), "--format", "json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["valid"] is True
    assert data["minted"] == 2
    assert data["combined"] == 1
    assert len(data["active_records"]) == 1


def test_replay_reports_violations(tmp_path):
    runner = CliRunner()
    log_path = tmp_path / "events.jsonl"
    runner.invoke(cli, ["demo", "--events", str(log_path)])

    lines = [json.loads(l) for l in log_path.read_text(encoding="utf-8").splitlines()]
    lines[-1]["payload"]["amount"] = 50
    log_path.write_text("".join(json.dumps(l) + "\n" for l in lines), encoding="utf-8")

    result = runner.invoke(cli, ["replay", str(log_path)])
    assert result.exit_code == 1
    assert "balance" in result.output


def test_replay_undecodable_log_is_an_error(tmp_path):
    log_path = tmp_path / "events.jsonl"
    log_path.write_bytes(b"\xff\xfe not utf-8\n")
    result = CliRunner().invoke(cli, ["replay", str(log_path)])
    assert result.exit_code == 2
    assert not isinstance(result.exception, UnicodeDecodeError)


def test_replay_wrongly_typed_payload_is_an_error(tmp_path):
    log_path = tmp_path / "events.jsonl"
    log_path.write_text(json.dumps({
        "sequence": 0, "timestamp": "2026-01-01T00:00:00.000Z",
        "event_type": "deleted", "payload": {"record_id": ["x"]},
    }) + "\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["replay", str(log_path)])
    assert result.exit_code == 2


def test_replay_missing_file(tmp_path):
    result = CliRunner().invoke(cli, ["replay", str(tmp_path / "nope.jsonl")])
    assert result.exit_code == 2


def test_demo_with_config(tmp_path):
    config = tmp_path / "ledger.yaml"
    log_path = tmp_path / "events.jsonl"
    config.write_text(f"price: 5\nevent_log: {log_path}\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["demo", "--config", str(config)])
    assert result.exit_code == 0, result.output
    assert "Withdrawn       10" in result.output
    assert log_path.exists()


def test_demo_rejects_bad_config(tmp_path):
    config = tmp_path / "ledger.yaml"
    config.write_text("price: 0\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["demo", "--config", str(config)])
    assert result.exit_code != 0
    assert "price must be a positive integer" in result.output

"""Tests for the live `run` command and its stdin parser."""

import json

import pytest
from click.testing import CliRunner

from mmp.cli import cli
from mmp.cli.run_cmds import parse_command
from mmp.match import Player


def test_parse_arrive():
    assert parse_command("arrive A 50 NA\n") == ('arrive', Player("A", 50.0, "NA"))


def test_parse_withdraw_and_wait():
    assert parse_command("withdraw A") == ('withdraw', "A")
    assert parse_command("WAIT 0.5") == ('wait', 0.5)


def test_parse_blank_and_comment():
    assert parse_command("   \n") is None
    assert parse_command("# just a note") is None
    assert parse_command("withdraw B  # left") == ('withdraw', "B")


@pytest.mark.parametrize("line", ["arrive A 50", "withdraw", "jump A", "arrive A fifty NA", "wait soon"])
def test_parse_rejects_malformed(line):
    with pytest.raises(ValueError):
        parse_command(line)


def test_run_matches_from_stdin(test_config):
    runner = CliRunner()
    stdin = "arrive A 50 NA\narrive C 90 EU\narrive B 55 NA\nbogus line\n"

    result = runner.invoke(cli, ['run', '--linger', '0.2'], input=stdin, obj=test_config)

    assert result.exit_code == 0, result.output
    assert "A + B" in result.output
    assert "1 players waiting" in result.output


def test_run_writes_checkpoint(tmp_path, test_config):
    test_config['driver']['continue_as_new_after'] = 1
    checkpoint = tmp_path / "pool.json"
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ['run', '--linger', '0.2', '--checkpoint-file', str(checkpoint)],
        input="arrive A 50 NA\narrive C 90 EU\n",
        obj=test_config,
    )

    assert result.exit_code == 0, result.output
    data = json.loads(checkpoint.read_text(encoding='utf-8'))
    assert [p['id'] for p in data['players']] == ["A", "C"]


def test_run_rejects_bad_retry_delay(test_config):
    runner = CliRunner()
    result = runner.invoke(cli, ['run', '--retry-delay', '0'], input="", obj=test_config)
    assert result.exit_code == 2

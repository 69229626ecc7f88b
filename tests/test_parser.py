"""Tests for the REPL command parser."""

from taskman.repl.parser import parse_command


def test_empty_input():
    result = parse_command("   ")
    assert result.command == ""
    assert result.args == []
    assert result.flags == {}


def test_command_is_lowercased():
    assert parse_command("LS").command == "ls"


def test_quoted_arguments_stay_together():
    result = parse_command('add "Buy milk" --due tomorrow')
    assert result.command == "add"
    assert result.args == ["Buy milk"]
    assert result.flags == {"due": "tomorrow"}


def test_quoted_flag_value():
    result = parse_command('add Report --due "in 2 weeks" --under ab12')
    assert result.args == ["Report"]
    assert result.flags == {"due": "in 2 weeks", "under": "ab12"}


def test_boolean_flags_do_not_take_values():
    result = parse_command("mv ab12 --above cd34")
    assert result.args == ["ab12", "cd34"]
    assert result.flags == {"above": True}


def test_short_flags():
    result = parse_command("rm ab12 -y")
    assert result.flags == {"yes": True}
    assert parse_command("ls -a").flags == {"all": True}


def test_value_flag_at_end_is_true():
    assert parse_command("ls --view").flags == {"view": True}


def test_unclosed_quote_falls_back_to_split():
    result = parse_command('add "Buy milk')
    assert result.args == ['"Buy', "milk"]


def test_raw_input_is_kept():
    assert parse_command("  done ab12  ").raw_input == "done ab12"

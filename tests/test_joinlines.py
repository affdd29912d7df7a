import io
import sys

from netlab.joinlines import join_until_blank, main


def test_stops_at_blank_line():
    assert join_until_blank(["ab", "cd", "", "ef"]) == "abcd"


def test_joins_all_without_blank():
    assert join_until_blank(["a", "b", "c"]) == "abc"


def test_empty_input():
    assert join_until_blank([]) == ""


def test_whitespace_line_is_not_blank():
    assert join_until_blank(["x", " ", "y", ""]) == "x y"


def test_main_reads_stdin(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("ab\ncd\n\nef\n"))
    assert main([]) == 0
    assert capsys.readouterr().out == "abcd\n"


def test_main_eof_without_blank(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("one\ntwo"))
    main([])
    assert capsys.readouterr().out == "onetwo\n"
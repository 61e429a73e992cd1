"""Tests for the fsetdec command-line tool."""

from setdec.cli.fsetdec import main


def _write(tmp_path, text):
    path = tmp_path / "problem.txt"
    path.write_text(text)
    return str(path)


def test_proved(tmp_path, capsys):
    path = _write(tmp_path, "h: x = y\nx in s\ngoal: y in s\n")
    assert main([path]) == 0
    assert capsys.readouterr().out.splitlines() == ["proved"]


def test_not_proved(tmp_path, capsys):
    path = _write(tmp_path, "Subset(r, s)\ngoal: x in s\n")
    assert main([path]) == 0
    assert capsys.readouterr().out.strip() == "not proved"


def test_certificate(tmp_path, capsys):
    path = _write(tmp_path, "goal: Subset(s, add(x, remove(x, s)))\n")
    assert main([path, "--certificate"]) == 0
    captured = capsys.readouterr()
    lines = captured.out.splitlines()
    assert lines[0] == "proved"
    assert any(line.startswith("[instantiate]") for line in lines)
    assert "Certificate error" not in captured.err


def test_declared_predicate(tmp_path, capsys):
    path = _write(tmp_path, "P(x)\nP(x) implies x in s\ngoal: x in s\n")
    assert main([path]) == 0
    assert capsys.readouterr().out.strip() == "not proved"
    assert main([path, "--decidable", "P"]) == 0
    assert capsys.readouterr().out.strip() == "proved"


def test_split_budget(tmp_path, capsys):
    path = _write(
        tmp_path,
        "x in s or x in t\nnot x in s or x in t\nx in s or not x in t\n"
        "goal: x in s and x in t\n",
    )
    assert main([path, "--max-splits", "0"]) == 0
    assert capsys.readouterr().out.strip() == "not proved"
    assert main([path, "--no-pull"]) == 0
    assert capsys.readouterr().out.strip() == "proved"


def test_crosscheck(tmp_path, capsys):
    path = _write(tmp_path, "goal: x in singleton(x)\n")
    assert main([path, "--crosscheck"]) == 0
    assert capsys.readouterr().out.splitlines() == ["proved", "z3: valid"]


def test_errors(tmp_path, capsys):
    assert main([str(tmp_path / "missing.txt")]) == 1
    assert "File not found" in capsys.readouterr().err

    path = _write(tmp_path, "x in\ngoal: true\n")
    assert main([path]) == 1
    assert "Error: line 1" in capsys.readouterr().err


def test_crosscheck_with_set_valued_function(tmp_path, capsys):
    path = _write(tmp_path, "Equal(s1, f(s2))\nx1 in s1\ngoal: x1 in f(s2)\n")
    assert main([path, "--crosscheck"]) == 0
    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["proved", "z3: valid"]
    assert "Error" not in captured.err

from rustdrills.ui import success, warn


def test_warn_without_emoji(monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    warn("Ran exercises/x.rs with errors")
    assert capsys.readouterr().out == "! Ran exercises/x.rs with errors\n"


def test_success_without_emoji(monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    success("Successfully ran exercises/x.rs")
    assert capsys.readouterr().out == "✓ Successfully ran exercises/x.rs\n"


def test_warn_with_emoji(monkeypatch, capsys):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    warn("careful")
    out = capsys.readouterr().out
    assert out.startswith("⚠️")
    assert out.endswith(" careful\n")


def test_success_with_emoji(monkeypatch, capsys):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    success("well done")
    assert capsys.readouterr().out == "✅ well done\n"
from ipa_shipit import prompts


def _answers(monkeypatch, *values: str) -> list[str]:
    queue = list(values)
    asked: list[str] = []

    def fake_input(prompt: str) -> str:
        asked.append(prompt)
        return queue.pop(0)

    monkeypatch.setattr("builtins.input", fake_input)
    return asked


def test_ask_returns_default_on_empty_input(monkeypatch) -> None:
    asked = _answers(monkeypatch, "")

    assert prompts.ask("Bundle Identifier:", "com.example.app") == "com.example.app"
    assert asked == ["Bundle Identifier: |com.example.app| "]


def test_ask_returns_typed_value(monkeypatch) -> None:
    _answers(monkeypatch, "  2.0.0 ")

    assert prompts.ask("Version String:", "1.0") == "2.0.0"


def test_agree_uses_default_and_retries_on_garbage(monkeypatch, capsys) -> None:
    asked = _answers(monkeypatch, "", "maybe", "N")

    assert prompts.agree("Bump build number? (y/n)", True) is True
    assert prompts.agree("Delete them? (y/n)", True) is False
    assert asked[0] == "Bump build number? (y/n) [Y/n] "
    assert "Please enter" in capsys.readouterr().out


def test_agree_default_no(monkeypatch) -> None:
    asked = _answers(monkeypatch, "")

    assert prompts.agree("Upload existing? (y/n)", False) is False
    assert asked == ["Upload existing? (y/n) [y/N] "]

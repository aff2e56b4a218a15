"""Tests for the console host."""

import io
import json

import pytest

from rulebot.cli.main import main, run
from rulebot.engine.factory import create_engine
from rulebot.handlers.registry import HandlerRegistry


def _lines(out: io.StringIO):
    return out.getvalue().splitlines()


class TestRun:
    def test_conversation(self):
        engine = create_engine(registry=HandlerRegistry())
        stdin = io.StringIO("Alice\ntell me a joke\nquit\nnever read\n")
        stdout = io.StringIO()

        assert run(engine, stdin, stdout) == 0

        lines = _lines(stdout)
        assert lines[0] == "Hi, I'm MajBot. What's your name?"
        assert lines[1].startswith("What can I do for you, Alice?")
        assert lines[2].startswith("Why do programmers")
        assert lines[3].startswith("What can I do for you, Alice?")
        assert len(lines) == 4

    def test_errors_do_not_stop_the_loop(self):
        engine = create_engine(registry=HandlerRegistry())
        stdin = io.StringIO("Alice\nweather in Paris\nbye\n")
        stdout = io.StringIO()

        run(engine, stdin, stdout)

        output = stdout.getvalue()
        assert "[error] No handler registered under name: Weather" in output
        assert "Goodbye, Alice!" in output


class TestMain:
    def test_custom_definition(self, tmp_path):
        path = tmp_path / "states.json"
        path.write_text(json.dumps({
            "invalid_answers": ["Eh?"],
            "states": [
                {"id": "0", "messages": ["Say hi"], "keywords": [
                    {"keyword": "hi", "target": "1", "points": 1},
                ]},
                {"id": "1", "messages": ["Hi yourself."]},
            ],
        }))
        stdout = io.StringIO()

        code = main(["--definition", str(path)], stdin=io.StringIO("hi\n"), stdout=stdout)

        assert code == 0
        assert _lines(stdout) == ["Say hi", "Hi yourself."]

    def test_missing_definition(self, tmp_path, capsys):
        code = main(["--definition", str(tmp_path / "missing.json")], stdin=io.StringIO(""))
        assert code == 1
        assert "Could not load" in capsys.readouterr().err

    def test_undecodable_definition(self, tmp_path, capsys):
        path = tmp_path / "states.json"
        path.write_bytes(b'{"invalid_answers": ["\xff"], "states": []}')

        code = main(["--definition", str(path)], stdin=io.StringIO(""))

        assert code == 1
        assert "Could not load" in capsys.readouterr().err

    def test_unknown_log_level_is_rejected(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--log-level", "verbose"], stdin=io.StringIO(""))
        assert exc.value.code == 2
        assert "invalid choice" in capsys.readouterr().err

    def test_log_level_is_case_insensitive(self):
        stdout = io.StringIO()
        code = main(["--log-level", "debug"], stdin=io.StringIO(""), stdout=stdout)
        assert code == 0
        assert _lines(stdout) == ["Hi, I'm MajBot. What's your name?"]

    def test_dump_definition(self, tmp_path):
        path = tmp_path / "states.xml"
        path.write_text(
            '<bot><invalid><message>Eh?</message></invalid>'
            '<state id="0"><message>Hi</message>'
            '<keyword target="1" className="Weather" arg="today" variable="city">'
            'weather in (\\w+)</keyword></state>'
            '<state id="1"><message>Bye</message></state></bot>'
        )
        stdout = io.StringIO()

        code = main(["--definition", str(path), "--dump-definition"], stdout=stdout)

        assert code == 0
        document = json.loads(stdout.getvalue())
        assert document["invalid_answers"] == ["Eh?"]
        keyword = document["states"][0]["keywords"][0]
        assert keyword["className"] == "Weather"
        assert keyword["keyword"] == "weather in (\\w+)"

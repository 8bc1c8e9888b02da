"""absint CLI and Driver Tests — CLI-001 through CLI-005."""

import json

import pytest

from absint.cli import main
from absint.examples import get_example, list_examples, run_example
from absint.lattice import NEG, POS, TOP, includes


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Keep config discovery away from any .absintrc in the checkout."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("NO_COLOR", "1")
    return tmp_path


class TestExamples:
    """CLI-001: example catalogue results."""

    @pytest.mark.parametrize("name,concrete,abstract", [
        ("straight-line", 4, POS),
        ("arithmetic", 8, POS),
        ("missing-else", 11, POS),
        ("countdown-loop", 0, TOP),
        ("factorial", 120, POS),
        ("input-guard", 1, POS),
    ])
    def test_results(self, name, concrete, abstract):
        result = run_example(get_example(name))
        assert result.concrete == concrete
        assert result.abstract == abstract
        assert result.sound

    def test_contradictory_else(self):
        result = run_example(get_example("contradictory-else"))
        assert result.concrete == -12
        assert includes(NEG, result.abstract)
        assert result.sound

    def test_every_example_is_sound(self):
        for name in list_examples():
            assert run_example(get_example(name)).sound, name

    def test_unknown_example(self):
        with pytest.raises(KeyError):
            get_example("nope")


class TestRun:
    """CLI-002: absint run."""

    def test_pretty(self, capsys):
        assert main(["run", "arithmetic"]) == 0
        out = capsys.readouterr().out
        assert "Result is 8" in out
        assert "Abstract result is Pos" in out

    def test_json_all(self, capsys):
        assert main(["run", "--format", "json"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert [r["name"] for r in payload] == list_examples()
        assert all(r["sound"] for r in payload)

    def test_unknown_name(self, capsys):
        assert main(["run", "bogus"]) == 1
        assert "bogus" in json.loads(capsys.readouterr().out)["error"]


class TestTrace:
    """CLI-003: absint trace."""

    def test_json(self, capsys):
        assert main(["trace", "countdown-loop", "--format", "json"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["name"] == "countdown-loop"
        kinds = [s["kind"] for s in payload["steps"]]
        assert "while-iteration" in kinds
        assert payload["steps"][-1]["state"] == {"x": "Top"}

    def test_pretty_prints_program(self, capsys):
        assert main(["trace", "missing-else"]) == 0
        out = capsys.readouterr().out
        assert "if x > 0 then" in out
        assert "Abstract trace" in out


class TestVerifyDomain:
    """CLI-004: absint verify-domain reports the multiplication findings."""

    def test_json(self, capsys):
        assert main(["verify-domain", "--format", "json"]) == 1
        payload = json.loads(capsys.readouterr().out)
        assert len(payload) == 2
        assert {e["kind"] for e in payload} == {"soundness"}

    def test_pretty(self, capsys):
        assert main(["verify-domain"]) == 1
        assert "MUL(Pos, Neg) = Neg" in capsys.readouterr().out


class TestConfigIntegration:
    """CLI-005: config file and global options."""

    def test_format_from_config(self, isolated_cwd, capsys):
        (isolated_cwd / ".absintrc.yml").write_text("format: json\n")
        assert main(["run", "straight-line"]) == 0
        assert json.loads(capsys.readouterr().out)[0]["concrete"] == 4

    def test_iteration_cap_from_config(self, isolated_cwd, capsys):
        (isolated_cwd / ".absintrc.json").write_text(json.dumps({"max_iterations": 1}))
        assert main(["run", "countdown-loop"]) == 1
        errors = json.loads(capsys.readouterr().out)
        assert errors[0]["kind"] == "fixpoint_divergence"

    def test_bad_config(self, isolated_cwd, capsys):
        path = isolated_cwd / "broken.yml"
        path.write_text("memory_size: -3\n")
        assert main(["--config", str(path), "list"]) == 1
        assert json.loads(capsys.readouterr().out)[0]["kind"] == "config_error"

    def test_no_command(self, capsys):
        assert main([]) == 1

    def test_list(self, capsys):
        assert main(["list"]) == 0
        out = capsys.readouterr().out
        for name in list_examples():
            assert name in out

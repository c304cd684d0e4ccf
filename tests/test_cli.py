from l2_trial_scores import cli


def test_missing_output_file_exits_non_zero(capsys):
    assert cli.main([]) == 1
    assert "Please specify a JSON output file" in capsys.readouterr().err


def test_arguments_are_passed_through(monkeypatch):
    seen = {}

    def fake_calculate_scores(**kwargs):
        seen.update(kwargs)

    monkeypatch.setattr(cli, "calculate_scores", fake_calculate_scores)

    assert cli.main(["--output-file", "out.json", "--provider-url", "http://localhost:8545"]) == 0
    assert seen["output_file"] == "out.json"
    assert seen["provider_url"] == "http://localhost:8545"
    assert seen["network"] == "goerli"


def test_unexpected_errors_print_traceback(monkeypatch, capsys):
    def boom(**kwargs):
        raise KeyError("abi")

    monkeypatch.setattr(cli, "calculate_scores", boom)

    assert cli.main(["--output-file", "out.json"]) == 1
    err = capsys.readouterr().err
    assert "Error: 'abi'" in err
    assert "Traceback" in err

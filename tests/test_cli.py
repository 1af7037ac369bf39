"""
Tests for the command line entry point.
"""

import json

import pytest

from main import main, parse_arguments, resolve_output_path, run_extraction


@pytest.fixture
def invoice_file(tmp_path, clean_invoice_text):
    path = tmp_path / "acme.txt"
    path.write_text(clean_invoice_text, encoding="utf-8")
    return path


class TestArguments:
    """Tests for argument parsing"""

    def test_defaults(self):
        args = parse_arguments(["--input", "scan.txt"])
        assert args.input == "scan.txt"
        assert args.output is None
        assert args.confidence is None
        assert not args.debug

    def test_input_required(self):
        with pytest.raises(SystemExit):
            parse_arguments([])

    def test_output_json_file_for_single_input(self, tmp_path):
        target = resolve_output_path(tmp_path / "a.txt", str(tmp_path / "out" / "r.json"), True)
        assert target == tmp_path / "out" / "r.json"
        assert target.parent.is_dir()

    def test_output_directory(self, tmp_path):
        target = resolve_output_path(tmp_path / "a.txt", str(tmp_path / "results"), False)
        assert target == tmp_path / "results" / "a.json"


class TestMain:
    """Tests for main()"""

    def test_single_file(self, invoice_file, tmp_path):
        output = tmp_path / "result.json"
        code = main(["--input", str(invoice_file), "--output", str(output),
                     "--confidence", "91.5", "--quiet"])
        assert code == 0

        document = json.loads(output.read_text(encoding="utf-8"))
        assert document["invoice_number"] == "INV-2024-001"
        assert document["totals"]["ttc"] == "1800.00"
        assert document["meta"]["confidence"] == 91.5
        assert document["source_file"] == str(invoice_file)

    def test_directory(self, invoice_file, tmp_path):
        (tmp_path / "empty.txt").write_text("")
        output = tmp_path / "results"
        code = main(["--input", str(tmp_path), "--output", str(output), "--quiet"])
        assert code == 0
        assert sorted(path.name for path in output.iterdir()) == ["acme.json"]

    def test_missing_input(self, tmp_path):
        assert main(["--input", str(tmp_path / "nope.txt"), "--quiet"]) == 1

    def test_invalid_confidence(self, invoice_file, tmp_path):
        code = main(["--input", str(invoice_file), "--output", str(tmp_path / "r.json"),
                     "--confidence", "150", "--quiet"])
        assert code == 1

    def test_empty_directory(self, tmp_path):
        (tmp_path / "in").mkdir()
        code = main(["--input", str(tmp_path / "in"), "--output", str(tmp_path / "out"), "--quiet"])
        assert code == 1


class TestRunExtraction:
    """Tests for the programmatic entry point"""

    def test_returns_documents(self, invoice_file):
        results = run_extraction(str(invoice_file), confidence=55.0, write_output=False)
        assert len(results) == 1
        assert results[0]["vendor"]["name"] == "Acme Corp"
        assert results[0]["meta"]["warnings"] == [
            "Low OCR confidence (55.0%) - results should be checked manually"
        ]

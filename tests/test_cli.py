from __future__ import annotations

import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from editvm.__main__ import main

DOCUMENT = [{"tag": "p", "children": ["Hello, ", "World"]}]


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.document = self.tmp / "doc.json"
        self.document.write_text(json.dumps(DOCUMENT), encoding="utf-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def run_cli(self, program: object, *extra: str) -> tuple[int, str, str]:
        path = self.tmp / "program.json"
        path.write_text(program if isinstance(program, str) else json.dumps(program), encoding="utf-8")
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            status = main([str(self.document), str(path), *extra])
        return status, out.getvalue(), err.getvalue()

    def test_applies_program_and_prints_html(self) -> None:
        program = [["Enter"], ["DeleteElements", 1], ["InsertDocString", "Goodbye, "], ["UnwrapSelf"]]
        status, out, _ = self.run_cli(program, "--require-done")
        assert status == 0
        assert out.strip() == "Goodbye, \nWorld"

    def test_json_output(self) -> None:
        status, out, _ = self.run_cli([["AdvanceElements", 1], ["WrapPrevious", 1, {"class": "cool"}]], "-f", "json")
        assert status == 0
        assert json.loads(out) == [{"tag": "div", "attrs": {"class": "cool"}, "children": DOCUMENT}]

    def test_wrapper_tag_and_test_format(self) -> None:
        status, out, _ = self.run_cli(
            [["AdvanceElements", 1], ["WrapPrevious", 1, {}]],
            "--wrapper-tag",
            "section",
            "--format",
            "test",
        )
        assert status == 0
        assert out.splitlines()[0] == "| <section>"

    def test_vm_error_exits_with_status_one(self) -> None:
        status, out, err = self.run_cli([["Unenter"]])
        assert status == 1
        assert out == ""
        assert "cannot-unenter-root" in err

    def test_bad_program_exits_with_status_one(self) -> None:
        status, _, err = self.run_cli([["Jump", 3]])
        assert status == 1
        assert "Unknown instruction" in err

    def test_missing_file_exits_with_status_two(self) -> None:
        err = io.StringIO()
        with redirect_stderr(err):
            status = main([str(self.tmp / "missing.json"), str(self.tmp / "missing.json")])
        assert status == 2

    def test_debug_flag_traces(self) -> None:
        status, _, err = self.run_cli([["Enter"], ["AdvanceElements", 2], ["Unenter"]], "--debug")
        assert status == 0
        assert "TreeVM: Enter" in err
        assert "TreeVM: Unenter" in err


if __name__ == "__main__":
    unittest.main()

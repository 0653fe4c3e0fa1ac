from __future__ import annotations

import re

from employee_import.cli import main as cli_main

"""SUMMARY 行フォーマット契約テスト."""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY\s+total=([0-9]+)\s+success=([0-9]+)\s+failed=([0-9]+)\s+"
    r"elapsed_sec=([0-9]+\.?[0-9]*)\s+throughput_rps=([0-9]+\.?[0-9]*)$"
)


def test_summary_pattern_example_line():
    line = "SUMMARY total=3 success=2 failed=1 elapsed_sec=0.84 throughput_rps=2.38"
    assert SUMMARY_PATTERN.match(line)


def test_cli_emits_exactly_one_summary_line(write_config, make_workbook, employee_row, capsys):
    workbook = make_workbook([employee_row("E1"), employee_row("E2", role_name="Ghost"), employee_row("E3")])
    cli_main([str(workbook), "--dry-run"])
    lines = [ln for ln in capsys.readouterr().out.splitlines() if ln.startswith("SUMMARY")]
    assert len(lines) == 1
    m = SUMMARY_PATTERN.match(lines[0])
    assert m, lines[0]
    total, success, failed = (int(g) for g in m.groups()[:3])
    assert (total, success, failed) == (3, 2, 1)
    assert total == success + failed

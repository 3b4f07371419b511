"""CSV export of grade sheets and schedules, and parsing of grade sheets.

The exports are a convenience for spreadsheets, not a stable format: one
header row, comma separated, free text quoted.
"""

from __future__ import annotations

import csv
import io
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from escola.services.grades import GradeSheetRow

GRADE_HEADERS = [
    "Matrícula",
    "Aluno",
    "1º Bimestre",
    "2º Bimestre",
    "3º Bimestre",
    "4º Bimestre",
    "Média",
    "Situação",
]


def _quote(text: Any) -> str:
    return '"' + str(text).replace('"', '""') + '"'


def _score(value: Optional[float]) -> str:
    return "" if value is None else f"{value:.1f}"


def grades_to_csv(rows: Iterable[GradeSheetRow]) -> str:
    lines = [",".join(GRADE_HEADERS)]
    for row in rows:
        fields = [
            _quote(row.registration_number),
            _quote(row.student_name),
            *(_score(s) for s in row.scores),
            _score(row.average),
            row.status.label,
        ]
        lines.append(",".join(fields))
    return "\n".join(lines)


def schedule_to_csv(
    lessons: Dict[Tuple[int, str, str], str],
    days: Sequence[str],
    day_indexes: Sequence[int],
    time_slots: Sequence[Tuple[str, str]],
) -> str:
    """Grid with one row per time slot and one column per day.

    ``lessons`` maps (day_index, start, end) to the cell text, usually
    "Subject - Teacher".
    """
    lines = [",".join(["Horário", *days])]
    for start, end in time_slots:
        row = [f"{start} - {end}"]
        for idx in day_indexes:
            text = lessons.get((idx, start, end))
            row.append(_quote(text) if text else "")
        lines.append(",".join(row))
    return "\n".join(lines)


# ----------------------------
# Import
# ----------------------------
def _norm(header: Any) -> str:
    s = str(header or "").strip().lower().replace('"', "")
    for a, b in (("º", ""), ("°", ""), ("í", "i"), ("é", "e"), (" ", "")):
        s = s.replace(a, b)
    return s


def _find_column(headers: List[str], *needles: str) -> Optional[int]:
    for i, h in enumerate(headers):
        if all(n in h for n in needles):
            return i
    return None


def parse_score(value: Any) -> Optional[float]:
    """Empty or unreadable cells become None; anything else must be 0..10."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        score = float(value)
    else:
        s = str(value).strip().replace(",", ".")
        if not s:
            return None
        try:
            score = float(s)
        except ValueError:
            return None
    if not 0 <= score <= 10:
        raise ValueError(f"score out of range: {value}")
    return score


def parse_grade_table(table: Sequence[Sequence[Any]]) -> List[Dict[str, Any]]:
    """Read a grade sheet (header + rows) into import rows.

    Header matching is loose: "Matricula"/"Matrícula", "Aluno"/"Nome" and any
    column mentioning "bim" and the bimester number. Rows without a
    registration number or name are skipped.
    """
    if len(table) < 2:
        raise ValueError("the sheet needs a header and at least one data row")

    headers = [_norm(h) for h in table[0]]
    reg_col = _find_column(headers, "matricula")
    name_col = _find_column(headers, "aluno")
    if name_col is None:
        name_col = _find_column(headers, "nome")
    bim_cols = [_find_column(headers, str(n), "bim") for n in range(1, 5)]

    if reg_col is None or name_col is None or None in bim_cols:
        raise ValueError(
            "invalid header, expected: " + ", ".join(GRADE_HEADERS[:6])
        )

    rows: List[Dict[str, Any]] = []
    for values in table[1:]:
        values = list(values)

        def cell(col: int) -> Any:
            return values[col] if col < len(values) else None

        reg = str(cell(reg_col) or "").strip()
        name = str(cell(name_col) or "").strip()
        if not reg or not name:
            continue

        row = {"registration_number": reg, "student_name": name}
        for n, col in enumerate(bim_cols, start=1):
            row[f"bim{n}"] = parse_score(cell(col))
        rows.append(row)
    return rows


def read_csv_table(text: str) -> List[List[str]]:
    return [r for r in csv.reader(io.StringIO(text)) if any(c.strip() for c in r)]

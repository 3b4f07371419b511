import pytest


@pytest.fixture()
def sheet(make):
    cls = make.school_class("9A")
    subject = make.subject("Matemática", "MAT")
    ana = make.student("Ana Silva Santos", "2024001", cls["id"])
    bruno = make.student("Bruno Costa Oliveira", "2024002", cls["id"])
    periods = make.bimesters(2024)
    return cls, subject, ana, bruno, periods


def _grades(student, subject, periods, scores):
    return [
        {"student_id": student["id"], "subject_id": subject["id"], "grading_period_id": p["id"], "score": s}
        for p, s in zip(periods, scores)
    ]


def _params(cls, subject, year=2024):
    return {"class_id": cls["id"], "subject_id": subject["id"], "academic_year": year}


def test_upsert_and_read_sheet(api, sheet):
    cls, subject, ana, bruno, periods = sheet

    r = api.put("/grades", json=_grades(ana, subject, periods, [8.5, 7.8, 9.0, 8.2]))
    assert r.status_code == 200
    assert r.json() == {"written": 4}
    api.put("/grades", json=_grades(bruno, subject, periods, [4.5, 5.0, None, None]))

    rows = api.get("/grades", params=_params(cls, subject)).json()
    by_reg = {r["registration_number"]: r for r in rows}

    assert by_reg["2024001"]["average"] == 8.4
    assert by_reg["2024001"]["status"] == "approved"
    assert by_reg["2024002"]["bim3"] is None
    assert by_reg["2024002"]["average"] == 4.8
    assert by_reg["2024002"]["status"] == "pending"


def test_upsert_updates_by_natural_key(api, sheet):
    cls, subject, ana, _, periods = sheet
    api.put("/grades", json=_grades(ana, subject, periods, [5.0, 5.0, 5.0, 5.0]))
    api.put("/grades", json=_grades(ana, subject, periods[:1], [9.0]))

    row = next(r for r in api.get("/grades", params=_params(cls, subject)).json() if r["student_id"] == ana["id"])
    assert [row["bim1"], row["bim2"]] == [9.0, 5.0]


def test_null_score_keeps_stored_value(api, sheet):
    cls, subject, ana, _, periods = sheet
    api.put("/grades", json=_grades(ana, subject, periods[:1], [6.0]))

    r = api.put("/grades", json=_grades(ana, subject, periods[:1], [None]))
    assert r.json() == {"written": 0}

    row = next(r for r in api.get("/grades", params=_params(cls, subject)).json() if r["student_id"] == ana["id"])
    assert row["bim1"] == 6.0


@pytest.mark.parametrize("score", [-0.1, 10.5])
def test_out_of_range_score_rejected(api, sheet, score):
    _, subject, ana, _, periods = sheet
    r = api.put("/grades", json=_grades(ana, subject, periods[:1], [score]))
    assert r.status_code == 422


def test_export_csv(api, sheet):
    cls, subject, ana, _, periods = sheet
    api.put("/grades", json=_grades(ana, subject, periods, [8.5, 7.8, 9.0, 8.2]))

    r = api.get("/grades/export", params=_params(cls, subject))
    assert r.status_code == 200
    assert "notas_MAT_9A_" in r.headers["content-disposition"]

    lines = r.text.split("\n")
    assert lines[0] == "Matrícula,Aluno,1º Bimestre,2º Bimestre,3º Bimestre,4º Bimestre,Média,Situação"
    assert lines[1] == '"2024001","Ana Silva Santos",8.5,7.8,9.0,8.2,8.4,Aprovado'
    assert lines[2] == '"2024002","Bruno Costa Oliveira",,,,,,Pendente'


def test_sheet_without_periods_is_empty(api, make):
    cls = make.school_class()
    subject = make.subject()
    make.student("Ana Silva Santos", "2024001", cls["id"])
    assert api.get("/grades", params=_params(cls, subject, 2030)).json() == []


def test_sheet_unknown_class(api, make):
    subject = make.subject()
    r = api.get("/grades", params={"class_id": 999, "subject_id": subject["id"], "academic_year": 2024})
    assert r.status_code == 404


def test_import_by_registration_number(api, sheet):
    cls, subject, ana, bruno, _ = sheet
    payload = {
        **_params(cls, subject),
        "rows": [
            {"registration_number": "2024001", "bim1": 7.0, "bim2": 8.0},
            {"registration_number": "2024002", "bim1": 3.0, "bim2": 4.0, "bim3": 4.0, "bim4": 3.0},
            {"registration_number": "9999999", "bim1": 10},
        ],
    }
    r = api.post("/grades/import", json=payload)
    assert r.status_code == 200
    assert r.json() == {"written": 6, "unknown_registrations": ["9999999"]}

    by_id = {r["student_id"]: r for r in api.get("/grades", params=_params(cls, subject)).json()}
    assert by_id[bruno["id"]]["status"] == "failed"
    assert by_id[ana["id"]]["average"] == 7.5


def test_grading_period_duplicate(api, make):
    make.bimesters(2025)
    r = api.post(
        "/grading-periods",
        json={
            "academic_year": 2025,
            "period_number": 1,
            "name": "1º Bimestre",
            "start_date": "2025-02-01",
            "end_date": "2025-04-01",
        },
    )
    assert r.status_code == 409
    assert len(api.get("/grading-periods", params={"academic_year": 2025}).json()) == 4

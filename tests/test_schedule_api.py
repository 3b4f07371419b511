from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from escola.models import ScheduleEntry

SIX_SLOTS = [
    {"start": "07:00", "end": "07:50"},
    {"start": "07:50", "end": "08:40"},
    {"start": "08:50", "end": "09:40"},
    {"start": "09:40", "end": "10:30"},
    {"start": "10:40", "end": "11:30"},
    {"start": "11:30", "end": "12:20"},
]


def _setup_two_assignments(make):
    cls = make.school_class(room="Sala 12")
    maria = make.teacher("Maria Santos")
    carlos = make.teacher("Carlos Oliveira")
    mat = make.subject("Matemática", "MAT", workload_minutes=100)
    fis = make.subject("Física", "FIS", workload_minutes=50)
    make.assignment(maria["id"], mat["id"], cls["id"])
    make.assignment(carlos["id"], fis["id"], cls["id"])
    return cls, maria, carlos, mat, fis


def test_generate_full_week(api, make):
    cls, maria, carlos, mat, fis = _setup_two_assignments(make)

    r = api.post(f"/schedules/class/{cls['id']}/generate", json={"time_slots": SIX_SLOTS, "seed": 1})
    assert r.status_code == 200, r.text
    body = r.json()

    assert body["requested"] == 4
    assert body["complete"] is True
    assert body["unplaced"] == []
    assert len(body["placed"]) == 4

    cells = {(e["day_of_week"], e["start_time"], e["end_time"]) for e in body["placed"]}
    assert len(cells) == 4
    assert all(e["room"] == "Sala 12" for e in body["placed"])
    assert sorted(e["subject_id"] for e in body["placed"]) == sorted([mat["id"]] * 2 + [fis["id"]] * 2)

    listed = api.get(f"/schedules/class/{cls['id']}").json()
    assert len(listed) == 4
    assert {e["subject"]["code"] for e in listed} == {"MAT", "FIS"}


def test_single_cell_reports_unplaced(api, make):
    cls, *_ = _setup_two_assignments(make)

    r = api.post(
        f"/schedules/class/{cls['id']}/generate",
        json={"days": ["Segunda"], "time_slots": [{"start": "07:00", "end": "07:50"}]},
    )
    body = r.json()

    assert r.status_code == 200
    assert len(body["placed"]) == 1
    assert len(body["unplaced"]) == 3
    assert body["complete"] is False
    assert len(api.get(f"/schedules/class/{cls['id']}").json()) == 1


def test_regenerate_replaces_previous_entries(api, make, db):
    cls, *_ = _setup_two_assignments(make)
    url = f"/schedules/class/{cls['id']}/generate"

    first = api.post(url, json={"seed": 1}).json()
    second = api.post(url, json={"seed": 2}).json()

    stored = db.query(ScheduleEntry).filter(ScheduleEntry.class_id == cls["id"]).all()
    assert sorted(e.id for e in stored) == sorted(e["id"] for e in second["placed"])
    assert not {e["id"] for e in first["placed"]} & {e.id for e in stored}


def test_failed_save_keeps_previous_schedule(api, make, db, monkeypatch):
    cls, *_ = _setup_two_assignments(make)
    url = f"/schedules/class/{cls['id']}/generate"
    first = api.post(url, json={"seed": 1}).json()

    def broken_commit(self):
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(Session, "commit", broken_commit)
    r = api.post(url, json={"seed": 2})
    monkeypatch.undo()

    assert r.status_code == 503
    assert r.json()["detail"] == "could not save the generated schedule"
    stored = db.query(ScheduleEntry).filter(ScheduleEntry.class_id == cls["id"]).all()
    assert sorted(e.id for e in stored) == sorted(e["id"] for e in first["placed"])


def test_same_seed_same_grid(api, make):
    cls, *_ = _setup_two_assignments(make)
    url = f"/schedules/class/{cls['id']}/generate"

    def cells(body):
        return sorted(
            (e["teacher_id"], e["subject_id"], e["day_of_week"], e["start_time"]) for e in body["placed"]
        )

    assert cells(api.post(url, json={"seed": 99}).json()) == cells(api.post(url, json={"seed": 99}).json())


def test_nothing_to_schedule_keeps_existing_entries(api, make):
    cls = make.school_class()
    subject = make.subject("Artes", "ART")
    teacher = make.teacher("Paula Santos")
    manual = api.post(
        "/schedules",
        json={
            "class_id": cls["id"],
            "subject_id": subject["id"],
            "teacher_id": teacher["id"],
            "day_of_week": 0,
            "start_time": "07:00",
            "end_time": "07:50",
        },
    )
    assert manual.status_code == 201

    r = api.post(f"/schedules/class/{cls['id']}/generate")
    assert r.status_code == 400
    assert "no subjects" in r.json()["detail"]
    assert len(api.get(f"/schedules/class/{cls['id']}").json()) == 1


def test_generate_unknown_class(api):
    assert api.post("/schedules/class/999/generate").status_code == 404


def test_generate_rejects_bad_input(api, make):
    cls, *_ = _setup_two_assignments(make)
    url = f"/schedules/class/{cls['id']}/generate"

    assert api.post(url, json={"days": []}).status_code == 422
    assert api.post(url, json={"time_slots": []}).status_code == 422
    assert api.post(url, json={"days": ["Monday"]}).status_code == 422
    assert api.post(url, json={"time_slots": [{"start": "08:00", "end": "07:00"}]}).status_code == 422


def test_teacher_not_double_booked_across_classes(api, make):
    maria = make.teacher("Maria Santos")
    mat = make.subject("Matemática", "MAT", workload_minutes=100)
    a = make.school_class("9º A")
    b = make.school_class("9º B")
    make.assignment(maria["id"], mat["id"], a["id"])
    make.assignment(maria["id"], mat["id"], b["id"])

    two_cells = {"days": ["Segunda"], "time_slots": SIX_SLOTS[:2]}
    first = api.post(f"/schedules/class/{a['id']}/generate", json=two_cells).json()
    second = api.post(f"/schedules/class/{b['id']}/generate", json=two_cells).json()

    assert len(first["placed"]) == 2
    assert second["placed"] == []
    assert len(second["unplaced"]) == 2


def test_manual_entry_conflicts(api, make):
    cls = make.school_class("9º A")
    other = make.school_class("9º B")
    subject = make.subject()
    teacher = make.teacher()
    entry = {
        "class_id": cls["id"],
        "subject_id": subject["id"],
        "teacher_id": teacher["id"],
        "day_of_week": 1,
        "start_time": "07:00",
        "end_time": "07:50",
    }
    assert api.post("/schedules", json=entry).status_code == 201
    assert api.post("/schedules", json=entry).status_code == 409
    assert api.post("/schedules", json={**entry, "class_id": other["id"]}).status_code == 409
    assert api.post("/schedules", json={**entry, "class_id": other["id"], "teacher_id": None}).status_code == 201


def test_schedule_export(api, make):
    cls = make.school_class("9A")
    subject = make.subject("Matemática", "MAT")
    teacher = make.teacher("Maria Santos")
    api.post(
        "/schedules",
        json={
            "class_id": cls["id"],
            "subject_id": subject["id"],
            "teacher_id": teacher["id"],
            "day_of_week": 0,
            "start_time": "07:00",
            "end_time": "07:50",
        },
    )

    r = api.get(f"/schedules/class/{cls['id']}/export")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    lines = r.text.split("\n")
    assert lines[0] == "Horário,Segunda,Terça,Quarta,Quinta,Sexta"
    assert lines[1] == '07:00 - 07:50,"Matemática - Maria Santos",,,,'
    assert len(lines) == 7


def test_delete_class_schedule(api, make):
    cls, *_ = _setup_two_assignments(make)
    api.post(f"/schedules/class/{cls['id']}/generate")

    assert api.delete(f"/schedules/class/{cls['id']}").status_code == 204
    assert api.get(f"/schedules/class/{cls['id']}").json() == []


def test_manual_entry_must_end_after_start(api, make):
    cls = make.school_class()
    subject = make.subject()
    entry = {
        "class_id": cls["id"],
        "subject_id": subject["id"],
        "day_of_week": 2,
        "start_time": "08:40",
        "end_time": "07:50",
    }
    assert api.post("/schedules", json=entry).status_code == 422

    created = api.post("/schedules", json={**entry, "start_time": "07:00"}).json()
    r = api.patch(f"/schedules/{created['id']}", json={"start_time": "09:00"})
    assert r.status_code == 422
    assert api.get(f"/schedules/{created['id']}").json()["start_time"] == "07:00"

from escola.services.notifications import DEFAULT_NOTIFICATIONS, NotificationCenter


def test_center_seed_and_dismiss():
    center = NotificationCenter(DEFAULT_NOTIFICATIONS)
    assert len(center) == 3

    first = center.list()[0]
    assert center.dismiss(first.id) == first
    assert center.dismiss(first.id) is None
    assert [n.id for n in center.list()] == ["2", "3"]


def test_push_gets_next_id():
    center = NotificationCenter()
    a = center.push("Notas lançadas", "9º A - Matemática", "grade", "/notas")
    b = center.push("Reunião", "Conselho de classe", "calendar")
    assert (a.id, b.id) == ("1", "2")
    assert b.action_path is None


def test_api_dismiss(api):
    body = api.get("/notifications").json()
    assert body["count"] == 3

    r = api.post("/notifications/1/dismiss")
    assert r.status_code == 200
    assert r.json()["action_path"] == "/alunos"
    assert api.get("/notifications").json()["count"] == 2
    assert api.post("/notifications/1/dismiss").status_code == 404


def test_len_follows_dismiss():
    center = NotificationCenter(DEFAULT_NOTIFICATIONS)
    center.dismiss("2")
    assert len(center) == 2
    assert len(center) == len(center.list())

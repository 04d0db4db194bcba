from datetime import date

from okfees.models import FeePayment
from okfees.repositories import DataServiceError
from okfees.routes import students as students_routes


def _add_student(client, **fields):
    payload = {"name": "Rahul Sharma", "email": "rahul@example.com", "batch": "Morning",
               "fee_amount": "5000", "fee_paid": "3000"}
    payload.update(fields)
    response = client.post("/api/students", json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()["student"]


def test_create_student_returns_refetched_list(auth_client):
    response = auth_client.post("/api/students", json={"name": "Rahul Sharma", "fee_amount": "5000", "fee_paid": "3000"})
    assert response.status_code == 201
    body = response.get_json()
    assert body["success"] is True
    assert body["notice"]["variant"] == "default"
    assert body["student"]["student_code"].startswith("STU-")
    assert body["student"]["pending_amount"] == 2000
    assert body["student"]["paid_percentage"] == 60
    assert [s["name"] for s in body["students"]] == ["Rahul Sharma"]


def test_create_student_without_fee_paid_defaults_to_zero(auth_client):
    student = _add_student(auth_client, fee_paid="", fee_amount="")
    assert student["fee_paid"] == 0
    assert student["fee_amount"] is None
    assert student["status"] == "active"
    assert student["enrollment_date"] == date.today().isoformat()


def test_create_student_requires_name(auth_client):
    response = auth_client.post("/api/students", json={"email": "x@example.com"})
    assert response.status_code == 400
    body = response.get_json()
    assert body["notice"]["variant"] == "destructive"
    assert "name" in body["message"]


def test_student_list_filter(auth_client):
    student = _add_student(auth_client)
    _add_student(auth_client, name="Priya Verma", email=None, batch="Evening")
    for term in ("rahul", "SHARMA", student["student_code"][-4:]):
        body = auth_client.get("/api/students", query_string={"q": term}).get_json()
        assert [s["name"] for s in body["students"]] == ["Rahul Sharma"], term
        assert body["total"] == 2


def test_update_and_delete_student(auth_client):
    student = _add_student(auth_client)
    response = auth_client.put(f"/api/students/{student['id']}", json={"fee_paid": "5000"})
    assert response.status_code == 200
    updated = response.get_json()["student"]
    assert updated["name"] == "Rahul Sharma"
    assert updated["pending_amount"] == 0

    assert auth_client.delete(f"/api/students/{student['id']}").status_code == 200
    response = auth_client.delete(f"/api/students/{student['id']}")
    assert response.status_code == 404
    assert response.get_json()["notice"]["title"] == "Not found"


def test_other_institute_cannot_touch_students(auth_client, make_user, login):
    student = _add_student(auth_client)
    make_user("other@example.com")
    other = login("other@example.com")

    assert other.get("/api/students").get_json()["students"] == []
    assert other.put(f"/api/students/{student['id']}", json={"name": "X"}).status_code == 404
    assert other.delete(f"/api/students/{student['id']}").status_code == 404
    assert len(auth_client.get("/api/students").get_json()["students"]) == 1


def test_admin_student_search(auth_client):
    student = _add_student(auth_client)
    assert auth_client.get("/api/students/search", query_string={"q": " "}).status_code == 400
    assert auth_client.get("/api/students/search", query_string={"q": "nobody"}).status_code == 404
    body = auth_client.get("/api/students/search", query_string={"q": student["student_code"]}).get_json()
    assert body["student"]["id"] == student["id"]


def test_student_id_whatsapp_needs_configured_number(auth_client):
    student = _add_student(auth_client)
    response = auth_client.post(f"/api/students/{student['id']}/whatsapp")
    assert response.status_code == 400
    assert response.get_json()["message"] == "Please configure your WhatsApp number first"

    auth_client.put("/api/settings/whatsapp", json={"whatsapp_number": "+91 98765-43210"})
    response = auth_client.post(f"/api/students/{student['id']}/whatsapp")
    assert response.status_code == 200
    assert response.get_json()["url"].startswith("https://wa.me/919876543210?text=")


def test_record_payment_and_summary(auth_client, app):
    student = _add_student(auth_client)
    today = date.today()
    response = auth_client.post("/api/fees", json={
        "student_id": student["id"], "month": today.month, "year": today.year, "amount_paid": "1000",
    })
    assert response.status_code == 201
    body = response.get_json()
    assert body["payment"]["student_code"] == student["student_code"]
    assert body["payment"]["payment_date"] == today.isoformat()
    assert body["summary"] == {"total_collected": 1000, "this_month": 1000, "total_payments": 1}

    assert auth_client.post("/api/fees", json={
        "student_id": student["id"], "month": 13, "year": today.year, "amount_paid": "10",
    }).status_code == 400

    payment_id = body["payment"]["id"]
    assert auth_client.delete(f"/api/fees/{payment_id}").get_json()["payments"] == []
    with app.app_context():
        assert FeePayment.query.count() == 0


def test_payment_for_other_institutes_student(auth_client, make_user, login):
    student = _add_student(auth_client)
    make_user("other@example.com")
    other = login("other@example.com")
    response = other.post("/api/fees", json={"student_id": student["id"], "month": 1, "year": 2026, "amount_paid": "10"})
    assert response.status_code == 404
    assert response.get_json()["message"] == "Student not found"


def test_pending_payments(auth_client):
    _add_student(auth_client, name="Small", fee_amount="1000", fee_paid="900")
    _add_student(auth_client, name="Large", fee_amount="9000", fee_paid="0")
    _add_student(auth_client, name="Paid", fee_amount="1000", fee_paid="1000")
    _add_student(auth_client, name="Gone", fee_amount="8000", fee_paid="0", status="inactive")
    pending = auth_client.get("/api/fees/pending").get_json()["pending"]
    assert [p["student_name"] for p in pending] == ["Large", "Small"]


def test_announcements(auth_client):
    response = auth_client.post("/api/announcements", json={"title": "Holiday", "content": "Closed on Monday"})
    assert response.status_code == 201
    assert response.get_json()["announcement"]["media_type"] == "none"

    bad = auth_client.post("/api/announcements", json={"title": "x", "content": "y", "media_type": "gif"})
    assert bad.status_code == 400

    feed = auth_client.get("/api/announcements/feed").get_json()
    assert feed["unread_count"] == 1
    assert auth_client.get("/api/announcements/latest").get_json()["announcements"][0]["title"] == "Holiday"

    _add_student(auth_client, batch="Morning")
    assert auth_client.get("/api/announcements/batches").get_json()["batches"] == ["Morning"]


def test_event_cap(auth_client, app):
    app.config["EVENT_LIMIT"] = 2
    for title in ("One", "Two"):
        assert auth_client.post("/api/blog/events", json={"title": title, "description": "d"}).status_code == 201
    response = auth_client.post("/api/blog/events", json={"title": "Three", "description": "d"})
    assert response.status_code == 409
    assert response.get_json()["message"] == "You can only add up to 2 events"

    listing = auth_client.get("/api/blog/events").get_json()
    assert listing["can_create"] is False
    event_id = listing["events"][0]["id"]
    after = auth_client.delete(f"/api/blog/events/{event_id}").get_json()
    assert after["can_create"] is True


def test_live_classes_and_toppers(auth_client):
    response = auth_client.post("/api/blog/live-classes", json={
        "class_name": "Class 10", "subject": "Maths", "start_date": "2026-11-01", "timing": "5 PM",
        "teacher_name": "Mr. Rao",
    })
    assert response.status_code == 201
    assert response.get_json()["item"]["fee"] == 0

    response = auth_client.post("/api/blog/toppers", json={"name": "Asha", "class_name": "12", "marks": "98%"})
    assert response.status_code == 201
    assert response.get_json()["limit"] == 10


def test_institute_and_summary_defaults(auth_client):
    assert auth_client.get("/api/blog/institute").get_json()["institute"]["name"] == "My Coaching Institute"
    response = auth_client.put("/api/blog/institute", json={"name": "Bright Minds", "location": "Pune"})
    assert response.get_json()["institute"]["name"] == "Bright Minds"

    assert auth_client.get("/api/blog/summary").get_json()["summary"]["summary"].startswith("Our students")
    assert auth_client.put("/api/blog/summary", json={"summary": ""}).status_code == 400


def test_dashboard_aggregates(auth_client):
    student = _add_student(auth_client)
    _add_student(auth_client, name="Priya", batch="Evening", fee_amount="1000", fee_paid="1500", status="inactive")
    today = date.today()
    auth_client.post("/api/fees", json={"student_id": student["id"], "month": today.month, "year": today.year,
                                        "amount_paid": "750"})
    stats = auth_client.get("/api/dashboard").get_json()["stats"]
    assert stats == {
        "total_students": 2,
        "active_students": 1,
        "monthly_revenue": 750,
        "pending_dues": 2000,
        "active_batches": 2,
    }


def test_profile_settings(auth_client):
    response = auth_client.put("/api/settings/profile", json={"full_name": "Asha Rao", "institute_name": "Bright"})
    assert response.get_json()["profile"]["full_name"] == "Asha Rao"
    auth_client.put("/api/settings/whatsapp", json={"whatsapp_number": "9000000000"})
    profile = auth_client.get("/api/settings/profile").get_json()["profile"]
    assert profile["institute_name"] == "Bright"
    assert profile["whatsapp_number"] == "9000000000"

    missing = auth_client.post("/api/settings/whatsapp/student-id", json={"student_code": "STU-0001"})
    assert missing.status_code == 400
    link = auth_client.post("/api/settings/whatsapp/student-id",
                            json={"student_code": "STU-0001", "student_name": "Asha"}).get_json()["url"]
    assert link.startswith("https://wa.me/9000000000?text=")


def test_public_student_search(auth_client, client):
    student = _add_student(auth_client)
    assert client.get("/public/students/search").status_code == 400
    response = client.get("/public/students/search", query_string={"q": "nobody"})
    assert response.status_code == 404
    assert response.get_json()["notice"]["title"] == "Not found"

    body = client.get("/public/students/search", query_string={"q": "rahul"}).get_json()
    assert body["student"]["student_code"] == student["student_code"]
    assert "email" not in body["student"]

    share = client.get("/public/students/search/share", query_string={"q": student["student_code"]}).get_json()
    assert share["url"].startswith("https://wa.me/?text=")


def test_index_banner(client):
    assert client.get("/").get_json()["name"] == "OkFees"


def test_non_finite_fee_is_a_validation_error(auth_client):
    for fields in ({"fee_amount": "inf", "fee_paid": "0"}, {"fee_amount": "1000", "fee_paid": "nan"}):
        response = auth_client.post("/api/students", json={"name": "Rahul Sharma", **fields})
        assert response.status_code == 400
        assert response.get_json()["notice"]["title"] == "Please check the form"
    assert auth_client.get("/api/students").get_json()["students"] == []


def test_topper_cap_blocks_create_until_a_delete(auth_client):
    for n in range(10):
        response = auth_client.post("/api/blog/toppers", json={"name": f"Topper {n}", "class_name": "12", "marks": "95%"})
        assert response.status_code == 201
    response = auth_client.post("/api/blog/toppers", json={"name": "Eleventh", "class_name": "12", "marks": "90%"})
    assert response.status_code == 409
    assert response.get_json()["message"] == "You can only add up to 10 topper students"

    listing = auth_client.get("/api/blog/toppers").get_json()
    assert listing["can_create"] is False
    assert len(listing["toppers"]) == 10
    after = auth_client.delete(f"/api/blog/toppers/{listing['toppers'][0]['id']}").get_json()
    assert after["can_create"] is True
    response = auth_client.post("/api/blog/toppers", json={"name": "Eleventh", "class_name": "12", "marks": "90%"})
    assert response.status_code == 201


def test_saved_row_is_reported_when_reload_fails(auth_client, monkeypatch):
    def broken_snapshot(ctx, term=None):
        raise DataServiceError("fetch", "students")

    monkeypatch.setattr(students_routes, "student_snapshot", broken_snapshot)
    response = auth_client.post("/api/students", json={"name": "Rahul Sharma"})
    assert response.status_code == 201
    body = response.get_json()
    assert body["success"] is True
    assert body["refreshed"] is False
    assert body["student"]["student_code"].startswith("STU-")

    monkeypatch.undo()
    assert [s["name"] for s in auth_client.get("/api/students").get_json()["students"]] == ["Rahul Sharma"]


def test_non_object_json_body_is_a_validation_error(auth_client):
    for body in (["Rahul"], "Rahul", 42):
        response = auth_client.post("/api/students", json=body)
        assert response.status_code == 400
        assert "name" in response.get_json()["message"]

import re

import pytest

from okfees import repositories
from okfees.models import FeePayment
from okfees.repositories import LimitReached, RowNotFound
from okfees.session import SessionEnded


def test_owners_never_see_each_others_rows(owners):
    first, second = owners
    mine = repositories.students(first).insert({"name": "Rahul Sharma"})

    assert repositories.students(second).list() == []
    with pytest.raises(RowNotFound):
        repositories.students(second).get(mine.id)
    with pytest.raises(RowNotFound):
        repositories.students(second).update(mine.id, {"name": "Hijacked"})
    with pytest.raises(RowNotFound):
        repositories.students(second).delete(mine.id)

    assert [s.name for s in repositories.students(first).list()] == ["Rahul Sharma"]


def test_insert_is_visible_in_next_list_newest_first(owners):
    first, _ = owners
    repo = repositories.students(first)
    repo.insert({"name": "Older"})
    created = repo.insert({"name": "Newer"})
    rows = repo.list()
    assert rows[0].id == created.id
    assert [s.name for s in rows] == ["Newer", "Older"]


def test_delete_is_idempotent(owners):
    first, _ = owners
    repo = repositories.students(first)
    keep = repo.insert({"name": "Keep"})
    gone = repo.insert({"name": "Gone"})

    repo.delete(gone.id)
    with pytest.raises(RowNotFound):
        repo.delete(gone.id)
    assert [s.id for s in repo.list()] == [keep.id]


def test_student_defaults(owners):
    first, _ = owners
    student = repositories.students(first).insert({"name": "No Fees", "fee_paid": None})
    assert student.fee_paid == 0
    assert student.fee_amount is None
    assert student.status == "active"
    assert student.enrollment_date is not None
    assert student.pending_amount == 0


def test_student_codes_are_generated_and_unique_across_owners(owners):
    first, second = owners
    a = repositories.students(first).insert({"name": "A"})
    b = repositories.students(second).insert({"name": "B"})
    c = repositories.students(first).insert({"name": "C"})

    codes = [a.student_code, b.student_code, c.student_code]
    assert all(re.match(r"^STU-\d{4}$", code) for code in codes)
    assert len(set(codes)) == 3


def test_search_over_code_and_name(owners):
    first, _ = owners
    repo = repositories.students(first)
    student = repo.insert({"name": "Rahul Sharma", "batch": "Morning"})
    assert repo.find_one(student.student_code, fields=("student_code", "name")).id == student.id
    assert repo.find_one("sharma").id == student.id
    with pytest.raises(RowNotFound):
        repo.find_one("Morning", fields=("student_code", "name"))


def test_event_cap_blocks_inserts_until_a_delete(owners, app_ctx):
    first, _ = owners
    app_ctx.config["EVENT_LIMIT"] = 2
    repo = repositories.events(first)
    one = repo.insert({"title": "Open day", "description": "Come visit"})
    repo.insert({"title": "Results", "description": "Board results"})

    assert repo.can_create() is False
    with pytest.raises(LimitReached) as exc:
        repo.insert({"title": "Third", "description": "Too many"})
    assert str(exc.value) == "You can only add up to 2 events"

    repo.delete(one.id)
    assert repo.can_create() is True


def test_singletons_are_created_lazily_once(owners):
    first, second = owners
    info = repositories.institute_info(first).get_or_create()
    again = repositories.institute_info(first).get_or_create()
    assert info.id == again.id
    assert info.name == "My Coaching Institute"

    repositories.institute_info(first).save({"name": "Bright Minds", "location": "Pune"})
    assert repositories.institute_info(first).get_or_create().name == "Bright Minds"
    assert repositories.institute_info(second).get_or_create().name == "My Coaching Institute"

    summary = repositories.student_summary(first).get_or_create()
    assert summary.summary.startswith("Our students")


def test_deleting_student_removes_payments(owners):
    first, _ = owners
    student = repositories.students(first).insert({"name": "Payer"})
    repositories.fee_payments(first).insert({"student_id": student.id, "month": 4, "year": 2026, "amount_paid": 500})
    assert FeePayment.query.count() == 1

    repositories.students(first).delete(student.id)
    assert FeePayment.query.count() == 0


def test_payment_must_reference_own_student(owners):
    first, second = owners
    theirs = repositories.students(second).insert({"name": "Other institute"})
    with pytest.raises(RowNotFound):
        repositories.fee_payments(first).insert({"student_id": theirs.id, "month": 1, "year": 2026, "amount_paid": 10})
    assert FeePayment.query.count() == 0


def test_payments_ordered_by_period(owners):
    first, _ = owners
    student = repositories.students(first).insert({"name": "Payer"})
    repo = repositories.fee_payments(first)
    for month, year in ((3, 2025), (1, 2026), (11, 2025)):
        repo.insert({"student_id": student.id, "month": month, "year": year, "amount_paid": 100})
    assert [(p.month, p.year) for p in repo.list()] == [(1, 2026), (11, 2025), (3, 2025)]


def test_feed_scope(owners):
    first, second = owners
    repositories.announcements(first).insert({"title": "Mine", "content": "x"})
    repositories.announcements(second).insert({"title": "Theirs", "content": "y"})

    own = repositories.latest_announcements(first, 10, "owner")
    everyone = repositories.latest_announcements(first, 10, "all")
    assert [a.title for a in own] == ["Mine"]
    assert {a.title for a in everyone} == {"Mine", "Theirs"}


def test_ended_session_stops_data_access(owners):
    first, _ = owners
    repo = repositories.students(first)
    first.end("signed_out")
    with pytest.raises(SessionEnded):
        repo.list()


def test_profile_save_only_touches_named_fields(owners):
    first, _ = owners
    repo = repositories.profiles(first)
    repo.save({"full_name": "Asha Rao", "phone": "123"}, only=("full_name", "phone"))
    repo.save({"whatsapp_number": "+91 90000 00000"}, only=("whatsapp_number",))
    profile = repo.get_or_create()
    assert profile.full_name == "Asha Rao"
    assert profile.whatsapp_number == "+91 90000 00000"

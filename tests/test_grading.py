from datetime import datetime, timedelta, timezone

import pytest

from tests.conftest import TestingSessionLocal
from tutorhub.core.errors import OutOfRangeError
from tutorhub.core.timeutils import as_utc
from tutorhub.schemas.submission import TextContent
from tutorhub.services.grading import grade_submission
from tutorhub.services.submissions import get_submission, submit


@pytest.fixture()
def submission(client, seed, student_headers):
    r = client.post(
        f"/assignments/{seed['assignment']}/submissions",
        headers=student_headers,
        json={"type": "TEXT", "content": "Answer 1"},
    )
    assert r.status_code == 201, r.text
    return r.json()


@pytest.mark.parametrize("grade,expected", [(100, 200), (0, 200), (101, 400), (-1, 400)])
def test_grade_bounds(client, teacher_headers, submission, grade, expected):
    r = client.post(f"/submissions/{submission['id']}/grade", headers=teacher_headers, json={"grade": grade})
    assert r.status_code == expected, r.text
    if expected == 400:
        assert r.json()["error"] == "OutOfRangeError"


def test_grading_sets_status_and_feedback(client, teacher_headers, submission):
    r = client.post(
        f"/submissions/{submission['id']}/grade",
        headers=teacher_headers,
        json={"grade": 80, "feedback": "Good"},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["status"] == "GRADED"
    assert body["grade"] == 80
    assert body["feedback"] == "Good"
    assert body["graded_at"] is not None


def test_only_owner_teacher_can_grade(client, other_teacher_headers, student_headers, submission):
    r = client.post(f"/submissions/{submission['id']}/grade", headers=other_teacher_headers, json={"grade": 50})
    assert r.status_code == 403
    assert r.json()["error"] == "AuthorizationError"

    r = client.post(f"/submissions/{submission['id']}/grade", headers=student_headers, json={"grade": 50})
    assert r.status_code == 403


def test_feedback_length_is_bounded(client, teacher_headers, submission):
    r = client.post(
        f"/submissions/{submission['id']}/grade",
        headers=teacher_headers,
        json={"grade": 50, "feedback": "x" * 1001},
    )
    assert r.status_code == 422

    r = client.post(
        f"/submissions/{submission['id']}/grade",
        headers=teacher_headers,
        json={"grade": 50, "feedback": "x" * 1000},
    )
    assert r.status_code == 200


def test_unknown_submission_is_not_found(client, teacher_headers):
    r = client.post("/submissions/999999/grade", headers=teacher_headers, json={"grade": 1})
    assert r.status_code == 404


def test_grade_resubmit_regrade_scenario(client, teacher_headers, student_headers, seed, submission):
    sid = submission["id"]

    r = client.post(f"/submissions/{sid}/grade", headers=teacher_headers, json={"grade": 80, "feedback": "Good"})
    first_graded_at = r.json()["graded_at"]

    r = client.post(
        f"/assignments/{seed['assignment']}/submissions",
        headers=student_headers,
        json={"type": "TEXT", "content": "Answer 2"},
    )
    assert r.json()["id"] == sid

    r = client.get(f"/submissions/{sid}", headers=student_headers)
    body = r.json()
    assert body["status"] == "PENDING"
    assert body["content"] == "Answer 2"
    assert body["grade"] is None
    assert body["feedback"] is None
    assert body["graded_at"] is None

    r = client.post(
        f"/submissions/{sid}/grade",
        headers=teacher_headers,
        json={"grade": 95, "feedback": "Much better"},
    )
    body = client.get(f"/submissions/{sid}", headers=teacher_headers).json()
    assert body["status"] == "GRADED"
    assert body["grade"] == 95
    assert body["feedback"] == "Much better"
    assert body["graded_at"] > first_graded_at


def test_regrade_overwrites_with_new_timestamp(seed):
    t1 = datetime(2026, 5, 1, 9, 0, tzinfo=timezone.utc)
    t2 = t1 + timedelta(hours=3)

    db = TestingSessionLocal()
    try:
        sub = submit(db, seed["assignment"], seed["student"], TextContent(content="Answer 1"))
        grade_submission(db, sub.id, seed["teacher"], 80, "Good", now=t1)
        grade_submission(db, sub.id, seed["teacher"], 95, "Better", now=t2)

        sub = get_submission(db, sub.id)
        assert sub.status == "GRADED"
        assert sub.grade == 95
        assert sub.feedback == "Better"
        assert as_utc(sub.graded_at) == t2

        with pytest.raises(OutOfRangeError):
            grade_submission(db, sub.id, seed["teacher"], 100.5)
    finally:
        db.close()


def test_non_finite_grade_is_rejected(client, teacher_headers, submission):
    for raw in ('{"grade": NaN}', '{"grade": Infinity}'):
        r = client.post(
            f"/submissions/{submission['id']}/grade",
            headers={**teacher_headers, "Content-Type": "application/json"},
            content=raw,
        )
        assert r.status_code == 422, r.text

    body = client.get(f"/submissions/{submission['id']}", headers=teacher_headers).json()
    assert body["status"] == "PENDING"
    assert body["grade"] is None


def test_nan_grade_is_out_of_range(seed, submission):
    db = TestingSessionLocal()
    try:
        with pytest.raises(OutOfRangeError):
            grade_submission(db, submission["id"], seed["teacher"], float("nan"))

        sub = get_submission(db, submission["id"])
        assert sub.status == "PENDING"
        assert sub.grade is None
    finally:
        db.close()

from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from tests.conftest import TestingSessionLocal
from tutorhub.core.errors import ValidationError
from tutorhub.models.assignment import Assignment
from tutorhub.models.membership import Membership
from tutorhub.models.submission import Submission, SubmissionRevision
from tutorhub.schemas.submission import TextContent
from tutorhub.services import submissions as submission_service


def _submit(client, headers, assignment_id, **body):
    return client.post(f"/assignments/{assignment_id}/submissions", headers=headers, json=body)


def test_submit_and_resubmit_updates_same_row(client, seed, student_headers):
    r1 = _submit(client, student_headers, seed["assignment"], type="TEXT", content="first")
    assert r1.status_code == 201, r1.text
    id1 = r1.json()["id"]
    assert r1.json()["status"] == "PENDING"

    r2 = _submit(client, student_headers, seed["assignment"], type="URL", content="https://example.com/answer")
    assert r2.status_code == 201, r2.text
    body2 = r2.json()
    assert body2["id"] == id1
    assert body2["type"] == "URL"
    assert body2["content"] == "https://example.com/answer"


def test_one_current_submission_per_student(client, seed, student_headers, db):
    for i in range(3):
        _submit(client, student_headers, seed["assignment"], type="TEXT", content=f"attempt {i}")

    rows = (
        db.query(Submission)
        .filter(Submission.assignment_id == seed["assignment"], Submission.student_id == seed["student"])
        .all()
    )
    assert len(rows) == 1
    assert rows[0].content == "attempt 2"


def test_late_submission_is_allowed_and_marked_late(client, seed, student_headers):
    # force the assignment due date to the past in the test DB
    db: Session = TestingSessionLocal()
    try:
        a = db.query(Assignment).filter(Assignment.id == seed["assignment"]).first()
        assert a is not None
        a.due_date = datetime.now(timezone.utc) - timedelta(days=1)
        db.commit()
    finally:
        db.close()

    r = _submit(client, student_headers, seed["assignment"], type="TEXT", content="late")

    # late submissions are accepted, only flagged
    assert r.status_code == 201, r.text
    assert r.json()["is_late"] is True


def test_on_time_submission_is_not_late(client, seed, student_headers):
    r = _submit(client, student_headers, seed["assignment"], type="TEXT", content="early")
    assert r.json()["is_late"] is False


def test_non_member_cannot_submit(client, seed, student2_headers, db):
    r = _submit(client, student2_headers, seed["assignment"], type="TEXT", content="let me in")
    assert r.status_code == 403
    assert r.json()["error"] == "NotEnrolledError"

    assert db.query(Submission).count() == 0


def test_unknown_assignment_is_not_found(client, student_headers):
    r = _submit(client, student_headers, 999999, type="TEXT", content="hello")
    assert r.status_code == 404


def test_url_submission_must_be_a_valid_url(client, seed, student_headers):
    r = _submit(client, student_headers, seed["assignment"], type="URL", content="not a url")
    assert r.status_code == 422


def test_unknown_submission_type_is_rejected(client, seed, student_headers):
    r = _submit(client, student_headers, seed["assignment"], type="VIDEO", content="x")
    assert r.status_code == 422


def test_docx_reference_submission_uses_placeholder(client, seed, student_headers):
    r = _submit(
        client,
        student_headers,
        seed["assignment"],
        type="DOCX",
        file_url="/files/abc.docx",
        file_name="essay.docx",
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["type"] == "DOCX"
    assert body["file_url"] == "/files/abc.docx"
    assert body["content"] == "Document submitted: essay.docx"


def test_docx_requires_file_reference(client, seed, student_headers):
    r = _submit(client, student_headers, seed["assignment"], type="DOCX")
    assert r.status_code == 422


def test_upload_document_submission(client, seed, student_headers, tmp_path):
    r = client.post(
        f"/assignments/{seed['assignment']}/submissions/upload",
        headers=student_headers,
        files={"file": ("essay.docx", b"PK\x03\x04 fake docx", "application/octet-stream")},
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["type"] == "DOCX"
    assert body["file_url"].startswith("/files/")
    assert body["file_url"].endswith(".docx")

    stored = tmp_path / body["file_url"].rsplit("/", 1)[-1]
    assert stored.read_bytes() == b"PK\x03\x04 fake docx"


def test_upload_rejects_unsupported_extension(client, seed, student_headers):
    r = client.post(
        f"/assignments/{seed['assignment']}/submissions/upload",
        headers=student_headers,
        files={"file": ("virus.exe", b"MZ", "application/octet-stream")},
    )
    assert r.status_code == 422
    assert r.json()["error"] == "ValidationError"


def test_upload_over_size_limit_is_rejected(client, seed, student_headers, tmp_path, monkeypatch):
    monkeypatch.setattr("tutorhub.routers.submissions.MAX_UPLOAD_BYTES", 16)
    monkeypatch.setattr("tutorhub.services.storage.MAX_UPLOAD_BYTES", 16)

    r = client.post(
        f"/assignments/{seed['assignment']}/submissions/upload",
        headers=student_headers,
        files={"file": ("essay.docx", b"x" * 64, "application/octet-stream")},
    )
    assert r.status_code == 422
    assert "too large" in r.json()["detail"]
    assert list(tmp_path.iterdir()) == []


def test_failed_upload_submission_removes_stored_file(client, seed, student_headers, tmp_path, monkeypatch):
    def failing_submit(*args, **kwargs):
        raise ValidationError("storage of the submission failed")

    monkeypatch.setattr(submission_service, "submit", failing_submit)

    r = client.post(
        f"/assignments/{seed['assignment']}/submissions/upload",
        headers=student_headers,
        files={"file": ("essay.docx", b"PK\x03\x04 fake docx", "application/octet-stream")},
    )
    assert r.status_code == 422
    assert list(tmp_path.iterdir()) == []


def test_submissions_listed_newest_first(client, seed, teacher_headers, student_headers, student2_headers, db):
    db.add(Membership(group_id=seed["lesson"], student_id=seed["student2"]))
    db.commit()

    first = _submit(client, student_headers, seed["assignment"], type="TEXT", content="a").json()
    second = _submit(client, student2_headers, seed["assignment"], type="TEXT", content="b").json()

    r = client.get(f"/assignments/{seed['assignment']}/submissions", headers=teacher_headers)
    assert r.status_code == 200
    assert [s["id"] for s in r.json()] == [second["id"], first["id"]]

    # a resubmission moves the student back to the top
    _submit(client, student_headers, seed["assignment"], type="TEXT", content="a2")
    r = client.get(f"/assignments/{seed['assignment']}/submissions", headers=teacher_headers)
    assert [s["id"] for s in r.json()] == [first["id"], second["id"]]


def test_only_owner_teacher_lists_submissions(client, seed, other_teacher_headers, student_headers):
    r = client.get(f"/assignments/{seed['assignment']}/submissions", headers=other_teacher_headers)
    assert r.status_code == 403

    r = client.get(f"/assignments/{seed['assignment']}/submissions", headers=student_headers)
    assert r.status_code == 403


def test_my_submissions_and_history(client, seed, student_headers, student2_headers):
    _submit(client, student_headers, seed["assignment"], type="TEXT", content="draft")
    sub = _submit(client, student_headers, seed["assignment"], type="TEXT", content="final").json()

    r = client.get("/submissions/me", headers=student_headers)
    assert r.status_code == 200
    assert [s["id"] for s in r.json()] == [sub["id"]]

    r = client.get(f"/submissions/{sub['id']}/history", headers=student_headers)
    assert r.status_code == 200
    assert [rev["content"] for rev in r.json()] == ["final", "draft"]

    r = client.get(f"/submissions/{sub['id']}", headers=student2_headers)
    assert r.status_code == 403


def test_losing_concurrent_insert_updates_the_winning_row(seed, db, monkeypatch):
    # another request inserted (and got graded) between our lookup and our insert
    winner = Submission(
        assignment_id=seed["assignment"],
        student_id=seed["student"],
        type="TEXT",
        content="winner",
        status="GRADED",
        grade=70,
        submitted_at=datetime.now(timezone.utc) - timedelta(minutes=1),
    )
    db.add(winner)
    db.commit()

    real_find = submission_service._find
    calls = []

    def stale_find(session, assignment_id, student_id):
        calls.append(assignment_id)
        if len(calls) == 1:
            return None
        return real_find(session, assignment_id, student_id)

    monkeypatch.setattr(submission_service, "_find", stale_find)

    session = TestingSessionLocal()
    try:
        sub = submission_service.submit(
            session, seed["assignment"], seed["student"], TextContent(content="later")
        )
        assert sub.id == winner.id
        assert sub.content == "later"
        assert sub.status == "PENDING"
        assert sub.grade is None
    finally:
        session.close()

    assert len(calls) == 2
    db.expire_all()
    rows = (
        db.query(Submission)
        .filter(Submission.assignment_id == seed["assignment"], Submission.student_id == seed["student"])
        .all()
    )
    assert len(rows) == 1
    assert rows[0].content == "later"
    revisions = db.query(SubmissionRevision).filter(SubmissionRevision.submission_id == winner.id).all()
    assert [r.content for r in revisions] == ["later"]

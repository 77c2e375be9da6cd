from backend.app.models.candidate import Candidate
from backend.app.models.resume import ResumeFile
from backend.app.models.user import User


def test_db_crud_operations_and_relationships(db_session):
    # Create recruiter user
    recruiter = User(email="crud_recruiter@example.com", password="hashed", role="recruiter", name="Recruiter")
    db_session.add(recruiter)
    db_session.commit()
    db_session.refresh(recruiter)
    assert recruiter.id is not None

    # Create candidate with defaults
    candidate = Candidate(
        full_name="Cand",
        email="crud_candidate@example.com",
        position="Engineer",
        created_by=recruiter.id,
    )
    db_session.add(candidate)
    db_session.commit()
    db_session.refresh(candidate)
    assert candidate.status == "ongoing"
    assert candidate.experience == 0
    assert candidate.created_at is not None
    assert candidate.creator.email == "crud_recruiter@example.com"
    assert len(recruiter.candidates) == 1

    # Attach resume
    candidate.resume = ResumeFile(content=b"%PDF", content_type="application/pdf", size_bytes=4)
    candidate.resume_filename = "cv.pdf"
    db_session.commit()
    db_session.refresh(candidate)
    assert candidate.resume_file_id is not None
    assert candidate.resume.candidate.id == candidate.id

    # Update
    candidate.status = "selected"
    db_session.commit()
    updated = db_session.query(Candidate).filter(Candidate.id == candidate.id).first()
    assert updated.status == "selected"

    # Delete cascades to the resume blob
    resume_id = candidate.resume_file_id
    db_session.delete(candidate)
    db_session.commit()
    assert db_session.query(Candidate).count() == 0
    assert db_session.query(ResumeFile).filter(ResumeFile.id == resume_id).first() is None

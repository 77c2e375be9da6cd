import logging
from urllib.parse import quote

from fastapi import APIRouter, Body, Depends, File, Form, Request, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..database import get_db
from ..services import candidates as candidate_service
from ..services.candidates import candidate_to_public
from ..services.query_filters import parse_list_query
from ..services.upload_gate import read_resume_upload
from ..utils.dependencies import get_current_user
from ..utils.roles import admin_only

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/candidates", tags=["Candidates"])


class StatusUpdate(BaseModel):
    status: str | None = None


def _list_payload(rows) -> dict:
    return {"success": True, "count": len(rows), "data": [candidate_to_public(c) for c in rows]}


@router.get("")
def list_candidates(request: Request, db: Session = Depends(get_db)):
    """
    List candidates.

    Any query parameter other than select/sort/page/limit is a filter:
    ``status=ongoing``, ``experience[gte]=3``, ``status[in]=selected,scheduled``.
    """
    list_query = parse_list_query(request.query_params.multi_items())
    result = candidate_service.list_candidates(db, list_query)
    return {"success": True, **result}


@router.get("/status/{status}")
def list_candidates_by_status(status: str, db: Session = Depends(get_db)):
    return _list_payload(candidate_service.list_candidates_by_status(db, status))


@router.get("/position/{position}")
def list_candidates_by_position(position: str, db: Session = Depends(get_db)):
    return _list_payload(candidate_service.list_candidates_by_position(db, position))


@router.get("/{candidate_id}")
def get_candidate(candidate_id: str, db: Session = Depends(get_db)):
    candidate = candidate_service.get_candidate(db, candidate_id)
    return {"success": True, "data": candidate_to_public(candidate)}


@router.get("/{candidate_id}/resume")
def download_candidate_resume(
    candidate_id: str,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    candidate, resume = candidate_service.get_candidate_resume(db, candidate_id)
    filename = candidate.resume_filename or "resume"
    return Response(
        content=resume.content,
        media_type=resume.content_type or "application/octet-stream",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )


@router.post("", status_code=201)
async def create_candidate(
    full_name: str | None = Form(default=None),
    email: str | None = Form(default=None),
    position: str | None = Form(default=None),
    status: str | None = Form(default=None),
    experience: str | None = Form(default=None),
    notes: str | None = Form(default=None),
    interview_date: str | None = Form(default=None),
    resume: UploadFile | None = File(default=None),
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    # The upload gate runs before anything touches storage.
    accepted = await read_resume_upload(resume)

    data = {
        "full_name": full_name,
        "email": email,
        "position": position,
        "status": status,
        "experience": experience,
        "notes": notes,
        "interview_date": interview_date,
    }
    candidate = candidate_service.create_candidate(db, data, user=user, resume=accepted)
    return {"success": True, "data": candidate_to_public(candidate)}


@router.put("/{candidate_id}/status")
def update_candidate_status(
    candidate_id: str,
    payload: StatusUpdate,
    db: Session = Depends(get_db),
    user=Depends(admin_only),
):
    candidate = candidate_service.update_candidate_status(db, candidate_id, payload.status)
    return {"success": True, "data": candidate_to_public(candidate)}


@router.put("/{candidate_id}")
def update_candidate(
    candidate_id: str,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    candidate = candidate_service.update_candidate(db, candidate_id, payload, user=user)
    return {"success": True, "data": candidate_to_public(candidate)}


@router.delete("/{candidate_id}", status_code=200)
def delete_candidate(
    candidate_id: str,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    candidate_service.delete_candidate(db, candidate_id)
    logger.info("Candidate %s deleted by user %s", candidate_id, user.get("sub"))
    return {"success": True, "data": {}}

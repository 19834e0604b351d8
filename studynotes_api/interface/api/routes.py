import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse

from studynotes_api.dependencies import get_repository
from studynotes_api.domain.exceptions import StorageUnavailable
from studynotes_api.domain.ports import NoteRepository
from studynotes_api.domain.schemas import (
    HealthOut,
    NoteCreateIn,
    NoteOut,
    NoteUpdateIn,
    SubjectCreateIn,
    SubjectOut,
    SubjectUpdateIn,
    SubjectWithCountOut,
)

router = APIRouter(prefix="/api")
logger = logging.getLogger("studynotes.api")


def _rid(request: Request) -> str:
    return getattr(request.state, "request_id", "")


@router.get("/health", response_model=HealthOut)
def health(repo: NoteRepository = Depends(get_repository)):
    try:
        repo.list_subjects()
    except StorageUnavailable:
        logger.exception("health_check_failed")
        return JSONResponse(status_code=500, content={"status": "error", "message": "Service is unhealthy"})
    return HealthOut(status="ok", message="Service is healthy")


@router.get("/subjects", response_model=list[SubjectWithCountOut])
def list_subjects(repo: NoteRepository = Depends(get_repository)):
    return [
        SubjectWithCountOut(**s.__dict__, note_count=len(repo.list_notes_by_subject(s.id)))
        for s in repo.list_subjects()
    ]


@router.get("/subjects/{subject_id}", response_model=SubjectOut)
def get_subject(subject_id: int, repo: NoteRepository = Depends(get_repository)):
    subject = repo.get_subject(subject_id)
    if subject is None:
        raise HTTPException(status_code=404, detail="subject_not_found")
    return SubjectOut(**subject.__dict__)


@router.post("/subjects", response_model=SubjectOut, status_code=201)
def create_subject(payload: SubjectCreateIn, request: Request, repo: NoteRepository = Depends(get_repository)):
    subject = repo.create_subject(payload.name, icon=payload.icon, color=payload.color)
    logger.info("subject_create", extra={"rid": _rid(request), "id": subject.id})
    return SubjectOut(**subject.__dict__)


@router.put("/subjects/{subject_id}", response_model=SubjectOut)
def update_subject(
    subject_id: int,
    payload: SubjectUpdateIn,
    request: Request,
    repo: NoteRepository = Depends(get_repository),
):
    subject = repo.update_subject(subject_id, payload.model_dump(exclude_unset=True))
    if subject is None:
        raise HTTPException(status_code=404, detail="subject_not_found")
    logger.info("subject_update", extra={"rid": _rid(request), "id": subject_id})
    return SubjectOut(**subject.__dict__)


@router.delete("/subjects/{subject_id}", status_code=204)
def delete_subject(subject_id: int, request: Request, repo: NoteRepository = Depends(get_repository)):
    if not repo.delete_subject(subject_id):
        raise HTTPException(status_code=404, detail="subject_not_found")
    logger.info("subject_delete", extra={"rid": _rid(request), "id": subject_id})
    return Response(status_code=204)


@router.get("/notes", response_model=list[NoteOut])
def list_notes(
    subject_id: Optional[int] = Query(None, alias="subjectId"),
    search: Optional[str] = None,
    repo: NoteRepository = Depends(get_repository),
):
    if search:
        notes = repo.search_notes(search)
    elif subject_id is not None:
        notes = repo.list_notes_by_subject(subject_id)
    else:
        notes = repo.list_notes()
    return [NoteOut(**n.__dict__) for n in notes]


@router.get("/notes/{note_id}", response_model=NoteOut)
def get_note(note_id: int, repo: NoteRepository = Depends(get_repository)):
    note = repo.get_note(note_id)
    if note is None:
        raise HTTPException(status_code=404, detail="note_not_found")
    return NoteOut(**note.__dict__)


@router.post("/notes", response_model=NoteOut, status_code=201)
def create_note(payload: NoteCreateIn, request: Request, repo: NoteRepository = Depends(get_repository)):
    note = repo.create_note(payload.title, payload.subject_id, content=payload.content, tags=payload.tags)
    logger.info("note_create", extra={"rid": _rid(request), "id": note.id, "subject_id": note.subject_id})
    return NoteOut(**note.__dict__)


@router.put("/notes/{note_id}", response_model=NoteOut)
def update_note(
    note_id: int,
    payload: NoteUpdateIn,
    request: Request,
    repo: NoteRepository = Depends(get_repository),
):
    note = repo.update_note(note_id, payload.model_dump(exclude_unset=True))
    if note is None:
        raise HTTPException(status_code=404, detail="note_not_found")
    logger.info("note_update", extra={"rid": _rid(request), "id": note_id})
    return NoteOut(**note.__dict__)


@router.delete("/notes/{note_id}", status_code=204)
def delete_note(note_id: int, request: Request, repo: NoteRepository = Depends(get_repository)):
    if not repo.delete_note(note_id):
        raise HTTPException(status_code=404, detail="note_not_found")
    logger.info("note_delete", extra={"rid": _rid(request), "id": note_id})
    return Response(status_code=204)

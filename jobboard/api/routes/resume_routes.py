"""
Resume Routes

POST /resume/parse     - Upload a PDF/DOCX resume, parse it with AI, optionally apply to profile
GET  /resume           - Latest stored parse for the current user
GET  /resume/formats   - Supported upload formats

/resume/parse also accepts internal calls:
    Authorization: Bearer <INTERNAL_API_TOKEN>
    X-User-Id: <user id>
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Header, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials

from jobboard.core.auth import get_current_user, optional_bearer_scheme
from jobboard.core.errors import NotFoundError
from jobboard.services import resume_service
from jobboard.services.mongo_service import ParsedResumeService
from jobboard.utils.file_upload import extract_text_from_file, get_supported_formats

router = APIRouter(prefix="/resume", tags=["Resume"])


@router.post("/parse")
async def parse_resume(
    resume: UploadFile = File(...),
    auto_apply: Optional[str] = Form(None),
    x_user_id: Optional[str] = Header(None),
    x_auto_apply: Optional[str] = Header(None),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer_scheme),
):
    """
    Parse a resume. Auto-apply (merge into the profile) defaults to on for
    internal calls and off for users; X-Auto-Apply or the auto_apply form
    field override it.
    """
    caller = await run_in_threadpool(
        resume_service.resolve_caller,
        credentials.credentials if credentials else None, x_user_id, x_auto_apply
    )
    if auto_apply is not None:
        caller["auto_apply"] = auto_apply.strip().lower() == "true"

    text, filename = await extract_text_from_file(resume)
    return await run_in_threadpool(
        resume_service.process_resume,
        caller["user_id"], text, filename, resume.content_type, caller["auto_apply"]
    )


@router.get("")
def get_parsed_resume(user: dict = Depends(get_current_user)):
    parsed = ParsedResumeService().get_by_user(user["user_id"])
    if not parsed:
        raise NotFoundError("No parsed resume found")
    return parsed


@router.get("/formats")
def formats():
    return get_supported_formats()

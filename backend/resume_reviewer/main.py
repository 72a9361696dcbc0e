from typing import Optional

from fastapi import FastAPI, UploadFile, File, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.middleware import SlowAPIMiddleware

from resume_reviewer import controller
from resume_reviewer.controller import ReviewApp
from resume_reviewer.core import AnalyzeResponse, ErrorResponse, NotificationOut, StateResponse
from resume_reviewer.error_handlers import attach_error_handlers
from resume_reviewer.errors import STATUS_BY_KIND, UnexpectedError
from resume_reviewer.log import configure_logging
from resume_reviewer.models import RESULTS, UploadedFile
from resume_reviewer.services.credentials import CredentialStore, JsonFileStorage
from resume_reviewer.services.report import render_page
from resume_reviewer.services.report_pdf import build_pdf
from resume_reviewer.settings import settings

configure_logging()

limiter = Limiter(key_func=get_remote_address)

rate_limit = limiter.limit(settings.RATE_LIMIT) if settings.is_prod else (lambda fn: fn)


def create_review_app() -> ReviewApp:
    storage = JsonFileStorage(settings.STORAGE_PATH)
    return ReviewApp(CredentialStore(storage, default=settings.OPENAI_API_KEY))


app = FastAPI(title=settings.APP_NAME, version="0.1.0")
app.state.limiter = limiter
app.state.review = create_review_app()
app.add_middleware(SlowAPIMiddleware)
attach_error_handlers(app)


def _review(request: Request) -> ReviewApp:
    return request.app.state.review


def _back_home() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=303)


async def _read_upload(resume: Optional[UploadFile]) -> Optional[UploadedFile]:
    if resume is None or not resume.filename:
        return None
    contents = await resume.read()
    await resume.close()
    return UploadedFile(
        filename=resume.filename,
        content_type=resume.content_type or "",
        data=contents,
    )


@app.get("/", response_class=HTMLResponse, tags=["ui"])
def index(request: Request):
    review = _review(request)
    return HTMLResponse(
        render_page(
            review.presenter.state,
            notifications=review.presenter.active_notifications(),
            modal_open=review.modal.is_open,
            api_key_value=review.modal.value,
            has_api_key=review.credentials.has(),
            title=settings.APP_NAME,
        )
    )


@app.post("/upload", tags=["ui"])
@rate_limit
async def upload(request: Request, resume: Optional[UploadFile] = File(None)):
    await _review(request).handle_file_upload(await _read_upload(resume))
    return _back_home()


@app.post("/reset", tags=["ui"])
def reset(request: Request):
    _review(request).reset()
    return _back_home()


@app.post("/api-key", tags=["ui"])
def save_api_key(request: Request, api_key: str = Form("")):
    _review(request).modal.save(api_key)
    return _back_home()


@app.post("/api-key/clear", tags=["ui"])
def clear_api_key(request: Request):
    _review(request).modal.clear()
    return _back_home()


@app.post("/api-key/open", tags=["ui"])
def open_api_key_modal(request: Request):
    _review(request).modal.open()
    return _back_home()


@app.post("/api-key/close", tags=["ui"])
def close_api_key_modal(request: Request):
    _review(request).modal.close()
    return _back_home()


@app.get("/api/state", response_model=StateResponse, tags=["api"])
def state(request: Request):
    review = _review(request)
    view = review.presenter.state
    return StateResponse(
        view=view.view,
        flow=review.state,
        message=view.message,
        analysis=view.analysis,
        modal_open=review.modal.is_open,
        api_key_configured=review.credentials.has(),
        notifications=[
            NotificationOut(kind=n.kind, message=n.message, ttl_ms=n.ttl_ms)
            for n in review.presenter.active_notifications()
        ],
    )


@app.post("/api/analyze", response_model=None, tags=["api"])
@rate_limit
async def analyze(request: Request, resume: Optional[UploadFile] = File(None)):
    review = _review(request)
    if review.busy:
        return JSONResponse(
            status_code=409,
            content=ErrorResponse(kind="busy", message="An analysis is already in progress.").model_dump(),
        )

    await review.handle_file_upload(await _read_upload(resume))

    if review.state == controller.RESULTS:
        return AnalyzeResponse(analysis=review.presenter.state.analysis).model_dump()

    kind, message = review.last_error or (UnexpectedError.kind, "Analysis failed")
    return JSONResponse(
        status_code=STATUS_BY_KIND.get(kind, 500),
        content=ErrorResponse(kind=kind, message=message).model_dump(),
    )


@app.get("/api/report.pdf", tags=["api"])
def download_report(request: Request):
    view = _review(request).presenter.state
    if view.view != RESULTS or not view.analysis:
        raise HTTPException(status_code=404, detail="No analysis to export")

    pdf_bytes = build_pdf(view.analysis)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="Resume_Review.pdf"'},
    )


@app.get("/health", tags=["default"])
def health(request: Request):
    return {
        "ok": True,
        "env": settings.ENV,
        "rate_limit_enabled": settings.is_prod,
        "api_key_configured": _review(request).credentials.has(),
    }

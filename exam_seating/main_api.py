import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from exam_seating import workflow
from exam_seating.config import settings
from exam_seating.database import Base, engine, get_db
from exam_seating.db_models import UserDB, UserRole
from exam_seating.dependencies import get_current_user, get_notification_sink, require_roles
from exam_seating.exceptions import AuthorizationError, NotFoundError, SeatingError
from exam_seating.exports import export_plan_excel, export_plan_pdf
from exam_seating.logging_config import setup_logging
from exam_seating.middleware import RequestLoggingMiddleware
from exam_seating.notifications import NotificationSink, build_sink_factory, list_notifications, mark_as_read
from exam_seating.schemas import GenerateRequest, SeatingPlanCreate, StatusUpdate, notification_to_dict, plan_to_dict


setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind = engine)
    logger.info("%s started (%s)", settings.APP_NAME, settings.ENVIRONMENT)
    yield


app = FastAPI(title = settings.APP_NAME, lifespan = lifespan)
app.state.notification_sink_factory = build_sink_factory(settings.NOTIFICATIONS_ENABLED)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins = settings.CORS_ORIGINS,
    allow_credentials = True,
    allow_methods = ["*"],
    allow_headers = ["*"],
)


@app.exception_handler(SeatingError)
async def seating_error_handler(request: Request, exc: SeatingError):
    return JSONResponse(
        status_code = exc.status_code,
        content = {"success": False, **exc.details, **exc.to_dict()},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": [str(part) for part in e.get("loc", ())], "msg": e.get("msg"), "type": e.get("type")}
        for e in exc.errors()
    ]
    return JSONResponse(
        status_code = 400,
        content = {
            "success": False,
            "code": "VALIDATION_ERROR",
            "message": errors[0]["msg"] if errors else "Invalid request",
            "details": {"errors": errors},
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code = exc.status_code,
        content = {"success": False, "message": exc.detail},
        headers = getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info = exc)
    return JSONResponse(status_code = 500, content = {"success": False, "message": "Server error"})


@app.get("/")
def root():
    return {"message": "Exam Seating API is running !"}


@app.get("/health")
def health():
    return {"status": "ok"}


router = APIRouter(prefix = "/seating", tags = ["seating"])

staff = require_roles(UserRole.FACULTY, UserRole.HOD)
hod_only = require_roles(UserRole.HOD)
student_only = require_roles(UserRole.STUDENT)


@router.get("/notifications")
def get_notifications(current_user: UserDB = Depends(get_current_user), db: Session = Depends(get_db)):
    notifications = list_notifications(db, current_user.id)
    return {"success": True, "notifications": [notification_to_dict(n) for n in notifications]}


@router.patch("/notifications/{notification_id}/read")
def read_notification(
    notification_id: int,
    current_user: UserDB = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if not mark_as_read(db, notification_id, current_user.id):
        raise NotFoundError("Notification", notification_id)
    return {"success": True}


@router.post("/generate")
def generate_seating(req: GenerateRequest, current_user: UserDB = Depends(staff), db: Session = Depends(get_db)):
    preview = workflow.generate_preview(db, req, current_user)
    return {"success": True, "preview": preview}


@router.post("", status_code = 201)
def submit_seating(payload: SeatingPlanCreate, current_user: UserDB = Depends(staff), db: Session = Depends(get_db)):
    plan = workflow.submit_plan(db, payload, current_user)
    return {"success": True, "seating": plan_to_dict(plan)}


@router.get("/pending")
def get_pending_plans(current_user: UserDB = Depends(hod_only), db: Session = Depends(get_db)):
    plans = workflow.list_pending(db, current_user)
    return {"success": True, "plans": [plan_to_dict(p) for p in plans]}


@router.get("/history")
def get_faculty_plans(current_user: UserDB = Depends(staff), db: Session = Depends(get_db)):
    plans = workflow.list_history(db, current_user)
    return {"success": True, "plans": [plan_to_dict(p) for p in plans]}


@router.get("/my-plan")
def get_student_seating(current_user: UserDB = Depends(student_only), db: Session = Depends(get_db)):
    return {"success": True, "seating": workflow.my_seating(db, current_user)}


@router.patch("/{plan_id}/status")
def update_seating_status(
    plan_id: int,
    body: StatusUpdate,
    current_user: UserDB = Depends(hod_only),
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink)
):
    result = workflow.decide_plan(db, plan_id, body.status, body.hod_remarks, current_user, sink)
    response = {
        "success": True,
        "seating": plan_to_dict(result["plan"]),
        "notified": result["notified"],
    }
    if result["notification_error"]:
        response["notificationError"] = result["notification_error"]
    return response


@router.post("/{plan_id}/notify")
def notify_students(
    plan_id: int,
    current_user: UserDB = Depends(staff),
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink)
):
    count = workflow.notify_plan(db, plan_id, current_user, sink)
    if not sink.enabled:
        return {"success": True, "message": "Notifications are disabled, no students were notified", "count": 0}
    if count == 0:
        return {"success": True, "message": "No students found in this section to notify", "count": 0}
    return {"success": True, "message": f"Notifications sent to {count} students", "count": count}


@router.delete("/{plan_id}")
def delete_seating(plan_id: int, current_user: UserDB = Depends(staff), db: Session = Depends(get_db)):
    workflow.delete_plan(db, plan_id, current_user)
    return {"success": True, "message": "Seating plan deleted"}


def _exportable_plan(db: Session, plan_id: int, current_user: UserDB):
    plan = workflow.get_plan(db, plan_id)
    if not (workflow.is_owner(current_user, plan) or workflow.is_department_authority(current_user, plan)):
        raise AuthorizationError("Not authorized to export this plan")
    return plan


@router.get("/{plan_id}/export/excel")
def export_seating_excel(plan_id: int, current_user: UserDB = Depends(staff), db: Session = Depends(get_db)):
    plan = _exportable_plan(db, plan_id, current_user)
    file_path = export_plan_excel(plan)
    return FileResponse(
        path = str(file_path),
        filename = file_path.name,
        media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )


@router.get("/{plan_id}/export/pdf")
def export_seating_pdf(plan_id: int, current_user: UserDB = Depends(staff), db: Session = Depends(get_db)):
    plan = _exportable_plan(db, plan_id, current_user)
    file_path = export_plan_pdf(plan)
    return FileResponse(
        path = str(file_path),
        filename = file_path.name,
        media_type = "application/pdf"
    )


app.include_router(router, prefix = settings.API_PREFIX)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "exam_seating.main_api:app",
        host = settings.SERVER_HOST,
        port = settings.SERVER_PORT,
        reload = settings.DEBUG
    )

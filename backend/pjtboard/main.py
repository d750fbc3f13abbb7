from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape
from sqlalchemy.orm import Session
from typing import Optional
import logging
import os

import pandas as pd

from . import services
from .db import Base, SessionLocal, engine, get_db, settings
from .errors import NotFoundError, ValidationError
from .logging_config import configure_logging
from .preprocess import preprocess_cost_history, read_table
from .schemas import CostRecordIn, EquipmentRecordIn, PersonIn, ProjectIn, ScheduleItemIn
from .seed import seed_if_empty
from .status_rules import STATUS_COLORS, cost_ratio_display
from .timeline import build_timeline, layout_bars, today_position

configure_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_TITLE)
app.add_middleware(CORSMiddleware, allow_origins=settings.CORS_ORIGINS, allow_methods=["*"], allow_headers=["*"])
Base.metadata.create_all(bind=engine)
if settings.SEED_SAMPLE_DATA:
    with SessionLocal() as _db:
        seed_if_empty(_db)
templates = Environment(loader=FileSystemLoader(os.path.join(os.path.dirname(__file__), "templates")),
                        autoescape=select_autoescape(["html", "xml"]))


@app.exception_handler(NotFoundError)
async def _not_found(request: Request, exc: NotFoundError):
    logger.info("404 %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=404, content={"detail": f"{exc.resource} not found"})


@app.exception_handler(ValidationError)
async def _invalid(request: Request, exc: ValidationError):
    logger.info("422 %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=422, content={"detail": exc.message, "fields": exc.details})


@app.get("/", response_class=HTMLResponse)
def index(db: Session = Depends(get_db)):
    rows = []
    for p in services.list_projects(db):
        tl = build_timeline(p.schedule_items)
        rows.append({
            "project": p,
            "status_color": STATUS_COLORS[p.status],
            "cost": cost_ratio_display(p.budget, p.actual_cost),
            "bars": layout_bars(p.schedule_items, tl),
            "today": today_position(tl),
        })
    return templates.get_template("index.html").render(rows=rows, stats=services.portfolio_stats(db))


# ── projects ─────────────────────────────────────────────────────────────

@app.get("/projects")
def list_projects(q: str = "", status: Optional[str] = None, sort: Optional[str] = None,
                  desc: bool = False, db: Session = Depends(get_db)):
    return [p.to_dict() for p in services.list_projects(db, q, status, sort, desc)]


@app.post("/projects", status_code=201)
def create_project(body: ProjectIn, db: Session = Depends(get_db)):
    return services.create_project(db, body.payload()).to_dict()


@app.get("/projects/{project_id}")
def get_project(project_id: str, db: Session = Depends(get_db)):
    return services.get_project(db, project_id).to_dict()


@app.put("/projects/{project_id}")
def update_project(project_id: str, body: ProjectIn, db: Session = Depends(get_db)):
    return services.update_project(db, project_id, body.payload()).to_dict()


@app.delete("/projects/{project_id}")
def delete_project(project_id: str, db: Session = Depends(get_db)):
    services.delete_project(db, project_id)
    return {"ok": True, "id": project_id}


@app.post("/projects/{project_id}/status/recompute")
def recompute_status(project_id: str, db: Session = Depends(get_db)):
    return services.recompute_status(db, project_id).to_dict()


# ── cost history ─────────────────────────────────────────────────────────

@app.post("/projects/{project_id}/cost-history", status_code=201)
def add_cost_record(project_id: str, body: CostRecordIn, recompute: bool = False,
                    db: Session = Depends(get_db)):
    return services.add_cost_record(db, project_id, body.payload(), recompute=recompute).to_dict()


@app.put("/projects/{project_id}/cost-history/{record_id}")
def update_cost_record(project_id: str, record_id: str, body: CostRecordIn, db: Session = Depends(get_db)):
    return services.update_cost_record(db, project_id, record_id, body.payload()).to_dict()


@app.delete("/projects/{project_id}/cost-history/{record_id}")
def remove_cost_record(project_id: str, record_id: str, db: Session = Depends(get_db)):
    return services.remove_cost_record(db, project_id, record_id).to_dict()


@app.post("/projects/{project_id}/cost-history/upload")
async def upload_cost_history(project_id: str, file: UploadFile = File(...), db: Session = Depends(get_db)):
    content = await file.read()
    try:
        df = read_table(content)
    except (ValueError, pd.errors.ParserError) as e:
        raise HTTPException(status_code=400, detail=f"Failed to parse {file.filename}: {e}")
    df = preprocess_cost_history(df)
    rows = services.replace_cost_history(db, project_id, df)
    return {"ok": True, "projectId": project_id, "rows": rows, "preprocessed": True}


# ── schedule ─────────────────────────────────────────────────────────────

@app.post("/projects/{project_id}/schedule", status_code=201)
def add_schedule_item(project_id: str, body: ScheduleItemIn, db: Session = Depends(get_db)):
    return services.add_schedule_item(db, project_id, body.payload()).to_dict()


@app.put("/projects/{project_id}/schedule/{item_id}")
def update_schedule_item(project_id: str, item_id: str, body: ScheduleItemIn, db: Session = Depends(get_db)):
    return services.update_schedule_item(db, project_id, item_id, body.payload()).to_dict()


@app.delete("/projects/{project_id}/schedule/{item_id}")
def remove_schedule_item(project_id: str, item_id: str, db: Session = Depends(get_db)):
    return services.remove_schedule_item(db, project_id, item_id).to_dict()


# ── equipment history ────────────────────────────────────────────────────

@app.post("/projects/{project_id}/equipment-history", status_code=201)
def add_equipment_record(project_id: str, body: EquipmentRecordIn, db: Session = Depends(get_db)):
    return services.add_equipment_record(db, project_id, body.payload()).to_dict()


@app.put("/projects/{project_id}/equipment-history/{record_id}")
def update_equipment_record(project_id: str, record_id: str, body: EquipmentRecordIn,
                            db: Session = Depends(get_db)):
    return services.update_equipment_record(db, project_id, record_id, body.payload()).to_dict()


@app.delete("/projects/{project_id}/equipment-history/{record_id}")
def remove_equipment_record(project_id: str, record_id: str, db: Session = Depends(get_db)):
    return services.remove_equipment_record(db, project_id, record_id).to_dict()


# ── people ───────────────────────────────────────────────────────────────

@app.post("/projects/{project_id}/people", status_code=201)
def add_person(project_id: str, body: PersonIn, db: Session = Depends(get_db)):
    return services.add_person(db, project_id, body.payload()).to_dict()


@app.put("/projects/{project_id}/people/{person_id}")
def update_person(project_id: str, person_id: str, body: PersonIn, db: Session = Depends(get_db)):
    return services.update_person(db, project_id, person_id, body.payload()).to_dict()


@app.delete("/projects/{project_id}/people/{person_id}")
def remove_person(project_id: str, person_id: str, db: Session = Depends(get_db)):
    return services.remove_person(db, project_id, person_id).to_dict()


@app.get("/projects/{project_id}/timeline")
def project_timeline(project_id: str, db: Session = Depends(get_db)):
    return services.project_timeline(db, project_id)


# ── read-only helpers ────────────────────────────────────────────────────

@app.get("/stats")
def get_stats(db: Session = Depends(get_db)):
    return services.portfolio_stats(db)


@app.get("/cost-ratio")
def get_cost_ratio(budget: str = "0", actual: str = "0"):
    return cost_ratio_display(budget, actual)

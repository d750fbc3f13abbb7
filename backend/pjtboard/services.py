"""
Project operations over the SQLAlchemy store.

Every mutation of a project's cost history re-syncs the budget/actualCost
snapshot from the latest record. The project status is never overwritten
here unless the caller asks for it through recompute_status (or
recompute=True on add_cost_record): a manually chosen status stands.
"""

import logging
from datetime import date, timedelta

import pandas as pd
from sqlalchemy import select
from sqlalchemy.orm import Session

from .domain import CostRecord, EquipmentRecord, Person, Project, ScheduleItem
from .errors import NotFoundError, ValidationError
from .models import CostRecordRow, EquipmentRecordRow, PersonRow, ProjectRow, ScheduleItemRow
from .portfolio import calculate_stats, filter_projects, sort_projects
from .status_rules import latest_record, normalize_status, record_ratio, suggest_status
from .timeline import build_timeline, layout_bars, month_headers, parse_date, today_position

logger = logging.getLogger(__name__)

PROJECT_FIELDS = (
    "pjt_no", "name", "pm", "progress", "budget", "actual_cost",
    "start_date", "end_date", "note", "lat", "lng", "country", "city", "address",
    "sales_managers", "design_managers", "control_managers", "production_managers",
)
NESTED_KEYS = ("costHistory", "scheduleItems", "equipmentHistory", "people")

# Seoul City Hall, used when a new project arrives without coordinates
DEFAULT_LAT = 37.5665
DEFAULT_LNG = 126.9780


# ── lookups ──────────────────────────────────────────────────────────────


def _get_row(db: Session, project_id: str) -> ProjectRow:
    row = db.get(ProjectRow, project_id)
    if row is None:
        raise NotFoundError("Project", project_id)
    return row


def _find_child(children, child_id: str, resource: str):
    for child in children:
        if child.id == child_id:
            return child
    raise NotFoundError(resource, child_id)


def _next_seq(children) -> int:
    return max((c.seq for c in children), default=-1) + 1


def _check_date(value: str, field: str) -> None:
    if value and parse_date(value) is None:
        raise ValidationError(f"{field} must be YYYY-MM-DD", details={field: value})


def _check_status(data: dict) -> None:
    label = data.get("status")
    if _blank(label):
        return
    if normalize_status(label, strict=True) is None:
        raise ValidationError("Unknown status", details={"status": label})


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_new_ids(db: Session, model, ids, resource: str) -> None:
    """Child ids are primary keys shared by every project."""
    seen = set()
    for child_id in ids:
        if child_id in seen or db.get(model, child_id) is not None:
            raise ValidationError(f"{resource} id already exists", details={"id": child_id})
        seen.add(child_id)


def _apply_fields(row: ProjectRow, project: Project) -> None:
    for f in PROJECT_FIELDS:
        setattr(row, f, getattr(project, f))
    row.status = project.status.value


def _cost_row(record: CostRecord, project_id: str, seq: int) -> CostRecordRow:
    return CostRecordRow(
        id=record.id, project_id=project_id, seq=seq, date=record.date,
        budget=record.budget, actual_cost=record.actual_cost,
        note=record.note, manager=record.manager, change_reason=record.change_reason,
    )


def _schedule_row(item: ScheduleItem, project_id: str, seq: int) -> ScheduleItemRow:
    return ScheduleItemRow(
        id=item.id, project_id=project_id, seq=seq, name=item.name,
        start_date=item.start_date, end_date=item.end_date, progress=item.progress,
    )


def _equipment_row(record: EquipmentRecord, project_id: str, seq: int) -> EquipmentRecordRow:
    return EquipmentRecordRow(
        id=record.id, project_id=project_id, seq=seq, date=record.date, part=record.part,
        content=record.content, action=record.action, manager=record.manager,
    )


def _person_row(person: Person, project_id: str, seq: int) -> PersonRow:
    return PersonRow(
        id=person.id, project_id=project_id, seq=seq, name=person.name,
        affiliation=person.affiliation, department=person.department,
    )


def _sync_snapshot(row: ProjectRow) -> None:
    latest = latest_record(row.cost_history)
    if latest is not None:
        row.budget = latest.budget
        row.actual_cost = latest.actual_cost


# ── projects ─────────────────────────────────────────────────────────────


def list_projects(db: Session, query: str = "", status=None, sort: str | None = None,
                  descending: bool = False) -> list[Project]:
    rows = db.execute(select(ProjectRow).order_by(ProjectRow.pjt_no)).scalars().all()
    projects = filter_projects([r.to_domain() for r in rows], query, status)
    if sort:
        projects = sort_projects(projects, sort, descending)
    return projects


def get_project(db: Session, project_id: str) -> Project:
    return _get_row(db, project_id).to_domain()


def create_project(db: Session, data: dict, today: date | None = None) -> Project:
    today = today or date.today()
    _check_status(data)
    project = Project.from_dict(data)
    project.pjt_no = project.pjt_no or f"PJT-{today:%Y%m%d}"
    project.start_date = project.start_date or today.isoformat()
    project.end_date = project.end_date or (today + timedelta(days=30)).isoformat()
    if _blank(data.get("lat")) and _blank(data.get("lng")):
        project.lat, project.lng = DEFAULT_LAT, DEFAULT_LNG
    _check_date(project.start_date, "startDate")
    _check_date(project.end_date, "endDate")
    for r in project.cost_history:
        _check_date(r.date, "costHistory.date")
    for s in project.schedule_items:
        _check_date(s.start_date, "scheduleItems.startDate")
        _check_date(s.end_date, "scheduleItems.endDate")
    for e in project.equipment_history:
        _check_date(e.date, "equipmentHistory.date")
    if db.get(ProjectRow, project.id) is not None:
        raise ValidationError("Project id already exists", details={"id": project.id})
    _check_new_ids(db, CostRecordRow, [r.id for r in project.cost_history], "CostRecord")
    _check_new_ids(db, ScheduleItemRow, [s.id for s in project.schedule_items], "ScheduleItem")
    _check_new_ids(db, EquipmentRecordRow, [e.id for e in project.equipment_history], "EquipmentRecord")
    _check_new_ids(db, PersonRow, [p.id for p in project.people], "Person")

    row = ProjectRow(id=project.id)
    _apply_fields(row, project)
    row.cost_history = [_cost_row(r, project.id, i) for i, r in enumerate(project.cost_history)]
    row.schedule_items = [_schedule_row(s, project.id, i) for i, s in enumerate(project.schedule_items)]
    row.equipment_history = [_equipment_row(e, project.id, i) for i, e in enumerate(project.equipment_history)]
    row.people = [_person_row(p, project.id, i) for i, p in enumerate(project.people)]
    _sync_snapshot(row)
    db.add(row)
    db.commit()
    logger.info("Project created: %s (%s)", row.pjt_no, row.id, extra={"project_id": row.id})
    return row.to_domain()


def update_project(db: Session, project_id: str, data: dict) -> Project:
    row = _get_row(db, project_id)
    _check_status(data)
    merged = row.to_domain().to_dict()
    merged.update({
        k: v for k, v in data.items()
        if k != "id" and k not in NESTED_KEYS and not (k == "status" and _blank(v))
    })
    project = Project.from_dict(merged)
    _check_date(project.start_date, "startDate")
    _check_date(project.end_date, "endDate")
    _apply_fields(row, project)
    db.commit()
    logger.info("Project updated: %s", project_id, extra={"project_id": project_id})
    return row.to_domain()


def delete_project(db: Session, project_id: str) -> None:
    row = _get_row(db, project_id)
    db.delete(row)
    db.commit()
    logger.info("Project deleted: %s", project_id, extra={"project_id": project_id})


def recompute_status(db: Session, project_id: str) -> Project:
    """Overwrite the stored status with the one suggested by the cost history."""
    row = _get_row(db, project_id)
    old = row.status
    row.status = suggest_status(row.cost_history).value
    db.commit()
    latest = latest_record(row.cost_history)
    logger.info(
        "Status recomputed for %s: %s -> %s", project_id, old, row.status,
        extra={
            "project_id": project_id,
            "old_status": old,
            "new_status": row.status,
            "cost_ratio": record_ratio(latest) if latest is not None else None,
        },
    )
    return row.to_domain()


# ── cost history ─────────────────────────────────────────────────────────


def add_cost_record(db: Session, project_id: str, data: dict, recompute: bool = False,
                    today: date | None = None) -> Project:
    row = _get_row(db, project_id)
    record = CostRecord.from_dict(data)
    record.date = record.date or (today or date.today()).isoformat()
    _check_date(record.date, "date")
    _check_new_ids(db, CostRecordRow, [record.id], "CostRecord")
    row.cost_history.append(_cost_row(record, project_id, _next_seq(row.cost_history)))
    _sync_snapshot(row)
    db.commit()
    logger.info("Cost record %s added to %s", record.id, project_id,
                extra={"project_id": project_id, "record_id": record.id})
    if recompute:
        return recompute_status(db, project_id)
    return row.to_domain()


def update_cost_record(db: Session, project_id: str, record_id: str, data: dict) -> Project:
    row = _get_row(db, project_id)
    rec = _find_child(row.cost_history, record_id, "CostRecord")
    merged = rec.to_domain().to_dict()
    merged.update({k: v for k, v in data.items() if k != "id"})
    record = CostRecord.from_dict(merged)
    _check_date(record.date, "date")
    rec.date, rec.budget, rec.actual_cost = record.date, record.budget, record.actual_cost
    rec.note, rec.manager, rec.change_reason = record.note, record.manager, record.change_reason
    _sync_snapshot(row)
    db.commit()
    logger.info("Cost record %s updated", record_id,
                extra={"project_id": project_id, "record_id": record_id})
    return row.to_domain()


def remove_cost_record(db: Session, project_id: str, record_id: str) -> Project:
    row = _get_row(db, project_id)
    rec = _find_child(row.cost_history, record_id, "CostRecord")
    row.cost_history.remove(rec)
    _sync_snapshot(row)
    db.commit()
    logger.info("Cost record %s removed", record_id,
                extra={"project_id": project_id, "record_id": record_id})
    return row.to_domain()


def replace_cost_history(db: Session, project_id: str, df: pd.DataFrame) -> int:
    """Swap the whole history for the rows of a preprocessed cost-history frame."""
    row = _get_row(db, project_id)
    row.cost_history.clear()
    db.flush()
    for i, r in enumerate(df.to_dict(orient="records")):
        record = CostRecord.from_dict(r)
        row.cost_history.append(_cost_row(record, project_id, i))
    _sync_snapshot(row)
    db.commit()
    logger.info("Cost history of %s replaced: %d records", project_id, len(row.cost_history),
                extra={"project_id": project_id})
    return len(row.cost_history)


# ── schedule ─────────────────────────────────────────────────────────────


def add_schedule_item(db: Session, project_id: str, data: dict) -> Project:
    row = _get_row(db, project_id)
    item = ScheduleItem.from_dict(data)
    _check_date(item.start_date, "startDate")
    _check_date(item.end_date, "endDate")
    _check_new_ids(db, ScheduleItemRow, [item.id], "ScheduleItem")
    row.schedule_items.append(_schedule_row(item, project_id, _next_seq(row.schedule_items)))
    db.commit()
    logger.info("Schedule item %s added to %s", item.id, project_id,
                extra={"project_id": project_id, "item_id": item.id})
    return row.to_domain()


def update_schedule_item(db: Session, project_id: str, item_id: str, data: dict) -> Project:
    row = _get_row(db, project_id)
    it = _find_child(row.schedule_items, item_id, "ScheduleItem")
    merged = it.to_domain().to_dict()
    merged.update({k: v for k, v in data.items() if k != "id"})
    item = ScheduleItem.from_dict(merged)
    _check_date(item.start_date, "startDate")
    _check_date(item.end_date, "endDate")
    it.name, it.start_date, it.end_date, it.progress = item.name, item.start_date, item.end_date, item.progress
    db.commit()
    return row.to_domain()


def remove_schedule_item(db: Session, project_id: str, item_id: str) -> Project:
    row = _get_row(db, project_id)
    it = _find_child(row.schedule_items, item_id, "ScheduleItem")
    row.schedule_items.remove(it)
    db.commit()
    logger.info("Schedule item %s removed", item_id,
                extra={"project_id": project_id, "item_id": item_id})
    return row.to_domain()


# ── equipment history ────────────────────────────────────────────────────


def add_equipment_record(db: Session, project_id: str, data: dict, today: date | None = None) -> Project:
    row = _get_row(db, project_id)
    record = EquipmentRecord.from_dict(data)
    record.date = record.date or (today or date.today()).isoformat()
    _check_date(record.date, "date")
    _check_new_ids(db, EquipmentRecordRow, [record.id], "EquipmentRecord")
    row.equipment_history.append(_equipment_row(record, project_id, _next_seq(row.equipment_history)))
    db.commit()
    logger.info("Equipment record %s added to %s", record.id, project_id,
                extra={"project_id": project_id, "record_id": record.id})
    return row.to_domain()


def update_equipment_record(db: Session, project_id: str, record_id: str, data: dict) -> Project:
    row = _get_row(db, project_id)
    rec = _find_child(row.equipment_history, record_id, "EquipmentRecord")
    merged = rec.to_domain().to_dict()
    merged.update({k: v for k, v in data.items() if k != "id"})
    record = EquipmentRecord.from_dict(merged)
    _check_date(record.date, "date")
    rec.date, rec.part, rec.content = record.date, record.part, record.content
    rec.action, rec.manager = record.action, record.manager
    db.commit()
    return row.to_domain()


def remove_equipment_record(db: Session, project_id: str, record_id: str) -> Project:
    row = _get_row(db, project_id)
    rec = _find_child(row.equipment_history, record_id, "EquipmentRecord")
    row.equipment_history.remove(rec)
    db.commit()
    logger.info("Equipment record %s removed", record_id,
                extra={"project_id": project_id, "record_id": record_id})
    return row.to_domain()


# ── people ───────────────────────────────────────────────────────────────


def add_person(db: Session, project_id: str, data: dict) -> Project:
    row = _get_row(db, project_id)
    person = Person.from_dict(data)
    if not person.name:
        raise ValidationError("name is required", details={"name": person.name})
    _check_new_ids(db, PersonRow, [person.id], "Person")
    row.people.append(_person_row(person, project_id, _next_seq(row.people)))
    db.commit()
    logger.info("Person %s added to %s", person.id, project_id,
                extra={"project_id": project_id, "item_id": person.id})
    return row.to_domain()


def update_person(db: Session, project_id: str, person_id: str, data: dict) -> Project:
    row = _get_row(db, project_id)
    p = _find_child(row.people, person_id, "Person")
    merged = p.to_domain().to_dict()
    merged.update({k: v for k, v in data.items() if k != "id"})
    person = Person.from_dict(merged)
    if not person.name:
        raise ValidationError("name is required", details={"name": person.name})
    p.name, p.affiliation, p.department = person.name, person.affiliation, person.department
    db.commit()
    return row.to_domain()


def remove_person(db: Session, project_id: str, person_id: str) -> Project:
    row = _get_row(db, project_id)
    p = _find_child(row.people, person_id, "Person")
    row.people.remove(p)
    db.commit()
    logger.info("Person %s removed", person_id,
                extra={"project_id": project_id, "item_id": person_id})
    return row.to_domain()


# ── read models ──────────────────────────────────────────────────────────


def project_timeline(db: Session, project_id: str, today: date | None = None) -> dict:
    project = get_project(db, project_id)
    tl = build_timeline(project.schedule_items, today)
    return {
        "projectId": project.id,
        "timeline": tl.to_dict(),
        "months": [{"year": y, "month": m} for y, m in month_headers(tl)],
        "bars": layout_bars(project.schedule_items, tl),
        "todayPosition": today_position(tl, today),
    }


def portfolio_stats(db: Session) -> dict:
    return calculate_stats(list_projects(db))
from typing import List

from sqlalchemy import JSON, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base
from .domain import CostRecord, EquipmentRecord, Person, Project, ScheduleItem


class ProjectRow(Base):
    __tablename__ = "projects"
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    pjt_no: Mapped[str] = mapped_column(String(32), index=True)
    name: Mapped[str] = mapped_column(String(256), default="")
    status: Mapped[str] = mapped_column(String(32), index=True)
    pm: Mapped[str] = mapped_column(String(128), default="")
    sales_managers: Mapped[list] = mapped_column(JSON, default=list)
    design_managers: Mapped[list] = mapped_column(JSON, default=list)
    control_managers: Mapped[list] = mapped_column(JSON, default=list)
    production_managers: Mapped[list] = mapped_column(JSON, default=list)
    progress: Mapped[int] = mapped_column(Integer, default=0)
    budget: Mapped[float] = mapped_column(Float, default=0)
    actual_cost: Mapped[float] = mapped_column(Float, default=0)
    start_date: Mapped[str] = mapped_column(String(10), default="")   # YYYY-MM-DD
    end_date: Mapped[str] = mapped_column(String(10), default="")
    note: Mapped[str] = mapped_column(Text, default="")
    country: Mapped[str] = mapped_column(String(64), default="")
    lat: Mapped[float] = mapped_column(Float, default=0)
    lng: Mapped[float] = mapped_column(Float, default=0)
    city: Mapped[str] = mapped_column(String(64), default="")
    address: Mapped[str] = mapped_column(String(256), default="")

    cost_history: Mapped[List["CostRecordRow"]] = relationship(
        back_populates="project", order_by="CostRecordRow.seq", cascade="all, delete-orphan"
    )
    schedule_items: Mapped[List["ScheduleItemRow"]] = relationship(
        back_populates="project", order_by="ScheduleItemRow.seq", cascade="all, delete-orphan"
    )
    equipment_history: Mapped[List["EquipmentRecordRow"]] = relationship(
        back_populates="project", order_by="EquipmentRecordRow.seq", cascade="all, delete-orphan"
    )
    people: Mapped[List["PersonRow"]] = relationship(
        back_populates="project", order_by="PersonRow.seq", cascade="all, delete-orphan"
    )

    def to_domain(self) -> Project:
        return Project(
            id=self.id,
            pjt_no=self.pjt_no,
            name=self.name,
            status=self.status,
            pm=self.pm,
            sales_managers=list(self.sales_managers or []),
            design_managers=list(self.design_managers or []),
            control_managers=list(self.control_managers or []),
            production_managers=list(self.production_managers or []),
            progress=self.progress,
            budget=self.budget,
            actual_cost=self.actual_cost,
            start_date=self.start_date,
            end_date=self.end_date,
            note=self.note,
            lat=self.lat,
            lng=self.lng,
            country=self.country,
            city=self.city,
            address=self.address,
            cost_history=[r.to_domain() for r in self.cost_history],
            schedule_items=[s.to_domain() for s in self.schedule_items],
            equipment_history=[e.to_domain() for e in self.equipment_history],
            people=[p.to_domain() for p in self.people],
        )


class CostRecordRow(Base):
    __tablename__ = "cost_records"
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    project_id: Mapped[str] = mapped_column(ForeignKey("projects.id"), index=True)
    seq: Mapped[int] = mapped_column(Integer)              # insertion order, breaks date ties
    date: Mapped[str] = mapped_column(String(10))
    budget: Mapped[float] = mapped_column(Float, default=0)
    actual_cost: Mapped[float] = mapped_column(Float, default=0)
    note: Mapped[str] = mapped_column(Text, default="")
    manager: Mapped[str] = mapped_column(String(128), default="")
    change_reason: Mapped[str] = mapped_column(Text, default="")

    project: Mapped[ProjectRow] = relationship(back_populates="cost_history")

    def to_domain(self) -> CostRecord:
        return CostRecord(
            id=self.id,
            date=self.date,
            budget=self.budget,
            actual_cost=self.actual_cost,
            note=self.note,
            manager=self.manager,
            change_reason=self.change_reason,
        )


class ScheduleItemRow(Base):
    __tablename__ = "schedule_items"
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    project_id: Mapped[str] = mapped_column(ForeignKey("projects.id"), index=True)
    seq: Mapped[int] = mapped_column(Integer)
    name: Mapped[str] = mapped_column(String(256), default="")
    start_date: Mapped[str] = mapped_column(String(10), default="")
    end_date: Mapped[str] = mapped_column(String(10), default="")
    progress: Mapped[int] = mapped_column(Integer, default=0)

    project: Mapped[ProjectRow] = relationship(back_populates="schedule_items")

    def to_domain(self) -> ScheduleItem:
        return ScheduleItem(
            id=self.id,
            name=self.name,
            start_date=self.start_date,
            end_date=self.end_date,
            progress=self.progress,
        )


class EquipmentRecordRow(Base):
    __tablename__ = "equipment_records"
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    project_id: Mapped[str] = mapped_column(ForeignKey("projects.id"), index=True)
    seq: Mapped[int] = mapped_column(Integer)
    date: Mapped[str] = mapped_column(String(10), default="")
    part: Mapped[str] = mapped_column(String(128), default="")
    content: Mapped[str] = mapped_column(Text, default="")
    action: Mapped[str] = mapped_column(Text, default="")
    manager: Mapped[str] = mapped_column(String(128), default="")

    project: Mapped[ProjectRow] = relationship(back_populates="equipment_history")

    def to_domain(self) -> EquipmentRecord:
        return EquipmentRecord(
            id=self.id,
            date=self.date,
            part=self.part,
            content=self.content,
            action=self.action,
            manager=self.manager,
        )


class PersonRow(Base):
    __tablename__ = "people"
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    project_id: Mapped[str] = mapped_column(ForeignKey("projects.id"), index=True)
    seq: Mapped[int] = mapped_column(Integer)
    name: Mapped[str] = mapped_column(String(128), default="")
    affiliation: Mapped[str] = mapped_column(String(128), default="")
    department: Mapped[str] = mapped_column(String(128), default="")

    project: Mapped[ProjectRow] = relationship(back_populates="people")

    def to_domain(self) -> Person:
        return Person(id=self.id, name=self.name, affiliation=self.affiliation, department=self.department)

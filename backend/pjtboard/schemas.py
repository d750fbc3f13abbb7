"""Request bodies for the HTTP layer. Field names follow the dashboard's camelCase JSON."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Body(BaseModel):
    model_config = ConfigDict(extra="ignore")

    def payload(self) -> dict:
        return self.model_dump(exclude_unset=True)


class CostRecordIn(_Body):
    id: Optional[str] = None
    date: Optional[str] = None
    budget: Optional[float] = None
    actualCost: Optional[float] = None
    note: Optional[str] = None
    manager: Optional[str] = None
    changeReason: Optional[str] = None


class ScheduleItemIn(_Body):
    id: Optional[str] = None
    name: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)


class EquipmentRecordIn(_Body):
    id: Optional[str] = None
    date: Optional[str] = None
    part: Optional[str] = None
    content: Optional[str] = None
    action: Optional[str] = None
    manager: Optional[str] = None


class PersonIn(_Body):
    id: Optional[str] = None
    name: Optional[str] = None
    affiliation: Optional[str] = None
    department: Optional[str] = None


class ProjectIn(_Body):
    id: Optional[str] = None
    pjtNo: Optional[str] = None
    name: Optional[str] = None
    status: Optional[str] = None
    pm: Optional[str] = None
    salesManagers: Optional[List[str]] = None
    designManagers: Optional[List[str]] = None
    controlManagers: Optional[List[str]] = None
    productionManagers: Optional[List[str]] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    budget: Optional[float] = None
    actualCost: Optional[float] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    note: Optional[str] = None
    country: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    city: Optional[str] = None
    address: Optional[str] = None
    costHistory: Optional[List[CostRecordIn]] = None
    scheduleItems: Optional[List[ScheduleItemIn]] = None
    equipmentHistory: Optional[List[EquipmentRecordIn]] = None
    people: Optional[List[PersonIn]] = None

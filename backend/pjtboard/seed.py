import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .models import ProjectRow
from .services import create_project

logger = logging.getLogger(__name__)

SAMPLE_PROJECTS = [
    {
        "id": "project_sample_1",
        "pjtNo": "PJT-2024001",
        "name": "Ulsan Refinery Retrofit",
        "status": "Active",
        "pm": "Kim",
        "salesManagers": ["Park"],
        "designManagers": ["Choi", "Jung"],
        "progress": 45,
        "startDate": "2024-01-15",
        "endDate": "2024-09-30",
        "country": "Korea",
        "city": "Ulsan",
        "lat": 35.5384,
        "lng": 129.3114,
        "address": "Onsan Industrial Complex, Ulju-gun",
        "costHistory": [
            {"date": "2024-02-01", "budget": 1_000_000, "actualCost": 250_000, "manager": "Kim"},
            {"date": "2024-05-01", "budget": 1_000_000, "actualCost": 640_000, "manager": "Kim"},
        ],
        "scheduleItems": [
            {"name": "Design", "startDate": "2024-01-15", "endDate": "2024-03-20", "progress": 100},
            {"name": "Procurement", "startDate": "2024-03-01", "endDate": "2024-06-15", "progress": 60},
            {"name": "Installation", "startDate": "2024-06-01", "endDate": "2024-09-30", "progress": 10},
        ],
        "equipmentHistory": [
            {"date": "2024-04-10", "part": "Feed pump", "content": "Seal leak", "action": "Seal replaced", "manager": "Jung"},
        ],
        "people": [
            {"name": "Kim", "affiliation": "HQ", "department": "Project Management"},
            {"name": "Jung", "affiliation": "Site", "department": "Mechanical"},
        ],
    },
    {
        "id": "project_sample_2",
        "pjtNo": "PJT-2024002",
        "name": "Hanoi Substation",
        "status": "ActiveNeedsAttention",
        "pm": "Lee",
        "controlManagers": ["Han"],
        "productionManagers": ["Yoon"],
        "progress": 70,
        "startDate": "2024-03-01",
        "endDate": "2025-02-28",
        "country": "Vietnam",
        "city": "Hanoi",
        "costHistory": [
            {"date": "2024-04-01", "budget": 2_500_000, "actualCost": 1_500_000, "manager": "Lee"},
            {"date": "2024-08-01", "budget": 2_500_000, "actualCost": 2_150_000, "manager": "Lee",
             "changeReason": "Cable price increase"},
        ],
        "scheduleItems": [
            {"name": "Civil works", "startDate": "2024-03-01", "endDate": "2024-08-31", "progress": 80},
            {"name": "Commissioning", "startDate": "2024-12-01", "endDate": "2025-02-28", "progress": 0},
        ],
    },
    {
        "id": "project_sample_3",
        "pjtNo": "PJT-2024003",
        "name": "Busan Port Crane Upgrade",
        "status": "Planned",
        "pm": "Park",
        "startDate": "2024-10-01",
        "endDate": "2025-06-30",
        "country": "Korea",
        "city": "Busan",
    },
    {
        "id": "project_sample_4",
        "pjtNo": "PJT-2023014",
        "name": "Jakarta Water Treatment",
        "status": "Completed",
        "pm": "Choi",
        "startDate": "2023-02-01",
        "endDate": "2023-12-15",
        "country": "Indonesia",
        "city": "Jakarta",
        "costHistory": [
            {"date": "2023-12-15", "budget": 800_000, "actualCost": 780_000, "manager": "Choi"},
        ],
    },
]


def seed_if_empty(db: Session) -> int:
    count = db.execute(select(func.count()).select_from(ProjectRow)).scalar_one()
    if count:
        return 0
    for data in SAMPLE_PROJECTS:
        create_project(db, data)
    logger.info("Seeded %d sample projects", len(SAMPLE_PROJECTS))
    return len(SAMPLE_PROJECTS)

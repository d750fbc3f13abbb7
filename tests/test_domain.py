from pjtboard.domain import CostRecord, EquipmentRecord, Person, Project, ScheduleItem, _names
from pjtboard.status_rules import ProjectStatus


def test_cost_record_coerces_amounts():
    r = CostRecord(id="r", date="2024-01-01", budget="1,000", actual_cost=-3)
    assert r.budget == 1000
    assert r.actual_cost == 0
    assert r.cost_ratio == 0


def test_overrun_is_allowed():
    r = CostRecord(id="r", date="2024-01-01", budget=100, actual_cost=150)
    assert r.cost_ratio == 150


def test_schedule_progress_is_clamped():
    assert ScheduleItem(id="s", name="x", progress=140).progress == 100
    assert ScheduleItem(id="s", name="x", progress="abc").progress == 0


def test_project_from_dict_normalizes_and_fills_ids():
    p = Project.from_dict({
        "pjtNo": "PJT-1",
        "status": "진행 중(관리필요)",
        "costHistory": [{"date": "2024-01-01", "budget": 10, "actualCost": 8}],
        "scheduleItems": [{"name": "Design", "startDate": "2024-01-01", "endDate": "2024-02-01"}],
    })
    assert p.id.startswith("project_")
    assert p.status is ProjectStatus.ACTIVE_NEEDS_ATTENTION
    assert p.cost_history[0].id.startswith("history_")
    assert p.schedule_items[0].id.startswith("schedule_")
    assert p.budget == 0


def test_project_json_round_trip():
    p = Project(
        id="p1", pjt_no="PJT-1", name="Plant", status=ProjectStatus.ON_HOLD, budget=100, actual_cost=40,
        cost_history=[CostRecord(id="r1", date="2024-01-01", budget=100, actual_cost=40, manager="Kim")],
        schedule_items=[ScheduleItem(id="s1", name="Design", start_date="2024-01-01", end_date="2024-02-01")],
    )
    d = p.to_dict()
    assert d["status"] == "OnHold"
    assert d["actualCost"] == 40
    assert d["costRatio"] == 40
    assert d["costHistory"][0]["manager"] == "Kim"
    assert Project.from_dict(d) == p


def test_manager_names_from_list_or_comma_string():
    assert _names("Kim, Lee,,Kim ") == ["Kim", "Lee"]
    assert _names([" Park", "", None, "Park"]) == ["Park"]
    assert _names(None) == []


def test_project_extended_fields_round_trip():
    p = Project.from_dict({
        "id": "p1", "pjtNo": "PJT-1", "name": "Plant",
        "salesManagers": "Park, Lee", "controlManagers": ["Han"],
        "progress": 130, "lat": "35.5", "lng": None, "address": " Ulsan ",
        "equipmentHistory": [{"date": "2024-04-10", "part": "Pump", "action": "Fixed"}],
        "people": [{"name": "Kim", "affiliation": "HQ"}],
    })
    assert p.sales_managers == ["Park", "Lee"]
    assert p.progress == 100
    assert (p.lat, p.lng) == (35.5, 0.0)
    assert p.address == "Ulsan"
    assert isinstance(p.equipment_history[0], EquipmentRecord)
    assert p.equipment_history[0].id.startswith("equipment_")
    assert isinstance(p.people[0], Person)
    assert p.people[0].id.startswith("person_")

    d = p.to_dict()
    assert d["salesManagers"] == ["Park", "Lee"]
    assert d["designManagers"] == []
    assert d["controlManagers"] == ["Han"]
    assert d["equipmentHistory"][0]["action"] == "Fixed"
    assert d["people"][0]["affiliation"] == "HQ"
    assert Project.from_dict(d) == p

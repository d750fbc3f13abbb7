import pytest

from pjtboard.domain import CostRecord, Project
from pjtboard.portfolio import calculate_stats, filter_projects, project_ratio, sort_projects
from pjtboard.status_rules import ProjectStatus


def _project(pid, pjt_no, status="Active", budget=0, actual=0, **kw):
    return Project(id=pid, pjt_no=pjt_no, name=kw.pop("name", pid), status=status,
                   budget=budget, actual_cost=actual, **kw)


@pytest.fixture
def projects():
    return [
        _project("a", "PJT-003", "Active", 1000, 300, country="Korea", city="Seoul", pm="Kim"),
        _project("b", "PJT-001", "ActiveNeedsAttention", 1000, 850, country="Vietnam", city="Hanoi", pm="Lee"),
        _project("c", "PJT-002", "Planned", 0, 0, country="Korea", city="Busan", pm="Park"),
        _project("d", "PJT-004", "Active", 500, 450, country="Indonesia", city="Jakarta", pm="Choi"),
    ]


def test_filter_by_query_is_case_insensitive(projects):
    assert [p.id for p in filter_projects(projects, "korea")] == ["a", "c"]
    assert [p.id for p in filter_projects(projects, "HANOI")] == ["b"]
    assert [p.id for p in filter_projects(projects, "pjt-004")] == ["d"]


def test_filter_by_status(projects):
    assert [p.id for p in filter_projects(projects, status="Active")] == ["a", "d"]
    assert [p.id for p in filter_projects(projects, status=ProjectStatus.PLANNED)] == ["c"]
    assert len(filter_projects(projects, status="all")) == 4


def test_filter_combines_query_and_status(projects):
    assert [p.id for p in filter_projects(projects, "korea", "Planned")] == ["c"]


def test_sort_by_project_number(projects):
    assert [p.pjt_no for p in sort_projects(projects, "pjtNo")] == ["PJT-001", "PJT-002", "PJT-003", "PJT-004"]


def test_sort_by_cost_ratio_descending(projects):
    assert [p.id for p in sort_projects(projects, "costRatio", descending=True)] == ["d", "b", "a", "c"]


def test_sort_by_status_follows_lifecycle_order(projects):
    assert [p.id for p in sort_projects(projects, "status")] == ["c", "a", "d", "b"]


def test_sort_unknown_field_keeps_order(projects):
    assert sort_projects(projects, "name") == projects


def test_project_ratio_prefers_latest_record():
    p = _project("x", "PJT-9", budget=100, actual=10, cost_history=[
        CostRecord(id="r2", date="2024-06-01", budget=100, actual_cost=90),
        CostRecord(id="r1", date="2024-01-01", budget=100, actual_cost=20),
    ])
    assert project_ratio(p) == pytest.approx(90)
    assert project_ratio(_project("y", "PJT-8", budget=200, actual=50)) == pytest.approx(25)


def test_stats(projects):
    stats = calculate_stats(projects)
    assert stats["totalProjects"] == 4
    assert stats["totalBudget"] == 2500
    assert stats["totalActualCost"] == 1600
    assert stats["budgetUtilization"] == pytest.approx(64)
    assert stats["avgCostRatio"] == pytest.approx((30 + 85 + 0 + 90) / 4)
    assert stats["statusCounts"] == {
        "Planned": 1, "Active": 2, "ActiveNeedsAttention": 1, "OnHold": 0, "Completed": 0,
    }
    assert stats["severityCounts"] == {"Normal": 2, "NeedsAttention": 0, "Warning": 2, "Critical": 0}
    # b by status and ratio, d by ratio alone
    assert stats["urgentProjects"] == 2


def test_stats_empty():
    stats = calculate_stats([])
    assert stats["totalProjects"] == 0
    assert stats["avgCostRatio"] == 0
    assert stats["budgetUtilization"] == 0
    assert sum(stats["statusCounts"].values()) == 0

from fastapi.testclient import TestClient

from app.main import app

client = TestClient(app)


def test_health_check():
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"success": True}


def test_routes_are_registered():
    paths = {route.path for route in app.routes}
    assert "/api/v1/students" in paths
    assert "/api/v1/grade-settings/{grade}" in paths
    assert "/api/v1/analysis/cohort" in paths
    assert "/api/v1/classroom/groups" in paths
    assert "/api/v1/classroom/follow-up" in paths
    assert "/api/v1/classroom/follow-up/students/{student_id}/toggle" in paths
    assert "/api/v1/classroom/follow-up/mark-all" in paths

from fastapi.testclient import TestClient

from app.main import app

client = TestClient(app)


def test_preview_report():
    payload = {
        "records": [
            {
                "name": "Ali",
                "performance_tasks": 10,
                "participation": 10,
                "book": 10,
                "homework": 10,
                "exam1": 30,
                "exam2": 30,
            },
            {"name": "Sara", "exam1": 25, "exam2": 45},
        ],
        "config": {"performance_tasks_max": 10, "exam1_max": 30, "exam2_max": 30},
    }
    response = client.post("/api/v1/analysis/preview", json=payload)
    assert response.status_code == 200
    data = response.json()
    assert [s["total"] for s in data["students"]] == [100, 55]
    assert [s["band"] for s in data["students"]] == ["Excellent", "Acceptable"]
    assert data["statistics"]["mean"] == 77.5
    assert data["statistics"]["mode"] == []
    assert data["final_total_max"] == 100
    assert data["grade"] is None


def test_preview_uses_default_configuration():
    response = client.post("/api/v1/analysis/preview", json={"records": [{"name": "Ali", "exam1": 30}]})
    assert response.status_code == 200
    assert response.json()["final_total_max"] == 100


def test_preview_pins_huge_exam_score_to_the_maximum():
    response = client.post("/api/v1/analysis/preview", json={"records": [{"name": "Ali", "exam1": 10**400}]})
    assert response.status_code == 200
    student = response.json()["students"][0]
    assert student["exam_total"] == 30
    assert student["total"] == 30


def test_preview_rejects_invalid_configuration():
    payload = {"records": [{"name": "Ali"}], "config": {"performance_tasks_max": 10, "exam1_max": 25, "exam2_max": 30}}
    response = client.post("/api/v1/analysis/preview", json=payload)
    assert response.status_code == 422


def test_preview_rejects_empty_cohort():
    response = client.post("/api/v1/analysis/preview", json={"records": []})
    assert response.status_code == 422


def test_band_ranges():
    response = client.get("/api/v1/analysis/band-ranges", params={"final_total_max": 60})
    assert response.status_code == 200
    assert response.json()[0] == {"band": "Excellent", "min": 54, "max": 60, "description": "High mastery"}

    response = client.get("/api/v1/analysis/band-ranges", params={"final_total_max": 70})
    assert response.status_code == 400

from unittest.mock import Mock

from sqlalchemy.exc import OperationalError

from loyaltyapi.database.session import get_db


class TestHealthRoutes:
    def test_health_ok(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "database": "ok"}

    def test_health_database_down(self, client):
        """DB 연결 실패 시 503"""
        # Given
        broken = Mock()
        broken.execute.side_effect = OperationalError("SELECT 1", {}, Exception("down"))
        client.app.dependency_overrides[get_db] = lambda: broken

        # When
        response = client.get("/health")

        # Then
        assert response.status_code == 503
        assert response.json()["database"] == "unavailable"

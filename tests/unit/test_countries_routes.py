"""
Unit tests for the /countries routes and CountryService.
"""

import pytest
from fastapi.testclient import TestClient

from useraccounts.domain.countries import CountryService
from useraccounts.domain.exceptions import ResourceNotFound


class TestCountryService:
    def test_lookup_is_case_insensitive(self, countries) -> None:
        service = CountryService(repository=countries)
        assert service.get_country("fi").name == "Finland"

    def test_unknown_code_raises(self, countries) -> None:
        service = CountryService(repository=countries)
        with pytest.raises(ResourceNotFound) as exc_info:
            service.get_country("zz")
        assert exc_info.value.message == "Country ZZ not found"


class TestCountriesEndpoints:
    def test_list_is_ordered_by_name(self, client: TestClient) -> None:
        response = client.get("/countries")

        assert response.status_code == 200
        assert [c["name"] for c in response.json()] == ["Finland", "Poland", "Sweden"]

    def test_finland(self, client: TestClient) -> None:
        response = client.get("/countries/FI")

        assert response.status_code == 200
        body = response.json()
        assert body["abbrev"] == "FI"
        assert body["name"] == "Finland"
        assert body["postalCodePattern"] == "99999"
        assert body["postalRegex"] == "^[0-9]{5}$"
        assert "id" in body

    def test_lowercase_code(self, client: TestClient) -> None:
        response = client.get("/countries/se")
        assert response.json()["name"] == "Sweden"

    def test_unknown_code_returns_404(self, client: TestClient) -> None:
        response = client.get("/countries/ZZ")

        assert response.status_code == 404
        assert response.json() == {"message": "Country ZZ not found", "errors": []}

    def test_malformed_code_returns_400(self, client: TestClient) -> None:
        response = client.get("/countries/FIN")
        assert response.status_code == 400

    def test_countries_need_no_token(self, client: TestClient) -> None:
        assert client.get("/countries", headers={"Authorization": "Bearer bogus"}).status_code == 200

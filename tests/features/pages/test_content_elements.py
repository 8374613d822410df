import pytest

from app.features.pages.models.page import ContentElement, Page


@pytest.fixture
def element(seed):
    page = seed(Page(title="Home", preview_url="https://x/home", workspace_id=0))
    return seed(ContentElement(page_id=page.id, language_id=0, header="Welcome", heading_level=2))


class TestUpdateContentElement:
    def test_changes_heading_level(self, client, auth_headers, element, load):
        response = client.patch(
            f"/api/v1/content-elements/{element.id}", json={"heading_level": 1}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["heading_level"] == 1
        assert load(ContentElement, element.id).heading_level == 1

    def test_fallback_tag_level(self, client, auth_headers, element, load):
        response = client.patch(
            f"/api/v1/content-elements/{element.id}", json={"heading_level": -1}, headers=auth_headers
        )
        assert response.status_code == 200
        assert load(ContentElement, element.id).heading_level == -1

    def test_changes_and_clears_landmark_role(self, client, auth_headers, element, load):
        url = f"/api/v1/content-elements/{element.id}"

        assert client.patch(url, json={"landmark_role": "navigation"}, headers=auth_headers).status_code == 200
        assert load(ContentElement, element.id).landmark_role == "navigation"

        assert client.patch(url, json={"landmark_role": ""}, headers=auth_headers).status_code == 200
        stored = load(ContentElement, element.id)
        assert stored.landmark_role == ""
        assert stored.heading_level == 2

    @pytest.mark.parametrize(
        "body",
        [{}, {"heading_level": 0}, {"heading_level": 7}, {"landmark_role": "article"}],
    )
    def test_invalid_values_are_422(self, client, auth_headers, element, body):
        response = client.patch(f"/api/v1/content-elements/{element.id}", json=body, headers=auth_headers)
        assert response.status_code == 422

    def test_language_access_is_checked(self, client, headers_for, seed, load):
        page = seed(Page(title="Startseite", preview_url="https://x/de", workspace_id=0))
        german = seed(ContentElement(page_id=page.id, language_id=1, header="Willkommen"))

        response = client.patch(
            f"/api/v1/content-elements/{german.id}", json={"heading_level": 3}, headers=headers_for(languages=[0])
        )

        assert response.status_code == 403
        assert load(ContentElement, german.id).heading_level == 2

    def test_unknown_element_is_404(self, client, auth_headers, seed):
        response = client.patch("/api/v1/content-elements/999", json={"heading_level": 3}, headers=auth_headers)
        assert response.status_code == 404

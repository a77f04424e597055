"""
Tests for sponsor, project, post and opportunity management.
"""

import json

import pytest
from httpx import AsyncClient

from lutonai.services.post_service import slugify

from tests.conftest import png_upload

POST_BODY = "Large language models are changing how our members work. " * 10


async def create_post(client, headers, title="Community Update: Spring Edition", **extra):
    form = {"title": title, "content": POST_BODY, "category": "Technology", "tags": "ai, community", **extra}
    return await client.post("/api/posts", data=form, files=png_upload(), headers=headers)


class TestSponsors:
    form = {
        "name": "Acme Robotics",
        "description": "Robots for everyone",
        "email": "hello@example.com",
        "website": "https://acme.example.com",
        "sponsorship_level": "Gold",
    }

    @pytest.mark.asyncio
    async def test_crud(self, client: AsyncClient, admin_headers, storage):
        response = await client.post(
            "/api/sponsors", data=self.form, files=png_upload("logo", "acme.png"), headers=admin_headers
        )
        assert response.status_code == 201
        sponsor = response.json()
        assert sponsor["sponsorship_level"] == "Gold"
        assert sponsor["logo"].startswith("/uploads/sponsors/")

        response = await client.get(f"/api/sponsors/{sponsor['id']}")
        assert response.json()["name"] == "Acme Robotics"

        response = await client.put(
            f"/api/sponsors/{sponsor['id']}", data={"sponsorship_level": "Platinum"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["sponsorship_level"] == "Platinum"
        assert response.json()["name"] == "Acme Robotics"

        response = await client.delete(f"/api/sponsors/{sponsor['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert list((storage.root / "sponsors").iterdir()) == []
        assert (await client.get(f"/api/sponsors/{sponsor['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_list_and_search(self, client: AsyncClient, admin_headers):
        for name, level in [("Acme Robotics", "Gold"), ("Beta Labs", "Silver")]:
            await client.post(
                "/api/sponsors",
                data={**self.form, "name": name, "sponsorship_level": level},
                files=png_upload("logo"),
                headers=admin_headers,
            )

        response = await client.get("/api/sponsors")
        data = response.json()
        assert data["pagination"]["total"] == 2
        assert [s["name"] for s in data["sponsors"]] == ["Beta Labs", "Acme Robotics"]

        response = await client.get("/api/sponsors?search=silver")
        assert [s["name"] for s in response.json()["sponsors"]] == ["Beta Labs"]

    @pytest.mark.asyncio
    async def test_invalid_level(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/sponsors",
            data={**self.form, "sponsorship_level": "Diamond"},
            files=png_upload("logo"),
            headers=admin_headers,
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_logo_required(self, client: AsyncClient, admin_headers):
        response = await client.post("/api/sponsors", data=self.form, headers=admin_headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_writes_require_admin(self, client: AsyncClient, user_headers):
        response = await client.post(
            "/api/sponsors", data=self.form, files=png_upload("logo"), headers=user_headers
        )
        assert response.status_code == 403


class TestProjects:
    @pytest.mark.asyncio
    async def test_crud_with_partners(self, client: AsyncClient, admin_headers):
        partners = [{"name": "University of Bedfordshire", "logo": "/uploads/partners/uob.png"}]
        response = await client.post(
            "/api/projects",
            data={
                "title": "AI for Local Charities",
                "description": "Helping charities adopt AI tools",
                "status": "Ongoing",
                "partners": json.dumps(partners),
            },
            files=png_upload(),
            headers=admin_headers,
        )
        assert response.status_code == 201
        project = response.json()
        assert project["partners"] == partners

        response = await client.get("/api/projects?status=Ongoing")
        assert response.json()["pagination"]["total"] == 1

        response = await client.put(
            f"/api/projects/{project['id']}", data={"status": "Completed"}, headers=admin_headers
        )
        assert response.json()["status"] == "Completed"
        assert response.json()["partners"] == partners

        response = await client.delete(f"/api/projects/{project['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert (await client.get(f"/api/projects/{project['id']}")).status_code == 404


class TestPosts:
    @pytest.mark.asyncio
    async def test_create_and_get_by_slug(self, client: AsyncClient, admin_headers):
        response = await create_post(client, admin_headers)
        assert response.status_code == 201
        post = response.json()
        assert post["slug"] == "community-update-spring-edition"
        assert post["tags"] == ["ai", "community"]

        response = await client.get("/api/posts/community-update-spring-edition")
        assert response.json()["id"] == post["id"]

        response = await client.get(f"/api/posts/{post['id']}")
        assert response.json()["slug"] == post["slug"]

    @pytest.mark.asyncio
    async def test_slugs_are_unique(self, client: AsyncClient, admin_headers):
        first = (await create_post(client, admin_headers)).json()
        second = (await create_post(client, admin_headers)).json()
        assert first["slug"] == "community-update-spring-edition"
        assert second["slug"] == "community-update-spring-edition-2"

    @pytest.mark.asyncio
    async def test_update_title_changes_slug(self, client: AsyncClient, admin_headers):
        post = (await create_post(client, admin_headers)).json()
        response = await client.put(
            f"/api/posts/{post['id']}", data={"title": "Summer Hackathon Results"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["slug"] == "summer-hackathon-results"

    @pytest.mark.asyncio
    async def test_numeric_title_gets_non_numeric_slug(self, client: AsyncClient, admin_headers):
        post = (await create_post(client, admin_headers, title="202420252026")).json()
        assert post["slug"] == "post-202420252026"

        response = await client.get("/api/posts/post-202420252026")
        assert response.status_code == 200
        assert response.json()["id"] == post["id"]

    def test_slugify(self):
        assert slugify("Community Update: Spring Edition!") == "community-update-spring-edition"
        assert slugify("2024") == "post-2024"
        assert slugify("2024 in review") == "2024-in-review"
        assert slugify("???") == "post"

    @pytest.mark.asyncio
    async def test_filters(self, client: AsyncClient, admin_headers):
        await create_post(client, admin_headers)
        await create_post(client, admin_headers, title="Research Notes: Vision Models", category="Science", tags="vision")

        response = await client.get("/api/posts?category=Science")
        assert [p["title"] for p in response.json()["posts"]] == ["Research Notes: Vision Models"]

        response = await client.get("/api/posts?tag=AI")
        assert [p["title"] for p in response.json()["posts"]] == ["Community Update: Spring Edition"]
        assert response.json()["pagination"]["total"] == 1

    @pytest.mark.asyncio
    async def test_content_too_short(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/posts",
            data={"title": "Community Update: Short", "content": "Too short", "category": "General"},
            files=png_upload(),
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["error"]["details"][0]["path"] == "content"

    @pytest.mark.asyncio
    async def test_delete(self, client: AsyncClient, admin_headers):
        post = (await create_post(client, admin_headers)).json()
        response = await client.delete(f"/api/posts/{post['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert (await client.get(f"/api/posts/{post['slug']}")).status_code == 404


class TestOpportunities:
    form = {
        "title": "Junior ML Engineer",
        "description": "Join a small team building forecasting tools",
        "type": "Job",
        "category": "AI Development",
        "level": "Beginner",
        "commitment": "Full Time",
        "skills": "python, pandas, sql",
        "location": "Luton",
        "application_url": "https://jobs.example.com/ml",
        "remote_available": "true",
    }

    @pytest.mark.asyncio
    async def test_crud_and_filters(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/opportunities",
            data=self.form,
            files=png_upload("company_logo", "logo.png"),
            headers=admin_headers,
        )
        assert response.status_code == 201
        opportunity = response.json()
        assert opportunity["skills"] == ["python", "pandas", "sql"]
        assert opportunity["remote_available"] is True
        assert opportunity["company_logo"].startswith("/uploads/opportunities/")

        assert (await client.get("/api/opportunities?type=Job&remote=true")).json()["pagination"]["total"] == 1
        assert (await client.get("/api/opportunities?type=Internship")).json()["pagination"]["total"] == 0
        assert (await client.get("/api/opportunities?search=forecasting")).json()["pagination"]["total"] == 1

        response = await client.put(
            f"/api/opportunities/{opportunity['id']}", data={"level": "Advanced"}, headers=admin_headers
        )
        assert response.json()["level"] == "Advanced"

        response = await client.delete(f"/api/opportunities/{opportunity['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert (await client.get(f"/api/opportunities/{opportunity['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_end_before_start(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/opportunities",
            data={**self.form, "start_date": "2026-09-01T00:00:00Z", "end_date": "2026-08-01T00:00:00Z"},
            files=png_upload("company_logo"),
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "End date must be after start date"

"""Tests for the article CRUD endpoints."""
from app.core.security import create_access_token
from app.models.article import Article


def _headers_for(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


def _article_body(**overrides):
    body = {
        "title": "Understanding Transformers",
        "category": "AI",
        "content": "<p>Attention   is &quot;all&quot; you need.</p>",
        "tags": "ml,nlp",
    }
    body.update(overrides)
    return body


class TestCreateArticle:
    def test_create_generates_summary(self, client, user, auth_headers):
        response = client.post("/api/articles", json=_article_body(), headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Article created successfully."
        article = data["article"]
        assert article["content"] == "<p>Attention   is &quot;all&quot; you need.</p>"
        assert article["short_summary"] == 'Attention is "all" you need.'
        assert article["user_id"] == user.id
        assert article["author"] == {"id": user.id, "username": user.username, "email": user.email}

    def test_create_with_ai_improves_content(self, client, auth_headers):
        response = client.post(
            "/api/articles", json=_article_body(use_ai=True), headers=auth_headers
        )

        article = response.json()["article"]
        assert article["content"] == '[AI Improved] <p>Attention is &quot;all&quot; you need.</p>'
        assert article["short_summary"] == '[AI Improved] Attention is "all" you need.'

    def test_create_long_content_summary_is_bounded(self, client, auth_headers):
        response = client.post(
            "/api/articles", json=_article_body(content="x" * 1000), headers=auth_headers
        )

        summary = response.json()["article"]["short_summary"]
        assert len(summary) == 200
        assert summary.endswith("...")

    def test_create_requires_fields(self, client, auth_headers):
        response = client.post(
            "/api/articles", json={"title": "No content", "category": "Tech"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Title, category, and content are required."

    def test_create_rejects_unknown_category(self, client, auth_headers):
        response = client.post(
            "/api/articles", json=_article_body(category="Cooking"), headers=auth_headers
        )

        assert response.status_code == 422

    def test_create_requires_auth(self, client):
        response = client.post("/api/articles", json=_article_body())

        assert response.status_code in [401, 403]


class TestReadArticles:
    def test_list_is_public_and_newest_first(self, client, user, make_article):
        make_article(user, title="older")
        make_article(user, title="newer")

        response = client.get("/api/articles")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert [a["title"] for a in data["articles"]] == ["newer", "older"]
        assert data["articles"][0]["author"]["username"] == user.username

    def test_list_filters(self, client, user, make_article):
        make_article(user, title="Docker basics", category="DevOps", tags="docker")
        make_article(user, title="React hooks", category="Frontend", tags="react,js")

        by_category = client.get("/api/articles", params={"category": "DevOps"}).json()
        by_tag = client.get("/api/articles", params={"tags": "react"}).json()
        by_search = client.get("/api/articles", params={"search": "docker"}).json()

        assert [a["title"] for a in by_category["articles"]] == ["Docker basics"]
        assert [a["title"] for a in by_tag["articles"]] == ["React hooks"]
        assert [a["title"] for a in by_search["articles"]] == ["Docker basics"]

    def test_list_rejects_unknown_category(self, client):
        assert client.get("/api/articles", params={"category": "Cooking"}).status_code == 422

    def test_get_article(self, client, user, make_article):
        article = make_article(user)

        response = client.get(f"/api/articles/{article.id}")

        assert response.status_code == 200
        assert response.json()["article"]["title"] == "Scaling Postgres"

    def test_get_missing_article(self, client):
        response = client.get("/api/articles/999")

        assert response.status_code == 404
        assert response.json()["detail"] == "Article not found."

    def test_my_articles(self, client, make_user, make_article):
        me = make_user()
        other = make_user()
        make_article(me, title="mine")
        make_article(other, title="theirs")

        response = client.get("/api/articles/my", headers=_headers_for(me))

        assert response.status_code == 200
        assert [a["title"] for a in response.json()["articles"]] == ["mine"]

    def test_my_articles_requires_auth(self, client):
        assert client.get("/api/articles/my").status_code in [401, 403]


class TestUpdateArticle:
    def test_partial_update_keeps_content(self, client, user, make_article, auth_headers):
        article = make_article(user, short_summary="kept summary")

        response = client.put(
            f"/api/articles/{article.id}", json={"title": "Scaling Postgres, revised"}, headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Article updated successfully."
        assert data["article"]["title"] == "Scaling Postgres, revised"
        assert data["article"]["short_summary"] == "kept summary"

    def test_update_content_recomputes_summary(self, client, user, make_article, auth_headers):
        article = make_article(user)

        response = client.put(
            f"/api/articles/{article.id}",
            json={"content": "<h2>Indexes</h2> &amp; vacuum", "tags": "postgres"},
            headers=auth_headers,
        )

        updated = response.json()["article"]
        assert updated["content"] == "<h2>Indexes</h2> &amp; vacuum"
        assert updated["short_summary"] == "Indexes & vacuum"
        assert updated["tags"] == "postgres"

    def test_update_by_other_user_is_forbidden(self, client, make_user, make_article):
        author = make_user()
        article = make_article(author)

        response = client.put(
            f"/api/articles/{article.id}", json={"title": "mine now"}, headers=_headers_for(make_user())
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Forbidden. You are not the author of this article."

    def test_update_missing_article(self, client, auth_headers):
        response = client.put("/api/articles/999", json={"title": "x"}, headers=auth_headers)

        assert response.status_code == 404


class TestDeleteArticle:
    def test_delete_article(self, client, db_session, user, make_article, auth_headers):
        article = make_article(user)
        article_id = article.id

        response = client.delete(f"/api/articles/{article_id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Article deleted successfully."}
        assert db_session.get(Article, article_id) is None

    def test_delete_by_other_user_is_forbidden(self, client, make_user, make_article):
        article = make_article(make_user())

        response = client.delete(f"/api/articles/{article.id}", headers=_headers_for(make_user()))

        assert response.status_code == 403

    def test_delete_missing_article(self, client, auth_headers):
        assert client.delete("/api/articles/999", headers=auth_headers).status_code == 404

import httpx
import pytest

from portfolio.services.youtube import YouTubeClient


def youtube_handler(request: httpx.Request) -> httpx.Response:
    video_id = request.url.params["id"]
    if video_id == "gone":
        return httpx.Response(200, json={"items": []})
    return httpx.Response(200, json={"items": [{
        "snippet": {
            "title": f"Talk {video_id}",
            "channelTitle": "Conference",
            "description": "A talk about machine learning in production",
            "publishedAt": "2024-05-01T00:00:00Z",
            "thumbnails": {"medium": {"url": f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg"}},
        },
        "contentDetails": {"duration": "PT45M"},
    }]})


@pytest.fixture
def youtube(client, context, settings):
    http = httpx.AsyncClient(
        base_url=settings.youtube.api_base_url, transport=httpx.MockTransport(youtube_handler)
    )
    client = YouTubeClient(settings.youtube, client=http, retry_min_wait=0, retry_max_wait=0)
    context.videos.youtube = client
    return client


def import_videos(client, urls, category="AI Works", generate_embeddings=False):
    return client.post(
        "/api/admin/videos/import",
        json={"urls": urls, "category": category, "generateEmbeddings": generate_embeddings},
    )


def test_import_reports_per_url_results(admin_client, youtube):
    response = import_videos(admin_client, [
        "https://www.youtube.com/watch?v=abc",
        "https://youtu.be/abc",
        "https://youtu.be/gone",
        "not a url",
    ])

    assert response.status_code == 200
    result = response.json()["result"]
    assert result["success"] == 1
    assert result["failed"] == 3
    assert result["importedIds"] == ["abc"]
    assert [e["error"] for e in result["errors"]] == [
        "Video already exists",
        "Video not found",
        "Invalid YouTube URL",
    ]


def test_import_with_embeddings_indexes_vectors(admin_client, youtube):
    import_videos(admin_client, ["https://youtu.be/abc"], generate_embeddings=True)

    vectors = admin_client.get("/api/admin/vectors", params={"type": "video"}).json()
    assert vectors["count"] == 1
    assert vectors["vectors"][0]["id"] == "video_abc_chunk_0"
    assert vectors["vectors"][0]["metadata"]["category"] == "AI Works"

    video = admin_client.get("/api/admin/videos/abc").json()["video"]
    assert video["vectorIds"] == ["video_abc_chunk_0"]


@pytest.mark.parametrize("payload,error", [
    ({"category": "AI Works"}, "URLs array is required"),
    ({"urls": [], "category": "AI Works"}, "URLs array is required"),
    ({"urls": ["https://youtu.be/abc"]}, "Category is required"),
])
def test_import_validation(admin_client, payload, error):
    response = admin_client.post("/api/admin/videos/import", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": error}


def test_import_rejects_unknown_category(admin_client, youtube):
    response = import_videos(admin_client, ["https://youtu.be/abc"], category="Sports")
    assert response.status_code == 400
    assert "Sports" in response.json()["error"]


def test_public_listing_hides_admin_fields(client, admin_client, youtube):
    import_videos(admin_client, ["https://youtu.be/abc", "https://youtu.be/def"])
    admin_client.post("/admin/logout")

    body = client.get("/api/videos").json()
    assert body["success"] is True
    assert {v["videoId"] for v in body["videos"]} == {"abc", "def"}
    assert all("addedBy" not in v and "vectorIds" not in v for v in body["videos"])
    assert body["stats"]["aiWorks"] == 2

    stats = client.get("/api/videos", params={"stats": "true"}).json()
    assert stats["success"] is True
    assert stats["total"] == 2

    by_category = client.get("/api/videos", params={"category": "health"}).json()
    assert by_category["videos"] == []


def test_update_category_and_delete(admin_client, youtube):
    import_videos(admin_client, ["https://youtu.be/abc"], generate_embeddings=True)

    response = admin_client.patch("/api/admin/videos/abc", json={"category": "Leadership"})
    assert response.status_code == 200
    assert response.json()["video"]["category"] == "Leadership"
    stats = admin_client.get("/api/admin/videos").json()["stats"]
    assert (stats["leadership"], stats["aiWorks"]) == (1, 0)

    assert admin_client.delete("/api/admin/videos/abc").json() == {"success": True}
    assert admin_client.get("/api/admin/videos/abc").status_code == 404
    assert admin_client.get("/api/admin/vectors", params={"type": "video"}).json()["count"] == 0


def test_missing_video_is_not_found(admin_client):
    for method in ("get", "delete"):
        response = getattr(admin_client, method)("/api/admin/videos/nope")
        assert response.status_code == 404
        assert response.json() == {"error": "Video not found"}
    response = admin_client.patch("/api/admin/videos/nope", json={"category": "Health"})
    assert response.status_code == 404


def test_admin_video_api_requires_admin(client):
    assert client.get("/api/admin/videos").status_code == 401
    assert client.post("/api/admin/videos/import", json={}).status_code == 401


def test_category_listing_ignores_pagination(admin_client, youtube):
    import_videos(admin_client, ["https://youtu.be/v1", "https://youtu.be/v2"])
    import_videos(admin_client, ["https://youtu.be/v3"], category="Health")

    body = admin_client.get(
        "/api/admin/videos", params={"category": "AI Works", "limit": 1, "offset": 1}
    ).json()

    assert sorted(video["videoId"] for video in body["videos"]) == ["v1", "v2"]
    assert body["pagination"] == {"limit": 1, "offset": 1, "total": 3}

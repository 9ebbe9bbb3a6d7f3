from sqlalchemy import func, select

from src.api.db import get_db_session
from src.api.models import Comment, Like


def test_create_story_defaults_to_draft(client, make_story):
    story = make_story(tone="nostalgic", lifeContext="Road trip")
    assert story["isPublished"] is False
    assert story["isAiGenerated"] is False
    assert story["likesCount"] == story["commentsCount"] == story["sharesCount"] == 0
    assert story["lifeContext"] == "Road trip"
    assert story["tone"] == "nostalgic"


def test_create_story_validates_references(client, make_user, make_song):
    user = make_user()
    song = make_song()
    base = {"title": "T", "content": "C", "authorName": "A"}

    r = client.post("/api/stories", json={**base, "userId": 999, "songId": song["id"]})
    assert r.status_code == 400
    r = client.post("/api/stories", json={**base, "userId": user["id"], "songId": 999})
    assert r.status_code == 400
    r = client.post("/api/stories", json={"userId": user["id"], "songId": song["id"], "title": "T"})
    assert r.status_code == 400


def test_get_story_with_details(client, make_user, make_song, make_story):
    user = make_user(display_name="Sarah Chen")
    song = make_song("Bohemian Rhapsody", "Queen")
    story = make_story(user=user, song=song)

    detail = client.get(f"/api/stories/{story['id']}").json()
    assert detail["user"]["displayName"] == "Sarah Chen"
    assert detail["song"]["title"] == "Bohemian Rhapsody"
    assert detail["comments"] == []
    assert detail["isLiked"] is None


def test_get_missing_story_404(client):
    r = client.get("/api/stories/123")
    assert r.status_code == 404
    assert r.json()["message"] == "Story not found."


def test_list_filters_and_order(client, make_user, make_story):
    alice = make_user("alice")
    bob = make_user("bob")
    first = make_story(user=alice, isPublished=True)
    second = make_story(user=alice)
    third = make_story(user=bob, isPublished=True)

    all_ids = [s["id"] for s in client.get("/api/stories").json()]
    assert all_ids == [third["id"], second["id"], first["id"]]

    published = client.get("/api/stories", params={"published": "true"}).json()
    assert [s["id"] for s in published] == [third["id"], first["id"]]

    drafts = client.get("/api/stories", params={"published": "false"}).json()
    assert [s["id"] for s in drafts] == [second["id"]]

    alice_published = client.get("/api/stories", params={"userId": alice["id"], "published": "true"}).json()
    assert [s["id"] for s in alice_published] == [first["id"]]

    # anything other than true/false is ignored
    assert len(client.get("/api/stories", params={"published": "yes"}).json()) == 3


def test_update_story_partial(client, make_song, make_story):
    story = make_story(title="Before", age="19")
    other_song = make_song("Wonderwall", "Oasis")

    r = client.put(
        f"/api/stories/{story['id']}",
        json={"title": "After", "songId": other_song["id"], "content": None},
    )
    assert r.status_code == 200
    updated = r.json()
    assert updated["title"] == "After"
    assert updated["songId"] == other_song["id"]
    assert updated["content"] == "It happened."
    assert updated["age"] == "19"

    assert client.put(f"/api/stories/{story['id']}", json={"songId": 999}).status_code == 400
    assert client.put("/api/stories/999", json={"title": "X"}).status_code == 404


def test_publish_and_share(client, make_story):
    story = make_story()

    r = client.post(f"/api/stories/{story['id']}/publish")
    assert r.status_code == 200
    assert r.json()["isPublished"] is True

    assert client.post(f"/api/stories/{story['id']}/share").json()["sharesCount"] == 1
    assert client.post(f"/api/stories/{story['id']}/share").json()["sharesCount"] == 2

    assert client.post("/api/stories/999/publish").status_code == 404
    assert client.post("/api/stories/999/share").status_code == 404


def test_like_toggle_keeps_count_in_step(client, make_user, make_story):
    story = make_story()
    reader = make_user("reader")
    other = make_user("other")

    assert client.post(f"/api/stories/{story['id']}/like", json={"userId": reader["id"]}).json() == {"liked": True}
    assert client.post(f"/api/stories/{story['id']}/like", json={"userId": other["id"]}).json() == {"liked": True}
    assert client.get(f"/api/stories/{story['id']}").json()["likesCount"] == 2

    detail = client.get(f"/api/stories/{story['id']}", params={"viewerId": reader["id"]}).json()
    assert detail["isLiked"] is True

    assert client.post(f"/api/stories/{story['id']}/like", json={"userId": reader["id"]}).json() == {"liked": False}
    detail = client.get(f"/api/stories/{story['id']}", params={"viewerId": reader["id"]}).json()
    assert detail["likesCount"] == 1
    assert detail["isLiked"] is False


def test_like_requires_existing_story_and_user(client, make_user, make_story):
    user = make_user()
    story = make_story()
    assert client.post("/api/stories/999/like", json={"userId": user["id"]}).status_code == 404
    assert client.post(f"/api/stories/{story['id']}/like", json={"userId": 999}).status_code == 404
    assert client.post(f"/api/stories/{story['id']}/like", json={}).status_code == 400


def test_comments(client, make_user, make_story):
    story = make_story()
    commenter = make_user("commenter", display_name="Zoe Williams")

    r = client.post(
        f"/api/stories/{story['id']}/comments",
        json={"userId": commenter["id"], "content": "  Love this!  ", "commenterName": "  "},
    )
    assert r.status_code == 200
    comment = r.json()
    assert comment["content"] == "Love this!"
    assert comment["commenterName"] is None
    assert comment["user"]["displayName"] == "Zoe Williams"

    client.post(
        f"/api/stories/{story['id']}/comments",
        json={"userId": commenter["id"], "content": "Second", "commenterName": "Zoe"},
    )

    listed = client.get(f"/api/stories/{story['id']}/comments").json()
    assert [c["content"] for c in listed] == ["Second", "Love this!"]

    detail = client.get(f"/api/stories/{story['id']}").json()
    assert detail["commentsCount"] == 2
    assert [c["content"] for c in detail["comments"]] == ["Second", "Love this!"]


def test_blank_comment_rejected(client, make_user, make_story):
    story = make_story()
    user = make_user()
    r = client.post(f"/api/stories/{story['id']}/comments", json={"userId": user["id"], "content": "   "})
    assert r.status_code == 400
    assert client.get(f"/api/stories/{story['id']}").json()["commentsCount"] == 0


def test_comment_on_missing_story_404(client, make_user):
    user = make_user()
    r = client.post("/api/stories/999/comments", json={"userId": user["id"], "content": "hi"})
    assert r.status_code == 404


def test_delete_cascades_to_likes_and_comments(client, make_user, make_story):
    story = make_story()
    reader = make_user("reader")
    client.post(f"/api/stories/{story['id']}/like", json={"userId": reader["id"]})
    client.post(f"/api/stories/{story['id']}/comments", json={"userId": reader["id"], "content": "Nice"})

    r = client.delete(f"/api/stories/{story['id']}")
    assert r.status_code == 200
    assert r.json() == {"message": "Story deleted successfully"}

    assert client.get(f"/api/stories/{story['id']}").status_code == 404
    assert client.delete(f"/api/stories/{story['id']}").status_code == 404

    with get_db_session() as db:
        assert db.execute(select(func.count(Like.id))).scalar_one() == 0
        assert db.execute(select(func.count(Comment.id))).scalar_one() == 0

from src.api.storage import age_description, decade_label, percentage


def test_create_and_get_user(client):
    r = client.post(
        "/api/users",
        json={"username": "musiclover92", "email": "Sarah@Example.com", "displayName": "Sarah Chen"},
    )
    assert r.status_code == 200
    user = r.json()
    assert user["email"] == "sarah@example.com"
    assert user["displayName"] == "Sarah Chen"
    assert "createdAt" in user

    assert client.get(f"/api/users/{user['id']}").json()["username"] == "musiclover92"


def test_duplicate_username_or_email_rejected(client, make_user):
    make_user("taken")
    r = client.post("/api/users", json={"username": "taken", "email": "new@example.com", "displayName": "X"})
    assert r.status_code == 400
    r = client.post("/api/users", json={"username": "fresh", "email": "TAKEN@example.com", "displayName": "X"})
    assert r.status_code == 400


def test_invalid_email_is_a_validation_error(client):
    r = client.post("/api/users", json={"username": "u", "email": "not-an-email", "displayName": "U"})
    assert r.status_code == 400
    assert r.json()["errors"][0]["loc"][-1] == "email"


def test_get_missing_user_404(client):
    r = client.get("/api/users/42")
    assert r.status_code == 404
    assert r.json()["message"] == "User not found."


def test_patch_user(client, make_user):
    user = make_user("marcus")
    other = make_user("emma")

    r = client.patch(f"/api/users/{user['id']}", json={"displayName": "Marcus J", "avatar": "https://a/b.png"})
    assert r.status_code == 200
    assert r.json()["displayName"] == "Marcus J"
    assert r.json()["username"] == "marcus"

    r = client.patch(f"/api/users/{user['id']}", json={"username": other["username"]})
    assert r.status_code == 400

    assert client.patch("/api/users/999", json={"displayName": "Nobody"}).status_code == 404


def test_follow_toggle_and_stats(client, make_user):
    alice = make_user("alice")
    bob = make_user("bob")

    r = client.post(f"/api/users/{bob['id']}/follow", json={"followerId": alice["id"]})
    assert r.json() == {"following": True}
    stats = client.get(f"/api/users/{bob['id']}/stats").json()
    assert stats["followers"] == 1
    assert client.get(f"/api/users/{alice['id']}/stats").json()["following"] == 1

    r = client.post(f"/api/users/{bob['id']}/follow", json={"followerId": alice["id"]})
    assert r.json() == {"following": False}
    assert client.get(f"/api/users/{bob['id']}/stats").json()["followers"] == 0


def test_follow_rejects_self_and_missing_follower(client, make_user):
    alice = make_user("alice")
    assert client.post(f"/api/users/{alice['id']}/follow", json={"followerId": alice["id"]}).status_code == 400
    assert client.post(f"/api/users/{alice['id']}/follow", json={}).status_code == 400
    assert client.post(f"/api/users/{alice['id']}/follow", json={"followerId": 999}).status_code == 404


def test_stats_count_stories_and_likes(client, make_user, make_story):
    author = make_user("author")
    reader = make_user("reader")
    story = make_story(user=author, isPublished=True)
    make_story(user=author)
    client.post(f"/api/stories/{story['id']}/like", json={"userId": reader["id"]})

    stats = client.get(f"/api/users/{author['id']}/stats").json()
    assert stats == {"storiesCount": 2, "totalLikes": 1, "followers": 0, "following": 0}


def test_analytics_distributions(client, make_user, make_song, make_story):
    user = make_user()
    rock_75 = make_song("Bohemian Rhapsody", "Queen", genre="Rock", year=1975)
    rock_76 = make_song("Hotel California", "Eagles", genre="Rock", year=1976)
    pop_82 = make_song("Billie Jean", "Michael Jackson", genre="Pop", year=1982)
    soul_10 = make_song("Rolling in the Deep", "Adele", genre="Soul", year=2010)
    no_meta = make_song("Untitled", "Nobody")

    make_story(user=user, song=rock_75, age="teenage")
    make_story(user=user, song=rock_76, age="teenage")
    make_story(user=user, song=pop_82, age="childhood")
    make_story(user=user, song=soul_10, age="19")
    make_story(user=user, song=no_meta)
    make_story(song=rock_75, age="adult")  # another user's story

    analytics = client.get(f"/api/users/{user['id']}/analytics").json()

    assert analytics["genres"] == [
        {"name": "Rock", "count": 2, "percentage": 50},
        {"name": "Pop", "count": 1, "percentage": 25},
        {"name": "Soul", "count": 1, "percentage": 25},
    ]
    assert analytics["decades"] == [
        {"decade": "1970s", "count": 2},
        {"decade": "1980s", "count": 1},
        {"decade": "2010s", "count": 1},
    ]
    assert analytics["ages"] == [
        {"age": "teenage", "count": 2, "description": "Adolescent years and coming of age"},
        {"age": "19", "count": 1, "description": "Life experiences and memories"},
        {"age": "childhood", "count": 1, "description": "Early memories and formative experiences"},
    ]


def test_analytics_empty_for_user_without_stories(client, make_user):
    user = make_user()
    assert client.get(f"/api/users/{user['id']}/analytics").json() == {"genres": [], "decades": [], "ages": []}


def test_analytics_helpers():
    assert percentage(1, 3) == 33
    assert percentage(2, 3) == 67
    assert percentage(1, 8) == 13
    assert percentage(0, 0) == 0
    assert decade_label(1994) == "1990s"
    assert decade_label(2000) == "2000s"
    assert age_description("senior") == "Wisdom years and life reflection"

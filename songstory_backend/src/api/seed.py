"""
Load sample users, songs and published stories into an empty database.

Run with:
    python -m src.api.seed
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select

from src.api import settings
from src.api.db import get_db_session, init_db
from src.api.models import User
from src.api.storage import Storage

logger = logging.getLogger(__name__)


def _avatar(seed: str) -> str:
    return f"https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"


SAMPLE_USERS = [
    {"username": "musiclover92", "email": "musiclover92@example.com", "display_name": "Sarah Chen", "avatar": _avatar("sarah")},
    {"username": "vinylcollector", "email": "vinylcollector@example.com", "display_name": "Marcus Johnson", "avatar": _avatar("marcus")},
    {"username": "melodymaker", "email": "melodymaker@example.com", "display_name": "Emma Rodriguez", "avatar": _avatar("emma")},
    {"username": "rhythmrider", "email": "rhythmrider@example.com", "display_name": "Jake Thompson", "avatar": _avatar("jake")},
    {"username": "harmonyhunter", "email": "harmonyhunter@example.com", "display_name": "Zoe Williams", "avatar": _avatar("zoe")},
    {"username": "beatkeeper", "email": "beatkeeper@example.com", "display_name": "Alex Kim", "avatar": _avatar("alex")},
    {"username": "songbird_87", "email": "songbird87@example.com", "display_name": "Maya Patel", "avatar": _avatar("maya")},
    {"username": "classicrock", "email": "classicrock@example.com", "display_name": "David Martinez", "avatar": _avatar("david")},
]

_WIKI = "https://upload.wikimedia.org/wikipedia/en"

SAMPLE_SONGS = [
    {"title": "Bohemian Rhapsody", "artist": "Queen", "album": "A Night at the Opera", "year": 1975, "genre": "Rock",
     "album_art": f"{_WIKI}/4/4d/Queen_A_Night_at_the_Opera.png"},
    {"title": "Hotel California", "artist": "Eagles", "album": "Hotel California", "year": 1976, "genre": "Rock",
     "album_art": f"{_WIKI}/4/49/Hotelcalifornia.jpg"},
    {"title": "Billie Jean", "artist": "Michael Jackson", "album": "Thriller", "year": 1982, "genre": "Pop",
     "album_art": f"{_WIKI}/5/55/Michael_Jackson_-_Thriller.png"},
    {"title": "Sweet Child O' Mine", "artist": "Guns N' Roses", "album": "Appetite for Destruction", "year": 1987,
     "genre": "Hard Rock", "album_art": f"{_WIKI}/5/50/Appetite_for_Destruction.jpg"},
    {"title": "Smells Like Teen Spirit", "artist": "Nirvana", "album": "Nevermind", "year": 1991, "genre": "Grunge",
     "album_art": f"{_WIKI}/b/b7/NirvanaNevermindalbumcover.jpg"},
    {"title": "Wonderwall", "artist": "Oasis", "album": "(What's the Story) Morning Glory?", "year": 1995,
     "genre": "Britpop", "album_art": f"{_WIKI}/4/4a/Oasis_-_Morning_Glory.jpg"},
    {"title": "Hey Ya!", "artist": "OutKast", "album": "Speakerboxxx/The Love Below", "year": 2003, "genre": "Hip Hop",
     "album_art": f"{_WIKI}/a/a1/OutKast_-_Speakerboxxx-The_Love_Below_CD_cover.jpg"},
    {"title": "Mr. Brightside", "artist": "The Killers", "album": "Hot Fuss", "year": 2004,
     "genre": "Alternative Rock", "album_art": f"{_WIKI}/7/77/Hot_Fuss.jpg"},
    {"title": "Rolling in the Deep", "artist": "Adele", "album": "21", "year": 2010, "genre": "Soul",
     "album_art": f"{_WIKI}/1/1b/Adele_-_21.png"},
    {"title": "Shape of You", "artist": "Ed Sheeran", "album": "÷ (Divide)", "year": 2017, "genre": "Pop",
     "album_art": f"{_WIKI}/2/2b/Ed_Sheeran_Divide_cover.jpg"},
]

# (username, song title, story fields)
SAMPLE_STORIES = [
    ("musiclover92", "Bohemian Rhapsody", {
        "title": "The Road Trip That Changed Everything",
        "content": (
            "I was 19, driving cross-country with my best friend after high school graduation. We had been "
            "planning this trip for months, saving every penny from our part-time jobs. When 'Bohemian Rhapsody' "
            "came on the radio somewhere in the Nevada desert, we both started singing at the top of our lungs. "
            "The way the song builds from that gentle piano to the operatic middle section to the final rock "
            "crescendo captured how we felt about leaving home. Every time I hear those opening piano notes now, "
            "I'm back in that beat-up Honda Civic, windows down, feeling infinite possibility stretching out ahead."
        ),
        "age": "19",
        "life_context": "Recent high school graduate on a road trip",
        "discovery_moment": "Playing on the radio during a cross-country drive",
        "core_memory": "Singing along with my best friend in the Nevada desert",
        "emotional_connection": "The song's structure mirrored our feelings about transitioning to adulthood",
        "tone": "nostalgic",
    }),
    ("vinylcollector", "Hotel California", {
        "title": "Dad's Vinyl Collection",
        "content": (
            "After my father passed away, I spent weeks going through his belongings. In the basement, I found "
            "his record collection, hundreds of albums carefully organized and preserved. 'Hotel California' was "
            "the first one I pulled out, remembering how he used to play it every Sunday morning while making "
            "pancakes. As I listened to it on his old turntable, I could almost smell the butter and maple syrup "
            "and hear his off-key humming along to the guitar solos. Now it's part of my Sunday morning routine too."
        ),
        "age": "35",
        "life_context": "Dealing with father's death and sorting through his belongings",
        "discovery_moment": "Found in father's vinyl collection after his passing",
        "core_memory": "Sunday morning pancakes with dad humming along",
        "emotional_connection": "A connection to my deceased father and our shared memories",
        "tone": "melancholic",
    }),
    ("melodymaker", "Billie Jean", {
        "title": "Dancing in My Bedroom",
        "content": (
            "I was 13 and had just gotten my first CD player for my birthday. 'Billie Jean' was the first song I "
            "played, and I spent the entire afternoon learning the moonwalk from a VHS tape I'd rented. I "
            "practiced for hours in front of my bedroom mirror, sliding across the hardwood floor in my socks. "
            "When I finally nailed it, I felt like I could conquer the world."
        ),
        "age": "13",
        "life_context": "Middle school, just got first CD player",
        "discovery_moment": "First song played on new CD player",
        "core_memory": "Learning to moonwalk in bedroom mirror",
        "emotional_connection": "Lesson about persistence and achieving the impossible",
        "tone": "uplifting",
    }),
    ("rhythmrider", "Smells Like Teen Spirit", {
        "title": "High School Angst Anthem",
        "content": (
            "Senior year of high school was rough. I felt misunderstood by everyone. Then I heard 'Smells Like "
            "Teen Spirit' for the first time at a friend's house, and it was like someone had put my feelings "
            "into music. I must have played that song a thousand times, air-guitaring alone in my room, finally "
            "feeling like someone understood what it was like to not fit into any neat category."
        ),
        "age": "17",
        "life_context": "Struggling with identity during senior year of high school",
        "discovery_moment": "Heard at a friend's house during a difficult period",
        "core_memory": "Air-guitaring alone in bedroom, feeling understood",
        "emotional_connection": "Song articulated teenage angst and feeling misunderstood",
        "tone": "cathartic",
    }),
    ("harmonyhunter", "Wonderwall", {
        "title": "College Radio Revelation",
        "content": (
            "I was a sophomore in college, working the late-night shift at our campus radio station. It was 2 AM, "
            "and I was feeling homesick and questioning all my life choices. I put on 'Wonderwall' almost "
            "randomly from a stack of CDs, and those simple, honest lyrics hit me right in the chest. Sitting "
            "alone in that tiny broadcast booth, I felt like the song was speaking directly to me."
        ),
        "age": "19",
        "life_context": "Sophomore in college, working at campus radio station",
        "discovery_moment": "Playing during late-night radio shift while feeling homesick",
        "core_memory": "Alone in broadcast booth at 2 AM, feeling the lyrics speak to me",
        "emotional_connection": "Song provided comfort during a period of self-doubt",
        "tone": "reflective",
    }),
    ("beatkeeper", "Hey Ya!", {
        "title": "Wedding Dance Floor Magic",
        "content": (
            "My sister's wedding reception was winding down when 'Hey Ya!' came on. I was exhausted from a long "
            "day of family obligations and small talk, but that infectious beat just grabbed me. Before I knew "
            "it, I was on the dance floor with my 8-year-old cousin, teaching him how to do the robot while the "
            "whole family cheered us on."
        ),
        "age": "25",
        "life_context": "At sister's wedding reception, feeling drained from social obligations",
        "discovery_moment": "Came on during wedding reception when energy was low",
        "core_memory": "Dancing with young cousin while family cheered",
        "emotional_connection": "Song transformed formal event into moment of pure joy",
        "tone": "joyful",
    }),
    ("songbird_87", "Mr. Brightside", {
        "title": "Late Night Study Sessions",
        "content": (
            "Junior year of college was brutal. I was pre-med, working two part-time jobs, and barely sleeping. "
            "During those endless nights in the library, 'Mr. Brightside' became my anthem. I'd put on my "
            "headphones, crank up the volume, and power through another chapter of organic chemistry."
        ),
        "age": "20",
        "life_context": "Struggling pre-med student working multiple jobs",
        "discovery_moment": "Became study soundtrack during intense college period",
        "core_memory": "Late nights in library using song as motivation",
        "emotional_connection": "Song provided energy and determination during difficult times",
        "tone": "determined",
    }),
    ("classicrock", "Rolling in the Deep", {
        "title": "Breakup Recovery Soundtrack",
        "content": (
            "After my first serious relationship ended, I was devastated. Then 'Rolling in the Deep' came on the "
            "radio during a particularly low moment. I played that song on repeat for weeks, singing along at "
            "the top of my lungs in my car, gradually feeling my confidence return."
        ),
        "age": "22",
        "life_context": "Recovering from first serious breakup",
        "discovery_moment": "Came on radio during a particularly low moment post-breakup",
        "core_memory": "Singing along loudly in car, gradually regaining confidence",
        "emotional_connection": "Song helped transform heartbreak into personal strength",
        "tone": "empowering",
    }),
]


# PUBLIC_INTERFACE
def seed_database() -> bool:
    """Insert the sample data; returns False (and changes nothing) when users already exist."""
    init_db()
    with get_db_session() as db:
        if db.execute(select(func.count(User.id))).scalar_one():
            logger.info("seed: skipped, database already has users")
            return False

        storage = Storage(db)
        users = {data["username"]: storage.create_user(data) for data in SAMPLE_USERS}
        songs = {data["title"]: storage.create_song(data) for data in SAMPLE_SONGS}
        for username, song_title, fields in SAMPLE_STORIES:
            user = users[username]
            storage.create_story(
                {
                    **fields,
                    "user_id": user.id,
                    "song_id": songs[song_title].id,
                    "author_name": user.display_name,
                    "is_published": True,
                }
            )
        logger.info("seed: created users=%s songs=%s stories=%s", len(users), len(songs), len(SAMPLE_STORIES))
    return True


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level())
    seed_database()

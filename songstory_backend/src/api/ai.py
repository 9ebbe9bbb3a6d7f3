"""
OpenAI adapter: story generation, story enhancement and voice transcription.

Every call is a single request/response with no retry and no streaming. Any
failure, including a missing API key, surfaces as ProviderError so the route
can return the message to the user.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from openai import OpenAI, OpenAIError
from pydantic.alias_generators import to_camel

from src.api import settings
from src.api.errors import ProviderError
from src.api.models import STORY_PROMPT_FIELDS

logger = logging.getLogger(__name__)

STORY_SYSTEM_PROMPT = """You are helping someone write down their actual memory about a song. This is NOT creative writing - you're organizing real details they've shared into a clear, simple account.

STRICT RULES:
- Use only facts they provided - no invented details, emotions, or scenes
- Write like someone quickly telling a friend what happened
- No dramatic language, metaphors, or "storytelling" tone
- No interpretations of what things "meant" or "represented"
- No conclusions about life lessons or deeper significance
- Just state what happened, when, where, who was there
- Keep it matter-of-fact and straightforward
- If they didn't mention specific details (weather, clothes, exact location), don't add them
- Maximum 3-4 sentences unless they provided extensive details"""

ENHANCE_SYSTEM_PROMPT = (
    "You help people revise their written memories about songs. Keep edits minimal and factual. "
    "Don't add creative interpretations or dramatic language."
)

EXTRACTION_SYSTEM_PROMPT = "You are an expert at extracting structured data from personal stories about music memories."

EXTRACTED_FIELDS = ("title", "age", "lifeContext", "discoveryMoment", "coreMemory", "emotionalConnection", "content")

# (camelCase key, label) in the order they appear in the prompt
PROMPT_LABELS: List[Tuple[str, str]] = [
    (to_camel(field), field.replace("_", " ").capitalize()) for field in STORY_PROMPT_FIELDS if field != "tone"
] + [
    # keys sent by the streamlined create form
    ("worldContext", "World context"),
    ("sharedStory", "Shared story"),
    ("emotionalRole", "Emotional role"),
    ("turningPoint", "Turning point"),
    ("musicalHook", "Musical hook"),
    ("surprisingConnection", "Surprising connection"),
]


def _client() -> OpenAI:
    api_key = settings.openai_api_key()
    if not api_key:
        raise ProviderError("openai", "OpenAI API key not configured")
    return OpenAI(api_key=api_key, timeout=max(settings.provider_timeout(), 60.0), max_retries=0)


def _song_info(song_title: Optional[str], artist: Optional[str]) -> str:
    if song_title and artist:
        return f'"{song_title}" by {artist}'
    return "this song"


def _answer(prompts: Mapping[str, Optional[str]], camel_key: str) -> Optional[str]:
    snake_key = "".join("_" + c.lower() if c.isupper() else c for c in camel_key)
    value = prompts.get(camel_key) or prompts.get(snake_key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


# PUBLIC_INTERFACE
def build_story_prompt(
    prompts: Mapping[str, Optional[str]],
    tone: str,
    song_title: Optional[str] = None,
    artist: Optional[str] = None,
) -> str:
    """Assemble the user prompt from whichever prompt answers were supplied."""
    facts = []
    for key, label in PROMPT_LABELS:
        value = _answer(prompts, key)
        if value:
            facts.append(f"- {label}: {value}")
    if tone:
        facts.append(f"- Preferred tone: {tone}")

    return (
        f"Here are the facts about someone's memory with {_song_info(song_title, artist)}:\n\n"
        + "\n".join(facts)
        + "\n\nWrite this as a straightforward first-person account. Just state what happened using the "
        "facts above. Don't embellish or interpret - just organize these details into a clear, simple memory."
    )


def _complete(system: str, user: str, model: str, temperature: float, **kwargs: Any) -> str:
    client = _client()
    try:
        response = client.chat.completions.create(
            model=model,
            messages=[{"role": "system", "content": system}, {"role": "user", "content": user}],
            temperature=temperature,
            **kwargs,
        )
    except OpenAIError as exc:
        raise ProviderError("openai", str(exc)) from exc

    content = response.choices[0].message.content if response.choices else None
    if not content:
        raise ProviderError("openai", "No content generated")
    return content


# PUBLIC_INTERFACE
def generate_story(
    prompts: Mapping[str, Optional[str]],
    tone: str,
    song_title: Optional[str] = None,
    artist: Optional[str] = None,
) -> str:
    """Turn prompt answers into a short first-person story."""
    user_prompt = build_story_prompt(prompts, tone, song_title, artist)
    story = _complete(
        STORY_SYSTEM_PROMPT, user_prompt, settings.openai_story_model(), temperature=0.7, max_tokens=1000
    )
    logger.info("story_generated: song=%r chars=%s", song_title, len(story))
    return story


# PUBLIC_INTERFACE
def enhance_story(original: str, suggestions: str) -> str:
    """Apply the author's suggested changes to an existing story."""
    prompt = (
        f"The user wants to improve this memory about a song with these specific suggestions: {suggestions}\n\n"
        f"Original memory:\n{original}\n\n"
        "Revise the memory by incorporating only the suggested changes. Keep the same factual, straightforward "
        "tone. Don't add drama or interpretation - just make the requested adjustments while staying true to "
        "the original facts."
    )
    return _complete(ENHANCE_SYSTEM_PROMPT, prompt, settings.openai_story_model(), temperature=0.7, max_tokens=1000)


def build_extraction_prompt(transcript: str, song_title: Optional[str], artist: Optional[str]) -> str:
    song = f'"{song_title}" by {artist}' if song_title else "Unknown song"
    return f"""You are helping to organize a voice recording into structured story fields for a music memory platform.

The user recorded themselves talking about a song memory. Extract the following information from their recording:

Song: {song}

From this transcript, extract:
1. A compelling title for their story (if they mention one, or create one based on the memory)
2. Their age when this happened (look for age mentions, school levels, life stages)
3. Life context (what was happening in their life)
4. How they discovered the song
5. Their main memory with the song
6. How it makes them feel now
7. Any other story content that doesn't fit the above categories

Transcript: "{transcript}"

Respond in JSON format:
{{
  "title": "extracted or suggested title",
  "age": "age range like '15-19' or 'In my 20s'",
  "lifeContext": "what was happening in their life",
  "discoveryMoment": "how they found the song",
  "coreMemory": "main memory with the song",
  "emotionalConnection": "current feelings about it",
  "content": "any additional story content or a flowing narrative version"
}}

If any field cannot be determined from the transcript, set it to null."""


# PUBLIC_INTERFACE
def parse_extracted_fields(raw: str) -> Dict[str, Optional[str]]:
    """Parse the extraction completion, keeping only the known story fields."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ProviderError("openai", f"extraction returned invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ProviderError("openai", "extraction returned a non-object JSON value")
    return {field: data.get(field) for field in EXTRACTED_FIELDS}


# PUBLIC_INTERFACE
def transcribe_story(
    audio: bytes,
    filename: str = "audio.wav",
    song_title: Optional[str] = None,
    artist: Optional[str] = None,
) -> Dict[str, Any]:
    """Transcribe a voice recording and split it into story fields."""
    client = _client()
    try:
        transcription = client.audio.transcriptions.create(
            file=(filename, audio),
            model=settings.openai_transcription_model(),
            language="en",
        )
    except OpenAIError as exc:
        raise ProviderError("openai", f"transcription failed: {exc}") from exc

    transcript = transcription.text
    raw = _complete(
        EXTRACTION_SYSTEM_PROMPT,
        build_extraction_prompt(transcript, song_title, artist),
        settings.openai_extraction_model(),
        temperature=0.3,
        response_format={"type": "json_object"},
    )
    logger.info("story_transcribed: audio_bytes=%s transcript_chars=%s", len(audio), len(transcript))
    return {"raw_transcript": transcript, "extracted_data": parse_extracted_fields(raw)}

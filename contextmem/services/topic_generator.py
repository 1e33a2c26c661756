"""
Unique topic generation.

Topic history is an explicit object owned by the caller and handed to the
generator, so separate agents (or tests) never share dedup state by accident.
"""

import threading
from collections.abc import Callable
from datetime import datetime, timedelta

from contextmem.core.llm.base import LLMProvider
from contextmem.models.memory import utc_now
from contextmem.models.personality import PersonalityProfile
from contextmem.utils.logger import get_logger

logger = get_logger(__name__)

MAX_TOPICS = 1000
TOPIC_TTL = timedelta(days=1)
MAX_ATTEMPTS = 3

TOPIC_TASK = """
Task: Generate a COMPLETELY NEW and UNIQUE topic that:
1. Has never been discussed before
2. Reflects your specific expertise and interests
3. Maintains your unique personality and communication style
4. Must be different from any previous topics

Generate a unique topic for timestamp {now}

Topic:"""


class TopicHistory:
    """
    Recently used topics with their creation time.

    Lifecycle: create, use through ``prune``/``is_unique``/``add``, and
    optionally ``clear``.
    """

    def __init__(
        self,
        max_size: int = MAX_TOPICS,
        ttl: timedelta = TOPIC_TTL,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.max_size = max_size
        self.ttl = ttl
        self._clock = clock
        self._topics: list[tuple[str, datetime]] = []
        self._lock = threading.Lock()

    def prune(self) -> None:
        """Drop topics older than the TTL, then keep only the newest ``max_size``."""
        with self._lock:
            cutoff = self._clock() - self.ttl
            self._topics = [(t, ts) for t, ts in self._topics if ts > cutoff]
            if len(self._topics) > self.max_size:
                self._topics.sort(key=lambda item: item[1], reverse=True)
                del self._topics[self.max_size :]

    def is_unique(self, topic: str) -> bool:
        """True unless a stored topic contains ``topic`` or is contained by it (case-insensitive)."""
        candidate = topic.lower()
        with self._lock:
            return not any(
                candidate in stored.lower() or stored.lower() in candidate
                for stored, _ in self._topics
            )

    def add(self, topic: str) -> None:
        with self._lock:
            self._topics.append((topic, self._clock()))

    def topics(self) -> list[str]:
        with self._lock:
            return [topic for topic, _ in self._topics]

    def clear(self) -> None:
        with self._lock:
            self._topics.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._topics)


class TopicGenerator:
    """Ask the completion backend for a topic not yet in the history."""

    def __init__(
        self,
        llm: LLMProvider,
        history: TopicHistory,
        profile: PersonalityProfile,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.llm = llm
        self.history = history
        self.profile = profile
        self._clock = clock

    def build_prompt(self) -> str:
        parts = [
            f"You are {self.profile.name}",
            f"Role: {self.profile.description or ''}",
            f"Style: {self.profile.style or ''}",
        ]
        if self.profile.traits:
            parts.append(f"Core personality traits: {', '.join(self.profile.traits)}")
        parts.append(f"Current time: {self._clock().isoformat()}")
        if self.profile.interests:
            parts.append(f"Primary areas of expertise: {', '.join(self.profile.interests)}")
        parts.append(TOPIC_TASK.format(now=self._clock().isoformat()))
        return "\n\n".join(parts)

    @staticmethod
    def clean_topic(raw: str) -> str:
        topic = raw.strip()
        if topic.startswith("Topic:"):
            topic = topic[len("Topic:") :]
        return topic.strip().strip('"').strip()

    async def generate(self) -> str:
        """
        Generate a topic unique within the history and record it.

        After three non-unique answers the last one is suffixed with the
        current unix timestamp.

        Raises:
            LLMError: If the completion call fails
        """
        self.history.prune()

        topic = ""
        for attempt in range(MAX_ATTEMPTS):
            topic = self.clean_topic(await self.llm.complete(self.build_prompt()))
            if self.history.is_unique(topic):
                self.history.add(topic)
                return topic
            logger.debug(f"Topic already used, retrying: {topic}", extra={"attempt": attempt + 1})

        topic = f"{topic} ({int(self._clock().timestamp())})"
        self.history.add(topic)
        return topic

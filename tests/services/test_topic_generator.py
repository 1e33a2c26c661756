"""
Tests for unique topic generation.
"""

from datetime import timedelta

import pytest

from contextmem.models.personality import PersonalityProfile
from contextmem.services.topic_generator import TopicGenerator, TopicHistory


@pytest.fixture
def profile():
    return PersonalityProfile(
        name="Ada",
        description="a mathematician",
        style="precise",
        traits=["curious"],
        interests=["analytical engines", "poetry"],
    )


@pytest.fixture
def history(clock):
    return TopicHistory(max_size=3, ttl=timedelta(days=1), clock=clock)


@pytest.mark.unit
class TestTopicHistory:
    """Test dedup state."""

    def test_uniqueness_is_case_insensitive_containment(self, history):
        history.add("Rust Ownership")

        assert not history.is_unique("rust ownership")
        assert not history.is_unique("ownership")
        assert not history.is_unique("Advanced Rust Ownership Patterns")
        assert history.is_unique("Python generators")

    def test_prune_drops_expired_topics(self, history, clock):
        history.add("old")
        clock.advance(hours=25)
        history.add("new")

        history.prune()

        assert history.topics() == ["new"]

    def test_prune_keeps_newest_when_over_capacity(self, history, clock):
        for topic in ["a1", "b2", "c3", "d4"]:
            history.add(topic)
            clock.advance(minutes=1)

        history.prune()

        assert sorted(history.topics()) == ["b2", "c3", "d4"]

    def test_clear(self, history):
        history.add("topic")
        history.clear()
        assert len(history) == 0


@pytest.mark.unit
@pytest.mark.asyncio
class TestTopicGenerator:
    """Test generation with retries."""

    async def test_generate_records_topic(self, fake_llm, history, profile, clock):
        fake_llm.responder = 'Topic: "The poetry of loops"'
        generator = TopicGenerator(fake_llm, history, profile, clock)

        topic = await generator.generate()

        assert topic == "The poetry of loops"
        assert history.topics() == ["The poetry of loops"]

    async def test_prompt_mentions_profile(self, fake_llm, history, profile, clock):
        generator = TopicGenerator(fake_llm, history, profile, clock)

        prompt = generator.build_prompt()

        assert prompt.startswith("You are Ada")
        assert "Core personality traits: curious" in prompt
        assert "Primary areas of expertise: analytical engines, poetry" in prompt
        assert clock.now.isoformat() in prompt

    async def test_retries_until_unique(self, fake_llm, history, profile, clock):
        history.add("Bernoulli numbers")
        replies = iter(["Bernoulli numbers", "Weaving patterns"])
        fake_llm.responder = lambda prompt: next(replies)
        generator = TopicGenerator(fake_llm, history, profile, clock)

        assert await generator.generate() == "Weaving patterns"
        assert len(fake_llm.prompts) == 2

    async def test_suffixes_timestamp_after_three_duplicates(self, fake_llm, history, profile, clock):
        history.add("Bernoulli numbers")
        fake_llm.responder = "Bernoulli numbers"
        generator = TopicGenerator(fake_llm, history, profile, clock)

        topic = await generator.generate()

        assert topic == f"Bernoulli numbers ({int(clock.now.timestamp())})"
        assert len(fake_llm.prompts) == 3
        assert topic in history.topics()


@pytest.mark.unit
def test_clean_topic():
    assert TopicGenerator.clean_topic('  Topic: "Loops"  ') == "Loops"
    assert TopicGenerator.clean_topic("Loops") == "Loops"

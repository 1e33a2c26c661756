"""Services layer for contextmem."""

from contextmem.services.chat_manager import ChatManager
from contextmem.services.context_assembler import ContextAssembler
from contextmem.services.engine import ContextMemEngine
from contextmem.services.insight_extractor import EMBEDDING_CONCURRENCY, InsightExtractor
from contextmem.services.insight_parser import parse_insights
from contextmem.services.semantic_search import SemanticSearch
from contextmem.services.topic_generator import TopicGenerator, TopicHistory

__all__ = [
    "ChatManager",
    "ContextAssembler",
    "ContextMemEngine",
    "EMBEDDING_CONCURRENCY",
    "InsightExtractor",
    "parse_insights",
    "SemanticSearch",
    "TopicGenerator",
    "TopicHistory",
]

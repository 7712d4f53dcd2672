from dataclasses import dataclass, field
from typing import List, Sequence

WEAK_TOPIC_THRESHOLD = 70.0
STRONG_TOPIC_THRESHOLD = 80.0
MIN_TOPIC_QUESTIONS = 3
MAX_TOPICS_PER_LIST = 3


@dataclass
class TopicPerformance:
    topic: str
    accuracy: float
    total_questions: int
    correct_answers: int = 0


@dataclass
class TopicInsights:
    weak_topics: List[TopicPerformance] = field(default_factory=list)
    strong_topics: List[TopicPerformance] = field(default_factory=list)


def extract_insights(topic_performance: Sequence[TopicPerformance]) -> TopicInsights:
    """
    Split topics into weak (< 70%, worst first) and strong (>= 80%, best
    first), three of each at most. Topics seen fewer than three times are
    left out of both lists whatever their accuracy.
    """
    sampled = [t for t in topic_performance if t.total_questions >= MIN_TOPIC_QUESTIONS]
    weak = sorted((t for t in sampled if t.accuracy < WEAK_TOPIC_THRESHOLD), key=lambda t: t.accuracy)
    strong = sorted((t for t in sampled if t.accuracy >= STRONG_TOPIC_THRESHOLD),
                    key=lambda t: t.accuracy, reverse=True)
    return TopicInsights(weak_topics=weak[:MAX_TOPICS_PER_LIST], strong_topics=strong[:MAX_TOPICS_PER_LIST])

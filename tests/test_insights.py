from studyquiz.services.insights import TopicPerformance, extract_insights


def _topic(name, correct, total):
    return TopicPerformance(topic=name, accuracy=correct / total * 100, total_questions=total, correct_answers=correct)


def test_two_of_three_is_weak():
    result = extract_insights([_topic("Algebra", 2, 3)])
    assert [t.topic for t in result.weak_topics] == ["Algebra"]
    assert result.strong_topics == []


def test_topic_between_thresholds_is_in_neither_list():
    result = extract_insights([_topic("Algebra", 3, 4)])
    assert result.weak_topics == []
    assert result.strong_topics == []


def test_low_accuracy_topic_is_weak():
    result = extract_insights([_topic("Chemistry", 1, 5)])
    assert [t.topic for t in result.weak_topics] == ["Chemistry"]
    assert result.strong_topics == []


def test_topics_with_too_few_questions_are_ignored():
    result = extract_insights([_topic("Poetry", 0, 2), _topic("Latin", 2, 2)])
    assert result.weak_topics == []
    assert result.strong_topics == []


def test_thresholds_are_weak_below_70_and_strong_from_80():
    topics = [
        TopicPerformance(topic="at70", accuracy=70.0, total_questions=10),
        TopicPerformance(topic="below70", accuracy=69.9, total_questions=10),
        TopicPerformance(topic="at80", accuracy=80.0, total_questions=10),
        TopicPerformance(topic="below80", accuracy=79.9, total_questions=10),
    ]
    result = extract_insights(topics)
    assert [t.topic for t in result.weak_topics] == ["below70"]
    assert [t.topic for t in result.strong_topics] == ["at80"]


def test_lists_are_sorted_and_capped_at_three():
    topics = [
        TopicPerformance(topic=f"weak{i}", accuracy=float(10 * i), total_questions=5) for i in range(5)
    ] + [
        TopicPerformance(topic=f"strong{i}", accuracy=float(80 + 4 * i), total_questions=5) for i in range(5)
    ]
    result = extract_insights(topics)

    assert [t.topic for t in result.weak_topics] == ["weak0", "weak1", "weak2"]
    assert [t.topic for t in result.strong_topics] == ["strong4", "strong3", "strong2"]


def test_no_topics():
    result = extract_insights([])
    assert result.weak_topics == [] and result.strong_topics == []

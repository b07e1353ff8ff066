import pytest

from answer_metrics.config import get_settings
from answer_metrics.utils.metrics import metrics
from tests.fakes import FakeStore, brand_metric, competitor, competitor_sentiment, make_event


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    """Fresh settings and metrics for every test."""
    monkeypatch.delenv("METRICS_BATCH_SIZE", raising=False)
    monkeypatch.delenv("METRICS_MAX_CONCURRENCY", raising=False)
    monkeypatch.delenv("DATE_RANGE_PAGE_SIZE", raising=False)
    get_settings.cache_clear()
    metrics.reset()
    yield
    get_settings.cache_clear()


@pytest.fixture
def scenario_events():
    """
    Three capture events of brand B1:
    A scored with 5 brand mentions and competitor Acme (2 mentions),
    B captured but never scored,
    C scored with an explicit zero.
    """
    return [
        make_event(
            101,
            topic="pricing",
            processed_at="2025-01-10T10:00:00",
            brand=brand_metric(total_brand_mentions=5, visibility_index=0.42, share_of_answers=35.0,
                               brand_positions=[1, 4], has_brand_presence=True),
            brand_sentiment={"sentiment_score": 0.6, "sentiment_label": "positive"},
            competitors=[competitor("c-acme", "Acme", competitor_mentions=2, visibility_index=0.3,
                                    share_of_answers=20.0, competitor_positions=[2])],
            competitor_sentiments=[competitor_sentiment("c-acme", 0.1)],
            question="Best CRM for small teams?",
        ),
        make_event(102, scored=False, question="Cheapest CRM?"),
        make_event(
            103,
            topic="support",
            processed_at="2025-01-11T09:00:00",
            brand=brand_metric(total_brand_mentions=0, visibility_index=0.0, share_of_answers=0.0,
                               brand_positions=[], has_brand_presence=False),
            collector_type="Perplexity",
        ),
    ]


@pytest.fixture(params=["object", "list"])
def shape(request):
    """Both relation encodings the store may return for to-one embeds."""
    return request.param


@pytest.fixture
def store(scenario_events, shape):
    return FakeStore(scenario_events, shape=shape)

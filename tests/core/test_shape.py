"""
Tests for relation shape normalization.
"""
import pytest

from answer_metrics.core.shape import ShapeNormalizer
from answer_metrics.utils.metrics import metrics
from tests.fakes import brand_metric, competitor, competitor_sentiment, make_event, render_fact

ALL_COLUMNS = "brand_metrics(...), brand_sentiment(...), competitor_metrics(...), competitor_sentiment(...)"


class TestToOneRelations:
    """`one` collapses every encoding of a to-one relation."""

    @pytest.mark.parametrize("value", [None, [], [None]])
    def test_absent_relation_is_none(self, value):
        assert ShapeNormalizer().one(value, "brand_metrics") is None

    def test_object_and_single_element_list_are_equivalent(self):
        normalizer = ShapeNormalizer()
        row = {"total_brand_mentions": 3}
        assert normalizer.one(row, "brand_metrics") == normalizer.one([row], "brand_metrics") == row

    def test_multiple_elements_use_first_and_count_anomaly(self):
        normalizer = ShapeNormalizer()
        first, second = {"total_brand_mentions": 1}, {"total_brand_mentions": 2}

        assert normalizer.one([first, second], "brand_metrics", owner=7) == first
        assert metrics.shape_anomalies.value(relation="brand_metrics") == 1

    def test_single_element_is_not_an_anomaly(self):
        ShapeNormalizer().one([{"a": 1}], "brand_sentiment")
        assert metrics.shape_anomalies.value(relation="brand_sentiment") == 0


class TestToManyRelations:

    def test_many_coerces_every_encoding_to_list(self):
        normalizer = ShapeNormalizer()
        assert normalizer.many(None) == []
        assert normalizer.many({"a": 1}) == [{"a": 1}]
        assert normalizer.many([{"a": 1}, None, {"a": 2}]) == [{"a": 1}, {"a": 2}]


class TestNormalizeFact:
    """Decoded records do not depend on the relation encoding."""

    def _fact(self):
        event = make_event(
            5,
            topic="pricing",
            brand=brand_metric(total_brand_mentions=4),
            brand_sentiment={"sentiment_score": 0.2},
            competitors=[competitor("c1", "Acme", competitor_mentions=1), competitor("c2", None)],
        )
        return event["fact"]

    def test_object_and_list_shapes_decode_identically(self):
        normalizer = ShapeNormalizer()
        as_object = normalizer.normalize_fact(render_fact(self._fact(), ALL_COLUMNS, "object"))
        as_list = normalizer.normalize_fact(render_fact(self._fact(), ALL_COLUMNS, "list"))
        assert as_object == as_list

    def test_dependents_are_decoded(self, shape):
        fact = ShapeNormalizer().normalize_fact(render_fact(self._fact(), ALL_COLUMNS, shape))

        assert fact.collector_result_id == 5
        assert fact.brand_metric.total_brand_mentions == 4
        assert fact.brand_sentiment.sentiment_score == 0.2
        assert [cm.display_name for cm in fact.competitor_metrics] == ["Acme", None]

    def test_competitors_are_ordered_by_id(self, shape):
        event = make_event(
            5,
            competitors=[competitor("c3", "Initech"), competitor("c1", "Acme"), competitor("c2", "Globex")],
            competitor_sentiments=[competitor_sentiment("c2", -0.4), competitor_sentiment("c1", 0.7)],
        )
        fact = ShapeNormalizer().normalize_fact(render_fact(event["fact"], ALL_COLUMNS, shape))

        assert [cm.competitor_id for cm in fact.competitor_metrics] == ["c1", "c2", "c3"]
        assert [cs.competitor_id for cs in fact.competitor_sentiments] == ["c1", "c2"]

    def test_embed_order_does_not_change_the_record(self):
        fact = self._fact()
        reversed_fact = {**fact, "competitor_metrics": list(reversed(fact["competitor_metrics"]))}
        normalizer = ShapeNormalizer()

        assert normalizer.normalize_fact(render_fact(fact, ALL_COLUMNS, "list")) == normalizer.normalize_fact(
            render_fact(reversed_fact, ALL_COLUMNS, "list")
        )

    def test_null_counts_in_present_row_become_zero(self):
        raw = render_fact(self._fact(), ALL_COLUMNS, "object")
        raw["brand_metrics"] = {"total_brand_mentions": None, "brand_positions": None}

        fact = ShapeNormalizer().normalize_fact(raw)

        assert fact.brand_metric.total_brand_mentions == 0
        assert fact.brand_metric.brand_positions == []
        assert fact.brand_metric.has_brand_presence is False


class TestNormalizeEvent:

    def test_unscored_event_keeps_identity(self, shape):
        event = make_event(9, scored=False, question="q?")
        raw = {key: value for key, value in event.items() if key != "fact"}
        raw["metric_facts"] = [] if shape == "list" else None

        record = ShapeNormalizer().normalize_event(raw)

        assert record.id == 9
        assert record.question == "q?"
        assert record.fact is None
        assert record.is_scored is False

    def test_event_from_fact_uses_fact_identity(self):
        raw = render_fact(self._fact_for(12), ALL_COLUMNS, "object")
        record = ShapeNormalizer().event_from_fact(raw)

        assert record.id == 12
        assert record.brand_id == "B1"
        assert record.fact.collector_result_id == 12

    @staticmethod
    def _fact_for(event_id):
        return make_event(event_id, brand=brand_metric())["fact"]

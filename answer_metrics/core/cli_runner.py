"""
CLI Runner for the Metrics Engine
Runs one projection against a live store and prints the envelope as JSON.

Usage:
    python -m answer_metrics.core.cli_runner brand --event-ids 101 102
    python -m answer_metrics.core.cli_runner competitors --brand-id B --start 2025-01-01 --end 2025-01-31
    python -m answer_metrics.core.cli_runner topics --customer-id C --topics pricing support
"""
import argparse
import asyncio
from typing import List, Optional

from answer_metrics.models.base import coerce_event_id
from answer_metrics.models.options import MetricsQueryOptions, TopicJoinOptions
from answer_metrics.repositories.connection import connect_store
from answer_metrics.services.metrics_engine import MetricsEngine
from answer_metrics.utils.observability import configure_logging, logger

OPTION_VIEWS = ("brand", "competitors", "combined", "prompts", "topic-positions")
VIEWS = OPTION_VIEWS + ("topics", "sources", "keywords", "providers")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run one metrics projection and print the result.")
    parser.add_argument("view", choices=VIEWS)
    parser.add_argument("--event-ids", nargs="*", type=coerce_event_id)
    parser.add_argument("--brand-id")
    parser.add_argument("--customer-id")
    parser.add_argument("--brand-name")
    parser.add_argument("--brand-domain")
    parser.add_argument("--start", dest="start_date")
    parser.add_argument("--end", dest="end_date")
    parser.add_argument("--providers", nargs="*", dest="provider_keys")
    parser.add_argument("--topics", nargs="*")
    parser.add_argument("--competitors", nargs="*", dest="competitor_names")
    parser.add_argument("--no-sentiment", action="store_false", dest="include_sentiment")
    return parser


async def run_view(args: argparse.Namespace):
    """Dispatch one view to the engine and return its envelope."""
    store = await connect_store()
    engine = MetricsEngine(store)

    if args.view in OPTION_VIEWS:
        options = MetricsQueryOptions(
            event_ids=args.event_ids,
            brand_id=args.brand_id,
            customer_id=args.customer_id,
            start_date=args.start_date,
            end_date=args.end_date,
            provider_keys=args.provider_keys,
            topics=args.topics,
            include_sentiment=args.include_sentiment,
            brand_name=args.brand_name,
        )
        handlers = {
            "brand": engine.fetch_brand_metrics,
            "competitors": engine.fetch_competitor_metrics,
            "combined": engine.fetch_combined_metrics,
            "prompts": engine.fetch_prompts_analytics,
            "topic-positions": engine.fetch_topic_positions,
        }
        return await handlers[args.view](options)

    if args.view == "topics":
        return await engine.fetch_topic_competitors(TopicJoinOptions(
            customer_id=args.customer_id,
            brand_name=args.brand_name,
            topics=args.topics or [],
            start_date=args.start_date,
            end_date=args.end_date,
            provider_keys=args.provider_keys,
            competitor_names=args.competitor_names,
        ))

    if args.view == "sources":
        if args.event_ids is not None:
            return await engine.fetch_source_attribution_metrics(
                args.event_ids,
                args.brand_id,
                start_date=args.start_date,
                end_date=args.end_date,
                provider_keys=args.provider_keys,
            )
        return await engine.aggregate_sources(
            args.brand_id,
            customer_id=args.customer_id,
            start_date=args.start_date,
            end_date=args.end_date,
            brand_domain=args.brand_domain,
        )

    if args.view == "keywords":
        return await engine.fetch_keyword_analytics(
            args.brand_id, customer_id=args.customer_id, start_date=args.start_date, end_date=args.end_date
        )

    return await engine.fetch_distinct_collector_types(
        args.brand_id, customer_id=args.customer_id, start_date=args.start_date, end_date=args.end_date
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    logger.info(f"Running view: {args.view}")
    result = asyncio.run(run_view(args))
    print(result.model_dump_json(indent=2))

    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())

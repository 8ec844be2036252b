"""
Command line entry point: fetch feeds, generate drafts, review them and inspect
job runs.
"""
from __future__ import annotations

import json
import logging
import random
from dataclasses import asdict

import click

from crawler.infra.http import HttpFetcher
from crawler.schemas.models import ArticleItem, SocialPostItem

from buzz.config_loader import load_feeds
from buzz.ingest import ingest_feeds
from buzz.models import Platform, PipelineOptions
from buzz.normalizer import normalize_article, normalize_social_post
from buzz.pipeline import DraftPipeline
from buzz.scoring import score_item
from buzz.settings import load_settings
from buzz.store import JOB_STATUSES, DraftStore
from buzz.templates import TEMPLATES
from buzz.titles import generate_title

logger = logging.getLogger(__name__)


def _echo_json(payload) -> None:
    click.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


@click.group()
@click.option("--db", "db_path", default=None, help="SQLite path (defaults to BUZZ_DB_PATH).")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
@click.pass_context
def cli(ctx: click.Context, db_path, verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = load_settings()
    ctx.obj = {"settings": settings, "db_path": db_path or settings.db_path}


def _store(ctx: click.Context) -> DraftStore:
    return DraftStore(ctx.obj["db_path"])


@cli.command("fetch-rss")
@click.option("--crypto-only", is_flag=True, help="Drop entries without crypto keywords.")
@click.pass_context
def fetch_rss(ctx: click.Context, crypto_only: bool):
    settings = ctx.obj["settings"]
    fetcher = HttpFetcher(user_agent=settings.user_agent, min_delay=settings.fetch_min_delay)
    results = ingest_feeds(_store(ctx), fetcher, load_feeds(settings.feeds_path), crypto_only=crypto_only)
    _echo_json([asdict(result) for result in results])


@cli.command("seed-templates")
@click.pass_context
def seed_templates(ctx: click.Context):
    count = _store(ctx).seed_templates(TEMPLATES)
    click.echo(f"Seeded {count} templates")


@cli.command("generate-drafts")
@click.option("--limit", type=int, default=None)
@click.option("--seed", type=int, default=None, help="Pin template choice for reproducible runs.")
@click.pass_context
def generate_drafts(ctx: click.Context, limit, seed):
    rng = random.Random(seed) if seed is not None else None
    pipeline = DraftPipeline(_store(ctx), rng=rng)
    result = pipeline.generate_drafts(limit or ctx.obj["settings"].generate_limit)
    _echo_json(asdict(result))


@cli.command("run")
@click.option("--dry-run", is_flag=True)
@click.option("--max-items", type=int, default=None)
@click.option("--from-hours", type=int, default=None)
@click.option(
    "--platform",
    "platforms",
    multiple=True,
    type=click.Choice([p.value for p in Platform]),
    help="Restrict to these platforms; repeatable.",
)
@click.pass_context
def run(ctx: click.Context, dry_run: bool, max_items, from_hours, platforms):
    settings = ctx.obj["settings"]
    options = PipelineOptions(
        dry_run=dry_run,
        max_items=max_items or settings.max_items,
        from_hours=from_hours or settings.from_hours,
        only_platforms=[Platform(p) for p in platforms] or None,
    )
    stats = DraftPipeline(_store(ctx)).run(options)
    _echo_json(asdict(stats))


def _scoring_item(platform: str, title: str, content: str, metrics, followers):
    if platform == Platform.NEWS.value:
        return normalize_article(ArticleItem(source="cli", title=title, url="", summary=content or None))
    post = SocialPostItem(
        platform=platform,
        user_handle="cli",
        post_id="cli",
        url="",
        text_snippet=f"{title} {content}".strip(),
        followers=followers,
        metrics=metrics,
    )
    return normalize_social_post(post)


@cli.command("score")
@click.argument("title")
@click.option("--content", default="")
@click.option("--platform", type=click.Choice([Platform.X.value, Platform.NEWS.value]), default=Platform.X.value)
@click.option("--likes", type=float, default=None)
@click.option("--retweets", type=float, default=None)
@click.option("--replies", type=float, default=None)
@click.option("--followers", type=int, default=None)
def score(title: str, content: str, platform: str, likes, retweets, replies, followers):
    """Score a headline as an X post (or news article) and show the Japanese title it would get."""
    metrics = {
        key: value
        for key, value in (("likes", likes), ("retweets", retweets), ("replies", replies))
        if value is not None
    }
    result = score_item(_scoring_item(platform, title, content, metrics, followers))
    _echo_json({**asdict(result), "title_ja": generate_title(title, content)})


@cli.command("drafts")
@click.option("--status", default=None)
@click.option("--min-score", type=int, default=None)
@click.option("--length", "length_category", type=click.Choice(["short", "medium", "long"]), default=None)
@click.option("--limit", type=int, default=20)
@click.pass_context
def drafts(ctx: click.Context, status, min_score, length_category, limit: int):
    rows = _store(ctx).list_drafts(
        status=status, min_score=min_score, length_category=length_category, limit=limit
    )
    _echo_json(rows)


@cli.command("jobs")
@click.option("--status", type=click.Choice(JOB_STATUSES), default=None)
@click.option("--limit", type=click.IntRange(1, 100), default=20)
@click.pass_context
def jobs(ctx: click.Context, status, limit: int):
    """Recent generate-drafts and pipeline runs, newest first."""
    _echo_json(_store(ctx).list_jobs(status=status, limit=limit))


@cli.command("review")
@click.argument("draft_id", type=int)
@click.argument("action", type=click.Choice(["approve", "reject", "posted"]))
@click.option("--edited-text", default=None)
@click.option("--note", default=None)
@click.pass_context
def review(ctx: click.Context, draft_id: int, action: str, edited_text, note):
    if not _store(ctx).record_decision(draft_id, action, edited_text=edited_text, note=note):
        raise click.ClickException(f"Draft {draft_id} not found")
    click.echo(f"Draft {draft_id}: {action}")


if __name__ == "__main__":  # pragma: no cover
    cli()

"""
SQLite persistence for ingested items, the template catalog, drafts, review
decisions and job-run history.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    exists,
    func,
    select,
    update,
)
from sqlalchemy.dialects.sqlite import insert

from crawler.pipelines.dedupe import make_digest

from buzz.models import Author, DraftPayload, NormalizedItem, Platform
from buzz.templates import Template

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
DECISION_STATUSES = {"approve": "approved", "reject": "rejected", "posted": "posted"}

JOB_RUNNING = "running"
JOB_SUCCESS = "success"
JOB_FAILED = "failed"
JOB_STATUSES = (JOB_RUNNING, JOB_SUCCESS, JOB_FAILED)

metadata = MetaData()

ingest_items_table = Table(
    "ingest_items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("external_id", String, unique=True, nullable=False),
    Column("platform", String, index=True),
    Column("url", String),
    Column("published_at", DateTime, index=True),
    Column("ingested_at", DateTime),
    Column("language", String, nullable=True),
    Column("text", Text, nullable=True),
    Column("title", Text, nullable=True),
    Column("author", Text, nullable=True),
    Column("metrics", Text, nullable=True),
    Column("raw", Text, nullable=True),
)

templates_table = Table(
    "templates",
    metadata,
    Column("code", String, primary_key=True),
    Column("name", String),
    Column("category", String, index=True),
    Column("hook_type", String, index=True),
    Column("description", Text),
    Column("structure", Text),
    Column("example", Text),
)

draft_posts_table = Table(
    "draft_posts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("external_id", String, ForeignKey("ingest_items.external_id"), index=True, nullable=False),
    Column("template_code", String, nullable=True),
    Column("title", Text, nullable=True),
    Column("post_text", Text, nullable=False),
    Column("tier", String, nullable=True, index=True),
    Column("template_type", String),
    Column("emotion_triggers", Text),
    Column("trend_score", Integer, index=True),
    Column("risk_flags", Text),
    Column("status", String, default=STATUS_PENDING, index=True),
    Column("digest", String, unique=True),
    Column("created_at", DateTime),
)

review_decisions_table = Table(
    "review_decisions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("draft_id", Integer, ForeignKey("draft_posts.id"), index=True),
    Column("action", String),
    Column("edited_text", Text, nullable=True),
    Column("note", Text, nullable=True),
    Column("created_at", DateTime),
)

job_runs_table = Table(
    "job_runs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("job_type", String, index=True),
    Column("status", String, index=True),
    Column("stats", Text),
    Column("error", Text, nullable=True),
    Column("started_at", DateTime, index=True),
    Column("finished_at", DateTime, nullable=True),
)


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _naive(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite DateTime columns are timezone-less; everything is stored as UTC.
    value = _utc(value)
    return value.replace(tzinfo=None) if value else None


def _loads(value: Optional[str], default: Any) -> Any:
    if not value:
        return default
    try:
        return json.loads(value)
    except ValueError:
        logger.warning("Corrupt JSON column value %r", value[:80])
        return default


class DraftStore:
    def __init__(self, db_path: str = "buzz_data.db") -> None:
        if db_path == ":memory:":
            self.engine = create_engine("sqlite://", future=True)
        else:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            self.engine = create_engine(f"sqlite:///{db_path}", future=True)
        metadata.create_all(self.engine)

    # -- ingest items -------------------------------------------------

    def upsert_item(self, item: NormalizedItem) -> bool:
        """Insert an item; returns False when its external_id is already stored."""
        stmt = insert(ingest_items_table).values(
            external_id=item.external_id,
            platform=item.platform.value if isinstance(item.platform, Platform) else str(item.platform),
            url=item.url,
            published_at=_naive(item.published_at),
            ingested_at=_naive(item.ingested_at),
            language=item.language,
            text=item.text,
            title=item.title,
            author=json.dumps(asdict(item.author)) if item.author else None,
            metrics=json.dumps(item.metrics or {}),
            raw=json.dumps(item.raw or {}, ensure_ascii=False, default=str),
        )
        stmt = stmt.on_conflict_do_nothing(index_elements=["external_id"])
        with self.engine.begin() as conn:
            result = conn.execute(stmt)
        return result.rowcount == 1

    def upsert_items(self, items: Iterable[NormalizedItem]) -> int:
        return sum(1 for item in items if self.upsert_item(item))

    def has_item(self, external_id: str) -> bool:
        stmt = select(ingest_items_table.c.id).where(ingest_items_table.c.external_id == external_id)
        with self.engine.connect() as conn:
            return conn.execute(stmt).first() is not None

    def _no_drafts_clause(self):
        return ~exists().where(draft_posts_table.c.external_id == ingest_items_table.c.external_id)

    def items_without_drafts(self, prefix: str = "rss:", limit: int = 20) -> List[NormalizedItem]:
        stmt = (
            select(ingest_items_table)
            .where(ingest_items_table.c.external_id.startswith(prefix))
            .where(self._no_drafts_clause())
            .order_by(ingest_items_table.c.published_at.desc())
            .limit(limit)
        )
        with self.engine.connect() as conn:
            return [self._row_to_item(row) for row in conn.execute(stmt).mappings()]

    def recent_items(
        self,
        since: datetime,
        platforms: Optional[Sequence[Platform]] = None,
        limit: int = 200,
    ) -> List[NormalizedItem]:
        stmt = select(ingest_items_table).where(ingest_items_table.c.published_at >= _naive(since))
        if platforms:
            stmt = stmt.where(ingest_items_table.c.platform.in_([Platform(p).value for p in platforms]))
        stmt = stmt.order_by(ingest_items_table.c.published_at.desc()).limit(limit)
        with self.engine.connect() as conn:
            return [self._row_to_item(row) for row in conn.execute(stmt).mappings()]

    @staticmethod
    def _row_to_item(row) -> NormalizedItem:
        author = _loads(row["author"], None)
        return NormalizedItem(
            external_id=row["external_id"],
            platform=Platform(row["platform"]),
            url=row["url"] or "",
            published_at=_utc(row["published_at"]),
            ingested_at=_utc(row["ingested_at"]),
            language=row["language"],
            text=row["text"],
            title=row["title"],
            author=Author(**author) if author else None,
            metrics=_loads(row["metrics"], {}),
            raw=_loads(row["raw"], {}),
        )

    # -- templates ----------------------------------------------------

    def seed_templates(self, templates: Iterable[Template]) -> int:
        count = 0
        with self.engine.begin() as conn:
            for template in templates:
                data = template.to_dict()
                stmt = insert(templates_table).values(
                    code=data["code"],
                    name=data["name"],
                    category=data["category"],
                    hook_type=data["hook_type"],
                    description=data["description"],
                    structure=json.dumps(data["structure"], ensure_ascii=False),
                    example=data["example"],
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=["code"],
                    set_={
                        "name": stmt.excluded.name,
                        "category": stmt.excluded.category,
                        "hook_type": stmt.excluded.hook_type,
                        "description": stmt.excluded.description,
                        "structure": stmt.excluded.structure,
                        "example": stmt.excluded.example,
                    },
                )
                conn.execute(stmt)
                count += 1
        logger.info("Seeded %s templates", count)
        return count

    def list_templates(self) -> List[Template]:
        stmt = select(templates_table).order_by(templates_table.c.code)
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [
            Template.from_dict({**row, "structure": _loads(row["structure"], {})})
            for row in rows
        ]

    # -- drafts -------------------------------------------------------

    def has_drafts(self, external_id: str) -> bool:
        stmt = select(func.count()).select_from(draft_posts_table).where(
            draft_posts_table.c.external_id == external_id
        )
        with self.engine.connect() as conn:
            return conn.execute(stmt).scalar_one() > 0

    def save_draft(self, external_id: str, payload: DraftPayload, template_code: Optional[str] = None) -> bool:
        """Store a pending draft; an identical draft for the same item is ignored."""
        tier = payload.tier.value if payload.tier else payload.risk_flags.length_category
        stmt = insert(draft_posts_table).values(
            external_id=external_id,
            template_code=template_code or payload.template_code,
            title=payload.title,
            post_text=payload.post_text,
            tier=tier,
            template_type=payload.template_type,
            emotion_triggers=json.dumps(list(payload.emotion_triggers), ensure_ascii=False),
            trend_score=int(payload.trend_score),
            risk_flags=json.dumps(asdict(payload.risk_flags), ensure_ascii=False),
            status=STATUS_PENDING,
            digest=make_digest([external_id, tier or "", payload.post_text]),
            created_at=_naive(datetime.now(timezone.utc)),
        )
        stmt = stmt.on_conflict_do_nothing(index_elements=["digest"])
        with self.engine.begin() as conn:
            result = conn.execute(stmt)
        return result.rowcount == 1

    def list_drafts(
        self,
        status: Optional[str] = None,
        min_score: Optional[int] = None,
        length_category: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        stmt = select(draft_posts_table)
        if status:
            stmt = stmt.where(draft_posts_table.c.status == status)
        if min_score is not None:
            stmt = stmt.where(draft_posts_table.c.trend_score >= min_score)
        if length_category:
            stmt = stmt.where(draft_posts_table.c.tier == length_category)
        stmt = stmt.order_by(draft_posts_table.c.id.desc()).limit(limit).offset(offset)
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        drafts = []
        for row in rows:
            draft = dict(row)
            draft["emotion_triggers"] = _loads(row["emotion_triggers"], [])
            draft["risk_flags"] = _loads(row["risk_flags"], {})
            drafts.append(draft)
        return drafts

    def record_decision(
        self,
        draft_id: int,
        action: str,
        edited_text: Optional[str] = None,
        note: Optional[str] = None,
    ) -> bool:
        """Apply a review action (approve/reject/posted); False if the draft does not exist."""
        if action not in DECISION_STATUSES:
            raise ValueError(f"Unknown review action: {action}")
        values: Dict[str, Any] = {"status": DECISION_STATUSES[action]}
        if edited_text:
            values["post_text"] = edited_text
        with self.engine.begin() as conn:
            result = conn.execute(
                update(draft_posts_table).where(draft_posts_table.c.id == draft_id).values(**values)
            )
            if result.rowcount == 0:
                return False
            conn.execute(
                insert(review_decisions_table).values(
                    draft_id=draft_id,
                    action=action,
                    edited_text=edited_text,
                    note=note,
                    created_at=_naive(datetime.now(timezone.utc)),
                )
            )
        return True

    # -- job runs -----------------------------------------------------

    def start_job(self, job_type: str, params: Optional[Dict[str, Any]] = None) -> int:
        """Open a job-run record in the running state and return its id."""
        stmt = insert(job_runs_table).values(
            job_type=job_type,
            status=JOB_RUNNING,
            stats=json.dumps(params or {}, ensure_ascii=False, default=str),
            started_at=_naive(datetime.now(timezone.utc)),
        )
        with self.engine.begin() as conn:
            result = conn.execute(stmt)
        return result.inserted_primary_key[0]

    def finish_job(
        self,
        job_id: int,
        status: str,
        stats: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ) -> None:
        if status not in (JOB_SUCCESS, JOB_FAILED):
            raise ValueError(f"Job can only finish as success or failed, not {status}")
        values: Dict[str, Any] = {
            "status": status,
            "error": json.dumps({"message": error}, ensure_ascii=False) if error else None,
            "finished_at": _naive(datetime.now(timezone.utc)),
        }
        if stats is not None:
            values["stats"] = json.dumps(stats, ensure_ascii=False, default=str)
        with self.engine.begin() as conn:
            conn.execute(update(job_runs_table).where(job_runs_table.c.id == job_id).values(**values))

    def list_jobs(self, status: Optional[str] = None, limit: int = 20) -> List[Dict[str, Any]]:
        """Job runs, newest first, optionally filtered by status."""
        stmt = select(job_runs_table)
        if status:
            stmt = stmt.where(job_runs_table.c.status == status)
        stmt = stmt.order_by(job_runs_table.c.started_at.desc(), job_runs_table.c.id.desc()).limit(limit)
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [
            {
                "id": row["id"],
                "job_type": row["job_type"],
                "status": row["status"],
                "stats": _loads(row["stats"], {}),
                "error": _loads(row["error"], None),
                "started_at": _utc(row["started_at"]),
                "finished_at": _utc(row["finished_at"]),
            }
            for row in rows
        ]

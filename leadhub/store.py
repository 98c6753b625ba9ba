"""Lead Store: the only module that talks to the `leads` table.

Each public method is one statement (plus its commit), so every write is
atomic on its own and nothing spans statements. Callers that need several
statements, such as count-then-fetch pagination or a multi-change webhook,
get per-statement atomicity only.
"""

from __future__ import annotations

import datetime
import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, TypedDict

from sqlalchemy import case, delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from leadhub.errors import StoreError
from leadhub.ingestion.schemas import NormalizedLead
from leadhub.models.lead import Lead, LeadSource, LeadStatus, utcnow

logger = logging.getLogger("leadhub.store")

SORTABLE_COLUMNS = {
    "created_at": Lead.created_at,
    "updated_at": Lead.updated_at,
    "name": Lead.name,
    "email": Lead.email,
}

SEARCHABLE_COLUMNS = (Lead.name, Lead.email, Lead.phone, Lead.message)

LIKE_ESCAPE = "\\"


def _escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


@dataclass(frozen=True)
class LeadCriteria:
    """Typed filter parameters for count/fetch. Unset fields add no clause."""

    search: Optional[str] = None
    source: Optional[LeadSource] = None
    status: Optional[LeadStatus] = None
    created_from: Optional[datetime.datetime] = None
    created_to: Optional[datetime.datetime] = None

    def clauses(self) -> List[ColumnElement]:
        """
        Ordered list of bound predicates, ANDed by the caller.

        The search term is a single OR group over the searchable columns;
        values are always bound parameters.
        """
        clauses: List[ColumnElement] = []

        if self.search:
            pattern = f"%{_escape_like(self.search)}%"
            clauses.append(
                or_(
                    *(
                        column.ilike(pattern, escape=LIKE_ESCAPE)
                        for column in SEARCHABLE_COLUMNS
                    )
                )
            )
        if self.source is not None:
            clauses.append(Lead.source == self.source.value)
        if self.status is not None:
            clauses.append(Lead.status == self.status.value)
        if self.created_from is not None:
            clauses.append(Lead.created_at >= self.created_from)
        if self.created_to is not None:
            clauses.append(Lead.created_at <= self.created_to)

        return clauses


@dataclass(frozen=True)
class LeadSort:
    """Allow-listed sort column and direction."""

    field: str = "created_at"
    direction: str = "desc"

    def __post_init__(self) -> None:
        if self.field not in SORTABLE_COLUMNS:
            raise ValueError(f"Unsupported sort field: {self.field!r}")
        if self.direction not in ("asc", "desc"):
            raise ValueError(f"Unsupported sort direction: {self.direction!r}")

    def order_by(self) -> List[ColumnElement]:
        # id breaks ties so offset windows never overlap or skip rows.
        column = SORTABLE_COLUMNS[self.field]
        if self.direction == "asc":
            return [column.asc(), Lead.id.asc()]
        return [column.desc(), Lead.id.desc()]


class LeadChanges(TypedDict, total=False):
    status: str
    assigned_to: Optional[str]


class LeadStore:
    """Persistence operations over the `leads` table for one session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _fail(self, action: str, exc: SQLAlchemyError) -> StoreError:
        self.session.rollback()
        logger.exception("Lead store failed to %s", action)
        return StoreError(f"Failed to {action}.")

    def insert(self, normalized: NormalizedLead) -> Lead:
        now = utcnow()
        lead = Lead(
            source=normalized.source.value,
            source_id=normalized.source_id,
            name=normalized.name,
            email=normalized.email,
            phone=normalized.phone,
            message=normalized.message,
            page_url=normalized.page_url,
            campaign_id=normalized.campaign_id,
            campaign_name=normalized.campaign_name,
            status=LeadStatus.NEW.value,
            meta=json.dumps(normalized.raw),
            created_at=now,
            updated_at=now,
        )
        try:
            self.session.add(lead)
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("insert lead", exc) from exc

        self.session.refresh(lead)
        logger.info(
            "Inserted lead id=%s source=%s source_id=%s",
            lead.id,
            lead.source,
            lead.source_id,
        )
        return lead

    def get(self, lead_id: int) -> Optional[Lead]:
        try:
            return self.session.get(Lead, lead_id, populate_existing=True)
        except SQLAlchemyError as exc:
            raise self._fail(f"load lead {lead_id}", exc) from exc

    def update_fields(self, lead_id: int, changes: LeadChanges) -> int:
        """Apply a partial update and bump updated_at. Returns rows updated."""
        values: Dict[str, object] = {
            key: changes[key] for key in ("status", "assigned_to") if key in changes
        }
        values["updated_at"] = utcnow()

        stmt = (
            update(Lead)
            .where(Lead.id == lead_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.session.execute(stmt)
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self._fail(f"update lead {lead_id}", exc) from exc

        logger.info(
            "Updated lead id=%s fields=%s rows=%s",
            lead_id,
            sorted(values),
            result.rowcount,
        )
        return result.rowcount

    def delete(self, lead_id: int) -> int:
        stmt = (
            delete(Lead)
            .where(Lead.id == lead_id)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.session.execute(stmt)
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self._fail(f"delete lead {lead_id}", exc) from exc

        logger.info("Deleted lead id=%s rows=%s", lead_id, result.rowcount)
        return result.rowcount

    def count(self, criteria: LeadCriteria) -> int:
        stmt = select(func.count(Lead.id)).where(*criteria.clauses())
        try:
            return int(self.session.execute(stmt).scalar_one() or 0)
        except SQLAlchemyError as exc:
            raise self._fail("count leads", exc) from exc

    def fetch_page(
        self,
        criteria: LeadCriteria,
        sort: LeadSort,
        *,
        offset: int,
        limit: int,
    ) -> List[Lead]:
        stmt = (
            select(Lead)
            .where(*criteria.clauses())
            .order_by(*sort.order_by())
            .offset(offset)
            .limit(limit)
        )
        try:
            return list(self.session.execute(stmt).scalars().all())
        except SQLAlchemyError as exc:
            raise self._fail("fetch leads", exc) from exc

    def aggregate_counts(self) -> Dict[str, int]:
        """Total plus per-status and per-source counts in one pass over the table."""
        columns = [func.count(Lead.id).label("total")]
        for lead_status in LeadStatus:
            columns.append(
                func.sum(case((Lead.status == lead_status.value, 1), else_=0)).label(
                    f"{lead_status.value}_count"
                )
            )
        for lead_source in (LeadSource.INSTAGRAM, LeadSource.GOOGLE, LeadSource.WEBSITE):
            columns.append(
                func.sum(case((Lead.source == lead_source.value, 1), else_=0)).label(
                    f"{lead_source.value}_count"
                )
            )

        try:
            row = self.session.execute(select(*columns)).mappings().one()
        except SQLAlchemyError as exc:
            raise self._fail("aggregate lead counts", exc) from exc

        # SUM over an empty table is NULL.
        return {key: int(value or 0) for key, value in row.items()}

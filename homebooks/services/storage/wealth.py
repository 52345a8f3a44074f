"""
Wealth Storage

The five wealth collections are persisted together as one composite
JSON object under a single key ("family-wealth-data" by default):

    {"incomeStreams": [...], "investments": [...], "goals": [...],
     "opportunities": [...], "familyMembers": [...]}

DESIGN DECISION: This is an explicit service object handed to its
callers, not a module-level singleton. Tests build one over an
in-memory store.
"""

from typing import Optional

import structlog

from homebooks.audit import AuditLogger
from homebooks.models.audit import AuditEventBuilder
from homebooks.models.common import RecordModel, new_record_id
from homebooks.models.wealth import (
    FamilyMember,
    FamilyMemberCreate,
    FamilyMemberPatch,
    IncomeStream,
    IncomeStreamCreate,
    IncomeStreamPatch,
    Investment,
    InvestmentCreate,
    InvestmentPatch,
    Opportunity,
    OpportunityCreate,
    OpportunityPatch,
    WealthData,
    WealthGoal,
    WealthGoalCreate,
    WealthGoalPatch,
    WealthStats,
    apply_patch,
)
from homebooks.services.storage.document import JsonDocumentStorage
from homebooks.services.storage.interface import KeyValueStore


DEFAULT_WEALTH_KEY = "family-wealth-data"

logger = structlog.get_logger(__name__)


# attribute on WealthData -> (record class, id prefix, audit entity name)
COLLECTIONS = {
    "income_streams": (IncomeStream, "income", "income_stream"),
    "investments": (Investment, "investment", "investment"),
    "goals": (WealthGoal, "goal", "goal"),
    "opportunities": (Opportunity, "opportunity", "opportunity"),
    "family_members": (FamilyMember, "member", "family_member"),
}


class WealthStorage(JsonDocumentStorage):
    """Storage adapter for the family wealth composite."""

    def __init__(
        self,
        store: KeyValueStore,
        storage_key: str = DEFAULT_WEALTH_KEY,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(store, storage_key, audit_logger)

    # ------------------------------------------------------------------
    # Whole composite
    # ------------------------------------------------------------------

    def _load(self, strict: bool = False) -> WealthData:
        document = self._read_document(strict=strict)
        if document is None:
            return WealthData.default()
        if not isinstance(document, dict):
            self._load_failed("Wealth document is not an object")
            return WealthData.default()

        collections = {}
        for attr, (record_cls, _, _) in COLLECTIONS.items():
            alias = WealthData.model_fields[attr].alias
            collections[attr] = self._parse_records(
                record_cls, document.get(alias), alias
            )
        return WealthData(**collections)

    def get_data(self) -> WealthData:
        """
        The stored composite.

        Absent or unreadable storage yields the default composite:
        one seeded family member and four empty lists.
        """
        return self._load()

    def save_data(self, data: WealthData) -> None:
        """
        Persist the whole composite in one write.

        Raises:
            StorageWriteError: If the composite could not be written
        """
        self._write_document(data.to_storage())

    def get_wealth_stats(self) -> WealthStats:
        """Dashboard figures, recomputed from storage on every call."""
        return WealthStats.from_data(self._load())

    # ------------------------------------------------------------------
    # Generic collection operations
    # ------------------------------------------------------------------

    def _add(self, attr: str, payload: RecordModel, label: str):
        record_cls, prefix, entity = COLLECTIONS[attr]
        data = self._load(strict=True)

        record = record_cls(**payload.model_dump(), id=new_record_id(prefix))
        getattr(data, attr).append(record)
        self.save_data(data)

        logger.info("wealth_record_added", entity=entity, record_id=record.id)
        if self._audit:
            self._audit.log(AuditEventBuilder.record_added(entity, record.id, label))
        return record

    def _update(self, attr: str, record_id: str, patch: RecordModel):
        _, _, entity = COLLECTIONS[attr]
        data = self._load(strict=True)
        records = getattr(data, attr)

        for index, record in enumerate(records):
            if record.id != record_id:
                continue

            updated = apply_patch(record, patch)
            records[index] = updated
            self.save_data(data)

            if self._audit:
                fields = sorted(patch.model_dump(exclude_unset=True, exclude_none=True))
                self._audit.log(AuditEventBuilder.record_updated(entity, record_id, fields))
            return updated

        return None

    def _delete(self, attr: str, record_id: str) -> bool:
        _, _, entity = COLLECTIONS[attr]
        data = self._load(strict=True)
        records = getattr(data, attr)

        remaining = [r for r in records if r.id != record_id]
        setattr(data, attr, remaining)
        self.save_data(data)

        removed = len(remaining) < len(records)
        if removed and self._audit:
            self._audit.log(AuditEventBuilder.record_deleted(entity, record_id))
        return removed

    # ------------------------------------------------------------------
    # Income streams
    # ------------------------------------------------------------------

    def add_income_stream(self, stream: IncomeStreamCreate) -> IncomeStream:
        return self._add("income_streams", stream, stream.name)

    def update_income_stream(
        self,
        stream_id: str,
        patch: IncomeStreamPatch,
    ) -> Optional[IncomeStream]:
        return self._update("income_streams", stream_id, patch)

    def delete_income_stream(self, stream_id: str) -> bool:
        return self._delete("income_streams", stream_id)

    # ------------------------------------------------------------------
    # Investments
    # ------------------------------------------------------------------

    def add_investment(self, investment: InvestmentCreate) -> Investment:
        return self._add("investments", investment, investment.name)

    def update_investment(
        self,
        investment_id: str,
        patch: InvestmentPatch,
    ) -> Optional[Investment]:
        return self._update("investments", investment_id, patch)

    def delete_investment(self, investment_id: str) -> bool:
        return self._delete("investments", investment_id)

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    def add_goal(self, goal: WealthGoalCreate) -> WealthGoal:
        return self._add("goals", goal, goal.title)

    def update_goal(
        self,
        goal_id: str,
        patch: WealthGoalPatch,
    ) -> Optional[WealthGoal]:
        return self._update("goals", goal_id, patch)

    def delete_goal(self, goal_id: str) -> bool:
        return self._delete("goals", goal_id)

    # ------------------------------------------------------------------
    # Opportunities
    # ------------------------------------------------------------------

    def add_opportunity(self, opportunity: OpportunityCreate) -> Opportunity:
        return self._add("opportunities", opportunity, opportunity.title)

    def update_opportunity(
        self,
        opportunity_id: str,
        patch: OpportunityPatch,
    ) -> Optional[Opportunity]:
        return self._update("opportunities", opportunity_id, patch)

    def delete_opportunity(self, opportunity_id: str) -> bool:
        return self._delete("opportunities", opportunity_id)

    # ------------------------------------------------------------------
    # Family members
    # ------------------------------------------------------------------

    def add_family_member(self, member: FamilyMemberCreate) -> FamilyMember:
        return self._add("family_members", member, member.name)

    def update_family_member(
        self,
        member_id: str,
        patch: FamilyMemberPatch,
    ) -> Optional[FamilyMember]:
        return self._update("family_members", member_id, patch)

    def delete_family_member(self, member_id: str) -> bool:
        return self._delete("family_members", member_id)

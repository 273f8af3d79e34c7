"""
BMR edit controller: load, edit, validate and save one record.

Everything that can fail on the way to the store is turned into exactly one
notifier message here; nothing escapes to the caller.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Protocol

from batchrec.core.config import SPEC_LOOKUP_LIMIT, DefaultAssignees
from batchrec.core.errors import BatchRecordError, NotFound
from batchrec.domain.mapper import to_domain, to_persisted
from batchrec.domain.stages import BMRType, Stage
from batchrec.forms import state as fs
from batchrec.forms.notifier import Notifier

logger = logging.getLogger(__name__)


class BMRStore(Protocol):
    def get(self, record_id: int) -> dict: ...

    def save(self, row: dict) -> dict: ...

    def search_specifications(self, query: str, limit: int) -> list[dict]: ...


class SubmitStatus(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"


class BMRFormController:
    def __init__(
        self,
        store: BMRStore,
        notifier: Notifier,
        assignees: DefaultAssignees | None = None,
        author_id: str | None = None,
    ):
        self.store = store
        self.notifier = notifier
        self.assignees = assignees or DefaultAssignees()
        self.author_id = author_id
        self.state = fs.new_state(BMRType.STANDARD, self.assignees)
        self.status = SubmitStatus.IDLE

    def new(self, bmr_type: BMRType | str = BMRType.STANDARD) -> fs.FormState:
        self.state = fs.new_state(bmr_type, self.assignees)
        return self.state

    def load(self, record_id: int, on_not_found: Callable[[], None] | None = None) -> fs.FormState | None:
        try:
            row = self.store.get(record_id)
        except NotFound:
            self.notifier.error(f"BMR {record_id} not found")
            if on_not_found is not None:
                on_not_found()
            return None
        except BatchRecordError as e:
            logger.exception("loading BMR %s failed", record_id)
            self.notifier.error(f"Failed to load BMR: {e}")
            return None
        self.state = fs.FormState(record=to_domain(row, self.assignees), assignees=self.assignees)
        return self.state

    # ---- editing ----
    def set(self, path, value) -> fs.FormState:
        self.state = fs.set_field(self.state, path, value)
        return self.state

    def add_row(self, section: str, stage: Stage | None = None) -> fs.FormState:
        self.state = fs.add_row(self.state, section, stage)
        return self.state

    def remove_row(self, section: str, index: int, stage: Stage | None = None) -> fs.FormState:
        self.state = fs.remove_row(self.state, section, index, stage)
        return self.state

    def lookup_specification(self, query: str) -> list[dict]:
        if not query or not query.strip():
            return []
        try:
            rows = self.store.search_specifications(query.strip(), SPEC_LOOKUP_LIMIT)
        except BatchRecordError as e:
            logger.exception("specification lookup failed")
            self.notifier.error(f"Failed to search test reports: {e}")
            return []
        return rows[:SPEC_LOOKUP_LIMIT]

    # ---- saving ----
    def submit(self, on_success: Callable[[dict], None] | None = None) -> bool:
        if self.status is SubmitStatus.SUBMITTING:
            logger.warning("submit ignored: a save is already in flight")
            return False

        errors = fs.validate(self.state)
        if errors:
            self.notifier.error("Please fill in the required fields: " + ", ".join(errors))
            return False

        self.status = SubmitStatus.SUBMITTING
        try:
            row = to_persisted(self.state.record, author_id=self.author_id)
            saved = self.store.save(row)
        except Exception as e:
            logger.exception("saving BMR failed")
            self.notifier.error(f"Failed to save BMR: {e}")
            return False
        finally:
            self.status = SubmitStatus.IDLE

        self.state = fs.FormState(record=to_domain(saved, self.assignees), assignees=self.assignees)
        self.notifier.success("BMR saved successfully")
        if on_success is not None:
            on_success(saved)
        return True

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, List, Optional

from ..calculators.geometry import derive_geometry, validate_room
from ..core.errors import NotFoundError, ValidationError
from ..core.logging_config import logger
from ..domain.dataset import ReferenceDataset
from ..domain.line_item_book import LineItemBook
from ..domain.models import LineItem, PhotoAttachment, Project, Room
from ..export.payload import build_export_payload
from ..schemas.export_v1 import ExportRequestV1
from ..storage.project_store import ProjectStore
from .answer_collector import AnswerCollector
from .context import ClassificationT
from .line_item_generator import generate

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AssessmentSession:
    """
    The one project being worked on, plus what it needs (dataset, store, clock).

    Every mutation works on a copy of the project, is persisted, and only then
    becomes the session's project. A ValidationError leaves both untouched.
    """

    def __init__(
        self,
        project: Project,
        dataset: ReferenceDataset,
        store: ProjectStore,
        now: Clock = utc_now,
    ):
        self.project = project
        self.dataset = dataset
        self.store = store
        self.now = now

    @classmethod
    def new_project(
        cls,
        dataset: ReferenceDataset,
        store: ProjectStore,
        name: Optional[str] = None,
        now: Clock = utc_now,
    ) -> "AssessmentSession":
        ts = now()
        project = Project(
            name=(name or "").strip() or f"Assessment {ts.date().isoformat()}",
            created_at=ts,
            updated_at=ts,
        )
        store.save_project(project)
        logger.bind(project_id=project.id).info("project_created")
        return cls(project, dataset, store, now)

    @classmethod
    def open(
        cls, project_id: str, dataset: ReferenceDataset, store: ProjectStore, now: Clock = utc_now
    ) -> "AssessmentSession":
        return cls(store.load_project(project_id), dataset, store, now)

    # -----------------
    # internals
    # -----------------

    def _commit(self, project: Project) -> Project:
        project.updated_at = self.now()
        self.store.save_project(project)
        self.project = project
        return project

    def _draft(self) -> Project:
        return self.project.model_copy(deep=True)

    def _require_classification(self) -> ClassificationT:
        if self.project.classification is None or self.project.damage_type is None:
            raise ValidationError(
                "CLASSIFICATION_REQUIRED",
                "Complete the damage classification before adding rooms.",
                project_id=self.project.id,
            )
        return self.project.classification

    # -----------------
    # operations
    # -----------------

    def start_classification(self) -> AnswerCollector:
        return AnswerCollector(self.dataset)

    def _room_items(
        self, damage_type: str, classification: ClassificationT, room: Room
    ) -> List[LineItem]:
        return generate(
            self.dataset,
            damage_type,
            classification,
            derive_geometry(room),
            room_id=room.id,
            room_name=room.name,
        )

    def apply_classification(self, classification: ClassificationT) -> List[LineItem]:
        """
        Store the classification and rebuild everything derived from it:
        the rough estimate and the items of every saved room are replaced
        outright, so no item of a previous classification survives.
        Returns the new rough items.
        """
        damage_type = classification.damage_type
        ts = self.now()

        draft = self._draft()
        previous = draft.damage_type
        draft.damage_type = damage_type
        draft.classification = classification

        book = LineItemBook(draft.line_items)
        merged = book.replace_scope(None, generate(self.dataset, damage_type, classification), ts)
        for room in draft.rooms:
            book.replace_scope(room.id, self._room_items(damage_type, classification, room), ts)
        draft.line_items = book.items()

        self._commit(draft)
        logger.bind(project_id=draft.id, damage_type=damage_type).info(
            "classification_applied",
            previous_damage_type=previous,
            rough_items=len(merged),
            rooms_regenerated=len(draft.rooms),
        )
        return merged

    def save_room(self, room: Room) -> List[LineItem]:
        """
        Validate, insert or replace the room (by id), and upsert its items
        keyed by (code, room id). Codes not re-derived are left as they are.
        """
        validate_room(room)
        classification = self._require_classification()

        ts = self.now()
        draft = self._draft()
        existing = draft.room(room.id)
        saved = room.model_copy(
            update={
                "name": room.name.strip(),
                "created_at": existing.created_at if existing else (room.created_at or ts),
                "updated_at": ts,
            }
        )

        if existing is not None:
            draft.rooms = [saved if r.id == room.id else r for r in draft.rooms]
        else:
            draft.rooms.append(saved)

        items = self._room_items(draft.damage_type, classification, saved)

        book = LineItemBook(draft.line_items)
        merged = book.upsert_all(items, ts)
        draft.line_items = book.items()

        self._commit(draft)
        logger.bind(project_id=draft.id, room_id=saved.id).info(
            "room_saved", updated=existing is not None, items=len(merged)
        )
        return merged

    def remove_room(self, room_id: str) -> int:
        """Remove a room and every line item keyed to it. Returns removed item count."""
        if self.project.room(room_id) is None:
            raise NotFoundError("ROOM_NOT_FOUND", f"Room {room_id} not found", room_id=room_id)

        draft = self._draft()
        draft.rooms = [r for r in draft.rooms if r.id != room_id]
        book = LineItemBook(draft.line_items)
        removed = book.remove_room(room_id)
        draft.line_items = book.items()

        self._commit(draft)
        logger.bind(project_id=draft.id, room_id=room_id).info("room_removed", items=removed)
        return removed

    def add_photo(self, photo: PhotoAttachment) -> PhotoAttachment:
        if photo.room_id is not None and self.project.room(photo.room_id) is None:
            raise ValidationError(
                "ROOM_NOT_FOUND", f"Photo references unknown room {photo.room_id}.",
                room_id=photo.room_id,
            )
        draft = self._draft()
        draft.photos.append(photo)
        self._commit(draft)
        return photo

    def export_payload(self) -> ExportRequestV1:
        return build_export_payload(self.project)

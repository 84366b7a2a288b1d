from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response

from ..domain.dataset import ReferenceDataset
from ..domain.models import PhotoAttachment, Project, Room
from ..engine.answer_collector import replay_selections
from ..engine.session import AssessmentSession, Clock
from ..export.esx_client import EsxExportClient
from ..schemas.api_v1 import ApplyClassificationV1, CreateProjectV1, RoomSavedV1
from ..schemas.export_v1 import ExportRequestV1
from ..storage.project_store import ProjectStore
from .dependencies import get_clock, get_dataset, get_esx_client, get_store

# ----------------------------
# Router
# ----------------------------
router = APIRouter(prefix="/api/projects", tags=["projects"])


def _session(
    project_id: str,
    dataset: ReferenceDataset = Depends(get_dataset),
    store: ProjectStore = Depends(get_store),
    now: Clock = Depends(get_clock),
) -> AssessmentSession:
    return AssessmentSession.open(project_id, dataset, store, now)


@router.post("", response_model=Project, status_code=201)
def create_project(
    payload: CreateProjectV1,
    dataset: ReferenceDataset = Depends(get_dataset),
    store: ProjectStore = Depends(get_store),
    now: Clock = Depends(get_clock),
):
    return AssessmentSession.new_project(dataset, store, name=payload.name, now=now).project


@router.get("", response_model=List[Project])
def list_projects(store: ProjectStore = Depends(get_store)):
    return store.list_projects()


@router.get("/{project_id}", response_model=Project)
def get_project(project_id: str, store: ProjectStore = Depends(get_store)):
    return store.load_project(project_id)


@router.post("/{project_id}/classification", response_model=Project)
def apply_classification(
    payload: ApplyClassificationV1, session: AssessmentSession = Depends(_session)
):
    classification = replay_selections(session.dataset, payload.damage_type, payload.selections)
    session.apply_classification(classification)
    return session.project


@router.put("/{project_id}/rooms", response_model=RoomSavedV1)
def save_room(room: Room, session: AssessmentSession = Depends(_session)):
    items = session.save_room(room)
    return RoomSavedV1(room_id=room.id, line_items=items)


@router.delete("/{project_id}/rooms/{room_id}", response_model=Project)
def remove_room(room_id: str, session: AssessmentSession = Depends(_session)):
    session.remove_room(room_id)
    return session.project


@router.post("/{project_id}/photos", response_model=PhotoAttachment, status_code=201)
def add_photo(photo: PhotoAttachment, session: AssessmentSession = Depends(_session)):
    return session.add_photo(photo)


@router.get("/{project_id}/export", response_model=ExportRequestV1, response_model_by_alias=True)
def export_payload(session: AssessmentSession = Depends(_session)):
    return session.export_payload()


@router.post("/{project_id}/export/esx")
def export_esx(
    session: AssessmentSession = Depends(_session),
    client: EsxExportClient = Depends(get_esx_client),
):
    content = client.create_esx(session.export_payload())
    filename = f"{session.project.name.replace(' ', '_')}.esx"
    return Response(
        content=content,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

from __future__ import annotations

from ..domain.models import Project
from ..schemas.export_v1 import (
    ExportLineItemV1,
    ExportProjectV1,
    ExportRequestV1,
    ExportRoomV1,
)


def build_export_payload(project: Project) -> ExportRequestV1:
    """Shape a project into the plain payload the export collaborator accepts."""
    classification = (
        project.classification.model_dump(mode="json") if project.classification else None
    )
    return ExportRequestV1(
        project=ExportProjectV1(
            name=project.name,
            damage_type=project.damage_type,
            classification=classification,
        ),
        rooms=[
            ExportRoomV1(
                name=r.name,
                type=r.room_type,
                length=r.length,
                width=r.width,
                height=r.height,
            )
            for r in project.rooms
        ],
        line_items=[
            ExportLineItemV1(
                code=i.code,
                description=i.description,
                quantity=float(i.quantity),
                unit=i.unit,
            )
            for i in project.line_items
        ],
    )

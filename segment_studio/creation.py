"""Chapter and part creation with server-derived order."""

import logging

from segment_studio.api import ContentApiClient
from segment_studio.errors import ApiError, DuplicateOrderError, ValidationError
from segment_studio.models import OrderedUnit
from segment_studio.ordering import propose_order

logger = logging.getLogger(__name__)


class UnitDraft:
    """Form state for a new chapter or part.

    `order` is assigned at load time and cannot be edited.
    """

    def __init__(self, parent_id: str, order: int, kind: str = "chapter", chapter_id: str | None = None):
        self.parent_id = parent_id
        self.kind = kind
        self.chapter_id = chapter_id
        self.title = ""
        self.description = ""
        self.status = "DRAFT"
        self.duration: int | None = None
        self._order = order

    @property
    def order(self) -> int:
        return self._order

    def payload(self) -> dict:
        data = {
            "title": self.title.strip(),
            "order": self._order,
            "status": self.status,
        }
        if self.description.strip():
            data["description"] = self.description.strip()
        if self.duration is not None:
            data["duration"] = int(self.duration)
        return data


async def prepare_chapter(api: ContentApiClient, audio_id: str) -> UnitDraft:
    order = await propose_order(lambda: api.list_chapters(audio_id, include_unpublished=True))
    return UnitDraft(audio_id, order, kind="chapter")


async def prepare_part(api: ContentApiClient, audio_id: str, chapter_id: str | None = None) -> UnitDraft:
    if chapter_id:
        order = await propose_order(lambda: api.list_chapter_parts(chapter_id, include_unpublished=True))
    else:
        order = await propose_order(lambda: api.list_parts(audio_id, include_unpublished=True))
    return UnitDraft(audio_id, order, kind="part", chapter_id=chapter_id)


def _check_title(draft: UnitDraft) -> None:
    if not draft.title.strip():
        raise ValidationError(f"{draft.kind.capitalize()} title is required")


async def _submit(draft: UnitDraft, create) -> OrderedUnit:
    _check_title(draft)
    try:
        unit = await create(draft.payload())
    except ApiError as e:
        if "order already exists" in str(e).lower():
            raise DuplicateOrderError(
                f"A {draft.kind} with order {draft.order} already exists", status_code=e.status_code
            ) from e
        raise
    logger.info("Created %s %s at order %d", draft.kind, unit.id, unit.order)
    return unit


async def submit_chapter(api: ContentApiClient, draft: UnitDraft) -> OrderedUnit:
    return await _submit(draft, lambda payload: api.create_chapter(draft.parent_id, payload))


async def submit_part(api: ContentApiClient, draft: UnitDraft) -> OrderedUnit:
    return await _submit(
        draft, lambda payload: api.create_part(draft.parent_id, payload, chapter_id=draft.chapter_id)
    )

"""Per-viewer "did I like this?" flags for a page of systems."""
from typing import Iterable, Optional

from app.ranking.repositories import LikeRepository


class ViewerAnnotator:
    def __init__(self, likes: LikeRepository) -> None:
        self._likes = likes

    async def annotate(
        self, system_ids: Iterable[str], viewer_id: Optional[str]
    ) -> dict[str, bool]:
        """
        Map each id to whether ``viewer_id`` liked it, in a single query.

        Anonymous callers get an empty map; the assembler decides what an
        absent flag looks like in the response.
        """
        ids = list(system_ids)
        if viewer_id is None or not ids:
            return {}
        liked = await self._likes.find_liked_system_ids(viewer_id, ids)
        return {sid: sid in liked for sid in ids}

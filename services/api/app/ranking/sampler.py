"""
Random ranking sampler.

Two strategies, chosen by population size N:

  N <= shuffle_threshold │ every system gets an independent chance;
                         │ ids are read once and sampled without replacement
  N >  shuffle_threshold │ one random offset r ∈ [0, N - limit], then `limit`
                         │ consecutive systems in creation order from r

The first reads up to shuffle_threshold ids (one column, no joins), which is
the row budget of a random request. The second reads O(limit) rows instead;
the price is that neighbours in creation order tend to show up together.

Like counts for sampled systems are always lifetime counts.
"""
import logging
import random
from typing import Optional

from app.ranking.repositories import LikeRepository, SystemRepository
from app.ranking.types import Candidate

logger = logging.getLogger(__name__)

DEFAULT_SHUFFLE_THRESHOLD = 1000


class RandomSampler:
    def __init__(
        self,
        systems: SystemRepository,
        likes: LikeRepository,
        rng: Optional[random.Random] = None,
        shuffle_threshold: int = DEFAULT_SHUFFLE_THRESHOLD,
    ) -> None:
        self._systems = systems
        self._likes = likes
        self._rng = rng or random.Random()
        self._shuffle_threshold = shuffle_threshold

    async def sample(self, limit: int) -> list[Candidate]:
        population = await self._systems.count()
        if population == 0:
            return []

        take = min(limit, population)
        if population <= self._shuffle_threshold:
            all_ids = await self._systems.list_all_ids()
            system_ids = self._rng.sample(all_ids, min(take, len(all_ids)))
        else:
            offset = self._rng.randint(0, max(population - take, 0))
            logger.debug("Random ranking window: offset=%d take=%d of %d", offset, take, population)
            system_ids = await self._systems.list_ids_stable(offset=offset, limit=take)

        counts = await self._likes.counts_by_system(system_ids)
        return [Candidate(system_id=sid, like_count=counts.get(sid, 0)) for sid in system_ids]

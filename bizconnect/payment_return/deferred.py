"""
Tâches différées « one-shot » (vérifications à +2s / +3s).
- Planifiées sur la boucle asyncio de l'application, hors du cycle de la requête:
  la réponse HTTP n'attend pas et n'annule pas la tâche.
- Registre des tâches vivantes (évite le ramasse-miettes); annulées au shutdown seulement.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Set

logger = logging.getLogger(__name__)

class DeferredRunner:
    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    def schedule(self, delay: float, func: Callable[[], Awaitable[object]], *, name: str = "deferred") -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._run(delay, func, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, delay: float, func: Callable[[], Awaitable[object]], name: str) -> None:
        await asyncio.sleep(max(delay, 0))
        try:
            await func()
        except Exception:
            logger.exception("payment_return.deferred task failed name=%s", name)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def shutdown(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("payment_return.deferred cancelled=%s", len(tasks))

# appbox/executor/batch.py
"""Batch executor - applies one operation to every component of an app."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Sequence

from appbox.core.errors import ComponentOperationError
from appbox.core.models import Component

logger = logging.getLogger(__name__)


Operation = Callable[[Component], None]


class ComponentBatchExecutor:
    """
    Runs a per-component operation over a batch on worker threads.

    Every component is attempted; failures are collected in completion
    order and returned, never retried. The input order is submission
    order, so callers place the data component first.
    """

    def __init__(self, max_workers: int = 8):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.max_workers = max_workers

    def run(
        self,
        components: Sequence[Component],
        operation: Operation,
        phase: str,
    ) -> List[ComponentOperationError]:
        if not components:
            return []

        errors: List[ComponentOperationError] = []
        workers = min(self.max_workers, len(components))

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"appbox-{phase}") as pool:
            future_to_component = {
                pool.submit(operation, component): component
                for component in components
            }

            for future in as_completed(future_to_component):
                component = future_to_component[future]
                try:
                    future.result()
                except ComponentOperationError as e:
                    errors.append(e)
                except Exception as e:
                    errors.append(ComponentOperationError(component.name, phase, e))

        if errors:
            logger.debug(f"[batch] {phase}: {len(errors)}/{len(components)} components failed")
        return errors

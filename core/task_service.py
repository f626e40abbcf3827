"""
Task search: filtered, offset-paginated listing of one user's tasks.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict

from core.filters import TaskField, TaskFilter
from core.ports import TaskStore
from utils.schemas import SearchTaskRequest
from utils.validators import validate

logger = logging.getLogger(__name__)


def build_task_filter(user_id: Any, req: SearchTaskRequest) -> TaskFilter:
    task_filter = TaskFilter(user_id)
    if req.title is not None:
        task_filter.contains(TaskField.TITLE, req.title)
    if req.description is not None:
        task_filter.contains(TaskField.DESCRIPTION, req.description)
    # False is a real filter, only None means "not specified".
    if req.completed is not None:
        task_filter.equals(TaskField.COMPLETED, req.completed)
    return task_filter


class TaskSearchService:
    def __init__(self, tasks: TaskStore):
        self._tasks = tasks

    async def search_tasks(self, user_id: Any, request: Any) -> Dict[str, Any]:
        """
        Return one page of ``user_id``'s tasks matching ``request``.

        Shape::

            {"data": [...], "paging": {"page", "total_item", "total_page"}}
        """
        req = validate(SearchTaskRequest, request)
        task_filter = build_task_filter(user_id, req)

        tasks = await self._tasks.find_many(task_filter, take=req.size, skip=req.skip)
        total_items = await self._tasks.count(task_filter)
        logger.debug(
            "Task search user=%s predicates=%d page=%d -> %d/%d",
            user_id, len(task_filter), req.page, len(tasks), total_items,
        )

        return {
            "data": [task.to_dict() for task in tasks],
            "paging": {
                "page": req.page,
                "total_item": total_items,
                "total_page": math.ceil(total_items / req.size),
            },
        }

"""Grouping of tasks into board columns"""
from datetime import date

from .models import Task

GROUP_BY_OPTIONS = ['project', 'status', 'priority']

PRIORITY_RANK = {code: index for index, (code, _) in enumerate(Task.PRIORITY_CHOICES)}

NO_PROJECT_LABEL = 'No project'


def task_sort_key(task):
    """Priority rank, then due date with undated tasks last, then creation time"""
    return (
        PRIORITY_RANK.get(task.priority, len(PRIORITY_RANK)),
        task.due_date is None,
        task.due_date or date.max,
        task.created_at,
    )


def _group(key, label, tasks, serialize):
    tasks = sorted(tasks, key=task_sort_key)
    return {
        'key': key,
        'label': label,
        'count': len(tasks),
        'open_count': sum(1 for t in tasks if t.is_open),
        'tasks': serialize(tasks),
    }


def build_board(tasks, group_by, serialize):
    """
    Group tasks for the board.

    Status and priority boards always show every column; the project board
    only shows projects that have tasks, by name, with unassigned tasks last.
    """
    if group_by not in GROUP_BY_OPTIONS:
        raise ValueError(f"Invalid group_by: {group_by}")

    tasks = list(tasks)

    if group_by == 'status':
        return [
            _group(code, label, [t for t in tasks if t.status == code], serialize)
            for code, label in Task.STATUS_CHOICES
        ]

    if group_by == 'priority':
        return [
            _group(code, label, [t for t in tasks if t.priority == code], serialize)
            for code, label in Task.PRIORITY_CHOICES
        ]

    by_project = {}
    projects = {}
    unassigned = []
    for task in tasks:
        if task.project_id is None:
            unassigned.append(task)
            continue
        by_project.setdefault(task.project_id, []).append(task)
        projects[task.project_id] = task.project

    groups = [
        _group(project_id, projects[project_id].name, by_project[project_id], serialize)
        for project_id in sorted(by_project, key=lambda pid: (projects[pid].name.lower(), pid))
    ]
    if unassigned:
        groups.append(_group(None, NO_PROJECT_LABEL, unassigned, serialize))
    return groups

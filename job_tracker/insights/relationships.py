"""Joins tasks, jobs and contacts to companies.

Links are weak: a company name with no Company record, or a ``relatedTo``
pointing at a deleted record, simply resolves to nothing.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from job_tracker.records.models import Company, Contact, Job, Task
from job_tracker.utils.text_processing import names_match

DEFAULT_RECENT_LIMIT = 3

RELATED_COLLECTIONS = {"job": "jobs", "contact": "contacts", "company": "companies"}


@dataclass
class CompanyDetails:
    company: Company
    jobs: list[Job] = field(default_factory=list)
    contacts: list[Contact] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    recent_jobs: list[Job] = field(default_factory=list)
    recent_tasks: list[Task] = field(default_factory=list)
    overdue_tasks: int = 0

    @property
    def pending_tasks(self) -> int:
        return sum(1 for task in self.tasks if not task.is_completed)


def company_jobs(store, company: Company) -> list[Job]:
    return [job for job in store.jobs if names_match(job.company, company.name)]


def company_contacts(store, company: Company) -> list[Contact]:
    return [contact for contact in store.contacts if names_match(contact.company, company.name)]


def company_tasks(store, company: Company) -> list[Task]:
    """Tasks naming the company, or related to it by id. Each task appears once."""
    return [task for task in store.tasks if _task_targets_company(task, company)]


def _task_targets_company(task: Task, company: Company) -> bool:
    if names_match(task.company, company.name):
        return True
    ref = task.related_to
    return ref is not None and ref.type == "company" and ref.id == company.id


def most_recent(records, date_attr: str, limit: int) -> list:
    """First ``limit`` records by date, newest first.

    Undated records sort last; records with equal dates keep collection
    order.
    """
    dated = [r for r in records if getattr(r, date_attr)]
    undated = [r for r in records if not getattr(r, date_attr)]
    dated.sort(key=lambda r: getattr(r, date_attr), reverse=True)
    return (dated + undated)[:max(limit, 0)]


def is_overdue(task: Task, today: Optional[date] = None) -> bool:
    """A pending task whose due date has passed. Undated tasks are never overdue."""
    if not task.due_date or task.is_completed:
        return False
    try:
        due = date.fromisoformat(task.due_date[:10])
    except ValueError:
        return False
    return due < (today or date.today())


def company_details(
    store,
    company: Company,
    recent_limit: int = DEFAULT_RECENT_LIMIT,
    today: Optional[date] = None,
) -> CompanyDetails:
    """Assemble everything linked to ``company``, recomputed from the store."""
    jobs = company_jobs(store, company)
    tasks = company_tasks(store, company)
    return CompanyDetails(
        company=company,
        jobs=jobs,
        contacts=company_contacts(store, company),
        tasks=tasks,
        recent_jobs=most_recent(jobs, "date_applied", recent_limit),
        recent_tasks=most_recent(tasks, "due_date", recent_limit),
        overdue_tasks=sum(1 for task in tasks if is_overdue(task, today)),
    )


def resolve_related(store, task: Task):
    """Return the job, contact or company a task's relatedTo points at, or None."""
    ref = task.related_to
    if ref is None or ref.type not in RELATED_COLLECTIONS:
        return None
    return store.get(RELATED_COLLECTIONS[ref.type], ref.id)


def tasks_for(store, related_type: str, record_id: str) -> list[Task]:
    """Tasks whose relatedTo targets the given record."""
    return [
        task
        for task in store.tasks
        if task.related_to is not None
        and task.related_to.type == related_type
        and task.related_to.id == record_id
    ]


def details_for_name(store, name: str, recent_limit: int = DEFAULT_RECENT_LIMIT) -> Optional[CompanyDetails]:
    """Company details looked up by name; None if no such company exists."""
    company = store.find_company(name)
    if company is None:
        return None
    return company_details(store, company, recent_limit)

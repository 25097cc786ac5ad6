"""Dashboard metrics derived from the live collections."""

from dataclasses import dataclass, field

from job_tracker.records.models import (
    CLOSED_STATUSES,
    INTERVIEW_STATUSES,
    JOB_STATUSES,
    LEGACY_JOB_STATUSES,
    OFFER_STATUSES,
)


def count_statuses(jobs) -> dict[str, int]:
    """Count jobs per status.

    Every known status is present, zero or not. A status outside the known
    set (possible in older saved data) gets its own key, so the counts
    always add up to the number of jobs.
    """
    counts = {status: 0 for status in JOB_STATUSES + LEGACY_JOB_STATUSES}
    for job in jobs:
        counts[job.status] = counts.get(job.status, 0) + 1
    return counts


def format_rate(part: int, total: int) -> str:
    """Percentage with one decimal, or "0" when there is nothing to divide."""
    if total <= 0:
        return "0"
    return f"{part / total * 100:.1f}"


@dataclass
class DashboardStats:
    total_jobs: int = 0
    status_counts: dict[str, int] = field(default_factory=dict)
    active_pipeline: int = 0
    in_interview_process: int = 0
    total_offers: int = 0
    success_rate: str = "0"
    response_rate: str = "0"
    interview_rate: str = "0"
    pending_tasks: int = 0
    total_contacts: int = 0
    total_companies: int = 0
    jobs_with_notes: int = 0

    def to_dict(self) -> dict:
        return {
            "totalJobs": self.total_jobs,
            "statusCounts": dict(self.status_counts),
            "activePipeline": self.active_pipeline,
            "inInterviewProcess": self.in_interview_process,
            "totalOffers": self.total_offers,
            "successRate": self.success_rate,
            "responseRate": self.response_rate,
            "interviewRate": self.interview_rate,
            "pendingTasks": self.pending_tasks,
            "totalContacts": self.total_contacts,
            "totalCompanies": self.total_companies,
            "jobsWithNotes": self.jobs_with_notes,
        }


def job_metrics(jobs) -> DashboardStats:
    """Funnel counts and rates for a job collection."""
    jobs = list(jobs)
    total = len(jobs)
    counts = count_statuses(jobs)

    in_interview = sum(counts[s] for s in INTERVIEW_STATUSES)
    offers = sum(counts[s] for s in OFFER_STATUSES)
    responded = total - counts["applied"]

    return DashboardStats(
        total_jobs=total,
        status_counts=counts,
        active_pipeline=total - sum(counts[s] for s in CLOSED_STATUSES),
        in_interview_process=in_interview,
        total_offers=offers,
        success_rate=format_rate(offers, total),
        response_rate=format_rate(responded, total),
        interview_rate=format_rate(in_interview, total),
        jobs_with_notes=sum(1 for job in jobs if job.notes_list),
    )


def compute_stats(store) -> DashboardStats:
    """Full dashboard snapshot. Nothing is cached between calls."""
    stats = job_metrics(store.jobs)
    stats.pending_tasks = sum(1 for task in store.tasks if task.status == "pending")
    stats.total_contacts = len(store.contacts)
    stats.total_companies = len(store.companies)
    return stats

"""Company reconciliation: every company name in use has one Company record."""

import logging
from typing import Iterable, Optional

from job_tracker.records.models import Company
from job_tracker.utils.text_processing import names_match, new_id

logger = logging.getLogger("job_tracker.reconcile")


def find_company(companies: Iterable[Company], name) -> Optional[Company]:
    """Return the company whose name case-insensitively equals ``name``."""
    for company in companies:
        if names_match(company.name, name):
            return company
    return None


def company_to_create(companies: Iterable[Company], name) -> Optional[Company]:
    """Return the Company to insert for ``name``, or None if nothing is needed.

    Blank names are ignored. The referencing job or contact keeps its name
    exactly as typed; only the new Company record is produced here.
    """
    if not name or not isinstance(name, str):
        return None
    if find_company(companies, name) is not None:
        return None

    logger.info("Creating company record for '%s'", name)
    return Company(id=new_id(), name=name)

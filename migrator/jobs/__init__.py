"""
Registry of migration jobs, one per legacy table.

Tiers:
    1: states, lookup tables, users
    2: companies, institutions, students
    3: company / institution supervisors and representatives
    4: internship commitment terms
    5: signed commitment terms
"""

from migrator.jobs import accounts, contacts, reference, terms

JOBS = [
    *reference.JOBS,
    *accounts.JOBS,
    *contacts.JOBS,
    *terms.JOBS,
]

__all__ = ["JOBS"]

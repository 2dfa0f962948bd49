"""
Development seed data.

Run from `api/` against an empty (or disposable) database:

    python -m seed

Existing directory data, users and sessions are deleted first.
"""

from __future__ import annotations

import asyncio
import logging

from accelerators import repository as accelerators_repository
from auth import repository as auth_repository
from auth import security
from companies import repository as companies_repository
from core import db
from core.logging_config import configure_logging
from people import repository as people_repository

logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin12345"
USER_EMAIL = "john.doe@example.com"
USER_PASSWORD = "password123"

ACCELERATORS = [
    {
        "title": "Y Combinator (YC)",
        "description": "Seed-stage accelerator founded in 2005 that has funded thousands of companies.",
        "why_it_stands_out": "Regarded as the benchmark accelerator, with alumni such as Airbnb, Dropbox and Stripe.",
        "average_funding": "$125K - $500K",
        "funded_companies": 5000,
        "founded_year": 2005,
        "country": "USA",
        "type": "Global",
        "website": "https://www.ycombinator.com",
    },
    {
        "title": "Techstars",
        "description": "Mentorship-driven accelerator with programs in dozens of cities worldwide.",
        "why_it_stands_out": "Strong global mentor network and many vertical or region-specific cohorts.",
        "average_funding": "$120K",
        "funded_companies": 3500,
        "founded_year": 2006,
        "country": "USA",
        "type": "Global",
        "website": "https://www.techstars.com",
    },
    {
        "title": "SOSV",
        "description": "Multi-stage investor running hardware and biotech accelerator programs.",
        "why_it_stands_out": "Deep technical support for hardware, biotech and other frontier startups.",
        "average_funding": "$200K - $300K",
        "funded_companies": 1000,
        "founded_year": 1995,
        "country": "USA",
        "type": "Industry-specific",
        "website": "https://sosv.com",
    },
]

COMPANIES = [
    {
        "name": "Stripe",
        "tagline": "Financial infrastructure for the internet",
        "description": "Payments platform that lets businesses of every size accept payments online.",
        "company_size": "1000+",
        "tech_stack": ["Ruby", "Go", "React", "AWS"],
        "sector": "Fintech",
        "founded_year": 2010,
        "website": "https://stripe.com",
        "location": "San Francisco, CA",
        "funding_stage": "Series D+",
        "accelerator": "Y Combinator (YC)",
        "contact_source": {"twitter": "@stripe", "emails": ["info@stripe.com"]},
    },
    {
        "name": "SendGrid",
        "tagline": "Email delivery that scales",
        "description": "Cloud-based email delivery platform for transactional and marketing email.",
        "company_size": "501-1000",
        "tech_stack": ["Python", "Go", "PostgreSQL"],
        "sector": "Developer Tools",
        "founded_year": 2009,
        "website": "https://sendgrid.com",
        "location": "Denver, CO",
        "funding_stage": "IPO",
        "accelerator": "Techstars",
        "contact_source": None,
    },
]

PEOPLE = [
    {
        "full_name": "Patrick Collison",
        "passion": "Economic infrastructure",
        "bio": "Co-founder and CEO of Stripe.",
        "notes": ["Frequent writer on progress studies"],
        "company": "Stripe",
        "contact": {"twitter": "@patrickc"},
    },
    {
        "full_name": "Isaac Saldana",
        "passion": "Developer tooling",
        "bio": "Co-founder of SendGrid.",
        "notes": [],
        "company": "SendGrid",
        "contact": None,
    },
]


async def _reset() -> None:
    for table in ("emails", "conversations", "people", "companies", "accelerators", "audit_logs", "users"):
        await db.execute(f"DELETE FROM {table}")


async def seed() -> None:
    await _reset()

    admin = await auth_repository.create_user(
        email=ADMIN_EMAIL,
        password_hash=security.hash_password(ADMIN_PASSWORD),
        name="Admin User",
    )
    await db.execute("UPDATE users SET role = 'ADMIN' WHERE id = $1", admin["id"])
    logger.info("seed_user_created email=%s role=ADMIN", ADMIN_EMAIL)

    await auth_repository.create_user(
        email=USER_EMAIL,
        password_hash=security.hash_password(USER_PASSWORD),
        name="John Doe",
    )
    logger.info("seed_user_created email=%s role=USER", USER_EMAIL)

    accelerator_ids = {}
    for fields in ACCELERATORS:
        row = await accelerators_repository.create_accelerator(fields)
        accelerator_ids[row["title"]] = row["id"]

    company_ids = {}
    for item in COMPANIES:
        fields = {k: v for k, v in item.items() if k not in {"accelerator", "contact_source"}}
        fields["accelerator_id"] = accelerator_ids.get(item["accelerator"])
        row = await companies_repository.create_company(fields, item["contact_source"])
        company_ids[row["name"]] = row["id"]

    for item in PEOPLE:
        fields = {k: v for k, v in item.items() if k not in {"company", "contact"}}
        fields["company_id"] = company_ids.get(item["company"])
        await people_repository.create_person(fields, item["contact"])

    logger.info(
        "seed_complete accelerators=%s companies=%s people=%s",
        len(ACCELERATORS),
        len(COMPANIES),
        len(PEOPLE),
    )


async def main() -> None:
    configure_logging()
    await db.init_pool()
    try:
        await seed()
    finally:
        await db.close_pool()


if __name__ == "__main__":
    asyncio.run(main())

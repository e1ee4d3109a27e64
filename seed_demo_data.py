"""
Script to seed a demo user with profiles, a default template and a draft resume.
Prints the user UUID to send as the X-User-Id header.
"""
import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from resume_optimizer.database.connection import async_session_maker, init_db, close_db
from resume_optimizer.repositories.user_repo import UserRepository
from resume_optimizer.repositories.profile_repo import ProfileRepository
from resume_optimizer.repositories.template_repo import TemplateRepository
from resume_optimizer.repositories.resume_repo import ResumeRepository
from resume_optimizer.utils.logging import setup_logging, get_logger

logger = get_logger(__name__)

DEMO_EMAIL = "demo@example.com"

DEMO_RESUME = """Jordan Demo
Software Engineer

Experience:
Acme Corp, Backend Engineer (2020 - Present)
- Built REST APIs in Python and FastAPI
- Maintained PostgreSQL and MySQL databases

Skills: Python, SQL, Docker, AWS

Education:
B.S. Computer Science, State University (2016 - 2020)
"""

DEMO_JOB = "Senior Python Backend Engineer: FastAPI, async SQLAlchemy, AWS, CI/CD, mentoring."


async def seed(email: str) -> str:
    """Create demo records and return the user UUID (existing user is reused)."""
    await init_db()
    try:
        async with async_session_maker() as session:
            users = UserRepository(session)
            user = await users.get_by_email(email)
            if user is not None:
                print(f"ℹ️  Demo user already exists: {user.user_uuid}")
                return user.user_uuid

            user = await users.create({
                "full_name": "Jordan Demo",
                "email": email,
                "phone": "+1 555 010 2030",
                "location": "Austin, TX",
            })

            profiles = ProfileRepository(session)
            await profiles.create(user.id, {
                "profile_name": "Primary",
                "full_name": "Jordan Demo",
                "email": email,
                "mobile_numbers": ["+1 555 010 2030"],
                "linkedin_url": "https://linkedin.com/in/jordan-demo",
                "location": "Austin, TX",
                "is_default": True,
            })
            await profiles.create(user.id, {
                "profile_name": "Contractor",
                "full_name": "Jordan Demo",
                "email": "jordan.contract@example.com",
                "mobile_numbers": [],
                "linkedin_url": None,
                "location": "Remote",
                "is_default": False,
            })

            template = await TemplateRepository(session).create(user.id, {
                "template_name": "Backend Engineer",
                "resume_content": DEMO_RESUME,
                "professional_summary": "Backend engineer focused on Python services.",
                "skills": ["Python", "SQL", "Docker", "AWS"],
                "experience": [],
                "education": [],
                "is_default": True,
            })

            await ResumeRepository(session).create(user.id, {
                "template_id": template.id,
                "resume_title": "Senior Backend Engineer - Example Inc",
                "company_name": "Example Inc",
                "job_posting_company": "Example Inc",
                "job_description": DEMO_JOB,
                "original_resume_content": DEMO_RESUME,
            })

            logger.info("Seeded demo data", extra={"user_id": user.id})
            return user.user_uuid
    finally:
        await close_db()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Seed demo user, profiles, template and resume")
    parser.add_argument("--email", type=str, default=DEMO_EMAIL, help=f"Demo user email (default: {DEMO_EMAIL})")
    args = parser.parse_args()

    setup_logging()
    user_uuid = asyncio.run(seed(args.email))
    print("=" * 80)
    print(f"✅ Demo user UUID: {user_uuid}")
    print("   Send it as the X-User-Id header, e.g.")
    print(f"   curl -H 'X-User-Id: {user_uuid}' http://localhost:8000/api/v1/profiles")
    print("=" * 80)

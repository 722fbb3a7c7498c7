import asyncio
import os
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from fairway.db import normalize_database_url
from fairway.models import (
    CourseHole,
    Event,
    EventCourse,
    EventPlayer,
    EventPrize,
    EventRound,
    EventRule,
    SkillsContest,
    User,
)
from fairway.passwords import pwd_context

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL environment variable is required")
DATABASE_URL = normalize_database_url(DATABASE_URL)

engine = create_async_engine(DATABASE_URL, echo=False, pool_pre_ping=True)
Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

DEMO_COURSE = "Pebble Creek Links"
# (hole, par, yardage, handicap); par 72
DEMO_HOLES = [
    (1, 4, 380, 9), (2, 5, 510, 3), (3, 3, 165, 17), (4, 4, 400, 5),
    (5, 4, 355, 13), (6, 3, 190, 15), (7, 5, 545, 1), (8, 4, 420, 7),
    (9, 4, 375, 11), (10, 4, 390, 10), (11, 3, 175, 18), (12, 5, 525, 2),
    (13, 4, 410, 6), (14, 4, 365, 14), (15, 3, 205, 16), (16, 5, 560, 4),
    (17, 4, 395, 8), (18, 4, 430, 12),
]


async def main():
    async with Session() as s:
        existing_holes = {
            h.hole_number
            for h in (
                await s.execute(select(CourseHole).where(CourseHole.course_name == DEMO_COURSE))
            ).scalars().all()
        }
        for number, par, yardage, handicap in DEMO_HOLES:
            if number not in existing_holes:
                s.add(
                    CourseHole(
                        id=f"demo-hole-{number}",
                        course_name=DEMO_COURSE,
                        hole_number=number,
                        par=par,
                        yardage=yardage,
                        handicap=handicap,
                    )
                )
        await s.commit()

        if await s.get(User, "demo-owner") is None:
            s.add(
                User(
                    id="demo-owner",
                    email="owner@example.com",
                    full_name="Demo Owner",
                    password_hash=pwd_context.hash("fairway123"),
                )
            )
            await s.commit()

        if await s.get(Event, "demo-event") is not None:
            return

        s.add(
            Event(
                id="demo-event",
                user_id="demo-owner",
                name="Spring Golf Trip",
                slug="spring-golf-trip",
                location="Monterey, CA",
                description="Three days, two rounds, one trophy.",
                start_date=date(2026, 4, 17),
                end_date=date(2026, 4, 19),
                is_published=True,
                clubhouse_password=pwd_context.hash("birdie"),
            )
        )
        await s.flush()
        s.add_all(
            [
                EventRound(
                    id="demo-round-1",
                    event_id="demo-event",
                    course_name=DEMO_COURSE,
                    round_date=date(2026, 4, 18),
                    tee_time="08:30",
                    holes=18,
                    round_number=1,
                ),
                EventRound(
                    id="demo-round-2",
                    event_id="demo-event",
                    course_name="Cypress Hollow",
                    round_date=date(2026, 4, 19),
                    tee_time="09:10",
                    holes=9,
                    round_number=2,
                ),
                EventCourse(
                    id="demo-course-1",
                    event_id="demo-event",
                    name=DEMO_COURSE,
                    par=72,
                    yardage=6955,
                    display_order=0,
                ),
                EventPrize(
                    id="demo-prize-1",
                    event_id="demo-event",
                    category="Overall winner",
                    description="Green jacket and bragging rights",
                ),
                EventRule(
                    id="demo-rule-1",
                    event_id="demo-event",
                    rule_text="Max score per hole is 15; pick up after that.",
                    display_order=0,
                ),
            ]
        )
        for pid, name, handicap, status in [
            ("demo-player-ana", "Ana Torres", 8.4, "accepted"),
            ("demo-player-ben", "Ben Walsh", 14.2, "accepted"),
            ("demo-player-cal", "Cal Murphy", 21.0, "invited"),
            ("demo-player-dee", "Dee Park", 5.1, "declined"),
        ]:
            s.add(
                EventPlayer(
                    id=pid,
                    event_id="demo-event",
                    full_name=name,
                    handicap=handicap,
                    status=status,
                )
            )
        await s.flush()
        s.add_all(
            [
                SkillsContest(
                    id="demo-contest-ld",
                    event_id="demo-event",
                    round_id="demo-round-1",
                    hole=7,
                    contest_type="longest_drive",
                ),
                SkillsContest(
                    id="demo-contest-ctp",
                    event_id="demo-event",
                    round_id="demo-round-1",
                    hole=3,
                    contest_type="closest_to_pin",
                ),
            ]
        )
        await s.commit()


if __name__ == "__main__":
    asyncio.run(main())

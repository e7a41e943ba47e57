from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Tuple
import math

from backend.schemas import (
    DAYS, ActivityCategory, DailyLog, GradeLevel, ScheduleItem, UserAccount, UserRole,
    WeeklySchedule, new_id, weekday_name,
)
from backend.log_manager import log_id_for

WEEKEND = ("Saturday", "Sunday")

STUDY_SUBJECTS = [
    "Math", "Science", "History", "English", "Geography",
    "Art", "Music", "Physical Education", "Computer Science",
    "Foreign Language", "Social Studies", "Physics", "Biology",
    "Chemistry", "Calculus", "Literature", "Psychology", "Economics"
]


def get_specific_subjects(level: GradeLevel, grade_num: int) -> List[str]:
    """Subjects used to fill the template for a grade"""
    if level == GradeLevel.ELEMENTARY:
        if grade_num <= 2:
            return ["Story Time", "Phonics", "Basic Counting", "Drawing", "Recess", "Nature Study"]
        return ["Reading Mastery", "Creative Writing", "Multiplication", "World Cultures", "Art Studio", "Science Lab"]
    if level == GradeLevel.MIDDLE:
        return ["Algebra Foundations", "Earth & Space Science", "Civics", "English Literature",
                "Robotics Club", "Physical Education"]
    if level == GradeLevel.HIGH:
        if grade_num >= 11:
            return ["AP Calculus", "Physics Honors", "Advanced Psychology", "World Literature",
                    "SAT/ACT Prep", "Organic Chemistry"]
        return ["Geometry", "Biology", "US History", "Foreign Language (Spanish)", "Debate Team", "Track & Field"]
    return ["Advanced Algorithms", "Quantum Mechanics", "Social Psychology Research", "Thesis Workshop",
            "Machine Learning", "Ethics in Tech"]


def _item(category, start, end, label, subject=None) -> ScheduleItem:
    return ScheduleItem(
        id=new_id(),
        category=category,
        start_time=start,
        end_time=end,
        label=label,
        planned_subject=subject,
    )


def generate_schedule_for_grade(level: GradeLevel, grade_num: int) -> WeeklySchedule:
    """Build a starter weekly template for a grade level"""
    subjects = get_specific_subjects(level, grade_num)
    schedule = {}

    for day in DAYS:
        items = []
        if day not in WEEKEND:
            items.append(_item(ActivityCategory.STUDYING, "08:30", "11:30", f"{subjects[0]} Session", subjects[0]))
            items.append(_item(ActivityCategory.STUDYING, "12:30", "15:00", f"{subjects[1]} Lab", subjects[1]))

            if day in ("Tuesday", "Thursday"):
                label = "Park Play" if level == GradeLevel.ELEMENTARY else "Team Practice"
                items.append(_item(ActivityCategory.EXERCISE, "16:00", "17:30", label))
            else:
                items.append(_item(ActivityCategory.READING, "16:30", "17:30", "Knowledge Expansion (Reading)"))

            items.append(_item(ActivityCategory.STUDYING, "19:00", "20:30", "Daily Mission Review", subjects[2]))
        else:
            items.append(_item(ActivityCategory.REST, "10:00", "12:00", "System Maintenance (Deep Sleep)"))
            items.append(_item(ActivityCategory.PLAYTIME, "14:00", "18:00", "Social Simulation (Hangout)"))
            if day == "Sunday":
                items.append(_item(ActivityCategory.CHORES, "19:00", "20:00", "Quarterly Base Cleanup"))

        schedule[day] = items

    return schedule


# level -> (display name, starting XP)
_GRADE_PROFILES = {
    GradeLevel.ELEMENTARY: ("Junior Scout", 500),
    GradeLevel.MIDDLE: ("Mission Specialist", 1500),
    GradeLevel.HIGH: ("Senior Commander", 4000),
    GradeLevel.UNIVERSITY: ("Elite Strategist", 8000),
}


def grade_template(level: GradeLevel, grade_num: int) -> Dict:
    """{'name': str, 'xp': int, 'schedule': WeeklySchedule} for a grade"""
    name, xp = _GRADE_PROFILES[level]
    return {"name": name, "xp": xp, "schedule": generate_schedule_for_grade(level, grade_num)}


GRADE_TEMPLATES: Dict[GradeLevel, Callable[[int], Dict]] = {
    level: (lambda n, level=level: grade_template(level, n)) for level in GradeLevel
}


def seed_demo(store, level: GradeLevel = GradeLevel.MIDDLE, grade_num: int = 7,
              days: int = 14, today: Optional[date] = None) -> Tuple[UserAccount, UserAccount]:
    """
    Create a demo parent and child with `days` of history.

    The first floor(90%) + 1 of each day's planned items are fulfilled. Returns
    (parent, child). Existing demo accounts are overwritten.
    """
    today = today or date.today()
    template = grade_template(level, grade_num)

    parent = UserAccount(
        id="p-demo",
        user_id="mentor",
        name="Mission Control",
        phone="555-0000",
        role=UserRole.PARENT,
        weekly_schedule=template["schedule"],
        xp=1500,
    )
    child = UserAccount(
        id="c-demo",
        user_id="student",
        name=f"{template['name']} Demo",
        phone="555-0001",
        role=UserRole.STUDENT,
        parent_id=parent.id,
        weekly_schedule=template["schedule"],
        xp=template["xp"],
        grade=level,
        specific_grade=grade_num,
    )
    store.save_user(parent)
    store.save_user(child)

    for offset in range(days):
        day = today - timedelta(days=offset)
        planned = template["schedule"].get(weekday_name(day), [])
        done = planned[:math.floor(len(planned) * 0.9) + 1]
        actual = [
            p.model_copy(update={
                "id": f"actual-{p.id}-{day.isoformat()}",
                "planned_id": p.id,
                "completed": True,
                "notes": "Historical data synced.",
            })
            for p in done
        ]
        store.save_daily_log(DailyLog(
            id=log_id_for(child.id, day),
            user_id=child.id,
            date=day,
            planned_snapshot=planned,
            actual_activities=actual,
        ))

    return parent, child

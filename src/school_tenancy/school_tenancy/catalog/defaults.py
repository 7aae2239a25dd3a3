"""Reference rows every new school starts with."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class IncidentType:
    name: str
    points: int
    severity: str
    description: str


@dataclass(frozen=True)
class MeritType:
    name: str
    points: int
    description: str


@dataclass(frozen=True)
class InterventionType:
    name: str
    description: str
    duration: Optional[int]


INCIDENT_TYPES = (
    IncidentType("Late to Class", 1, "low", "Student arrives late to class without valid excuse"),
    IncidentType("Disruptive Behavior", 2, "medium", "Disrupting class activities or other students"),
    IncidentType("Incomplete Homework", 1, "low", "Failure to complete assigned homework"),
    IncidentType("Uniform Violation", 1, "low", "Not wearing proper school uniform"),
    IncidentType("Bullying", 5, "high", "Physical or verbal bullying of other students"),
    IncidentType("Fighting", 5, "high", "Physical altercation with another student"),
    IncidentType("Vandalism", 4, "high", "Intentional damage to school property"),
    IncidentType("Cheating", 3, "medium", "Academic dishonesty during tests or assignments"),
    IncidentType("Disrespect to Staff", 3, "medium", "Rude or disrespectful behavior towards teachers or staff"),
    IncidentType("Truancy", 3, "medium", "Unexcused absence from school or class"),
    IncidentType("Cell Phone Violation", 1, "low", "Unauthorized use of cell phone during class"),
    IncidentType("Profanity", 2, "medium", "Use of inappropriate language"),
)

MERIT_TYPES = (
    MeritType("Academic Excellence", 5, "Outstanding academic achievement or improvement"),
    MeritType("Helping Others", 3, "Assisting classmates or staff members"),
    MeritType("Good Citizenship", 2, "Demonstrating positive school citizenship"),
    MeritType("Perfect Attendance", 3, "No absences or tardies for the period"),
    MeritType("Leadership", 4, "Demonstrating leadership qualities"),
    MeritType("Sports Achievement", 3, "Excellence in sports or physical education"),
    MeritType("Community Service", 4, "Participation in community service activities"),
    MeritType("Creativity", 2, "Outstanding creative work in arts or projects"),
    MeritType("Improvement", 3, "Significant improvement in behavior or academics"),
    MeritType("Respect", 2, "Showing respect to peers and staff"),
)

INTERVENTION_TYPES = (
    InterventionType("Counseling Session", "One-on-one counseling with school counselor", 30),
    InterventionType("Peer Mediation", "Mediated discussion between students in conflict", 45),
    InterventionType("Parent Conference", "Meeting with parents to discuss student behavior", 60),
    InterventionType("Behavior Contract", "Written agreement outlining expected behaviors", None),
    InterventionType("Academic Support", "Extra tutoring or academic assistance", 60),
    InterventionType("Anger Management", "Sessions focused on managing anger and emotions", 45),
    InterventionType("Social Skills Training", "Training to improve social interactions", 45),
    InterventionType("Mentorship Program", "Pairing with a mentor for guidance", None),
    InterventionType("Restorative Circle", "Group discussion to repair harm and restore relationships", 60),
    InterventionType("Check-In/Check-Out", "Daily check-ins with designated staff member", 10),
)

from __future__ import annotations  # Scheduling package exports

from .notifier import LogNotifier, Notifier, SmtpNotifier, notifier_from_settings
from .planner import GatewayInterviewPlanner, InterviewPlanner, PlanDraft
from .scheduler import ScheduledInterview, ScheduleRequest, Scheduler

__all__ = [
    "GatewayInterviewPlanner",
    "InterviewPlanner",
    "LogNotifier",
    "Notifier",
    "PlanDraft",
    "ScheduleRequest",
    "ScheduledInterview",
    "Scheduler",
    "SmtpNotifier",
    "notifier_from_settings",
]

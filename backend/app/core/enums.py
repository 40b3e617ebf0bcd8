"""Status and role enumerations shared by models, schemas and services."""

from enum import Enum


class LessonStatus(str, Enum):
    PLANNED = "planned"
    DONE = "done"
    CANCELLED = "cancelled"


class ScheduleRequestStatus(str, Enum):
    REQUESTED = "requested"
    REPROPOSED = "reproposed"
    REJECTED = "rejected"
    CONFIRMED = "confirmed"


class RequestedBy(str, Enum):
    TEACHER = "teacher"
    PARENT = "parent"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    REPORTED = "reported"
    CONFIRMED = "confirmed"

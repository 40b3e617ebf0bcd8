from backend.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from backend.app.models.student import Student  # noqa: F401
from backend.app.models.student_location import StudentLocation  # noqa: F401
from backend.app.models.lesson import Lesson  # noqa: F401
from backend.app.models.makeup_credit import MakeupCredit  # noqa: F401
from backend.app.models.schedule_request import ScheduleRequest  # noqa: F401
from backend.app.models.monthly_payment import MonthlyPayment  # noqa: F401
from backend.app.models.billing_other_charge import BillingOtherCharge  # noqa: F401

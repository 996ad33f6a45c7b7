# Import every model so Alembic autogenerate sees the full schema.

from hospital_admin.models.user import User  # noqa: F401
from hospital_admin.models.audit import AuditEvent  # noqa: F401
from hospital_admin.models.person import Person  # noqa: F401
from hospital_admin.models.permit import Permit, PermitHistory  # noqa: F401
from hospital_admin.models.task import Task  # noqa: F401
from hospital_admin.models.registration import (  # noqa: F401
    CompanyRegistration,
    ImportPermit,
    Vehicle,
)
from hospital_admin.models.document import Document  # noqa: F401
from hospital_admin.models.report import Report  # noqa: F401
from hospital_admin.models.setting import SystemSetting  # noqa: F401

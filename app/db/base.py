# Import all models so that Base.metadata and relationship strings resolve
from app.db.base_class import Base  # noqa: F401
from app.db.models.user import User  # noqa: F401
from app.db.models.vendor import Vendor  # noqa: F401
from app.db.models.job import Job  # noqa: F401
from app.db.models.assignment import Assignment  # noqa: F401
from app.db.models.part import Part  # noqa: F401
from app.db.models.photo import Photo  # noqa: F401
from app.db.models.request_log import RequestLog  # noqa: F401

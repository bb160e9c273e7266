from geosoft.models.timetable_workspace import TimetableWorkspace  # noqa: F401
from geosoft.models.user import AppSource, AuthProvider, User, UserPlan, UserRole  # noqa: F401
from geosoft.models.visit import Visit  # noqa: F401

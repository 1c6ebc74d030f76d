from jobnest.models.application import Application
from jobnest.models.company import Company
from jobnest.models.company_admin import CompanyAdmin
from jobnest.models.favorite import Favorite
from jobnest.models.interest import Interest
from jobnest.models.job import Job
from jobnest.models.notification import Notification
from jobnest.models.profile import Profile
from jobnest.models.skill import Skill
from jobnest.models.user import User

__all__ = [
    "User",
    "Company",
    "CompanyAdmin",
    "Job",
    "Application",
    "Favorite",
    "Notification",
    "Profile",
    "Skill",
    "Interest",
]

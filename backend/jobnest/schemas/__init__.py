from jobnest.schemas.application import ApplicationDetail, ApplicationOut, ApplicationStatusUpdate
from jobnest.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserOut
from jobnest.schemas.common import Pagination
from jobnest.schemas.company import CompanyCreate, CompanyOut, CompanyUpdate
from jobnest.schemas.favorite import FavoriteCreate, FavoriteDetail, FavoriteOut
from jobnest.schemas.job import JobCreate, JobOut, JobUpdate
from jobnest.schemas.notification import NotificationCreate, NotificationOut, NotificationTarget
from jobnest.schemas.profile import ProfileFields, ProfileOut, PublicProfile
from jobnest.schemas.skill import InterestCreate, InterestOut, SkillCreate, SkillOut, SkillUpdate

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "UserOut",
    "AuthResponse",
    "Pagination",
    "JobCreate",
    "JobUpdate",
    "JobOut",
    "CompanyCreate",
    "CompanyUpdate",
    "CompanyOut",
    "ApplicationOut",
    "ApplicationDetail",
    "ApplicationStatusUpdate",
    "FavoriteCreate",
    "FavoriteOut",
    "FavoriteDetail",
    "NotificationCreate",
    "NotificationTarget",
    "NotificationOut",
    "ProfileFields",
    "ProfileOut",
    "PublicProfile",
    "SkillCreate",
    "SkillUpdate",
    "SkillOut",
    "InterestCreate",
    "InterestOut",
]

"""ORM models package."""
from .api_key import ApiKey
from .audit import AuditLog
from .base import Base
from .company import Company, CompanyStatus
from .contract import Contract, ContractStatus, Milestone, MilestoneStatus
from .dispute import Dispute, DisputeMessage, DisputeStatus
from .freelancer_profile import Availability, FreelancerProfile
from .interview import Interview, InterviewStatus, InterviewType
from .job import Application, ApplicationStatus, Job, JobStatus, JobType, SavedJob
from .notification import Notification
from .portfolio import PortfolioItem, PortfolioLike
from .project import BudgetType, Duration, ExperienceLevel, Project, ProjectCategory, ProjectStatus
from .proposal import Proposal, ProposalStatus
from .review import Review
from .user import User, UserRole
from .wallet import ReferenceType, WalletTransaction, WalletTransactionStatus, WalletTransactionType

__all__ = [
    "ApiKey",
    "Application",
    "ApplicationStatus",
    "AuditLog",
    "Availability",
    "Base",
    "BudgetType",
    "Company",
    "CompanyStatus",
    "Contract",
    "ContractStatus",
    "Dispute",
    "DisputeMessage",
    "DisputeStatus",
    "Duration",
    "ExperienceLevel",
    "FreelancerProfile",
    "Interview",
    "InterviewStatus",
    "InterviewType",
    "Job",
    "JobStatus",
    "JobType",
    "Milestone",
    "MilestoneStatus",
    "Notification",
    "PortfolioItem",
    "PortfolioLike",
    "Project",
    "ProjectCategory",
    "ProjectStatus",
    "Proposal",
    "ProposalStatus",
    "ReferenceType",
    "Review",
    "SavedJob",
    "User",
    "UserRole",
    "WalletTransaction",
    "WalletTransactionStatus",
    "WalletTransactionType",
]

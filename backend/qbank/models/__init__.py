"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from qbank.models.user import User, UserRole
from qbank.models.company import Company
from qbank.models.employee import Employee
from qbank.models.role import Role, Permission, RolePermission, EmployeeRole
from qbank.models.category import Category
from qbank.models.question_status import QuestionStatus, StatusTransition, StatusHistory
from qbank.models.question import Question, QuestionOption
from qbank.models.content_version import ContentVersion
from qbank.models.review import Review, ReviewStatus, ReviewHistory, ReviewComment, ReviewAssignment
from qbank.models.vote import VoteType, Vote, VoteHistory

__all__ = [
    "User", "UserRole",
    "Company",
    "Employee",
    "Role", "Permission", "RolePermission", "EmployeeRole",
    "Category",
    "QuestionStatus", "StatusTransition", "StatusHistory",
    "Question", "QuestionOption",
    "ContentVersion",
    "Review", "ReviewStatus", "ReviewHistory", "ReviewComment", "ReviewAssignment",
    "VoteType", "Vote", "VoteHistory",
]

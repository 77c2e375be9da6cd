from .candidate import Candidate
from .resume import ResumeFile
from .user import User

__all__ = ["Candidate", "ResumeFile", "User"]

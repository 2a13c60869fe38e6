"""Database models package for CodeQuest.

Feature models live beside their modules; they are imported here so that
``db.create_all()`` and Flask-Migrate see every table.
"""

from ..db_instance import db

from .user import User
from ..modules.progression.models import ExpTransaction, Level
from ..modules.course.models import Course, CourseEnrollment, Lesson, UserLessonProgress
from ..modules.flashcard.models import Flashcard, UserFlashcardProgress
from ..modules.assessment.models import (
    CodingChallenge,
    CtfChallenge,
    EssayQuestion,
    QuizQuestion,
    Test,
    TestAttempt,
    TestItem,
    TestItemSubmission,
    TestStudent,
)
from ..modules.gamification.models import Achievement, UserAchievement, UserStreak
from ..modules.notification.models import Notification

__all__ = [
    'db',
    'User',
    'Level',
    'ExpTransaction',
    'Course',
    'Lesson',
    'CourseEnrollment',
    'UserLessonProgress',
    'Flashcard',
    'UserFlashcardProgress',
    'Test',
    'TestItem',
    'TestStudent',
    'TestAttempt',
    'TestItemSubmission',
    'QuizQuestion',
    'EssayQuestion',
    'CodingChallenge',
    'CtfChallenge',
    'Achievement',
    'UserAchievement',
    'UserStreak',
    'Notification',
]

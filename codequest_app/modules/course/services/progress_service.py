"""
Course Progress Service
Lesson completion, course completion and the XP they grant.
"""
from flask import current_app
from sqlalchemy.exc import IntegrityError

from codequest_app.core import clock
from codequest_app.core.signals import lesson_completed
from codequest_app.db_instance import db
from codequest_app.modules.progression.interface import award_xp
from ..logics import progress_logic
from ..models import CourseEnrollment, Lesson, UserLessonProgress
from .course_service import CourseService
from .enrollment_service import EnrollmentService


class CourseProgressService:

    @staticmethod
    def _completed_count(user_id, course_id):
        return (
            UserLessonProgress.query.join(Lesson, Lesson.id == UserLessonProgress.lesson_id)
            .filter(UserLessonProgress.user_id == user_id, Lesson.course_id == course_id)
            .count()
        )

    @staticmethod
    def complete_lesson(user_id, lesson_id):
        """
        Mark a lesson as completed, enrolling the user when needed.

        Completing a lesson twice changes nothing. The lesson's exp_reward is
        granted on the first completion, and the course's completion reward
        once every lesson of the course is done.

        Returns the course progress dict.
        """
        lesson = CourseService.get_lesson(lesson_id)
        course = lesson.course
        EnrollmentService.ensure_enrolled(user_id, course)

        existing = UserLessonProgress.query.filter_by(user_id=user_id, lesson_id=lesson.id).first()
        if existing is not None:
            db.session.commit()
            return CourseProgressService.get_course_progress(user_id, course.id)

        db.session.add(UserLessonProgress(user_id=user_id, lesson_id=lesson.id, completed_at=clock.now()))
        try:
            db.session.flush()
        except IntegrityError:
            # Completed by a concurrent request
            db.session.rollback()
            return CourseProgressService.get_course_progress(user_id, course.id)

        total = len(course.lessons)
        completed = CourseProgressService._completed_count(user_id, course.id)
        enrollment = (
            CourseEnrollment.query.filter_by(user_id=user_id, course_id=course.id)
            .with_for_update().first()
        )
        course_completed = (
            progress_logic.is_complete(completed, total) and enrollment.completed_at is None
        )
        if course_completed:
            enrollment.completed_at = clock.now()

        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            current_app.logger.error(f"Failed to complete lesson {lesson.id} for user {user_id}", exc_info=True)
            raise
        current_app.logger.info(f"User {user_id} completed lesson {lesson.id} of course {course.id}")

        if lesson.exp_reward > 0:
            award_xp(user_id, lesson.exp_reward, f"Completed Lesson: {lesson.title}",
                     source_kind='LESSON', source_id=lesson.id)
        if course_completed:
            current_app.logger.info(f"User {user_id} completed course {course.id}")
            if course.completion_exp_reward > 0:
                award_xp(user_id, course.completion_exp_reward, f"Completed Course: {course.title}",
                         source_kind='COURSE', source_id=course.id)

        lesson_completed.send(
            None, user_id=user_id, lesson_id=lesson.id, course_id=course.id, course_completed=course_completed
        )
        return CourseProgressService.get_course_progress(user_id, course.id)

    @staticmethod
    def get_course_progress(user_id, course_id):
        course = CourseService.get_course(course_id)
        enrollment = EnrollmentService.get_enrollment(user_id, course_id)
        done = {
            lesson_id for (lesson_id,) in
            db.session.query(UserLessonProgress.lesson_id)
            .join(Lesson, Lesson.id == UserLessonProgress.lesson_id)
            .filter(UserLessonProgress.user_id == user_id, Lesson.course_id == course_id)
        }
        total = len(course.lessons)
        return {
            'course_id': course.id,
            'enrolled': enrollment is not None,
            'completed_lessons': len(done),
            'total_lessons': total,
            'progress_percent': progress_logic.progress_percentage(len(done), total),
            'completed_at': enrollment.completed_at.isoformat() if enrollment and enrollment.completed_at else None,
            'lessons': [
                {'id': lesson.id, 'title': lesson.title, 'completed': lesson.id in done}
                for lesson in course.lessons
            ],
        }

"""
Enrollment Service
Who is taking which course.
"""
from flask import current_app
from sqlalchemy.exc import IntegrityError

from codequest_app.core import clock
from codequest_app.core.error_handlers import ConflictError, InvalidArgumentError, NotFoundError
from codequest_app.db_instance import db
from codequest_app.models import User
from ..models import CourseEnrollment
from .course_service import CourseService


class EnrollmentService:

    @staticmethod
    def get_enrollment(user_id, course_id):
        return CourseEnrollment.query.filter_by(user_id=user_id, course_id=course_id).first()

    @staticmethod
    def is_enrolled(user_id, course_id):
        return EnrollmentService.get_enrollment(user_id, course_id) is not None

    @staticmethod
    def _add(user_id, course):
        """Insert the enrollment row (flushed only). Returns None when it already exists."""
        if EnrollmentService.is_enrolled(user_id, course.id):
            return None
        enrollment = CourseEnrollment(user_id=user_id, course_id=course.id, enrolled_at=clock.now())
        db.session.add(enrollment)
        try:
            db.session.flush()
        except IntegrityError:
            # Enrolled by a concurrent request
            db.session.rollback()
            return None
        return enrollment

    @staticmethod
    def enroll(user_id, course_id):
        course = CourseService.get_course(course_id)
        if not course.is_published:
            raise ConflictError(
                f"Course {course_id} is not open for enrollment",
                code='COURSE_NOT_PUBLISHED',
                details={'course_id': course_id},
            )
        enrollment = EnrollmentService._add(user_id, course)
        if enrollment is None:
            raise ConflictError(
                f"User {user_id} is already enrolled in course {course_id}",
                code='ALREADY_ENROLLED',
                details={'course_id': course_id, 'user_id': user_id},
            )
        db.session.commit()
        current_app.logger.info(f"User {user_id} enrolled in course {course_id}")
        return enrollment

    @staticmethod
    def ensure_enrolled(user_id, course):
        """Enroll silently if needed; the caller commits."""
        return EnrollmentService.get_enrollment(user_id, course.id) or EnrollmentService._add(user_id, course)

    @staticmethod
    def unenroll(user_id, course_id):
        enrollment = EnrollmentService.get_enrollment(user_id, course_id)
        if enrollment is None:
            raise NotFoundError(f"User {user_id} is not enrolled in course {course_id}", resource='enrollment')
        db.session.delete(enrollment)
        db.session.commit()
        current_app.logger.info(f"User {user_id} left course {course_id}")

    @staticmethod
    def enroll_students(course_id, student_ids):
        """
        Enroll several students on behalf of the course owner.
        Unpublished courses are allowed here. Failures are reported per student.
        """
        if not isinstance(student_ids, list) or not student_ids:
            raise InvalidArgumentError("'student_ids' must be a non-empty list", details={'field': 'student_ids'})
        course = CourseService.get_course(course_id)

        enrolled, errors = [], []
        for student_id in student_ids:
            user = db.session.get(User, student_id) if isinstance(student_id, int) else None
            if user is None or user.user_role != User.ROLE_STUDENT:
                errors.append({'student_id': student_id, 'error': 'not a student'})
            elif EnrollmentService._add(user.user_id, course) is None:
                errors.append({'student_id': student_id, 'error': 'already enrolled'})
            else:
                db.session.commit()
                enrolled.append(student_id)

        current_app.logger.info(f"Enrolled {len(enrolled)} students in course {course_id} ({len(errors)} errors)")
        return {
            'enrolled': enrolled,
            'errors': errors,
            'total_enrolled': len(enrolled),
            'total_errors': len(errors),
        }

    @staticmethod
    def get_enrolled_students(course_id):
        CourseService.get_course(course_id)
        return (
            CourseEnrollment.query.filter_by(course_id=course_id)
            .order_by(CourseEnrollment.enrolled_at, CourseEnrollment.id)
            .all()
        )

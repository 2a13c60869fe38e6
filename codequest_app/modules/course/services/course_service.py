"""
Course Service
Course catalog and lesson authoring.
"""
from flask import current_app

from codequest_app.core import clock
from codequest_app.core.error_handlers import InvalidArgumentError, NotFoundError
from codequest_app.db_instance import db
from codequest_app.modules.assessment.logics import slugs
from ..models import Course, CourseEnrollment, Lesson


def _required_text(data, field):
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"'{field}' is required", details={'field': field})
    return value.strip()


def _reward(data, field):
    value = data.get(field, 0)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidArgumentError(f"'{field}' must be a non-negative integer", details={'field': field})
    return value


class CourseService:

    @staticmethod
    def get_course(course_id):
        course = db.session.get(Course, course_id)
        if course is None:
            raise NotFoundError(f"Course {course_id} not found", resource='course')
        return course

    @staticmethod
    def get_lesson(lesson_id):
        lesson = db.session.get(Lesson, lesson_id)
        if lesson is None:
            raise NotFoundError(f"Lesson {lesson_id} not found", resource='lesson')
        return lesson

    @staticmethod
    def list_courses(user):
        """Admins see everything, teachers their own and published courses, students published ones."""
        query = Course.query
        if user.is_admin:
            pass
        elif user.user_role == user.ROLE_TEACHER:
            query = query.filter(db.or_(Course.is_published.is_(True), Course.created_by == user.user_id))
        else:
            query = query.filter(Course.is_published.is_(True))
        return query.order_by(Course.id).all()

    @staticmethod
    def list_enrolled_courses(user_id):
        return (
            Course.query.join(CourseEnrollment, CourseEnrollment.course_id == Course.id)
            .filter(CourseEnrollment.user_id == user_id)
            .order_by(CourseEnrollment.enrolled_at)
            .all()
        )

    @staticmethod
    def _apply_course_fields(course, data):
        if 'title' in data:
            course.title = _required_text(data, 'title')
        if 'description' in data:
            course.description = data.get('description')
        if 'is_published' in data:
            course.is_published = bool(data.get('is_published'))
        if 'completion_exp_reward' in data:
            course.completion_exp_reward = _reward(data, 'completion_exp_reward')

    @staticmethod
    def create_course(teacher_id, data):
        title = _required_text(data, 'title')
        base = slugs.slugify(data.get('slug') or title)
        taken = {slug for (slug,) in db.session.query(Course.slug).filter(Course.slug.like(f'{base}%'))}

        course = Course(
            created_by=teacher_id,
            title=title,
            slug=slugs.unique_slug(base, taken),
            is_published=False,
            completion_exp_reward=0,
            created_at=clock.now(),
        )
        CourseService._apply_course_fields(course, data)
        db.session.add(course)
        db.session.commit()
        current_app.logger.info(f"Teacher {teacher_id} created course {course.id} ({course.slug})")
        return course

    @staticmethod
    def update_course(course_id, data):
        course = CourseService.get_course(course_id)
        CourseService._apply_course_fields(course, data)
        db.session.commit()
        return course

    @staticmethod
    def delete_course(course_id):
        course = CourseService.get_course(course_id)
        db.session.delete(course)
        db.session.commit()
        current_app.logger.info(f"Deleted course {course_id}")

    # ------------------------------------------------------------------
    # Lessons
    # ------------------------------------------------------------------
    @staticmethod
    def _apply_lesson_fields(lesson, data):
        if 'title' in data:
            lesson.title = _required_text(data, 'title')
        if 'content' in data:
            lesson.content = data.get('content')
        if 'exp_reward' in data:
            lesson.exp_reward = _reward(data, 'exp_reward')
        if 'order' in data:
            order = data.get('order')
            if isinstance(order, bool) or not isinstance(order, int) or order < 0:
                raise InvalidArgumentError("'order' must be a non-negative integer", details={'field': 'order'})
            lesson.order = order

    @staticmethod
    def add_lesson(course_id, data):
        course = CourseService.get_course(course_id)
        lesson = Lesson(
            course_id=course.id,
            title=_required_text(data, 'title'),
            exp_reward=0,
            order=len(course.lessons) + 1,
        )
        CourseService._apply_lesson_fields(lesson, data)
        db.session.add(lesson)
        db.session.commit()
        current_app.logger.info(f"Added lesson {lesson.id} to course {course.id}")
        return lesson

    @staticmethod
    def update_lesson(course_id, lesson_id, data):
        lesson = CourseService.get_lesson(lesson_id)
        if lesson.course_id != course_id:
            raise NotFoundError(f"Lesson {lesson_id} not found in course {course_id}", resource='lesson')
        CourseService._apply_lesson_fields(lesson, data)
        db.session.commit()
        return lesson

    @staticmethod
    def remove_lesson(course_id, lesson_id):
        lesson = CourseService.get_lesson(lesson_id)
        if lesson.course_id != course_id:
            raise NotFoundError(f"Lesson {lesson_id} not found in course {course_id}", resource='lesson')
        db.session.delete(lesson)
        db.session.commit()
        current_app.logger.info(f"Removed lesson {lesson_id} from course {course_id}")

from flask import request
from flask_login import current_user, login_required

from codequest_app.core.error_handlers import InvalidArgumentError, NotFoundError, success_response
from codequest_app.models import User
from ..access_control.decorators import ensure_owner_or_admin, require_role
from . import course_api_bp
from .services.course_service import CourseService
from .services.enrollment_service import EnrollmentService
from .services.progress_service import CourseProgressService


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidArgumentError('Request body must be a JSON object')
    return data


def _can_manage(course):
    return current_user.is_admin or current_user.user_id == course.created_by


def _managed_course(course_id):
    course = CourseService.get_course(course_id)
    ensure_owner_or_admin(course.created_by)
    return course


def _visible_course(course_id):
    course = CourseService.get_course(course_id)
    if course.is_published or _can_manage(course) \
            or EnrollmentService.is_enrolled(current_user.user_id, course.id):
        return course
    raise NotFoundError(f"Course {course_id} not found", resource='course')


# ----------------------------------------------------------------------
# Catalog
# ----------------------------------------------------------------------
@course_api_bp.route('', methods=['GET'])
@login_required
def list_courses():
    courses = CourseService.list_courses(current_user)
    return success_response([course.to_dict() for course in courses])


@course_api_bp.route('/mine', methods=['GET'])
@login_required
def my_courses():
    courses = CourseService.list_enrolled_courses(current_user.user_id)
    return success_response([course.to_dict() for course in courses])


@course_api_bp.route('', methods=['POST'])
@login_required
@require_role(User.ROLE_TEACHER)
def create_course():
    course = CourseService.create_course(current_user.user_id, _json_body())
    return success_response(course.to_dict(), message='Course created', status_code=201)


@course_api_bp.route('/<int:course_id>', methods=['GET'])
@login_required
def get_course(course_id):
    course = _visible_course(course_id)
    data = course.to_dict()
    data['lessons'] = [lesson.to_dict(include_content=False) for lesson in course.lessons]
    return success_response(data)


@course_api_bp.route('/<int:course_id>', methods=['PUT'])
@login_required
@require_role(User.ROLE_TEACHER)
def update_course(course_id):
    _managed_course(course_id)
    course = CourseService.update_course(course_id, _json_body())
    return success_response(course.to_dict(), message='Course updated')


@course_api_bp.route('/<int:course_id>', methods=['DELETE'])
@login_required
@require_role(User.ROLE_TEACHER)
def delete_course(course_id):
    _managed_course(course_id)
    CourseService.delete_course(course_id)
    return success_response(message='Course deleted')


# ----------------------------------------------------------------------
# Lessons
# ----------------------------------------------------------------------
@course_api_bp.route('/<int:course_id>/lessons', methods=['POST'])
@login_required
@require_role(User.ROLE_TEACHER)
def add_lesson(course_id):
    _managed_course(course_id)
    lesson = CourseService.add_lesson(course_id, _json_body())
    return success_response(lesson.to_dict(), message='Lesson added', status_code=201)


@course_api_bp.route('/<int:course_id>/lessons/<int:lesson_id>', methods=['GET'])
@login_required
def get_lesson(course_id, lesson_id):
    _visible_course(course_id)
    lesson = CourseService.get_lesson(lesson_id)
    if lesson.course_id != course_id:
        raise NotFoundError(f"Lesson {lesson_id} not found in course {course_id}", resource='lesson')
    return success_response(lesson.to_dict())


@course_api_bp.route('/<int:course_id>/lessons/<int:lesson_id>', methods=['PUT'])
@login_required
@require_role(User.ROLE_TEACHER)
def update_lesson(course_id, lesson_id):
    _managed_course(course_id)
    lesson = CourseService.update_lesson(course_id, lesson_id, _json_body())
    return success_response(lesson.to_dict(), message='Lesson updated')


@course_api_bp.route('/<int:course_id>/lessons/<int:lesson_id>', methods=['DELETE'])
@login_required
@require_role(User.ROLE_TEACHER)
def remove_lesson(course_id, lesson_id):
    _managed_course(course_id)
    CourseService.remove_lesson(course_id, lesson_id)
    return success_response(message='Lesson removed')


@course_api_bp.route('/<int:course_id>/lessons/<int:lesson_id>/complete', methods=['POST'])
@login_required
def complete_lesson(course_id, lesson_id):
    _visible_course(course_id)
    lesson = CourseService.get_lesson(lesson_id)
    if lesson.course_id != course_id:
        raise NotFoundError(f"Lesson {lesson_id} not found in course {course_id}", resource='lesson')
    progress = CourseProgressService.complete_lesson(current_user.user_id, lesson_id)
    return success_response(progress, message='Lesson completed')


@course_api_bp.route('/<int:course_id>/progress', methods=['GET'])
@login_required
def course_progress(course_id):
    _visible_course(course_id)
    return success_response(CourseProgressService.get_course_progress(current_user.user_id, course_id))


# ----------------------------------------------------------------------
# Enrollment
# ----------------------------------------------------------------------
@course_api_bp.route('/<int:course_id>/enroll', methods=['POST'])
@login_required
def enroll(course_id):
    enrollment = EnrollmentService.enroll(current_user.user_id, course_id)
    return success_response(enrollment.to_dict(), message='Enrolled', status_code=201)


@course_api_bp.route('/<int:course_id>/enroll', methods=['DELETE'])
@login_required
def unenroll(course_id):
    EnrollmentService.unenroll(current_user.user_id, course_id)
    return success_response(message='Unenrolled')


@course_api_bp.route('/<int:course_id>/students', methods=['GET'])
@login_required
@require_role(User.ROLE_TEACHER)
def list_students(course_id):
    _managed_course(course_id)
    enrollments = EnrollmentService.get_enrolled_students(course_id)
    return success_response([
        dict(enrollment.to_dict(), username=enrollment.user.username) for enrollment in enrollments
    ])


@course_api_bp.route('/<int:course_id>/students', methods=['POST'])
@login_required
@require_role(User.ROLE_TEACHER)
def enroll_students(course_id):
    _managed_course(course_id)
    result = EnrollmentService.enroll_students(course_id, _json_body().get('student_ids'))
    return success_response(result)


@course_api_bp.route('/<int:course_id>/students/<int:student_id>', methods=['DELETE'])
@login_required
@require_role(User.ROLE_TEACHER)
def remove_student(course_id, student_id):
    _managed_course(course_id)
    EnrollmentService.unenroll(student_id, course_id)
    return success_response(message='Student removed')

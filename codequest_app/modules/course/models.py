from datetime import datetime

from codequest_app.db_instance import db


class Course(db.Model):
    __tablename__ = 'courses'

    id = db.Column(db.Integer, primary_key=True)
    created_by = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(220), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=True)
    is_published = db.Column(db.Boolean, nullable=False, default=False)
    # Granted once, when every lesson is completed
    completion_exp_reward = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    lessons = db.relationship(
        'Lesson', backref='course', lazy=True, order_by='Lesson.order',
        cascade='all, delete-orphan'
    )
    enrollments = db.relationship('CourseEnrollment', backref='course', lazy='dynamic', cascade='all, delete-orphan')

    __table_args__ = (
        db.CheckConstraint('completion_exp_reward >= 0', name='ck_course_completion_reward'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'created_by': self.created_by,
            'title': self.title,
            'slug': self.slug,
            'description': self.description,
            'is_published': self.is_published,
            'completion_exp_reward': self.completion_exp_reward,
            'lesson_count': len(self.lessons),
        }


class Lesson(db.Model):
    __tablename__ = 'lessons'

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=True)
    exp_reward = db.Column(db.Integer, nullable=False, default=0)
    order = db.Column(db.Integer, nullable=False, default=0)

    completions = db.relationship(
        'UserLessonProgress', backref='lesson', lazy='dynamic', cascade='all, delete-orphan'
    )

    __table_args__ = (
        db.CheckConstraint('exp_reward >= 0', name='ck_lesson_exp_reward'),
    )

    def to_dict(self, include_content=True):
        data = {
            'id': self.id,
            'course_id': self.course_id,
            'title': self.title,
            'exp_reward': self.exp_reward,
            'order': self.order,
        }
        if include_content:
            data['content'] = self.content
        return data


class CourseEnrollment(db.Model):
    __tablename__ = 'course_enrollments'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False, index=True)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False, index=True)
    enrolled_at = db.Column(db.DateTime, nullable=False)
    completed_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship('User', lazy=True)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'course_id', name='uq_course_enrollment'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'course_id': self.course_id,
            'enrolled_at': self.enrolled_at.isoformat() if self.enrolled_at else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }


class UserLessonProgress(db.Model):
    """A completed lesson. The row exists only once the lesson is done."""
    __tablename__ = 'user_lesson_progress'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False, index=True)
    lesson_id = db.Column(db.Integer, db.ForeignKey('lessons.id', ondelete='CASCADE'), nullable=False, index=True)
    completed_at = db.Column(db.DateTime, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'lesson_id', name='uq_user_lesson_progress'),
    )

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'lesson_id': self.lesson_id,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }

from datetime import datetime

from codequest_app.db_instance import db
from .logics import grading, lifecycle


class QuizQuestion(db.Model):
    __tablename__ = 'quiz_questions'

    TYPES = ('multiple_choice', 'fill_blank', 'boolean')

    id = db.Column(db.Integer, primary_key=True)
    question = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(30), nullable=False, default='multiple_choice')
    options = db.Column(db.JSON, nullable=True)
    correct_answer = db.Column(db.Text, nullable=False)
    explanation = db.Column(db.Text, nullable=True)

    def answer_key(self):
        return {'type': self.type, 'correct_answer': self.correct_answer}

    def to_dict(self, include_answers=False):
        data = {
            'id': self.id,
            'question': self.question,
            'type': self.type,
            'options': self.options or [],
        }
        if include_answers:
            data['correct_answer'] = self.correct_answer
            data['explanation'] = self.explanation
        return data


class EssayQuestion(db.Model):
    __tablename__ = 'essay_questions'

    id = db.Column(db.Integer, primary_key=True)
    question = db.Column(db.Text, nullable=False)
    min_words = db.Column(db.Integer, nullable=True)
    max_words = db.Column(db.Integer, nullable=True)
    rubric = db.Column(db.Text, nullable=True)

    def answer_key(self):
        return {}

    def to_dict(self, include_answers=False):
        data = {
            'id': self.id,
            'question': self.question,
            'min_words': self.min_words,
            'max_words': self.max_words,
        }
        if include_answers:
            data['rubric'] = self.rubric
        return data


class CodingChallenge(db.Model):
    __tablename__ = 'coding_challenges'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    problem_statement = db.Column(db.Text, nullable=False)
    # [{"input": "...", "expected_output": "..."}]
    test_cases = db.Column(db.JSON, nullable=False, default=list)

    def answer_key(self):
        return {'test_cases': self.test_cases or []}

    def to_dict(self, include_answers=False):
        cases = self.test_cases or []
        data = {
            'id': self.id,
            'title': self.title,
            'problem_statement': self.problem_statement,
            'inputs': [case.get('input') for case in cases],
        }
        if include_answers:
            data['test_cases'] = cases
        return data


class CtfChallenge(db.Model):
    __tablename__ = 'ctf_challenges'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    flag = db.Column(db.String(255), nullable=False)
    hints = db.Column(db.JSON, nullable=True)

    def answer_key(self):
        return {'flag': self.flag}

    def to_dict(self, include_answers=False):
        data = {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'hints': self.hints or [],
        }
        if include_answers:
            data['flag'] = self.flag
        return data


ITEM_MODELS = {
    grading.KIND_QUIZ: QuizQuestion,
    grading.KIND_ESSAY: EssayQuestion,
    grading.KIND_CODING: CodingChallenge,
    grading.KIND_CTF: CtfChallenge,
}


class Test(db.Model):
    __tablename__ = 'tests'

    id = db.Column(db.Integer, primary_key=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False, index=True)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id', ondelete='SET NULL'), nullable=True, index=True)

    title = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(220), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=True)
    instructions = db.Column(db.Text, nullable=True)

    duration_minutes = db.Column(db.Integer, nullable=True)
    total_points = db.Column(db.Integer, nullable=False, default=0)
    start_time = db.Column(db.DateTime, nullable=True)
    end_time = db.Column(db.DateTime, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=lifecycle.STATUS_DRAFT, index=True)

    shuffle_questions = db.Column(db.Boolean, nullable=False, default=False)
    show_results_immediately = db.Column(db.Boolean, nullable=False, default=False)
    allow_review = db.Column(db.Boolean, nullable=False, default=True)
    max_attempts = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    deleted_at = db.Column(db.DateTime, nullable=True)

    items = db.relationship(
        'TestItem', backref='test', lazy=True, order_by='TestItem.order',
        cascade='all, delete-orphan'
    )
    roster = db.relationship('TestStudent', backref='test', lazy='dynamic', cascade='all, delete-orphan')
    attempts = db.relationship('TestAttempt', backref='test', lazy='dynamic', cascade='all, delete-orphan')

    __table_args__ = (
        db.CheckConstraint('max_attempts >= 1', name='ck_test_max_attempts'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'teacher_id': self.teacher_id,
            'course_id': self.course_id,
            'title': self.title,
            'slug': self.slug,
            'description': self.description,
            'instructions': self.instructions,
            'duration_minutes': self.duration_minutes,
            'total_points': self.total_points,
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'status': self.status,
            'shuffle_questions': self.shuffle_questions,
            'show_results_immediately': self.show_results_immediately,
            'allow_review': self.allow_review,
            'max_attempts': self.max_attempts,
            'item_count': len(self.items),
        }


class TestItem(db.Model):
    """One gradable unit of a test: a typed reference to a question or challenge."""
    __tablename__ = 'test_items'

    id = db.Column(db.Integer, primary_key=True)
    test_id = db.Column(db.Integer, db.ForeignKey('tests.id', ondelete='CASCADE'), nullable=False, index=True)
    item_kind = db.Column(db.String(30), nullable=False)
    item_ref_id = db.Column(db.Integer, nullable=False)
    order = db.Column(db.Integer, nullable=False, default=0)
    points = db.Column(db.Integer, nullable=False, default=1)

    submissions = db.relationship(
        'TestItemSubmission', backref='item', lazy='dynamic', cascade='all, delete-orphan'
    )

    __table_args__ = (
        db.CheckConstraint('points >= 0', name='ck_test_item_points'),
    )

    @property
    def content(self):
        model = ITEM_MODELS.get(self.item_kind)
        if model is None:
            return None
        return db.session.get(model, self.item_ref_id)

    @property
    def is_auto_gradable(self):
        return grading.is_auto_gradable(self.item_kind)

    def to_dict(self, include_answers=False):
        content = self.content
        return {
            'id': self.id,
            'test_id': self.test_id,
            'item_kind': self.item_kind,
            'order': self.order,
            'points': self.points,
            'content': content.to_dict(include_answers=include_answers) if content else None,
        }


class TestStudent(db.Model):
    """Roster entry: the student may take the test."""
    __tablename__ = 'test_students'

    id = db.Column(db.Integer, primary_key=True)
    test_id = db.Column(db.Integer, db.ForeignKey('tests.id', ondelete='CASCADE'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False, index=True)
    assigned_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('test_id', 'student_id', name='uq_test_student'),
    )


class TestAttempt(db.Model):
    __tablename__ = 'test_attempts'

    id = db.Column(db.Integer, primary_key=True)
    test_id = db.Column(db.Integer, db.ForeignKey('tests.id', ondelete='CASCADE'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False, index=True)
    attempt_number = db.Column(db.Integer, nullable=False)

    started_at = db.Column(db.DateTime, nullable=False)
    submitted_at = db.Column(db.DateTime, nullable=True)
    time_spent_minutes = db.Column(db.Integer, nullable=True)
    total_score = db.Column(db.Integer, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=lifecycle.ATTEMPT_IN_PROGRESS, index=True)

    submissions = db.relationship(
        'TestItemSubmission', backref='attempt', lazy=True, cascade='all, delete-orphan'
    )
    student = db.relationship('User', lazy=True)

    __table_args__ = (
        db.UniqueConstraint('test_id', 'student_id', 'attempt_number', name='uq_test_attempt_number'),
    )

    def to_dict(self, include_submissions=False, include_scores=True):
        data = {
            'id': self.id,
            'test_id': self.test_id,
            'student_id': self.student_id,
            'attempt_number': self.attempt_number,
            'started_at': self.started_at.isoformat() if self.started_at else None,
            'submitted_at': self.submitted_at.isoformat() if self.submitted_at else None,
            'time_spent_minutes': self.time_spent_minutes,
            'total_score': self.total_score if include_scores else None,
            'status': self.status,
        }
        if include_submissions:
            data['submissions'] = [
                submission.to_dict(include_scores=include_scores) for submission in self.submissions
            ]
        return data


class TestItemSubmission(db.Model):
    __tablename__ = 'test_item_submissions'

    id = db.Column(db.Integer, primary_key=True)
    test_attempt_id = db.Column(
        db.Integer, db.ForeignKey('test_attempts.id', ondelete='CASCADE'), nullable=False, index=True
    )
    test_item_id = db.Column(
        db.Integer, db.ForeignKey('test_items.id', ondelete='CASCADE'), nullable=False, index=True
    )
    answer = db.Column(db.JSON, nullable=True)
    score = db.Column(db.Integer, nullable=True)
    is_correct = db.Column(db.Boolean, nullable=True)
    feedback = db.Column(db.Text, nullable=True)

    answered_at = db.Column(db.DateTime, nullable=True)
    graded_at = db.Column(db.DateTime, nullable=True)
    graded_by = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=True)

    __table_args__ = (
        db.UniqueConstraint('test_attempt_id', 'test_item_id', name='uq_submission_attempt_item'),
    )

    def to_dict(self, include_scores=True):
        data = {
            'id': self.id,
            'test_attempt_id': self.test_attempt_id,
            'test_item_id': self.test_item_id,
            'answer': self.answer,
        }
        if include_scores:
            data.update({
                'score': self.score,
                'is_correct': self.is_correct,
                'feedback': self.feedback,
            })
        return data

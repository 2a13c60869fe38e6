"""
Central Signal Registry for Event-Driven Architecture.

Uses blinker to enable decoupled communication between modules. The core
services only send; subscribers live in each module's events.py.

Usage:
    # Publisher (sender)
    from codequest_app.core.signals import level_up
    level_up.send(None, user_id=1, old_level=2, new_level=3, level=level)

    # Subscriber (receiver) - in module's events.py
    @level_up.connect
    def on_level_up(sender, **kwargs):
        ...
"""
from blinker import Namespace

# ============================================
# Progression Signals
# ============================================
progression_signals = Namespace()

# Signal: Fired after XP is added to a user
# Payload: user_id, amount, new_total, source_kind, source_id
xp_awarded = progression_signals.signal('xp_awarded')

# Signal: Fired when a user's level increases
# Payload: user_id, old_level, new_level, level (Level row or None)
level_up = progression_signals.signal('level_up')

# Signal: Fired when an achievement is unlocked
# Payload: user_id, achievement, earned_at
achievement_earned = progression_signals.signal('achievement_earned')

# ============================================
# Learning Signals
# ============================================
learning_signals = Namespace()

# Signal: Fired after a flashcard review has been scheduled
# Payload: user_id, flashcard_id, quality, is_correct, next_review_at
flashcard_reviewed = learning_signals.signal('flashcard_reviewed')

# Signal: Fired the first time a user completes a lesson
# Payload: user_id, lesson_id, course_id, course_completed
lesson_completed = learning_signals.signal('lesson_completed')

# ============================================
# Assessment Signals
# ============================================
assessment_signals = Namespace()

# Signal: Fired when a student submits a test attempt
# Payload: user_id, attempt_id, test_id, status
attempt_submitted = assessment_signals.signal('attempt_submitted')

# Signal: Fired when an attempt reaches the graded status
# Payload: user_id, attempt_id, test_id, total_score
attempt_graded = assessment_signals.signal('attempt_graded')

# Signal: Fired after an explicit test status transition
# Payload: test_id, old_status, new_status
test_status_changed = assessment_signals.signal('test_status_changed')

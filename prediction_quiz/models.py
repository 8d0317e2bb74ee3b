from prediction_quiz import db, bcrypt
from flask_login import UserMixin
from datetime import datetime
from prediction_quiz.questions import get_question, public_question

PHASE_REGISTRATION = 'registration'
INITIAL_QUESTION = 1


class User(UserMixin, db.Model):
    """Admin account; only authenticated users may drive the game."""
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class GameState(db.Model):
    __tablename__ = 'game_state'
    id = db.Column(db.Integer, primary_key=True)
    phase = db.Column(db.String(32), nullable=False, default=PHASE_REGISTRATION)  # registration, question, results, final
    current_question = db.Column(db.Integer, nullable=False, default=INITIAL_QUESTION)  # 1-based
    version = db.Column(db.Integer, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __mapper_args__ = {'version_id_col': version}

    @classmethod
    def current(cls):
        return cls.query.order_by(cls.id).first()

    def reset(self):
        self.phase = PHASE_REGISTRATION
        self.current_question = INITIAL_QUESTION

    def to_dict(self, reveal_answer=None):
        if reveal_answer is None:
            reveal_answer = self.phase in ('results', 'final')
        return {
            'phase': self.phase,
            'current_question': self.current_question,
            'question': public_question(get_question(self.current_question), reveal_answer=reveal_answer),
            'seq': self.version,
        }


class Participant(db.Model):
    __tablename__ = 'participant'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), unique=True, nullable=False, index=True)
    submitted = db.Column(db.Boolean, default=False, nullable=False)
    current_score = db.Column(db.Float, default=0, nullable=False)
    total_score = db.Column(db.Float, default=0, nullable=False)
    version = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    answers = db.relationship('Answer', backref='participant', order_by='Answer.question_id')
    results = db.relationship('RoundResult', backref='participant', order_by='RoundResult.id')

    __mapper_args__ = {'version_id_col': version}
    # Never hand a deleted participant's id to a new registration on SQLite
    __table_args__ = {'sqlite_autoincrement': True}

    def answer_for(self, question_id):
        for a in self.answers:
            if a.question_id == question_id:
                return a.value
        return None

    @property
    def prediction_diffs(self):
        return [r.diff for r in self.results]

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'submitted': self.submitted,
            'current_score': self.current_score or 0,
            'total_score': self.total_score or 0,
            'answers': {str(a.question_id): a.value for a in self.answers},
            'prediction_diffs': self.prediction_diffs,
            'seq': self.version,
        }


class Answer(db.Model):
    __tablename__ = 'answer'
    id = db.Column(db.Integer, primary_key=True)
    participant_id = db.Column(db.Integer, db.ForeignKey('participant.id'), nullable=False)
    question_id = db.Column(db.Integer, nullable=False)
    value = db.Column(db.Float, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # One answer per participant per question
    __table_args__ = (db.UniqueConstraint('participant_id', 'question_id', name='uq_answer_participant_question'),)


class RoundResult(db.Model):
    __tablename__ = 'round_result'
    id = db.Column(db.Integer, primary_key=True)
    participant_id = db.Column(db.Integer, db.ForeignKey('participant.id'), nullable=False)
    question_id = db.Column(db.Integer, nullable=False)
    prediction = db.Column(db.Float, nullable=False)
    score = db.Column(db.Float, nullable=False)
    diff = db.Column(db.Float, nullable=False)

    # A question is scored at most once per participant
    __table_args__ = (db.UniqueConstraint('participant_id', 'question_id', name='uq_round_result_participant_question'),)

    def to_dict(self):
        return {
            'question_id': self.question_id,
            'prediction': self.prediction,
            'score': self.score,
            'diff': self.diff,
        }

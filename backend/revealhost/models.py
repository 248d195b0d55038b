from revealhost import db
import uuid

from revealhost.services.presentation.reveal import RevealFlags
from revealhost.services.presentation.snapshot import RoundView

HINT_COUNT = 3


def normalize_hints(hints):
    """Always exactly three hint strings: pad short input, drop the excess."""
    values = [str(h) if h is not None else '' for h in list(hints or [])[:HINT_COUNT]]
    return values + [''] * (HINT_COUNT - len(values))


class Round(db.Model):
    __tablename__ = 'round'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    position = db.Column(db.Integer, nullable=False, default=0, index=True)
    image_url = db.Column(db.Text, nullable=False, default='')
    image_name = db.Column(db.String(255), nullable=False, default='')
    answer = db.Column(db.Text, nullable=False, default='')
    hint1 = db.Column(db.Text, nullable=False, default='')
    hint2 = db.Column(db.Text, nullable=False, default='')
    hint3 = db.Column(db.Text, nullable=False, default='')
    reveal_hint1 = db.Column(db.Boolean, nullable=False, default=False)
    reveal_hint2 = db.Column(db.Boolean, nullable=False, default=False)
    reveal_hint3 = db.Column(db.Boolean, nullable=False, default=False)
    reveal_answer = db.Column(db.Boolean, nullable=False, default=False)

    @property
    def hints(self):
        return [self.hint1 or '', self.hint2 or '', self.hint3 or '']

    @hints.setter
    def hints(self, values):
        self.hint1, self.hint2, self.hint3 = normalize_hints(values)

    @property
    def reveal(self) -> RevealFlags:
        return RevealFlags(
            hint1=bool(self.reveal_hint1),
            hint2=bool(self.reveal_hint2),
            hint3=bool(self.reveal_hint3),
            answer=bool(self.reveal_answer),
        )

    @reveal.setter
    def reveal(self, flags: RevealFlags):
        self.reveal_hint1 = flags.hint1
        self.reveal_hint2 = flags.hint2
        self.reveal_hint3 = flags.hint3
        self.reveal_answer = flags.answer

    def to_view(self) -> RoundView:
        return RoundView(
            id=self.id,
            image_url=self.image_url or '',
            image_name=self.image_name or '',
            answer=self.answer or '',
            hints=tuple(self.hints),
            reveal=self.reveal,
        )

    def to_dict(self):
        return {
            'id': self.id,
            'position': self.position,
            'image_url': self.image_url,
            'image_name': self.image_name,
            'answer': self.answer,
            'hints': self.hints,
            'reveal': self.reveal.to_dict(),
        }


class Team(db.Model):
    __tablename__ = 'team'
    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(16), nullable=False)
    name = db.Column(db.String(64), nullable=False)
    score = db.Column(db.Integer, nullable=False, default=0)
    position = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            'id': self.id,
            'key': self.key,
            'name': self.name,
            'score': self.score,
        }


class HostSettings(db.Model):
    """Single-row table: presentation settings and the selected round index."""
    __tablename__ = 'host_settings'
    id = db.Column(db.Integer, primary_key=True)
    duration_sec = db.Column(db.Integer, nullable=False, default=60)
    auto_unblur = db.Column(db.Boolean, nullable=False, default=True)
    start_blur_px = db.Column(db.Integer, nullable=False, default=18)
    start_zoom = db.Column(db.Float, nullable=False, default=2.0)
    current_index = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            'duration_sec': self.duration_sec,
            'auto_unblur': self.auto_unblur,
            'start_blur_px': self.start_blur_px,
            'start_zoom': self.start_zoom,
        }

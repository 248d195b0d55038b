"""Round entity store: ordered rounds, selected index, settings and round packs.

All methods need an application context. The presenter only reaches the
store from request handlers, never from background tasks.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from revealhost import db
from revealhost.models import HostSettings, Round, Team, normalize_hints
from revealhost.services.presentation.clock import PresentationParams, clamp_duration
from revealhost.services.presentation.reveal import RevealFlags
from revealhost.services.scoring import replace_teams

PACK_NAME = 'ProjectorGeoGuess Pack'
PACK_VERSION = 1


def _check_hints(entries) -> None:
    for entry in entries:
        if entry.get('hints') is not None and not isinstance(entry['hints'], list):
            raise ValueError('hints must be a list')


class RoundStore:
    def __init__(self, config):
        self.config = config

    # ---- settings ----

    def settings_row(self) -> HostSettings:
        row = db.session.get(HostSettings, 1)
        if row is None:
            row = HostSettings(
                id=1,
                duration_sec=self._duration(self.config.get('ROUND_DURATION_SEC', 60)),
                auto_unblur=bool(self.config.get('AUTO_UNBLUR', True)),
                start_blur_px=int(self.config.get('START_BLUR_PX', 18)),
                start_zoom=float(self.config.get('START_ZOOM', 2.0)),
                current_index=0,
            )
            db.session.add(row)
            db.session.commit()
        return row

    def settings(self) -> Dict[str, Any]:
        return self.settings_row().to_dict()

    def update_settings(self, data: Dict[str, Any]) -> Dict[str, Any]:
        row = self.settings_row()
        merged = row.to_dict()
        merged.update({k: v for k, v in (data or {}).items() if k in merged})
        params = PresentationParams.from_settings(merged, self.config)
        row.duration_sec = self._duration(merged['duration_sec'])
        row.auto_unblur = params.auto_unblur
        row.start_blur_px = params.start_blur_px
        row.start_zoom = params.start_zoom
        db.session.add(row)
        db.session.commit()
        return row.to_dict()

    def _duration(self, value) -> int:
        return clamp_duration(
            value,
            int(self.config.get('ROUND_DURATION_MIN_SEC', 10)),
            int(self.config.get('ROUND_DURATION_MAX_SEC', 300)),
            int(self.config.get('ROUND_DURATION_SEC', 60)),
        )

    # ---- rounds ----

    def rounds(self) -> List[Round]:
        return Round.query.order_by(Round.position, Round.id).all()

    def get_round(self, round_id: str) -> Optional[Round]:
        return db.session.get(Round, round_id)

    def current_index(self) -> int:
        count = Round.query.count()
        idx = int(self.settings_row().current_index or 0)
        if count == 0:
            return 0
        return max(0, min(idx, count - 1))

    def active_round(self) -> Optional[Round]:
        rounds = self.rounds()
        if not rounds:
            return None
        return rounds[self.current_index()]

    def active_round_view(self):
        active = self.active_round()
        return active.to_view() if active else None

    def select(self, index: int) -> Optional[Round]:
        count = Round.query.count()
        row = self.settings_row()
        row.current_index = max(0, min(int(index), max(0, count - 1)))
        db.session.add(row)
        db.session.commit()
        return self.active_round()

    def step(self, delta: int) -> Optional[Round]:
        return self.select(self.current_index() + delta)

    def add_rounds(self, entries: Iterable[Dict[str, Any]]) -> List[Round]:
        entries = list(entries)
        _check_hints(entries)
        existing = self.rounds()
        next_pos = (existing[-1].position + 1) if existing else 0
        created = []
        for entry in entries:
            r = Round(
                image_url=str(entry.get('image_url') or ''),
                image_name=str(entry.get('image_name') or ''),
                answer=str(entry.get('answer') or ''),
                position=next_pos,
            )
            r.hints = entry.get('hints') or []
            db.session.add(r)
            created.append(r)
            next_pos += 1
        if created:
            # Jump to the first of the new rounds
            self.settings_row().current_index = len(existing)
        db.session.commit()
        return created

    def update_round(self, rnd: Round, data: Dict[str, Any]) -> Round:
        for key in ('image_url', 'image_name', 'answer'):
            if key in data:
                setattr(rnd, key, str(data[key] or ''))
        if 'hints' in data:
            rnd.hints = data['hints']
        db.session.add(rnd)
        db.session.commit()
        return rnd

    def delete_round(self, rnd: Round) -> None:
        row = self.settings_row()
        idx = int(row.current_index or 0)
        db.session.delete(rnd)
        db.session.flush()
        remaining = Round.query.count()
        if remaining == 0:
            row.current_index = 0
        elif idx >= remaining:
            row.current_index = remaining - 1
        db.session.add(row)
        db.session.commit()

    def clear(self) -> int:
        count = Round.query.delete()
        self.settings_row().current_index = 0
        db.session.commit()
        return count

    def write_reveal(self, round_id: str, flags: RevealFlags) -> None:
        rnd = self.get_round(round_id)
        if rnd is None:
            return
        rnd.reveal = flags
        db.session.add(rnd)
        db.session.commit()

    # ---- round packs ----

    def export_pack(self) -> Dict[str, Any]:
        settings = self.settings()
        return {
            'meta': {
                'name': PACK_NAME,
                'version': PACK_VERSION,
                'exportedAt': datetime.now(timezone.utc).isoformat(),
            },
            'rounds': [
                {
                    'imageName': r.image_name,
                    'imageUrl': r.image_url,
                    'answer': r.answer,
                    'hints': r.hints,
                }
                for r in self.rounds()
            ],
            'teams': [
                {'id': t.key, 'name': t.name, 'score': t.score}
                for t in Team.query.order_by(Team.position, Team.id).all()
            ],
            'settings': {
                'duration': settings['duration_sec'],
                'autoUnblur': settings['auto_unblur'],
                'startBlur': settings['start_blur_px'],
                'startZoom': settings['start_zoom'],
            },
        }

    def import_pack(self, pack: Dict[str, Any]) -> Dict[str, int]:
        """Replace rounds (and teams/settings when present) from a pack.

        Raises ValueError when the payload is not a pack object.
        """
        if not isinstance(pack, dict):
            raise ValueError('Import failed: invalid JSON')
        imported = {'rounds': 0, 'teams': 0}

        rounds = pack.get('rounds')
        if isinstance(rounds, list):
            rounds = [x for x in rounds if isinstance(x, dict)]
            _check_hints(rounds)
            Round.query.delete()
            for pos, r in enumerate(rounds):
                rnd = Round(
                    image_url=str(r.get('imageUrl') or ''),
                    image_name=str(r.get('imageName') or ''),
                    answer=str(r.get('answer') or ''),
                    position=pos,
                )
                rnd.hints = normalize_hints(r.get('hints'))
                db.session.add(rnd)
                imported['rounds'] += 1
            self.settings_row().current_index = 0

        teams = pack.get('teams')
        if isinstance(teams, list):
            imported['teams'] = replace_teams(teams)

        settings = pack.get('settings')
        if isinstance(settings, dict):
            duration = settings.get('duration')
            start_blur = settings.get('startBlur')
            self.update_settings({
                'duration_sec': 60 if duration is None else duration,
                'auto_unblur': bool(settings.get('autoUnblur')),
                'start_blur_px': 18 if start_blur is None else start_blur,
                **({'start_zoom': settings['startZoom']} if settings.get('startZoom') is not None else {}),
            })
        db.session.commit()
        return imported

from revealhost import db
from revealhost.models import Team

DEFAULT_TEAMS = [('A', 'Team A'), ('B', 'Team B'), ('C', 'Team C'), ('D', 'Team D')]


def ensure_default_teams() -> None:
    if Team.query.count():
        return
    for pos, (key, name) in enumerate(DEFAULT_TEAMS):
        db.session.add(Team(key=key, name=name, score=0, position=pos))
    db.session.commit()


def adjust_score(team: Team, delta: int) -> Team:
    """Add ``delta`` points to a team; scores never go below zero."""
    team.score = max(0, int(team.score or 0) + int(delta))
    db.session.add(team)
    db.session.commit()
    return team


def rename_team(team: Team, name: str) -> Team:
    team.name = name
    db.session.add(team)
    db.session.commit()
    return team


def reset_scores() -> None:
    for team in Team.query.all():
        team.score = 0
        db.session.add(team)
    db.session.commit()


def replace_teams(teams) -> int:
    """Replace the scoreboard with the teams of an imported pack (no commit)."""
    Team.query.delete()
    count = 0
    for pos, t in enumerate(x for x in teams if isinstance(x, dict)):
        try:
            score = max(0, int(t.get('score') or 0))
        except (TypeError, ValueError, OverflowError):
            score = 0
        key = str(t.get('id') or chr(ord('A') + pos))
        db.session.add(Team(key=key, name=str(t.get('name') or f'Team {key}'), score=score, position=pos))
        count += 1
    return count

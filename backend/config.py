import os

basedir = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///' + os.path.join(basedir, 'revealhost.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Round timer (seconds); settings are clamped into [MIN, MAX]
    ROUND_DURATION_SEC = int(os.environ.get('ROUND_DURATION_SEC', '60'))
    ROUND_DURATION_MIN_SEC = int(os.environ.get('ROUND_DURATION_MIN_SEC', '10'))
    ROUND_DURATION_MAX_SEC = int(os.environ.get('ROUND_DURATION_MAX_SEC', '300'))
    # Presentation defaults
    AUTO_UNBLUR = os.environ.get('AUTO_UNBLUR', '1') not in ('0', 'false', 'False')
    START_BLUR_PX = int(os.environ.get('START_BLUR_PX', '18'))
    START_BLUR_MAX_PX = int(os.environ.get('START_BLUR_MAX_PX', '30'))
    START_ZOOM = float(os.environ.get('START_ZOOM', '2.0'))
    START_ZOOM_MAX = float(os.environ.get('START_ZOOM_MAX', '3.0'))
    # Clock frame pacing (sec) and audience display poll interval (ms)
    CLOCK_FRAME_SEC = float(os.environ.get('CLOCK_FRAME_SEC', '0.016'))
    DISPLAY_POLL_MS = int(os.environ.get('DISPLAY_POLL_MS', '100'))
    # How long clients should show transient notices (ms)
    NOTICE_DURATION_MS = int(os.environ.get('NOTICE_DURATION_MS', '2000'))
    # Grace period before a disconnected host is torn down (sec)
    HOST_GRACE_SEC = float(os.environ.get('HOST_GRACE_SEC', '2.0'))
    # Optional: heartbeat interval for clock tick logs (sec). 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
    # Uploaded round images
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(basedir, 'uploads')
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', str(32 * 1024 * 1024)))

"""initial schema: round, team, host_settings

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1a2b3c4d5e6f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'round',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('image_url', sa.Text(), nullable=False, server_default=''),
        sa.Column('image_name', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('answer', sa.Text(), nullable=False, server_default=''),
        sa.Column('hint1', sa.Text(), nullable=False, server_default=''),
        sa.Column('hint2', sa.Text(), nullable=False, server_default=''),
        sa.Column('hint3', sa.Text(), nullable=False, server_default=''),
        sa.Column('reveal_hint1', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reveal_hint2', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reveal_hint3', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reveal_answer', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    with op.batch_alter_table('round') as batch_op:
        batch_op.create_index('ix_round_position', ['position'])

    op.create_table(
        'team',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('key', sa.String(length=16), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
    )

    op.create_table(
        'host_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('duration_sec', sa.Integer(), nullable=False, server_default='60'),
        sa.Column('auto_unblur', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('start_blur_px', sa.Integer(), nullable=False, server_default='18'),
        sa.Column('start_zoom', sa.Float(), nullable=False, server_default='2.0'),
        sa.Column('current_index', sa.Integer(), nullable=False, server_default='0'),
    )


def downgrade():
    op.drop_table('host_settings')
    op.drop_table('team')
    with op.batch_alter_table('round') as batch_op:
        batch_op.drop_index('ix_round_position')
    op.drop_table('round')
